"""
Configuration Management Module

This module handles all configuration settings for the mood and persona core,
including signal buffering, inference weights, persona lifecycle thresholds,
recommendation limits and the persistence backend.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional
from pathlib import Path
import logging
from dataclasses import dataclass, asdict, field

logger = logging.getLogger(__name__)


@dataclass
class SignalConfig:
    """Configuration for behavioral signal buffering."""
    buffer_capacity: int = 1000
    max_signal_age_days: int = 7
    # Per-user collectors kept in memory; least recently used dropped first
    max_tracked_users: int = 10000


@dataclass
class MoodConfig:
    """Configuration for mood inference."""
    # Importance weights applied on top of the mood mapping matrix
    engagement_volatility_weight: float = 0.15
    challenge_seeking_weight: float = 0.25
    social_openness_weight: float = 0.20
    exploration_bias_weight: float = 0.20
    focus_stability_weight: float = 0.20

    # Signal volume at which the volume term of confidence saturates
    confidence_saturation_signals: int = 20
    weight_adjustment_rate: float = 0.1

    def inference_weights(self) -> Dict[str, float]:
        return {
            'engagement_volatility': self.engagement_volatility_weight,
            'challenge_seeking': self.challenge_seeking_weight,
            'social_openness': self.social_openness_weight,
            'exploration_bias': self.exploration_bias_weight,
            'focus_stability': self.focus_stability_weight
        }


@dataclass
class PersonaConfig:
    """Configuration for the persona lifecycle."""
    stale_after_hours: float = 24.0
    confidence_saturation_points: int = 50
    freshness_decay_hours: float = 168.0
    default_confidence: float = 0.3

    # History caps (oldest entries dropped first)
    max_mood_history: int = 100
    max_intent_history: int = 50
    max_trait_evolution: int = 50
    max_recent_games: int = 50
    max_preferred_times: int = 100
    state_recent_games: int = 10


@dataclass
class RecommendationConfig:
    """Configuration for recommendation ranking."""
    max_recommendations: int = 10
    max_candidates: int = 20
    min_candidate_score: float = 20.0
    exclude_recently_played: bool = True
    max_explanations: int = 2


@dataclass
class StoreConfig:
    """Configuration for the persistence backend."""
    backend: str = 'memory'  # memory, redis
    redis_url: Optional[str] = None
    redis_host: str = 'localhost'
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    key_prefix: str = 'gamepilot'
    socket_timeout: int = 5


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    log_dir: str = 'logs'
    enable_file_logging: bool = False


@dataclass
class SystemConfig:
    """Main system configuration containing all sub-configurations."""
    signals: SignalConfig = field(default_factory=SignalConfig)
    mood: MoodConfig = field(default_factory=MoodConfig)
    persona: PersonaConfig = field(default_factory=PersonaConfig)
    recommendation: RecommendationConfig = field(default_factory=RecommendationConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Global settings
    environment: str = 'development'  # development, staging, production
    debug: bool = False


class ConfigManager:
    """Manages configuration loading, validation, and updates."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to a YAML or JSON configuration file
        """
        self.config_path = config_path or 'config/gamepilot.yaml'
        self.config = SystemConfig()
        self._load_config()
        self._setup_environment_overrides()

    def _load_config(self):
        """Load configuration from file."""
        try:
            config_file = Path(self.config_path)

            if config_file.exists():
                with open(config_file, 'r') as f:
                    if config_file.suffix.lower() == '.json':
                        config_data = json.load(f)
                    elif config_file.suffix.lower() in ['.yaml', '.yml']:
                        config_data = yaml.safe_load(f)
                    else:
                        logger.warning(f"Unsupported config file format: {config_file.suffix}")
                        return

                self._update_config_from_dict(config_data or {})
                logger.info(f"Loaded configuration from {self.config_path}")
            else:
                logger.info("Configuration file not found, using defaults")

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration: {e}")
            logger.info("Using default configuration")

    def _update_config_from_dict(self, config_dict: Dict[str, Any]):
        """Update configuration from dictionary."""
        for section_name, section_config in config_dict.items():
            if not hasattr(self.config, section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section_obj = getattr(self.config, section_name)

            if hasattr(section_obj, '__dataclass_fields__') and isinstance(section_config, dict):
                for field_name, field_value in section_config.items():
                    if hasattr(section_obj, field_name):
                        setattr(section_obj, field_name, field_value)
                    else:
                        logger.warning(f"Unknown configuration key: {section_name}.{field_name}")
            else:
                setattr(self.config, section_name, section_config)

    def _setup_environment_overrides(self):
        """Setup environment variable overrides."""
        try:
            if os.getenv('GAMEPILOT_REDIS_URL'):
                self.config.store.redis_url = os.getenv('GAMEPILOT_REDIS_URL')
                self.config.store.backend = 'redis'
            if os.getenv('GAMEPILOT_LOG_LEVEL'):
                self.config.logging.level = os.getenv('GAMEPILOT_LOG_LEVEL').upper()
            if os.getenv('GAMEPILOT_STALE_HOURS'):
                self.config.persona.stale_after_hours = float(os.getenv('GAMEPILOT_STALE_HOURS'))
            if os.getenv('GAMEPILOT_MAX_RECOMMENDATIONS'):
                self.config.recommendation.max_recommendations = int(os.getenv('GAMEPILOT_MAX_RECOMMENDATIONS'))
            if os.getenv('GAMEPILOT_ENVIRONMENT'):
                self.config.environment = os.getenv('GAMEPILOT_ENVIRONMENT')
            if os.getenv('DEBUG'):
                self.config.debug = os.getenv('DEBUG').lower() == 'true'

        except ValueError as e:
            logger.error(f"Error setting up environment overrides: {e}")

    def get_config(self) -> SystemConfig:
        """Get the current configuration."""
        return self.config

    def update_config(self, updates: Dict[str, Any]):
        """Update configuration with new values."""
        self._update_config_from_dict(updates)
        logger.info("Configuration updated successfully")

    def save_config(self, path: Optional[str] = None):
        """Save current configuration to file."""
        save_path = path or self.config_path
        config_dict = asdict(self.config)

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w') as f:
            if save_path.endswith('.json'):
                json.dump(config_dict, f, indent=2, default=str)
            else:
                yaml.dump(config_dict, f, default_flow_style=False)

        logger.info(f"Configuration saved to {save_path}")

    def validate_config(self) -> Dict[str, Any]:
        """Validate current configuration."""
        validation_results = {
            'valid': True,
            'errors': [],
            'warnings': []
        }

        weights = self.config.mood.inference_weights()
        total_weight = sum(weights.values())
        if abs(total_weight - 1.0) > 0.01:
            validation_results['warnings'].append(
                f"Mood inference weights sum to {total_weight:.3f}, not 1.0"
            )
        if any(weight < 0 for weight in weights.values()):
            validation_results['errors'].append("Mood inference weights must be non-negative")

        if self.config.persona.confidence_saturation_points <= 0:
            validation_results['errors'].append("Persona confidence saturation must be positive")

        if self.config.persona.stale_after_hours <= 0:
            validation_results['errors'].append("Persona staleness window must be positive")

        if self.config.recommendation.max_recommendations <= 0:
            validation_results['errors'].append("max_recommendations must be positive")

        if self.config.signals.max_tracked_users <= 0:
            validation_results['errors'].append("max_tracked_users must be positive")

        if self.config.signals.buffer_capacity <= 0:
            validation_results['errors'].append("Signal buffer capacity must be positive")

        if self.config.store.backend not in ('memory', 'redis'):
            validation_results['errors'].append(f"Unknown store backend: {self.config.store.backend}")

        if not (1 <= self.config.store.redis_port <= 65535):
            validation_results['errors'].append("Redis port must be between 1 and 65535")

        if validation_results['errors']:
            validation_results['valid'] = False

        return validation_results


def load_config(config_path: Optional[str] = None) -> SystemConfig:
    """Load a SystemConfig from file and environment."""
    return ConfigManager(config_path).get_config()
