"""
GamePilot

Mood inference and persona-driven game recommendation:
- Behavioral mood analysis from play history
- Durable per-user gaming personas
- Mood- and persona-based recommendations
"""

from .games import Game
from .pipeline import MoodPersonaPipeline
from .utils.config import SystemConfig, ConfigManager, load_config

__version__ = "1.0.0"

__all__ = [
    'Game',
    'MoodPersonaPipeline',
    'SystemConfig',
    'ConfigManager',
    'load_config'
]
