"""
Recommendation data models
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Any, Optional

from ..games import Game
from ..utils.time import format_datetime, utcnow


@dataclass
class Recommendation:
    """A scored candidate game"""
    game_id: str
    name: str
    genre: Optional[str]
    score: float
    reasons: List[str] = field(default_factory=list)
    mood_match: float = 0.0
    playstyle_match: Optional[float] = None
    social_match: Optional[float] = None
    estimated_playtime: float = 60.0
    difficulty: str = 'medium'
    tags: List[str] = field(default_factory=list)

    # Persona post-processing
    intent_match: Optional[float] = None
    behavior_match: Optional[float] = None
    persona_explanation: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MoodForecast:
    """Predicted mood for the next session, with confidence in [0,1]"""
    predicted_mood: str
    confidence: float


@dataclass
class RecommendationContext:
    current_mood: Optional[str] = None
    time_available: Optional[float] = None  # minutes
    social_context: Optional[str] = 'solo'  # solo, co-op, pvp
    intensity: str = 'medium'  # low, medium, high
    exclude_recently_played: bool = True
    genres: List[str] = field(default_factory=list)
    recent_games: List[str] = field(default_factory=list)


@dataclass
class PlaystylePreferences:
    session_length: str = 'medium'  # short, medium, long
    difficulty: str = 'normal'  # casual, normal, hard, expert
    social_preference: str = 'solo'  # solo, cooperative, competitive
    story_focus: int = 50
    graphics_focus: int = 50
    gameplay_focus: int = 50


@dataclass
class PlayerIdentity:
    """Synthetic player profile the ranking engine scores against"""
    user_id: str
    archetype: str
    traits: List[str] = field(default_factory=list)
    preferences: PlaystylePreferences = field(default_factory=PlaystylePreferences)
    genre_affinities: Dict[str, float] = field(default_factory=dict)  # 0-1


@dataclass
class RankedRecommendations:
    recommendations: List[Recommendation]
    generated_at: datetime = field(default_factory=utcnow)
    total_games: int = 0
    predicted_mood: Optional[str] = None
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recommendations': [r.to_dict() for r in self.recommendations],
            'generated_at': format_datetime(self.generated_at),
            'total_games': self.total_games,
            'predicted_mood': self.predicted_mood,
            'confidence': self.confidence
        }


__all__ = [
    'Game',
    'Recommendation',
    'MoodForecast',
    'RecommendationContext',
    'PlaystylePreferences',
    'PlayerIdentity',
    'RankedRecommendations'
]
