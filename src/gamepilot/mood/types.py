"""
Mood analysis data types

Inputs (play sessions, activities, games as seen by the mood pipeline) and
outputs (signals, normalized features, mood vectors, analysis results).
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Any, Optional

from ..utils.time import parse_datetime, format_datetime, utcnow


class SignalSource(Enum):
    """Where a behavioral signal was derived from"""
    SESSION = "session"
    GENRE = "genre"
    PLAYTIME = "playtime"
    PLATFORM = "platform"
    INTEGRATION = "integration"


FEATURE_NAMES = (
    'engagement_volatility',
    'challenge_seeking',
    'social_openness',
    'exploration_bias',
    'focus_stability'
)

# Also the tie-break priority for the dominant mood
MOOD_DIMENSIONS = ('calm', 'competitive', 'curious', 'social', 'focused')


@dataclass
class PlaySession:
    """One recorded play session"""
    game_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: float = 0.0  # minutes
    session_type: str = 'main'  # main, social, coop, casual, ...
    platform: str = 'pc'
    intensity: Optional[float] = None  # 1-10
    mood: Optional[str] = None
    achievements: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaySession':
        start = parse_datetime(data.get('start_time') or data.get('started_at') or data.get('timestamp')) or utcnow()
        platform = data.get('platform', 'pc')
        if isinstance(platform, dict):
            platform = platform.get('code', 'pc')
        return cls(
            game_id=str(data.get('game_id', '')),
            start_time=start,
            end_time=parse_datetime(data.get('end_time') or data.get('ended_at')),
            duration=float(data.get('duration') or 0.0),
            session_type=data.get('session_type', 'main'),
            platform=platform,
            intensity=data.get('intensity'),
            mood=data.get('mood'),
            achievements=list(data.get('achievements') or [])
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['start_time'] = format_datetime(self.start_time)
        data['end_time'] = format_datetime(self.end_time)
        return data


@dataclass
class Activity:
    """An integration activity record (achievement unlocked, session start, ...)"""
    type: str
    platform: str
    timestamp: datetime
    game_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Activity':
        return cls(
            type=data['type'],
            platform=data.get('platform', 'unknown'),
            timestamp=parse_datetime(data.get('timestamp')) or utcnow(),
            game_id=data.get('game_id')
        )


@dataclass
class BehavioralSignal:
    """A single timestamped, weighted observation"""
    timestamp: datetime
    source: SignalSource
    data: Dict[str, Any]
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': format_datetime(self.timestamp),
            'source': self.source.value,
            'data': dict(self.data),
            'weight': self.weight
        }


@dataclass
class NormalizedFeatures:
    """Five [0,1] behavioral scalars"""
    engagement_volatility: float
    challenge_seeking: float
    social_openness: float
    exploration_bias: float
    focus_stability: float

    @classmethod
    def neutral(cls) -> 'NormalizedFeatures':
        """Unknown-state sentinel used when there are no signals"""
        return cls(0.5, 0.5, 0.5, 0.5, 0.5)

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FEATURE_NAMES}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NormalizedFeatures':
        return cls(**{name: float(data[name]) for name in FEATURE_NAMES})


@dataclass
class MoodVector:
    """Independent [0,1] affinities; no sum constraint"""
    calm: float
    competitive: float
    curious: float
    social: float
    focused: float

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in MOOD_DIMENSIONS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MoodVector':
        return cls(**{name: float(data[name]) for name in MOOD_DIMENSIONS})


@dataclass
class DominantMood:
    mood: str
    confidence: float
    secondary_mood: Optional[str] = None
    secondary_confidence: Optional[float] = None


@dataclass
class MoodDescription:
    primary: str
    description: str
    traits: List[str]
    recommendations: List[str]


@dataclass
class MoodInsight:
    dominant: str
    description: str
    traits: List[str]
    recommendations: List[str]
    confidence: float
    ambiguity: float = 0.0
    feature_consistency: Optional[float] = None


@dataclass
class MoodAnalysisResult:
    """Output of one analysis pass"""
    mood_vector: MoodVector
    confidence: float
    signal_count: int
    last_updated: datetime
    features: NormalizedFeatures

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mood_vector': self.mood_vector.as_dict(),
            'confidence': self.confidence,
            'signal_count': self.signal_count,
            'last_updated': format_datetime(self.last_updated),
            'features': self.features.as_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MoodAnalysisResult':
        return cls(
            mood_vector=MoodVector.from_dict(data['mood_vector']),
            confidence=float(data['confidence']),
            signal_count=int(data['signal_count']),
            last_updated=parse_datetime(data['last_updated']),
            features=NormalizedFeatures.from_dict(data['features'])
        )
