"""
Persona data models

The unified persona is the durable per-user profile: categorical traits,
current mood and intent, behavioral patterns, bounded history logs and the
signals they were derived from. PersonaState is the flattened projection
consumed by the recommendation engine.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Any, Optional

from ..utils.time import parse_datetime, format_datetime, utcnow

ARCHETYPES = ('Achiever', 'Explorer', 'Competitor', 'Strategist', 'Casual')
INTENSITIES = ('Low', 'Medium', 'High')
PACINGS = ('Burst', 'Flow', 'Marathon')
RISK_PROFILES = ('Conservative', 'Balanced', 'Experimental')
SOCIAL_STYLES = ('Solo', 'Cooperative', 'Competitive')

PERSONA_MOODS = (
    'energetic', 'focused', 'relaxed', 'creative', 'competitive', 'social',
    'curious', 'nostalgic', 'stressed', 'bored', 'neutral'
)
PERSONA_INTENTS = (
    'short_session', 'comfort', 'novelty', 'social', 'challenge',
    'exploration', 'achievement', 'neutral'
)


@dataclass
class PersonaTraits:
    archetype_id: str = 'Casual'
    intensity: str = 'Medium'
    pacing: str = 'Flow'
    risk_profile: str = 'Balanced'
    social_style: str = 'Solo'
    confidence: float = 0.3

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonaTraits':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class RecentGame:
    game_id: str
    game_name: str = 'Unknown Game'
    session_count: int = 0
    total_playtime: float = 0.0  # minutes
    last_played: Optional[datetime] = None
    average_session_length: float = 0.0
    completion_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['last_played'] = format_datetime(self.last_played)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecentGame':
        return cls(
            game_id=str(data['game_id']),
            game_name=data.get('game_name') or 'Unknown Game',
            session_count=int(data.get('session_count', 0)),
            total_playtime=float(data.get('total_playtime', 0.0)),
            last_played=parse_datetime(data.get('last_played')),
            average_session_length=float(data.get('average_session_length', 0.0)),
            completion_rate=float(data.get('completion_rate', 0.0))
        )


@dataclass
class SessionPatterns:
    average_length: float = 60.0
    preferred_times: List[int] = field(default_factory=list)  # hours of day 0-23
    sessions_per_week: float = 3.0
    late_night_ratio: float = 0.2
    weekend_ratio: float = 0.6

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionPatterns':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class AbandonedGame:
    game_id: str
    abandoned_at: Optional[datetime] = None
    playtime_before_abandonment: float = 0.0
    last_session_length: float = 0.0
    reason: Optional[str] = None  # difficulty, boredom, time, technical, other

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['abandoned_at'] = format_datetime(self.abandoned_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AbandonedGame':
        return cls(
            game_id=str(data['game_id']),
            abandoned_at=parse_datetime(data.get('abandoned_at')),
            playtime_before_abandonment=float(data.get('playtime_before_abandonment', 0.0)),
            last_session_length=float(data.get('last_session_length', 0.0)),
            reason=data.get('reason')
        )


@dataclass
class CompletionPatterns:
    games_completed: int = 0
    average_completion_rate: float = 0.0
    preferred_completion_types: List[str] = field(default_factory=list)
    achievement_hunting: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompletionPatterns':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class BehavioralPatterns:
    recent_games: List[RecentGame] = field(default_factory=list)
    session_patterns: SessionPatterns = field(default_factory=SessionPatterns)
    abandoned_games: List[AbandonedGame] = field(default_factory=list)
    completion_patterns: CompletionPatterns = field(default_factory=CompletionPatterns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recent_games': [g.to_dict() for g in self.recent_games],
            'session_patterns': self.session_patterns.to_dict(),
            'abandoned_games': [g.to_dict() for g in self.abandoned_games],
            'completion_patterns': self.completion_patterns.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BehavioralPatterns':
        return cls(
            recent_games=[RecentGame.from_dict(g) for g in data.get('recent_games') or []],
            session_patterns=SessionPatterns.from_dict(data.get('session_patterns') or {}),
            abandoned_games=[AbandonedGame.from_dict(g) for g in data.get('abandoned_games') or []],
            completion_patterns=CompletionPatterns.from_dict(data.get('completion_patterns') or {})
        )


@dataclass
class MoodHistoryEntry:
    mood: str
    intensity: int
    timestamp: datetime
    context: Optional[str] = None
    game_id: Optional[str] = None


@dataclass
class IntentHistoryEntry:
    intent: str
    timestamp: datetime
    success: bool = False
    game_id: Optional[str] = None


@dataclass
class TraitEvolutionEntry:
    date: datetime
    traits: PersonaTraits
    confidence: float
    trigger_event: Optional[str] = None


@dataclass
class PersonaHistory:
    mood_history: List[MoodHistoryEntry] = field(default_factory=list)
    intent_history: List[IntentHistoryEntry] = field(default_factory=list)
    trait_evolution: List[TraitEvolutionEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mood_history': [
                {**asdict(e), 'timestamp': format_datetime(e.timestamp)} for e in self.mood_history
            ],
            'intent_history': [
                {**asdict(e), 'timestamp': format_datetime(e.timestamp)} for e in self.intent_history
            ],
            'trait_evolution': [
                {
                    'date': format_datetime(e.date),
                    'traits': e.traits.to_dict(),
                    'confidence': e.confidence,
                    'trigger_event': e.trigger_event
                }
                for e in self.trait_evolution
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonaHistory':
        return cls(
            mood_history=[
                MoodHistoryEntry(
                    mood=e['mood'],
                    intensity=int(e['intensity']),
                    timestamp=parse_datetime(e['timestamp']),
                    context=e.get('context'),
                    game_id=e.get('game_id')
                )
                for e in data.get('mood_history') or []
            ],
            intent_history=[
                IntentHistoryEntry(
                    intent=e['intent'],
                    timestamp=parse_datetime(e['timestamp']),
                    success=bool(e.get('success', False)),
                    game_id=e.get('game_id')
                )
                for e in data.get('intent_history') or []
            ],
            trait_evolution=[
                TraitEvolutionEntry(
                    date=parse_datetime(e['date']),
                    traits=PersonaTraits.from_dict(e['traits']),
                    confidence=float(e['confidence']),
                    trigger_event=e.get('trigger_event')
                )
                for e in data.get('trait_evolution') or []
            ]
        )


@dataclass
class PersonaSignals:
    genre_affinity: Dict[str, float] = field(default_factory=dict)
    completion_rate: float = 0.0
    session_pattern: float = 0.0  # mean session minutes
    playtime_distribution: List[float] = field(default_factory=list)  # share of sessions per hour of day
    multiplayer_ratio: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonaSignals':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class RecommendationContextPreferences:
    preferred_genres: List[str] = field(default_factory=list)
    avoided_genres: List[str] = field(default_factory=list)
    session_length_preference: str = 'medium'  # short, medium, long
    difficulty_preference: str = 'normal'  # easy, normal, hard, adaptive
    social_preference: str = 'any'  # solo, coop, competitive, any

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecommendationContextPreferences':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class UnifiedPersona:
    """Complete per-user persona"""
    user_id: str
    created_at: datetime
    last_updated: datetime
    traits: PersonaTraits = field(default_factory=PersonaTraits)
    current_mood: str = 'neutral'
    current_intent: str = 'neutral'
    mood_intensity: int = 5
    patterns: BehavioralPatterns = field(default_factory=BehavioralPatterns)
    history: PersonaHistory = field(default_factory=PersonaHistory)
    signals: PersonaSignals = field(default_factory=PersonaSignals)
    confidence: float = 0.3
    data_points: int = 0
    last_analysis_date: Optional[datetime] = None
    recommendation_context: RecommendationContextPreferences = field(
        default_factory=RecommendationContextPreferences
    )

    @classmethod
    def default(cls, user_id: str, now: Optional[datetime] = None,
                confidence: float = 0.3) -> 'UnifiedPersona':
        """Low-confidence persona for a user with no analysis yet"""
        now = now or utcnow()
        return cls(
            user_id=user_id,
            created_at=now,
            last_updated=now,
            traits=PersonaTraits(confidence=confidence),
            confidence=confidence,
            last_analysis_date=now
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'created_at': format_datetime(self.created_at),
            'last_updated': format_datetime(self.last_updated),
            'traits': self.traits.to_dict(),
            'current_mood': self.current_mood,
            'current_intent': self.current_intent,
            'mood_intensity': self.mood_intensity,
            'patterns': self.patterns.to_dict(),
            'history': self.history.to_dict(),
            'signals': self.signals.to_dict(),
            'confidence': self.confidence,
            'data_points': self.data_points,
            'last_analysis_date': format_datetime(self.last_analysis_date),
            'recommendation_context': self.recommendation_context.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UnifiedPersona':
        created_at = parse_datetime(data.get('created_at')) or utcnow()
        return cls(
            user_id=data['user_id'],
            created_at=created_at,
            last_updated=parse_datetime(data.get('last_updated')) or created_at,
            traits=PersonaTraits.from_dict(data.get('traits') or {}),
            current_mood=data.get('current_mood', 'neutral'),
            current_intent=data.get('current_intent', 'neutral'),
            mood_intensity=int(data.get('mood_intensity', 5)),
            patterns=BehavioralPatterns.from_dict(data.get('patterns') or {}),
            history=PersonaHistory.from_dict(data.get('history') or {}),
            signals=PersonaSignals.from_dict(data.get('signals') or {}),
            confidence=float(data.get('confidence', 0.3)),
            data_points=int(data.get('data_points', 0)),
            last_analysis_date=parse_datetime(data.get('last_analysis_date')) or created_at,
            recommendation_context=RecommendationContextPreferences.from_dict(
                data.get('recommendation_context') or {}
            )
        )


@dataclass
class PersonaState:
    """Flattened persona for recommendation scoring"""
    user_id: str
    archetype: str
    mood: str
    intent: str
    session_length_preference: float  # minutes
    genre_affinities: Dict[str, float]
    difficulty_preference: float  # 0 easy .. 1 hard
    social_preference: float  # 0 solo .. 1 competitive
    time_of_day: int  # 0-23
    day_of_week: int  # 0-6, Sunday = 0
    recent_games: List[str]
    confidence: float
    data_freshness: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonaState':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class MoodUpdate:
    mood: str
    intensity: int
    context: Optional[str] = None


@dataclass
class IntentUpdate:
    intent: str
    context: Optional[str] = None


@dataclass
class BehaviorUpdate:
    game_id: str
    session_length: float  # minutes
    completed: bool = False
    timestamp: Optional[datetime] = None
    game_name: Optional[str] = None
    achievements: int = 0
    difficulty: Optional[str] = None
    multiplayer: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BehaviorUpdate':
        return cls(
            game_id=str(data['game_id']),
            session_length=float(data.get('session_length', 0.0)),
            completed=bool(data.get('completed', False)),
            timestamp=parse_datetime(data.get('timestamp')),
            game_name=data.get('game_name'),
            achievements=int(data.get('achievements') or 0),
            difficulty=data.get('difficulty'),
            multiplayer=bool(data.get('multiplayer', False))
        )


@dataclass
class PersonaUpdateRequest:
    """Any combination of parts; an empty request only touches last_updated"""
    mood: Optional[MoodUpdate] = None
    intent: Optional[IntentUpdate] = None
    behavior: Optional[BehaviorUpdate] = None
    event: Optional[Any] = None  # a PersonaEvent

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonaUpdateRequest':
        from .events import parse_event

        mood = data.get('mood')
        intent = data.get('intent')
        behavior = data.get('behavior')
        event = data.get('event')
        return cls(
            mood=MoodUpdate(mood['mood'], int(mood['intensity']), mood.get('context')) if mood else None,
            intent=IntentUpdate(intent['intent'], intent.get('context')) if intent else None,
            behavior=BehaviorUpdate.from_dict(behavior) if behavior else None,
            event=parse_event(event) if isinstance(event, dict) else event
        )


@dataclass
class PersonaInsights:
    dominant_traits: List[str] = field(default_factory=list)
    behavior_patterns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass
class PersonaAnalysisResult:
    persona: UnifiedPersona
    state: PersonaState
    insights: PersonaInsights
    analysis_date: datetime
    data_points_used: int
    computation_time: float  # seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            'persona': self.persona.to_dict(),
            'state': self.state.to_dict(),
            'insights': asdict(self.insights),
            'metadata': {
                'analysis_date': format_datetime(self.analysis_date),
                'data_points_used': self.data_points_used,
                'computation_time': self.computation_time
            }
        }
