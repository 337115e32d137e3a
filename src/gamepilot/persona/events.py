"""
Persona update events

A closed set of event variants. Each variant carries only the fields it
needs; PersonaService dispatches on the concrete type.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional, Union

from .models import BehaviorUpdate
from ..utils.time import parse_datetime, utcnow


@dataclass
class MoodEvent:
    mood: str
    intensity: int
    timestamp: datetime = field(default_factory=utcnow)
    context: Optional[str] = None
    game_id: Optional[str] = None


@dataclass
class IntentEvent:
    intent: str
    timestamp: datetime = field(default_factory=utcnow)
    success: bool = False
    game_id: Optional[str] = None


@dataclass
class BehaviorEvent:
    behavior: BehaviorUpdate
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class SessionEvent:
    game_id: str
    session_length: float
    timestamp: datetime = field(default_factory=utcnow)
    session_id: Optional[str] = None


@dataclass
class AchievementEvent:
    game_id: str
    achievement_id: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)


PersonaEvent = Union[MoodEvent, IntentEvent, BehaviorEvent, SessionEvent, AchievementEvent]

EVENT_TYPES = {
    'mood': MoodEvent,
    'intent': IntentEvent,
    'behavior': BehaviorEvent,
    'session': SessionEvent,
    'achievement': AchievementEvent
}


def parse_event(data: Dict[str, Any]) -> Optional[PersonaEvent]:
    """
    Build an event from its tagged dict form.

    {'type': 'mood', 'timestamp': ..., 'data': {...}, 'context': {'game_id': ...}}

    Returns None for unknown tags.
    """
    event_type = data.get('type')
    payload = data.get('data') or {}
    context = data.get('context') or {}
    timestamp = parse_datetime(data.get('timestamp')) or utcnow()
    game_id = payload.get('game_id') or context.get('game_id')

    if event_type == 'mood':
        return MoodEvent(
            mood=payload['mood'],
            intensity=int(payload['intensity']),
            timestamp=timestamp,
            context=payload.get('context'),
            game_id=game_id
        )
    if event_type == 'intent':
        return IntentEvent(
            intent=payload['intent'],
            timestamp=timestamp,
            success=bool(payload.get('success', False)),
            game_id=game_id
        )
    if event_type == 'behavior':
        behavior = BehaviorUpdate.from_dict({'timestamp': data.get('timestamp'), **payload})
        return BehaviorEvent(behavior=behavior, timestamp=timestamp)
    if event_type == 'session':
        return SessionEvent(
            game_id=str(game_id),
            session_length=float(payload.get('session_length', 0.0)),
            timestamp=timestamp,
            session_id=payload.get('session_id') or context.get('session_id')
        )
    if event_type == 'achievement':
        return AchievementEvent(
            game_id=str(game_id),
            achievement_id=payload.get('achievement_id'),
            timestamp=timestamp
        )
    return None
