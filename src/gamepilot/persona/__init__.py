"""
Persona Module

Durable per-user gaming personas:
- Unified persona model and recommendation-facing state
- Persona update events and pure builders
- Analysis of raw library and session history
- Persona lifecycle service
"""

from .models import (
    UnifiedPersona,
    PersonaTraits,
    PersonaState,
    PersonaUpdateRequest,
    MoodUpdate,
    IntentUpdate,
    BehaviorUpdate,
    PersonaAnalysisResult
)
from .events import (
    MoodEvent,
    IntentEvent,
    BehaviorEvent,
    SessionEvent,
    AchievementEvent,
    PersonaEvent,
    parse_event
)
from .persona_service import PersonaService

__all__ = [
    'UnifiedPersona',
    'PersonaTraits',
    'PersonaState',
    'PersonaUpdateRequest',
    'MoodUpdate',
    'IntentUpdate',
    'BehaviorUpdate',
    'PersonaAnalysisResult',
    'MoodEvent',
    'IntentEvent',
    'BehaviorEvent',
    'SessionEvent',
    'AchievementEvent',
    'PersonaEvent',
    'parse_event',
    'PersonaService'
]
