"""
Persona builders

Pure per-concern update functions. Each takes a persona snapshot and
returns a new one; the input is never mutated.
"""

import copy
from datetime import datetime
from typing import Dict, List, Optional, TypeVar

from .models import (
    UnifiedPersona, PersonaState, MoodUpdate, IntentUpdate, BehaviorUpdate,
    MoodHistoryEntry, IntentHistoryEntry, RecentGame, RecommendationContextPreferences
)
from .events import MoodEvent, IntentEvent, SessionEvent, AchievementEvent
from ..utils.time import utcnow, ensure_aware, hours_between, js_weekday, clamp

T = TypeVar('T')

DIFFICULTY_SCALE = {
    'easy': 0.25,
    'normal': 0.5,
    'hard': 0.75,
    'adaptive': 0.5
}

SOCIAL_SCALE = {
    'solo': 0.1,
    'coop': 0.5,
    'competitive': 0.9,
    'any': 0.5
}

PREFERRED_GENRE_AFFINITY = 0.5
AVOIDED_GENRE_AFFINITY = 0.2
SHORT_SESSION_MINUTES = 30
MEDIUM_SESSION_MINUTES = 60


def _keep_last(items: List[T], cap: int) -> List[T]:
    """Drop the oldest entries beyond cap"""
    return items[-cap:] if len(items) > cap else items


def apply_mood_update(persona: UnifiedPersona, update: MoodUpdate,
                      now: Optional[datetime] = None, max_history: int = 100,
                      game_id: Optional[str] = None) -> UnifiedPersona:
    """Set the current mood and log it"""
    updated = copy.deepcopy(persona)
    intensity = int(clamp(update.intensity, 1, 10))
    updated.current_mood = update.mood
    updated.mood_intensity = intensity
    updated.history.mood_history.append(MoodHistoryEntry(
        mood=update.mood,
        intensity=intensity,
        timestamp=now or utcnow(),
        context=update.context,
        game_id=game_id
    ))
    updated.history.mood_history = _keep_last(updated.history.mood_history, max_history)
    return updated


def apply_intent_update(persona: UnifiedPersona, update: IntentUpdate,
                        now: Optional[datetime] = None, max_history: int = 50,
                        success: bool = False, game_id: Optional[str] = None) -> UnifiedPersona:
    """Set the current intent and log it; success is recorded once fulfilled"""
    updated = copy.deepcopy(persona)
    updated.current_intent = update.intent
    updated.history.intent_history.append(IntentHistoryEntry(
        intent=update.intent,
        timestamp=now or utcnow(),
        success=success,
        game_id=game_id
    ))
    updated.history.intent_history = _keep_last(updated.history.intent_history, max_history)
    return updated


def apply_behavior_update(persona: UnifiedPersona, behavior: BehaviorUpdate,
                          now: Optional[datetime] = None, max_recent_games: int = 50,
                          max_preferred_times: int = 100) -> UnifiedPersona:
    """Fold one played session into recent games and session patterns"""
    updated = copy.deepcopy(persona)
    played_at = ensure_aware(behavior.timestamp or now or utcnow())
    patterns = updated.patterns

    game = next((g for g in patterns.recent_games if g.game_id == behavior.game_id), None)
    if game is not None:
        game.session_count += 1
        game.total_playtime += behavior.session_length
        game.last_played = played_at
        game.average_session_length = game.total_playtime / game.session_count
        if behavior.completed:
            game.completion_rate = (game.completion_rate + 1) / 2
        else:
            game.completion_rate = game.completion_rate / 2
    else:
        patterns.recent_games.append(RecentGame(
            game_id=behavior.game_id,
            game_name=behavior.game_name or 'Unknown Game',
            session_count=1,
            total_playtime=behavior.session_length,
            last_played=played_at,
            average_session_length=behavior.session_length,
            completion_rate=1.0 if behavior.completed else 0.0
        ))
    patterns.recent_games = _keep_last(patterns.recent_games, max_recent_games)

    sessions = patterns.session_patterns
    sessions.average_length = (sessions.average_length + behavior.session_length) / 2
    sessions.preferred_times.append(played_at.hour)
    sessions.preferred_times = _keep_last(sessions.preferred_times, max_preferred_times)

    return updated


def apply_mood_event(persona: UnifiedPersona, event: MoodEvent,
                     max_history: int = 100) -> UnifiedPersona:
    if not event.mood or not event.intensity:
        return persona
    return apply_mood_update(
        persona, MoodUpdate(event.mood, event.intensity, event.context),
        now=event.timestamp, max_history=max_history, game_id=event.game_id
    )


def apply_intent_event(persona: UnifiedPersona, event: IntentEvent,
                       max_history: int = 50) -> UnifiedPersona:
    if not event.intent:
        return persona
    return apply_intent_update(
        persona, IntentUpdate(event.intent),
        now=event.timestamp, max_history=max_history,
        success=event.success, game_id=event.game_id
    )


def apply_session_event(persona: UnifiedPersona, event: SessionEvent,
                        max_preferred_times: int = 100) -> UnifiedPersona:
    """Record the hour the session happened; data points only change on analysis"""
    updated = copy.deepcopy(persona)
    times = updated.patterns.session_patterns.preferred_times
    times.append(ensure_aware(event.timestamp).hour)
    updated.patterns.session_patterns.preferred_times = _keep_last(times, max_preferred_times)
    return updated


def apply_achievement_event(persona: UnifiedPersona, event: AchievementEvent) -> UnifiedPersona:
    updated = copy.deepcopy(persona)
    updated.patterns.completion_patterns.achievement_hunting = True
    return updated


def session_length_category(minutes: float) -> str:
    if minutes < SHORT_SESSION_MINUTES:
        return 'short'
    if minutes <= MEDIUM_SESSION_MINUTES:
        return 'medium'
    return 'long'


def build_recommendation_context(persona: UnifiedPersona) -> RecommendationContextPreferences:
    """Derive recommendation preferences from traits, patterns and signals"""
    affinities = persona.signals.genre_affinity
    preferred = sorted(
        (genre for genre, affinity in affinities.items() if affinity > PREFERRED_GENRE_AFFINITY),
        key=lambda genre: affinities[genre],
        reverse=True
    )

    # Weak genres only count as avoided once the player has abandoned something
    avoided = []
    if persona.patterns.abandoned_games:
        avoided = sorted(genre for genre, affinity in affinities.items() if affinity < AVOIDED_GENRE_AFFINITY)

    intensity = persona.traits.intensity
    if intensity == 'High':
        difficulty = 'hard'
    elif intensity == 'Low':
        difficulty = 'easy'
    else:
        difficulty = 'normal'

    ratio = persona.signals.multiplayer_ratio
    if persona.traits.social_style == 'Competitive':
        social = 'competitive'
    elif ratio > 0.5:
        social = 'coop'
    elif persona.data_points > 0 and ratio < 0.2:
        social = 'solo'
    else:
        social = 'any'

    return RecommendationContextPreferences(
        preferred_genres=preferred,
        avoided_genres=avoided,
        session_length_preference=session_length_category(persona.patterns.session_patterns.average_length),
        difficulty_preference=difficulty,
        social_preference=social
    )


def recompute_persona(persona: UnifiedPersona, saturation_points: int = 50) -> UnifiedPersona:
    """Refresh derived values: confidence and recommendation context"""
    updated = copy.deepcopy(persona)
    updated.confidence = min(persona.data_points / saturation_points, 1.0)
    updated.recommendation_context = build_recommendation_context(persona)
    return updated


def calculate_data_freshness(last_analysis: Optional[datetime], now: Optional[datetime] = None,
                             decay_hours: float = 168.0) -> float:
    """1 right after analysis, decaying linearly to 0 over decay_hours"""
    if last_analysis is None:
        return 0.0
    hours_since = hours_between(last_analysis, now or utcnow())
    return clamp(1 - hours_since / decay_hours)


def build_persona_state(persona: UnifiedPersona, now: Optional[datetime] = None,
                        recent_games: int = 10, decay_hours: float = 168.0) -> PersonaState:
    """Project a persona into the flat state the recommenders score against"""
    now = ensure_aware(now or utcnow())
    context = persona.recommendation_context
    return PersonaState(
        user_id=persona.user_id,
        archetype=persona.traits.archetype_id,
        mood=persona.current_mood,
        intent=persona.current_intent,
        session_length_preference=persona.patterns.session_patterns.average_length,
        genre_affinities=dict(persona.signals.genre_affinity),
        difficulty_preference=DIFFICULTY_SCALE.get(context.difficulty_preference, 0.5),
        social_preference=SOCIAL_SCALE.get(context.social_preference, 0.5),
        time_of_day=now.hour,
        day_of_week=js_weekday(now),
        recent_games=[g.game_id for g in persona.patterns.recent_games[:recent_games]],
        confidence=persona.confidence,
        data_freshness=calculate_data_freshness(persona.last_analysis_date, now, decay_hours)
    )
