"""
Persona Analysis

Derives persona building blocks from a user's raw library and session
history:
- Aggregate signals (genre affinity, completion, session length, hour-of-day
  distribution, multiplayer share)
- Five trait scores and the categorical traits read off them
- Short-term mood signals and the mood/intent heuristics over them
- Behavioral patterns (recent games, session habits, abandonment, completion)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .models import (
    PersonaTraits, PersonaSignals, BehavioralPatterns, RecentGame, SessionPatterns,
    AbandonedGame, CompletionPatterns, PersonaInsights, UnifiedPersona
)
from ..games import Game
from ..mood.types import PlaySession
from ..utils.time import clamp, utcnow, ensure_aware, js_weekday

logger = logging.getLogger(__name__)

# Archetype per trait score, in tie-break order
TRAIT_ARCHETYPES = (
    ('completionist', 'Achiever'),
    ('explorer', 'Explorer'),
    ('competitor', 'Competitor'),
    ('strategist', 'Strategist'),
    ('adventurer', 'Casual')
)

COMPETITIVE_GENRES = ('shooter', 'fps', 'fighting', 'sports', 'racing', 'moba', 'battle royale')
STRATEGY_GENRES = ('strategy', 'puzzle', 'simulation', 'tactics', 'card')
ADVENTURE_GENRES = ('adventure', 'rpg', 'action', 'open world', 'platformer')
MULTIPLAYER_MARKERS = ('multiplayer', 'co-op', 'coop', 'mmo', 'mmorpg', 'pvp', 'online')

# Library hours after which an unfinished game counts as completed
COMPLETION_HOURS = 20
# Distinct genres at which the explorer score saturates
EXPLORER_GENRE_SATURATION = 10
# Mean session minutes at which the strategist session component saturates
STRATEGIST_SESSION_SATURATION = 180.0
ABANDONMENT_DAYS = 30
RECENT_SESSION_WINDOW = 5
LATE_NIGHT_START = 22
LATE_NIGHT_END = 4
NEVER_PLAYED = datetime.min.replace(tzinfo=timezone.utc)

ARCHETYPE_RECOMMENDATIONS = {
    'Achiever': ['Finish a game close to completion', 'Chase remaining achievements'],
    'Explorer': ['Try a genre outside your usual rotation', 'Pick up an open-world title'],
    'Competitor': ['Jump into ranked matches', 'Try a competitive multiplayer game'],
    'Strategist': ['Start a long strategy campaign', 'Tackle a complex puzzle game'],
    'Casual': ['Play something short and relaxing', 'Revisit a familiar favourite']
}


@dataclass
class MoodSignals:
    session_pattern: float = 0.0  # mean minutes over the most recent sessions
    playtime_spike: float = 0.0  # recent vs overall mean, clamped to [0,1]
    genre_shift: float = 0.0  # share of consecutive sessions switching primary genre


def _sessions_frame(sessions: List[PlaySession]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                'game_id': s.game_id,
                'start_time': ensure_aware(s.start_time),
                'duration': float(s.duration or 0.0),
                'achievements': len(s.achievements),
                'session_type': s.session_type
            }
            for s in sessions
        ],
        columns=['game_id', 'start_time', 'duration', 'achievements', 'session_type']
    )
    if not frame.empty:
        frame['start_time'] = pd.to_datetime(frame['start_time'], utc=True)
        frame = frame.sort_values('start_time', kind='stable').reset_index(drop=True)
        frame['hour'] = frame['start_time'].dt.hour
        frame['weekday'] = [js_weekday(t.to_pydatetime()) for t in frame['start_time']]
    return frame


def _is_completed(game: Game) -> bool:
    return game.completed or game.hours_played > COMPLETION_HOURS


def _is_multiplayer(game: Game) -> bool:
    markers = set(game.tags) | set(game.genres)
    return any(marker in markers for marker in MULTIPLAYER_MARKERS)


def _game_playtime(games: List[Game], frame: pd.DataFrame) -> Dict[str, float]:
    """Minutes per game: library hours or logged sessions, whichever is larger"""
    session_minutes = frame.groupby('game_id')['duration'].sum().to_dict() if not frame.empty else {}
    return {
        game.id: max(game.hours_played * 60.0, float(session_minutes.get(game.id, 0.0)))
        for game in games
    }


def calculate_genre_affinity(games: List[Game], sessions: List[PlaySession]) -> Dict[str, float]:
    """Genre playtime relative to the most played genre, in [0,1]"""
    if not games:
        return {}

    playtime = _game_playtime(games, _sessions_frame(sessions))
    rows = [
        {'genre': genre, 'minutes': playtime[game.id]}
        for game in games for genre in game.genres
    ]
    if not rows:
        return {}

    by_genre = pd.DataFrame(rows).groupby('genre')['minutes'].agg(['sum', 'size'])
    # Fall back to library counts when nothing has been played yet
    column = 'sum' if by_genre['sum'].max() > 0 else 'size'
    top = float(by_genre[column].max())
    return {genre: round(float(value) / top, 4) for genre, value in by_genre[column].items()}


def build_persona_signals(games: List[Game], sessions: List[PlaySession]) -> PersonaSignals:
    frame = _sessions_frame(sessions)

    completion_rate = sum(_is_completed(g) for g in games) / len(games) if games else 0.0
    multiplayer_ratio = sum(_is_multiplayer(g) for g in games) / len(games) if games else 0.0

    if frame.empty:
        session_pattern = 0.0
        distribution: List[float] = []
    else:
        session_pattern = float(frame['duration'].mean())
        counts = frame['hour'].value_counts().reindex(range(24), fill_value=0)
        distribution = [round(float(c) / len(frame), 4) for c in counts]

    return PersonaSignals(
        genre_affinity=calculate_genre_affinity(games, sessions),
        completion_rate=completion_rate,
        session_pattern=session_pattern,
        playtime_distribution=distribution,
        multiplayer_ratio=multiplayer_ratio
    )


def _max_affinity(affinity: Dict[str, float], genres: Tuple[str, ...]) -> float:
    return max((value for genre, value in affinity.items() if genre in genres), default=0.0)


def score_traits(signals: PersonaSignals) -> Dict[str, float]:
    """Five [0,1] trait scores"""
    affinity = signals.genre_affinity
    session_component = min(1.0, signals.session_pattern / STRATEGIST_SESSION_SATURATION)

    return {
        'completionist': clamp(signals.completion_rate),
        'explorer': clamp(len(affinity) / EXPLORER_GENRE_SATURATION),
        'competitor': clamp(0.6 * signals.multiplayer_ratio + 0.4 * _max_affinity(affinity, COMPETITIVE_GENRES)),
        'strategist': clamp(0.7 * _max_affinity(affinity, STRATEGY_GENRES) + 0.3 * session_component),
        'adventurer': clamp(0.7 * _max_affinity(affinity, ADVENTURE_GENRES) + 0.3 * (1 - signals.completion_rate))
    }


def derive_traits(scores: Dict[str, float]) -> PersonaTraits:
    """Map trait scores to the categorical persona traits"""
    ranked = sorted(TRAIT_ARCHETYPES, key=lambda pair: scores[pair[0]], reverse=True)
    top_score, archetype = scores[ranked[0][0]], ranked[0][1]

    if scores['competitor'] > 0.6:
        intensity = 'High'
    elif scores['adventurer'] > 0.6:
        intensity = 'Low'
    else:
        intensity = 'Medium'

    return PersonaTraits(
        archetype_id=archetype,
        intensity=intensity,
        pacing='Marathon' if scores['strategist'] > 0.6 else 'Flow',
        risk_profile='Experimental' if scores['explorer'] > 0.6 else 'Balanced',
        social_style='Competitive' if scores['competitor'] > 0.5 else 'Solo',
        confidence=top_score
    )


def extract_mood_signals(games: List[Game], sessions: List[PlaySession]) -> MoodSignals:
    frame = _sessions_frame(sessions)
    if frame.empty:
        return MoodSignals()

    recent_mean = float(frame['duration'].tail(RECENT_SESSION_WINDOW).mean())
    overall_mean = float(frame['duration'].mean())
    spike = recent_mean / overall_mean - 1 if overall_mean > 0 else 0.0

    primary_genre = {g.id: g.genre for g in games}
    genres = frame['game_id'].map(primary_genre)
    pairs = [
        (prev, curr) for prev, curr in zip(genres.iloc[:-1], genres.iloc[1:])
        if isinstance(prev, str) and isinstance(curr, str)
    ]
    shift = sum(prev != curr for prev, curr in pairs) / len(pairs) if pairs else 0.0

    return MoodSignals(
        session_pattern=recent_mean,
        playtime_spike=clamp(spike),
        genre_shift=shift
    )


def infer_current_mood(mood_signals: MoodSignals) -> str:
    if mood_signals.session_pattern > 120:
        return 'focused'
    if mood_signals.playtime_spike > 0.5:
        return 'energetic'
    if mood_signals.genre_shift > 0.7:
        return 'curious'
    return 'neutral'


def infer_current_intent(traits: PersonaTraits, mood_signals: MoodSignals) -> str:
    if traits.intensity == 'High' and mood_signals.playtime_spike > 0.3:
        return 'challenge'
    if mood_signals.genre_shift > 0.5:
        return 'exploration'
    return 'neutral'


def calculate_mood_intensity(mood_signals: MoodSignals) -> int:
    return int(clamp(5 + int(np.floor(mood_signals.playtime_spike * 5)), 1, 10))


def _recent_games(games: List[Game], frame: pd.DataFrame, max_recent_games: int) -> List[RecentGame]:
    game_map = {g.id: g for g in games}
    recent = []

    if not frame.empty:
        per_game = frame.groupby('game_id').agg(
            session_count=('duration', 'size'),
            total_playtime=('duration', 'sum'),
            average_session_length=('duration', 'mean'),
            last_played=('start_time', 'max')
        ).sort_values('last_played', ascending=False, kind='stable')

        for game_id, row in per_game.iterrows():
            game = game_map.get(game_id)
            recent.append(RecentGame(
                game_id=str(game_id),
                game_name=game.name if game and game.name else 'Unknown Game',
                session_count=int(row['session_count']),
                total_playtime=float(row['total_playtime']),
                last_played=row['last_played'].to_pydatetime(),
                average_session_length=float(row['average_session_length']),
                completion_rate=1.0 if game and _is_completed(game) else 0.0
            ))

    seen = {g.game_id for g in recent}
    unplayed = [g for g in games if g.id not in seen and (g.hours_played > 0 or g.last_played)]
    unplayed.sort(key=lambda g: ensure_aware(g.last_played) if g.last_played else NEVER_PLAYED, reverse=True)
    for game in unplayed:
        recent.append(RecentGame(
            game_id=game.id,
            game_name=game.name or 'Unknown Game',
            total_playtime=game.hours_played * 60.0,
            last_played=game.last_played,
            completion_rate=1.0 if _is_completed(game) else 0.0
        ))

    return recent[:max_recent_games]


def _session_patterns(frame: pd.DataFrame, max_preferred_times: int) -> SessionPatterns:
    if frame.empty:
        return SessionPatterns()

    span_days = (frame['start_time'].max() - frame['start_time'].min()).total_seconds() / 86400
    weeks = max(1.0, span_days / 7)
    hours = frame['hour']
    late_night = ((hours >= LATE_NIGHT_START) | (hours < LATE_NIGHT_END)).mean()
    weekend = frame['weekday'].isin([0, 6]).mean()

    return SessionPatterns(
        average_length=float(frame['duration'].mean()),
        preferred_times=[int(h) for h in hours.tolist()][-max_preferred_times:],
        sessions_per_week=round(len(frame) / weeks, 2),
        late_night_ratio=float(late_night),
        weekend_ratio=float(weekend)
    )


def _abandoned_games(games: List[Game], frame: pd.DataFrame, now: datetime) -> List[AbandonedGame]:
    cutoff = ensure_aware(now) - timedelta(days=ABANDONMENT_DAYS)
    playtime = _game_playtime(games, frame)
    abandoned = []

    for game in games:
        if _is_completed(game) or playtime[game.id] <= 0:
            continue
        game_sessions = frame[frame['game_id'] == game.id] if not frame.empty else frame
        last_session = game_sessions.iloc[-1] if not game_sessions.empty else None

        last_played = game.last_played
        if last_session is not None:
            session_time = last_session['start_time'].to_pydatetime()
            last_played = max(ensure_aware(last_played), session_time) if last_played else session_time
        if last_played is None or ensure_aware(last_played) >= cutoff:
            continue

        abandoned.append(AbandonedGame(
            game_id=game.id,
            abandoned_at=last_played,
            playtime_before_abandonment=playtime[game.id],
            last_session_length=float(last_session['duration']) if last_session is not None else 0.0
        ))

    return abandoned


def _completion_patterns(games: List[Game], frame: pd.DataFrame) -> CompletionPatterns:
    completed = sum(_is_completed(g) for g in games)
    return CompletionPatterns(
        games_completed=completed,
        average_completion_rate=completed / len(games) if games else 0.0,
        preferred_completion_types=['main_story'] if completed else [],
        achievement_hunting=bool(not frame.empty and frame['achievements'].mean() >= 1)
    )


def extract_behavioral_patterns(games: List[Game], sessions: List[PlaySession],
                                now: Optional[datetime] = None, max_recent_games: int = 50,
                                max_preferred_times: int = 100) -> BehavioralPatterns:
    frame = _sessions_frame(sessions)
    return BehavioralPatterns(
        recent_games=_recent_games(games, frame, max_recent_games),
        session_patterns=_session_patterns(frame, max_preferred_times),
        abandoned_games=_abandoned_games(games, frame, now or utcnow()),
        completion_patterns=_completion_patterns(games, frame)
    )


def generate_persona_insights(persona: UnifiedPersona, scores: Dict[str, float]) -> PersonaInsights:
    dominant = [
        name for name, score in sorted(scores.items(), key=lambda item: item[1], reverse=True)
        if score >= 0.3
    ][:3]

    behaviors = []
    sessions = persona.patterns.session_patterns
    if sessions.average_length > 90:
        behaviors.append('Prefers long play sessions')
    elif sessions.average_length < 30:
        behaviors.append('Prefers short play sessions')
    if sessions.late_night_ratio > 0.3:
        behaviors.append('Frequently plays late at night')
    if sessions.weekend_ratio > 0.5:
        behaviors.append('Mostly plays on weekends')
    if persona.patterns.abandoned_games:
        behaviors.append(f"Has {len(persona.patterns.abandoned_games)} unfinished games on hold")
    if persona.patterns.completion_patterns.achievement_hunting:
        behaviors.append('Hunts achievements')

    return PersonaInsights(
        dominant_traits=dominant,
        behavior_patterns=behaviors,
        recommendations=list(ARCHETYPE_RECOMMENDATIONS.get(persona.traits.archetype_id, [])),
        confidence=persona.confidence
    )
