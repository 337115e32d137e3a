"""
Signal Collection

Turns raw gaming history into weighted behavioral signals:
- Session completion and achievement signals
- Genre transitions between consecutive sessions
- Day-of-week playtime consistency
- Platform switching
- Integration activity (achievements, session starts, connections)

Every collector is total: empty input yields an empty list.
"""

from collections import Counter, defaultdict, deque
from datetime import datetime, timedelta
from typing import Dict, List, Any, Optional, Iterable, Deque

import numpy as np

from .types import BehavioralSignal, SignalSource, PlaySession, Activity
from ..games import Game
from ..utils.time import utcnow, ensure_aware, js_weekday, clamp

# Fixed per-source weights: direct session evidence is trusted most,
# passive integration activity least.
SESSION_SIGNAL_WEIGHT = 0.8
ACHIEVEMENT_SIGNAL_WEIGHT = 0.6
GENRE_SIGNAL_WEIGHT = 0.7
PLAYTIME_SIGNAL_WEIGHT = 0.5
PLATFORM_SIGNAL_WEIGHT = 0.4
INTEGRATION_SIGNAL_WEIGHT = 0.3

SOCIAL_ACTIVITY_TYPES = ('achievement', 'session_start')
COMMUNITY_ACTIVITY_TYPES = ('integration_connected',)


class SignalBuffer:
    """
    Capped signal store.

    Eviction: when full, the oldest inserted signal is dropped; on every
    insert, signals older than max_age (relative to now) are dropped too.
    """

    def __init__(self, capacity: int = 1000, max_age: timedelta = timedelta(days=7)):
        self.capacity = capacity
        self.max_age = max_age
        self._signals: Deque[BehavioralSignal] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._signals)

    def __iter__(self):
        return iter(self._signals)

    def add(self, signal: BehavioralSignal, now: Optional[datetime] = None):
        self._signals.append(signal)
        self.evict_expired(now)

    def evict_expired(self, now: Optional[datetime] = None):
        cutoff = ensure_aware(now or utcnow()) - self.max_age
        if any(ensure_aware(s.timestamp) < cutoff for s in self._signals):
            kept = [s for s in self._signals if ensure_aware(s.timestamp) >= cutoff]
            self._signals = deque(kept, maxlen=self.capacity)

    def clear(self):
        self._signals.clear()


class SignalCollector:
    """Collects behavioral signals from existing data sources"""

    def __init__(self, buffer_capacity: int = 1000, max_signal_age: timedelta = timedelta(days=7)):
        self.max_signal_age = max_signal_age
        self.buffer = SignalBuffer(capacity=buffer_capacity, max_age=max_signal_age)

    def collect_from_session_history(self, sessions: List[PlaySession],
                                     games: List[Game]) -> List[BehavioralSignal]:
        """Collect one completion signal per session plus achievement signals"""
        signals = []
        game_map = {g.id: g for g in games}

        for session in sessions:
            game = game_map.get(session.game_id)
            timestamp = session.end_time or session.start_time

            signals.append(BehavioralSignal(
                timestamp=timestamp,
                source=SignalSource.SESSION,
                data={
                    'duration': session.duration,
                    'completed': session.end_time is not None,
                    'mood': session.mood,
                    'session_type': session.session_type,
                    'intensity': session.intensity,
                    'game_genre': game.genre if game else None
                },
                weight=SESSION_SIGNAL_WEIGHT
            ))

            if session.achievements:
                signals.append(BehavioralSignal(
                    timestamp=timestamp,
                    source=SignalSource.SESSION,
                    data={
                        'achievement_count': len(session.achievements),
                        'achievement_types': list(session.achievements)
                    },
                    weight=ACHIEVEMENT_SIGNAL_WEIGHT
                ))

        return signals

    def collect_from_genre_transitions(self, sessions: List[PlaySession],
                                       games: List[Game]) -> List[BehavioralSignal]:
        """Collect a signal for each change of primary genre between consecutive sessions"""
        signals = []
        game_map = {g.id: g for g in games}
        ordered = sorted(sessions, key=lambda s: ensure_aware(s.start_time))

        for prev_session, curr_session in zip(ordered, ordered[1:]):
            prev_game = game_map.get(prev_session.game_id)
            curr_game = game_map.get(curr_session.game_id)
            prev_genre = prev_game.genre if prev_game else None
            curr_genre = curr_game.genre if curr_game else None

            if prev_genre and curr_genre and prev_genre != curr_genre:
                prev_end = prev_session.end_time or prev_session.start_time
                signals.append(BehavioralSignal(
                    timestamp=curr_session.start_time,
                    source=SignalSource.GENRE,
                    data={
                        'from_genre': prev_genre,
                        'to_genre': curr_genre,
                        'transition_time': (ensure_aware(curr_session.start_time) - ensure_aware(prev_end)).total_seconds()
                    },
                    weight=GENRE_SIGNAL_WEIGHT
                ))

        return signals

    def collect_from_playtime_patterns(self, sessions: List[PlaySession],
                                       now: Optional[datetime] = None) -> List[BehavioralSignal]:
        """Collect one consistency signal per weekday with at least two sessions"""
        signals = []
        sessions_by_day: Dict[int, List[PlaySession]] = defaultdict(list)
        for session in sessions:
            sessions_by_day[js_weekday(session.start_time)].append(session)

        timestamp = now or utcnow()
        for day_of_week, day_sessions in sessions_by_day.items():
            if len(day_sessions) < 2:
                continue

            durations = np.array([s.duration or 0.0 for s in day_sessions], dtype=float)
            total_playtime = float(durations.sum())
            average_session_length = float(durations.mean())
            variance = float(durations.var())
            if average_session_length > 0:
                consistency = clamp(1 - variance / (average_session_length ** 2))
            else:
                consistency = 0.0

            signals.append(BehavioralSignal(
                timestamp=timestamp,
                source=SignalSource.PLAYTIME,
                data={
                    'day_of_week': day_of_week,
                    'total_playtime': total_playtime,
                    'average_session_length': average_session_length,
                    'variance': variance,
                    'session_count': len(day_sessions),
                    'consistency': consistency
                },
                weight=PLAYTIME_SIGNAL_WEIGHT
            ))

        return signals

    def collect_from_platform_switching(self, sessions: List[PlaySession]) -> List[BehavioralSignal]:
        """Collect a signal for each platform change between consecutive sessions"""
        signals = []
        ordered = sorted(sessions, key=lambda s: ensure_aware(s.start_time))
        platform_counts = Counter(s.platform for s in sessions)

        for prev_session, curr_session in zip(ordered, ordered[1:]):
            if prev_session.platform == curr_session.platform:
                continue
            prev_end = prev_session.end_time or prev_session.start_time
            signals.append(BehavioralSignal(
                timestamp=curr_session.start_time,
                source=SignalSource.PLATFORM,
                data={
                    'from_platform': prev_session.platform,
                    'to_platform': curr_session.platform,
                    'switch_time': (ensure_aware(curr_session.start_time) - ensure_aware(prev_end)).total_seconds(),
                    'platform_preference': platform_counts[curr_session.platform] / len(sessions)
                },
                weight=PLATFORM_SIGNAL_WEIGHT
            ))

        return signals

    def collect_from_integration_activity(self, activities: List[Activity]) -> List[BehavioralSignal]:
        """Collect one signal per integration activity"""
        return [
            BehavioralSignal(
                timestamp=activity.timestamp,
                source=SignalSource.INTEGRATION,
                data={
                    'type': activity.type,
                    'platform': activity.platform,
                    'game_id': activity.game_id,
                    'social_interaction': activity.type in SOCIAL_ACTIVITY_TYPES,
                    'community_engagement': activity.type in COMMUNITY_ACTIVITY_TYPES
                },
                weight=INTEGRATION_SIGNAL_WEIGHT
            )
            for activity in activities
        ]

    def collect_all(self, sessions: List[PlaySession], games: List[Game],
                    activities: Optional[List[Activity]] = None,
                    now: Optional[datetime] = None) -> List[BehavioralSignal]:
        """Run every collector and concatenate the results"""
        return (
            self.collect_from_session_history(sessions, games)
            + self.collect_from_genre_transitions(sessions, games)
            + self.collect_from_playtime_patterns(sessions, now=now)
            + self.collect_from_platform_switching(sessions)
            + self.collect_from_integration_activity(activities or [])
        )

    def add_signal(self, signal: BehavioralSignal, now: Optional[datetime] = None):
        """Add a signal to the buffer"""
        self.buffer.add(signal, now=now)

    def add_signals(self, signals: Iterable[BehavioralSignal], now: Optional[datetime] = None):
        for signal in signals:
            self.buffer.add(signal, now=now)

    def get_recent_signals(self, max_age: Optional[timedelta] = None,
                           now: Optional[datetime] = None) -> List[BehavioralSignal]:
        """Buffered signals younger than max_age, newest first"""
        cutoff = ensure_aware(now or utcnow()) - (max_age or self.max_signal_age)
        recent = [s for s in self.buffer if ensure_aware(s.timestamp) >= cutoff]
        return sorted(recent, key=lambda s: ensure_aware(s.timestamp), reverse=True)

    def get_signal_stats(self) -> Dict[str, Any]:
        """Summary statistics over the buffered signals"""
        signals = list(self.buffer)
        signals_by_source = Counter(s.source.value for s in signals)
        timestamps = sorted(ensure_aware(s.timestamp) for s in signals)

        return {
            'total_signals': len(signals),
            'signals_by_source': dict(signals_by_source),
            'average_weight': float(np.mean([s.weight for s in signals])) if signals else 0.0,
            'oldest_signal': timestamps[0] if timestamps else None,
            'newest_signal': timestamps[-1] if timestamps else None
        }

    def clear_signals(self):
        """Clear all buffered signals"""
        self.buffer.clear()
