"""
Shared fixtures for the GamePilot test suites.
"""

from datetime import datetime, timedelta, timezone

import pytest

from gamepilot.games import Game
from gamepilot.mood.types import PlaySession, Activity
from gamepilot.persona.models import PersonaState
from gamepilot.storage import InMemoryStore
from gamepilot.utils.config import SystemConfig

# A Wednesday
FIXED_NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def sample_games():
    return [
        Game(id='g1', name='Stardew Valley', genres=['simulation', 'casual'],
             tags=['relaxing', 'casual'], estimated_playtime=45, difficulty='easy', hours_played=10),
        Game(id='g2', name='Counter-Strike 2', genres=['shooter', 'action'],
             tags=['multiplayer', 'competitive', 'pvp'], estimated_playtime=40, difficulty='hard',
             hours_played=50),
        Game(id='g3', name='Civilization VI', genres=['strategy'],
             tags=['strategic', 'turn-based'], estimated_playtime=120, difficulty='medium', hours_played=5),
        Game(id='g4', name='Portal 2', genres=['puzzle'],
             tags=['co-op', 'puzzle'], estimated_playtime=30, difficulty='medium')
    ]


@pytest.fixture
def make_session():
    def _make(game_id, start, duration=60.0, session_type='main', platform='pc',
              intensity=None, ended=True, achievements=None):
        return PlaySession(
            game_id=game_id,
            start_time=start,
            end_time=start + timedelta(minutes=duration) if ended else None,
            duration=duration,
            session_type=session_type,
            platform=platform,
            intensity=intensity,
            achievements=list(achievements or [])
        )
    return _make


@pytest.fixture
def recent_sessions(make_session):
    """Sessions from the last few hours, inside the signal buffer window"""
    base = datetime.now(timezone.utc) - timedelta(hours=12)
    return [
        make_session('g1', base, duration=45, session_type='casual'),
        make_session('g2', base + timedelta(hours=1), duration=30, intensity=9, achievements=['ace']),
        make_session('g3', base + timedelta(hours=2), duration=120, platform='ps5'),
        make_session('g2', base + timedelta(hours=5), duration=40, session_type='social', intensity=8)
    ]


@pytest.fixture
def activities():
    at = datetime.now(timezone.utc) - timedelta(hours=1)
    return [
        Activity(type='achievement', platform='steam', timestamp=at, game_id='g2'),
        Activity(type='integration_connected', platform='discord', timestamp=at)
    ]


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def config():
    return SystemConfig()


@pytest.fixture
def make_state():
    def _make(**overrides):
        values = dict(
            user_id='user1',
            archetype='Casual',
            mood='neutral',
            intent='neutral',
            session_length_preference=60.0,
            genre_affinities={},
            difficulty_preference=0.5,
            social_preference=0.5,
            time_of_day=12,
            day_of_week=3,
            recent_games=[],
            confidence=0.5,
            data_freshness=1.0
        )
        values.update(overrides)
        return PersonaState(**values)
    return _make
