"""
End-to-end tests for MoodPersonaPipeline over the in-memory store.
"""

from unittest.mock import AsyncMock

import pytest

from gamepilot import MoodPersonaPipeline, SystemConfig
from gamepilot.mood.types import MoodAnalysisResult, MoodVector, NormalizedFeatures
from gamepilot.recommenders import MoodForecast
from gamepilot.storage import InMemoryStore, RedisStore

from conftest import FIXED_NOW


def make_result(calm=0.5, competitive=0.5, curious=0.5, social=0.5, focused=0.5, confidence=0.6):
    return MoodAnalysisResult(
        mood_vector=MoodVector(calm, competitive, curious, social, focused),
        confidence=confidence,
        signal_count=10,
        last_updated=FIXED_NOW,
        features=NormalizedFeatures.neutral()
    )


class TestMoodPersonaPipeline:
    """Mood, persona and recommendation flow through one facade."""

    @pytest.fixture
    def pipeline(self, store, config, sample_games):
        store.add_games('user1', [g.to_dict() for g in sample_games])
        return MoodPersonaPipeline(store, config)

    def test_forecast_from_mood(self, pipeline):
        forecast = pipeline.forecast_from_mood(make_result(competitive=0.9, confidence=0.7))
        assert forecast == MoodForecast('competitive', 0.7)

        assert pipeline.forecast_from_mood(make_result(curious=0.8)).predicted_mood == 'exploratory'

    def test_tied_moods_forecast_chill(self, pipeline):
        assert pipeline.forecast_from_mood(make_result()).predicted_mood == 'chill'

    @pytest.mark.asyncio
    async def test_mood_recommendations_from_stored_analysis(self, pipeline, recent_sessions, sample_games):
        analysis = await pipeline.analyze_user_mood('user1', recent_sessions, sample_games)
        current = await pipeline.get_current_mood('user1')

        assert current.signal_count == analysis.signal_count
        result = await pipeline.get_mood_based_recommendations('user1', limit=2)

        assert result.predicted_mood == pipeline.forecast_from_mood(current).predicted_mood
        assert result.total_games == 4
        assert len(result.recommendations) == 2

    @pytest.mark.asyncio
    async def test_no_stored_mood_gives_none(self, pipeline):
        assert await pipeline.get_mood_based_recommendations('user1') is None

    @pytest.mark.asyncio
    async def test_explicit_forecast_skips_store_lookup(self, pipeline):
        result = await pipeline.get_mood_based_recommendations('user1', MoodForecast('chill', 1.0))
        assert result.recommendations[0].game_id == 'g1'

    @pytest.mark.asyncio
    async def test_update_persona_from_dict(self, pipeline):
        updated = await pipeline.update_persona('user1', {
            'mood': {'mood': 'relaxed', 'intensity': 4},
            'intent': {'intent': 'short_session'}
        })

        assert updated.current_mood == 'relaxed'
        assert updated.current_intent == 'short_session'
        assert updated.mood_intensity == 4

    @pytest.mark.asyncio
    async def test_persona_recommendations(self, pipeline):
        await pipeline.analyze_persona('user1')

        result = await pipeline.get_persona_based_recommendations('user1', options={'max_recommendations': 3})

        assert result.total_games == 4
        assert 0 < len(result.recommendations) <= 3
        assert all(r.intent_match is not None for r in result.recommendations)

    @pytest.mark.asyncio
    async def test_unreadable_persona_gives_none(self, pipeline, store):
        store.get_persona = AsyncMock(side_effect=RuntimeError('store offline'))
        assert await pipeline.get_persona_based_recommendations('user1') is None

    def test_health_check(self, pipeline):
        health = pipeline.health_check()

        assert health['status'] == 'healthy'
        assert health['components']['store'] == {'backend': 'memory'}
        assert set(health['components']) == {'mood', 'persona', 'recommendations', 'store'}

    def test_from_config(self):
        assert isinstance(MoodPersonaPipeline.from_config(SystemConfig()).store, InMemoryStore)

        config = SystemConfig()
        config.store.backend = 'redis'
        assert isinstance(MoodPersonaPipeline.from_config(config).store, RedisStore)

    def test_default_config(self):
        assert MoodPersonaPipeline(InMemoryStore()).config == SystemConfig()
