"""
Tests for personas: pure builders, events and the persona service.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from gamepilot.persona import (
    UnifiedPersona, PersonaService, PersonaUpdateRequest, MoodUpdate, IntentUpdate,
    BehaviorUpdate, MoodEvent, SessionEvent, AchievementEvent, BehaviorEvent, parse_event
)
from gamepilot.persona import builders
from gamepilot.persona.models import AbandonedGame, RecentGame, PersonaTraits
from gamepilot.utils.exceptions import PersonaUpdateError, PersonaAnalysisError

from conftest import FIXED_NOW


@pytest.fixture
def persona():
    return UnifiedPersona.default('user1', now=FIXED_NOW)


class TestPersonaBuilders:
    """Pure per-concern update functions."""

    def test_mood_update_does_not_mutate_input(self, persona):
        updated = builders.apply_mood_update(persona, MoodUpdate('energetic', 8), now=FIXED_NOW)

        assert updated.current_mood == 'energetic'
        assert updated.mood_intensity == 8
        assert persona.current_mood == 'neutral'
        assert persona.history.mood_history == []

    def test_mood_history_drops_oldest(self, persona):
        for i in range(101):
            persona = builders.apply_mood_update(persona, MoodUpdate('focused', 5, context=str(i)), now=FIXED_NOW)

        history = persona.history.mood_history
        assert len(history) == 100
        assert history[0].context == '1'
        assert history[-1].context == '100'

    @pytest.mark.parametrize('intensity,expected', [(15, 10), (0, 1), (7, 7)])
    def test_mood_intensity_is_clamped(self, persona, intensity, expected):
        updated = builders.apply_mood_update(persona, MoodUpdate('bored', intensity), now=FIXED_NOW)
        assert updated.mood_intensity == expected
        assert updated.history.mood_history[-1].intensity == expected

    def test_intent_history_cap(self, persona):
        for i in range(55):
            persona = builders.apply_intent_update(persona, IntentUpdate('novelty', str(i)), now=FIXED_NOW)

        assert persona.current_intent == 'novelty'
        assert len(persona.history.intent_history) == 50

    def test_behavior_update_tracks_recent_games(self, persona):
        first = BehaviorUpdate('g1', session_length=30, completed=True, timestamp=FIXED_NOW, game_name='Celeste')
        updated = builders.apply_behavior_update(persona, first)

        game = updated.patterns.recent_games[0]
        assert (game.game_id, game.game_name, game.session_count, game.completion_rate) == ('g1', 'Celeste', 1, 1.0)
        assert updated.patterns.session_patterns.average_length == 45
        assert updated.patterns.session_patterns.preferred_times == [12]

        second = BehaviorUpdate('g1', session_length=30, completed=False, timestamp=FIXED_NOW)
        updated = builders.apply_behavior_update(updated, second)

        game = updated.patterns.recent_games[0]
        assert len(updated.patterns.recent_games) == 1
        assert game.session_count == 2
        assert game.total_playtime == 60
        assert game.average_session_length == 30
        assert game.completion_rate == 0.5

    def test_recent_games_capped(self, persona):
        for i in range(55):
            persona = builders.apply_behavior_update(
                persona, BehaviorUpdate(f'g{i}', session_length=20, timestamp=FIXED_NOW)
            )

        recent = persona.patterns.recent_games
        assert len(recent) == 50
        assert recent[0].game_id == 'g5'

    def test_session_event(self, persona):
        updated = builders.apply_session_event(persona, SessionEvent('g1', 45, timestamp=FIXED_NOW))
        assert updated.data_points == persona.data_points == 0
        assert updated.patterns.session_patterns.preferred_times == [12]

    def test_achievement_event(self, persona):
        updated = builders.apply_achievement_event(persona, AchievementEvent('g1', 'speedrun'))
        assert updated.data_points == persona.data_points == 0
        assert updated.patterns.completion_patterns.achievement_hunting is True
        assert persona.patterns.completion_patterns.achievement_hunting is False

    @pytest.mark.parametrize('data_points,expected', [(0, 0.0), (25, 0.5), (50, 1.0), (100, 1.0)])
    def test_confidence_saturates(self, persona, data_points, expected):
        persona.data_points = data_points
        assert builders.recompute_persona(persona).confidence == expected

    def test_preferred_and_avoided_genres(self, persona):
        persona.signals.genre_affinity = {'rpg': 0.9, 'puzzle': 0.6, 'sports': 0.5, 'racing': 0.1}

        context = builders.build_recommendation_context(persona)
        assert context.preferred_genres == ['rpg', 'puzzle']
        assert context.avoided_genres == []

        persona.patterns.abandoned_games = [AbandonedGame('g9')]
        assert builders.build_recommendation_context(persona).avoided_genres == ['racing']

    @pytest.mark.parametrize('social_style,ratio,data_points,expected', [
        ('Competitive', 0.0, 0, 'competitive'),
        ('Solo', 0.6, 0, 'coop'),
        ('Solo', 0.1, 5, 'solo'),
        ('Solo', 0.1, 0, 'any')
    ])
    def test_social_preference(self, persona, social_style, ratio, data_points, expected):
        persona.traits.social_style = social_style
        persona.signals.multiplayer_ratio = ratio
        persona.data_points = data_points
        assert builders.build_recommendation_context(persona).social_preference == expected

    @pytest.mark.parametrize('intensity,expected', [('High', 'hard'), ('Low', 'easy'), ('Medium', 'normal')])
    def test_difficulty_preference(self, persona, intensity, expected):
        persona.traits.intensity = intensity
        assert builders.build_recommendation_context(persona).difficulty_preference == expected

    @pytest.mark.parametrize('minutes,expected', [(20, 'short'), (30, 'medium'), (60, 'medium'), (61, 'long')])
    def test_session_length_category(self, minutes, expected):
        assert builders.session_length_category(minutes) == expected

    def test_persona_state_projection(self, persona):
        persona.last_analysis_date = FIXED_NOW - timedelta(hours=84)
        persona.signals.genre_affinity = {'rpg': 0.8}
        persona.patterns.recent_games = [RecentGame(f'g{i}') for i in range(12)]
        persona.recommendation_context.difficulty_preference = 'hard'
        persona.recommendation_context.social_preference = 'solo'

        state = builders.build_persona_state(persona, now=FIXED_NOW)

        assert state.archetype == 'Casual'
        assert state.session_length_preference == 60
        assert state.difficulty_preference == 0.75
        assert state.social_preference == 0.1
        assert state.time_of_day == 12
        assert state.day_of_week == 3
        assert state.recent_games == [f'g{i}' for i in range(10)]
        assert state.data_freshness == pytest.approx(0.5)
        assert state.genre_affinities == {'rpg': 0.8}

    def test_sunday_is_day_zero(self, persona):
        sunday = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert builders.build_persona_state(persona, now=sunday).day_of_week == 0

    def test_freshness_bounds(self):
        assert builders.calculate_data_freshness(None, FIXED_NOW) == 0.0
        assert builders.calculate_data_freshness(FIXED_NOW - timedelta(days=30), FIXED_NOW) == 0.0
        assert builders.calculate_data_freshness(FIXED_NOW, FIXED_NOW) == 1.0


class TestPersonaEvents:
    """Tagged persona events."""

    def test_parse_mood_event(self):
        event = parse_event({
            'type': 'mood',
            'timestamp': '2026-03-04T12:00:00Z',
            'data': {'mood': 'relaxed', 'intensity': 3},
            'context': {'game_id': 'g1'}
        })

        assert isinstance(event, MoodEvent)
        assert event.mood == 'relaxed'
        assert event.game_id == 'g1'
        assert event.timestamp == FIXED_NOW

    def test_parse_behavior_event(self):
        event = parse_event({
            'type': 'behavior',
            'timestamp': '2026-03-04T12:00:00Z',
            'data': {'game_id': 'g2', 'session_length': 40, 'completed': True}
        })

        assert isinstance(event, BehaviorEvent)
        assert event.behavior.game_id == 'g2'
        assert event.behavior.timestamp == FIXED_NOW

    def test_parse_session_and_achievement_events(self):
        session = parse_event({'type': 'session', 'data': {'game_id': 'g1', 'session_length': 25}})
        achievement = parse_event({'type': 'achievement', 'data': {'achievement_id': 'a1'}, 'context': {'game_id': 'g1'}})

        assert isinstance(session, SessionEvent)
        assert session.session_length == 25
        assert isinstance(achievement, AchievementEvent)
        assert achievement.game_id == 'g1'

    def test_unknown_event_type(self):
        assert parse_event({'type': 'teleport', 'data': {}}) is None

    def test_update_request_from_dict(self):
        request = PersonaUpdateRequest.from_dict({
            'mood': {'mood': 'focused', 'intensity': 7},
            'event': {'type': 'achievement', 'data': {'game_id': 'g3'}}
        })

        assert request.mood == MoodUpdate('focused', 7)
        assert request.intent is None
        assert isinstance(request.event, AchievementEvent)
        assert PersonaUpdateRequest.from_dict({}) == PersonaUpdateRequest()


class TestPersonaService:
    """Persona lifecycle against an in-memory store."""

    @pytest.fixture
    def service(self, store, config):
        return PersonaService(store, config)

    @pytest.fixture
    def seeded_store(self, store, sample_games):
        store.add_games('user1', [g.to_dict() for g in sample_games])
        store.add_sessions('user1', [
            {'game_id': 'g3', 'start_time': '2026-03-01T18:00:00Z', 'duration': 60, 'platform': 'pc'},
            {'game_id': 'g1', 'start_time': '2026-03-02T20:00:00Z', 'duration': 90, 'platform': 'pc'}
        ])
        return store

    @pytest.mark.asyncio
    async def test_default_persona_created_on_first_access(self, service, store):
        persona = await service.get_persona('user1')

        assert persona.traits == PersonaTraits()
        assert persona.confidence == 0.3
        assert (persona.current_mood, persona.current_intent, persona.mood_intensity) == ('neutral', 'neutral', 5)
        assert store.personas['user1']['user_id'] == 'user1'

    @pytest.mark.asyncio
    async def test_stale_persona_is_reanalyzed(self, service, seeded_store):
        stale = UnifiedPersona.default('user1', now=datetime.now(timezone.utc) - timedelta(hours=48))
        stale = builders.apply_mood_update(stale, MoodUpdate('stressed', 6), now=stale.created_at)
        seeded_store.personas['user1'] = stale.to_dict()

        persona = await service.get_persona('user1')

        assert persona.data_points == 6
        assert persona.last_analysis_date > stale.last_analysis_date
        assert persona.history.mood_history[0].mood == 'stressed'
        assert len(persona.history.trait_evolution) == 1

    @pytest.mark.asyncio
    async def test_get_persona_read_failure(self, service, store):
        store.get_persona = AsyncMock(side_effect=RuntimeError('store offline'))
        assert await service.get_persona('user1') is None
        assert await service.get_persona_state('user1') is None

    @pytest.mark.asyncio
    async def test_empty_update_only_touches_last_updated(self, service, store):
        before = await service.get_persona('user1')

        after = await service.update_persona('user1', PersonaUpdateRequest())

        assert after.traits == before.traits
        assert after.patterns == before.patterns
        assert after.history == before.history
        assert after.current_mood == before.current_mood
        assert after.last_updated >= before.last_updated

    @pytest.mark.asyncio
    async def test_update_applies_all_parts_with_one_write(self, service, store):
        await service.get_persona('user1')
        writes = store.write_count

        updated = await service.update_persona('user1', PersonaUpdateRequest(
            mood=MoodUpdate('energetic', 9),
            intent=IntentUpdate('challenge'),
            behavior=BehaviorUpdate('g2', session_length=40, completed=True),
            event=SessionEvent('g2', 40)
        ))

        assert store.write_count == writes + 1
        assert updated.current_mood == 'energetic'
        assert updated.current_intent == 'challenge'
        assert updated.patterns.recent_games[0].game_id == 'g2'
        assert updated.data_points == 0
        assert updated.confidence == 0.0
        assert store.personas['user1']['current_mood'] == 'energetic'

    @pytest.mark.asyncio
    async def test_updates_never_change_data_points(self, service, seeded_store):
        analyzed = (await service.analyze_persona('user1')).persona

        updated = await service.update_persona('user1', PersonaUpdateRequest(
            mood=MoodUpdate('focused', 7),
            intent=IntentUpdate('novelty'),
            behavior=BehaviorUpdate('g4', session_length=25, completed=False),
            event=SessionEvent('g4', 25)
        ))
        updated = await service.update_persona('user1', PersonaUpdateRequest(event=AchievementEvent('g4', 'escape')))

        assert updated.data_points == analyzed.data_points == 6
        assert updated.confidence == analyzed.confidence
        assert updated.patterns.completion_patterns.achievement_hunting is True

    @pytest.mark.asyncio
    async def test_stale_persona_update_writes_once(self, service, seeded_store):
        stale = UnifiedPersona.default('user1', now=datetime.now(timezone.utc) - timedelta(hours=48))
        seeded_store.personas['user1'] = stale.to_dict()
        writes = seeded_store.write_count

        updated = await service.update_persona('user1', PersonaUpdateRequest())

        assert seeded_store.write_count == writes + 1
        assert updated.data_points == 6
        assert updated.last_analysis_date > stale.last_analysis_date

    @pytest.mark.asyncio
    async def test_first_update_creates_persona_with_one_write(self, service, store):
        updated = await service.update_persona('user1', PersonaUpdateRequest(mood=MoodUpdate('relaxed', 3)))

        assert store.write_count == 1
        assert store.personas['user1']['current_mood'] == 'relaxed'
        assert updated.data_points == 0

    @pytest.mark.asyncio
    async def test_update_read_failure_raises(self, service, store):
        store.get_persona = AsyncMock(side_effect=RuntimeError('store offline'))

        with pytest.raises(PersonaUpdateError):
            await service.update_persona('user1', PersonaUpdateRequest(mood=MoodUpdate('bored', 2)))

    @pytest.mark.asyncio
    async def test_update_write_failure_raises(self, service, store):
        await service.get_persona('user1')
        store.update_persona = AsyncMock(side_effect=RuntimeError('store offline'))

        with pytest.raises(PersonaUpdateError) as exc_info:
            await service.update_persona('user1', PersonaUpdateRequest())
        assert exc_info.value.details == {'user_id': 'user1'}

    def test_unknown_event_is_ignored(self, service, persona):
        assert service.process_persona_event(persona, object()) is persona

    @pytest.mark.asyncio
    async def test_analyze_persona(self, service, seeded_store):
        result = await service.analyze_persona('user1')
        persona = result.persona

        assert persona.traits.archetype_id == 'Casual'
        assert persona.traits.intensity == 'High'
        assert persona.traits.social_style == 'Competitive'
        assert persona.traits.risk_profile == 'Balanced'
        assert persona.traits.confidence == pytest.approx(0.925)
        assert persona.signals.genre_affinity['shooter'] == 1.0
        assert persona.signals.multiplayer_ratio == 0.5
        assert persona.data_points == 6
        assert persona.confidence == pytest.approx(0.12)
        assert result.data_points_used == 6
        assert result.state.archetype == 'Casual'
        assert result.insights.recommendations
        assert persona.history.trait_evolution[-1].trigger_event == 'analysis'
        assert seeded_store.personas['user1']['traits']['archetype_id'] == 'Casual'

    @pytest.mark.asyncio
    async def test_analyze_without_data(self, service):
        result = await service.analyze_persona('user1')

        assert result.persona.traits.archetype_id == 'Casual'
        assert result.persona.traits.confidence == pytest.approx(0.3)
        assert result.persona.data_points == 0

    @pytest.mark.asyncio
    async def test_analyze_failure_raises(self, service, store):
        store.get_user_games = AsyncMock(side_effect=RuntimeError('store offline'))

        with pytest.raises(PersonaAnalysisError):
            await service.analyze_persona('user1')

    @pytest.mark.asyncio
    async def test_persona_state_and_delete(self, service, store):
        state = await service.get_persona_state('user1')
        assert state.archetype == 'Casual'
        assert state.data_freshness == pytest.approx(1.0, abs=1e-3)

        assert await service.delete_persona('user1') is True
        assert await service.delete_persona('user1') is False
