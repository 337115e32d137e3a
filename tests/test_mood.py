"""
Tests for mood analysis: signal collection, feature extraction,
mood inference and the per-user mood service.
"""

from datetime import timedelta
from unittest.mock import ANY, AsyncMock, MagicMock

import pytest

from gamepilot.mood import (
    SignalCollector, FeatureExtractor, MoodInference, MoodService,
    BehavioralSignal, SignalSource, NormalizedFeatures, MoodVector
)
from gamepilot.mood.types import Activity
from gamepilot.utils.exceptions import MoodAnalysisError

from conftest import FIXED_NOW


def signal(source, weight=0.8, at=FIXED_NOW, **data):
    return BehavioralSignal(timestamp=at, source=source, data=data, weight=weight)


class TestSignalCollector:
    """Signal collection from raw history."""

    @pytest.fixture
    def collector(self):
        return SignalCollector()

    def test_empty_input_gives_no_signals(self, collector):
        assert collector.collect_all([], [], None, now=FIXED_NOW) == []
        assert collector.collect_from_integration_activity([]) == []

    def test_session_history_signals(self, collector, sample_games, make_session):
        sessions = [
            make_session('g1', FIXED_NOW, duration=30, achievements=['first_crop', 'first_fish']),
            make_session('unknown', FIXED_NOW + timedelta(hours=1), ended=False)
        ]

        signals = collector.collect_from_session_history(sessions, sample_games)

        assert [s.weight for s in signals] == [0.8, 0.6, 0.8]
        assert signals[0].data['completed'] is True
        assert signals[0].data['game_genre'] == 'simulation'
        assert signals[1].data['achievement_count'] == 2
        assert signals[2].data['completed'] is False
        assert signals[2].data['game_genre'] is None

    def test_genre_transitions_sorted_without_mutating_input(self, collector, sample_games, make_session):
        s1 = make_session('g1', FIXED_NOW, duration=30)
        s2 = make_session('g2', FIXED_NOW + timedelta(hours=1))
        s3 = make_session('g2', FIXED_NOW + timedelta(hours=3))
        sessions = [s3, s1, s2]

        signals = collector.collect_from_genre_transitions(sessions, sample_games)

        assert sessions == [s3, s1, s2]
        assert len(signals) == 1
        assert signals[0].source == SignalSource.GENRE
        assert signals[0].weight == 0.7
        assert signals[0].data['from_genre'] == 'simulation'
        assert signals[0].data['to_genre'] == 'shooter'
        assert signals[0].data['transition_time'] == 1800

    def test_playtime_patterns_need_two_sessions_per_day(self, collector, make_session):
        sessions = [
            make_session('g1', FIXED_NOW, duration=30),
            make_session('g1', FIXED_NOW + timedelta(hours=2), duration=90),
            make_session('g1', FIXED_NOW + timedelta(days=1), duration=60)
        ]

        signals = collector.collect_from_playtime_patterns(sessions, now=FIXED_NOW)

        assert len(signals) == 1
        data = signals[0].data
        assert data['day_of_week'] == 3
        assert data['session_count'] == 2
        assert data['total_playtime'] == 120
        assert data['variance'] == pytest.approx(900)
        assert data['consistency'] == pytest.approx(0.75)
        assert signals[0].weight == 0.5

    def test_zero_length_sessions_have_zero_consistency(self, collector, make_session):
        sessions = [
            make_session('g1', FIXED_NOW, duration=0),
            make_session('g1', FIXED_NOW + timedelta(hours=1), duration=0)
        ]

        signals = collector.collect_from_playtime_patterns(sessions, now=FIXED_NOW)

        assert signals[0].data['consistency'] == 0.0

    def test_platform_switching(self, collector, make_session):
        sessions = [
            make_session('g1', FIXED_NOW, platform='pc'),
            make_session('g1', FIXED_NOW + timedelta(hours=2), platform='ps5'),
            make_session('g1', FIXED_NOW + timedelta(hours=4), platform='ps5')
        ]

        signals = collector.collect_from_platform_switching(sessions)

        assert len(signals) == 1
        assert signals[0].weight == 0.4
        assert signals[0].data['to_platform'] == 'ps5'
        assert signals[0].data['platform_preference'] == pytest.approx(2 / 3)

    def test_integration_activity_flags(self, collector):
        signals = collector.collect_from_integration_activity([
            Activity(type='achievement', platform='steam', timestamp=FIXED_NOW),
            Activity(type='integration_connected', platform='discord', timestamp=FIXED_NOW),
            Activity(type='library_sync', platform='steam', timestamp=FIXED_NOW)
        ])

        assert [s.data['social_interaction'] for s in signals] == [True, False, False]
        assert [s.data['community_engagement'] for s in signals] == [False, True, False]
        assert all(s.weight == 0.3 for s in signals)

    def test_collect_all_keeps_source_order(self, collector, sample_games, make_session):
        sessions = [
            make_session('g1', FIXED_NOW, platform='pc'),
            make_session('g2', FIXED_NOW + timedelta(hours=2), platform='ps5')
        ]
        activities = [Activity(type='achievement', platform='steam', timestamp=FIXED_NOW)]

        signals = collector.collect_all(sessions, sample_games, activities, now=FIXED_NOW)

        sources = [s.source for s in signals]
        assert sources == [
            SignalSource.SESSION, SignalSource.SESSION,
            SignalSource.GENRE,
            SignalSource.PLAYTIME,
            SignalSource.PLATFORM,
            SignalSource.INTEGRATION
        ]


class TestSignalBuffer:
    """Bounded per-collector signal buffer."""

    def test_capacity_drops_oldest_inserted(self):
        collector = SignalCollector(buffer_capacity=3)
        for i in range(5):
            collector.add_signal(signal(SignalSource.SESSION, index=i), now=FIXED_NOW)

        assert [s.data['index'] for s in collector.buffer] == [2, 3, 4]
        assert collector.get_signal_stats()['total_signals'] == 3

    def test_expired_signals_are_evicted_on_insert(self):
        collector = SignalCollector(max_signal_age=timedelta(days=7))
        collector.add_signal(signal(SignalSource.SESSION, at=FIXED_NOW - timedelta(days=10)), now=FIXED_NOW)
        collector.add_signal(signal(SignalSource.GENRE, at=FIXED_NOW - timedelta(days=1)), now=FIXED_NOW)

        assert len(collector.buffer) == 1
        assert next(iter(collector.buffer)).source == SignalSource.GENRE

    def test_recent_signals_newest_first(self):
        collector = SignalCollector()
        collector.add_signals([
            signal(SignalSource.SESSION, at=FIXED_NOW - timedelta(hours=3), tag='a'),
            signal(SignalSource.SESSION, at=FIXED_NOW - timedelta(hours=1), tag='b'),
            signal(SignalSource.SESSION, at=FIXED_NOW - timedelta(hours=2), tag='c')
        ], now=FIXED_NOW)

        assert [s.data['tag'] for s in collector.get_recent_signals(now=FIXED_NOW)] == ['b', 'c', 'a']
        recent = collector.get_recent_signals(max_age=timedelta(hours=1, minutes=30), now=FIXED_NOW)
        assert [s.data['tag'] for s in recent] == ['b']

    def test_stats_and_clear(self):
        collector = SignalCollector()
        collector.add_signals([
            signal(SignalSource.SESSION, weight=0.8),
            signal(SignalSource.PLATFORM, weight=0.4, at=FIXED_NOW - timedelta(hours=1))
        ], now=FIXED_NOW)

        stats = collector.get_signal_stats()
        assert stats['signals_by_source'] == {'session': 1, 'platform': 1}
        assert stats['average_weight'] == pytest.approx(0.6)
        assert stats['oldest_signal'] == FIXED_NOW - timedelta(hours=1)
        assert stats['newest_signal'] == FIXED_NOW

        collector.clear_signals()
        assert collector.get_signal_stats()['total_signals'] == 0
        assert collector.get_signal_stats()['oldest_signal'] is None


class TestFeatureExtractor:
    """Feature extraction from signals."""

    @pytest.fixture
    def extractor(self):
        return FeatureExtractor()

    def test_empty_signals_are_neutral(self, extractor):
        features = extractor.extract_features([])
        assert features.as_dict() == {name: 0.5 for name in features.as_dict()}

    def test_features_stay_in_unit_range(self, extractor, sample_games, recent_sessions, activities):
        signals = SignalCollector().collect_all(recent_sessions, sample_games, activities)
        features = extractor.extract_features(signals)

        assert all(0.0 <= value <= 1.0 for value in features.as_dict().values())
        assert extractor.validate_features(features).issues == []

    def test_volatility_needs_three_sessions(self, extractor):
        signals = [signal(SignalSource.SESSION, duration=d) for d in (30, 90)]
        assert extractor.extract_features(signals).engagement_volatility == 0.5

    def test_volatility_is_coefficient_of_variation(self, extractor):
        signals = [signal(SignalSource.SESSION, duration=d) for d in (30, 60, 90)]
        assert extractor.extract_features(signals).engagement_volatility == pytest.approx(0.4082, abs=1e-3)

    def test_challenge_seeking_counts_intense_main_sessions(self, extractor):
        signals = [
            signal(SignalSource.SESSION, session_type='main', intensity=8),
            signal(SignalSource.SESSION, session_type='casual', intensity=9)
        ]
        assert extractor.extract_features(signals).challenge_seeking == pytest.approx(0.65)

    def test_social_openness_is_clamped(self, extractor):
        signals = [
            signal(SignalSource.SESSION, session_type='coop'),
            signal(SignalSource.INTEGRATION, weight=0.3, social_interaction=True)
        ]
        assert extractor.extract_features(signals).social_openness == 1.0

    def test_exploration_bias(self, extractor):
        signals = [
            signal(SignalSource.GENRE, from_genre='rpg', to_genre='puzzle'),
            signal(SignalSource.GENRE, from_genre='puzzle', to_genre='racing')
        ] + [signal(SignalSource.PLATFORM, weight=0.4) for _ in range(5)]

        assert extractor.extract_features(signals).exploration_bias == pytest.approx(0.815)

    def test_focus_stability_from_completion(self, extractor):
        signals = [signal(SignalSource.SESSION, completed=True, session_type='casual') for _ in range(2)]
        assert extractor.extract_features(signals).focus_stability == pytest.approx(0.8)

    def test_feature_confidence(self, extractor):
        signals = [signal(SignalSource.SESSION, duration=60) for _ in range(10)]
        confidence = extractor.calculate_feature_confidence(signals)

        assert confidence['overall'] == pytest.approx(0.8)
        assert confidence['by_feature']['engagement_volatility'] == 1.0
        assert confidence['by_feature']['exploration_bias'] == 0.0

    def test_feature_weights(self, extractor):
        weights = extractor.get_feature_weights()
        assert weights['engagement_volatility'] == 0.25
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_out_of_range_feature_is_invalid(self, extractor):
        report = extractor.validate_features(NormalizedFeatures(1.2, 0.5, 0.5, 0.5, 0.5))
        assert not report.is_valid
        assert len(report.issues) == 1

    def test_unusual_patterns_only_warn(self, extractor):
        report = extractor.validate_features(NormalizedFeatures(0.95, 0.95, 0.5, 0.5, 0.1))
        assert report.is_valid
        assert len(report.warnings) == 2


class TestMoodInference:
    """Heuristic mood inference."""

    @pytest.fixture
    def inference(self):
        return MoodInference()

    def test_neutral_features_give_no_strong_mood(self, inference):
        vector = inference.infer_mood(NormalizedFeatures.neutral())
        assert max(vector.as_dict().values()) < 0.6
        assert inference.validate_mood_vector(vector).is_valid

    @pytest.mark.parametrize('value', [0.0, 1.0])
    def test_extreme_features_stay_in_range(self, inference, value):
        vector = inference.infer_mood(NormalizedFeatures(value, value, value, value, value))
        assert all(0.0 <= v <= 1.0 for v in vector.as_dict().values())

    def test_social_features_raise_social_mood(self, inference):
        vector = inference.infer_mood(NormalizedFeatures(0.5, 0.2, 1.0, 0.5, 0.3))
        assert inference.get_dominant_mood(vector).mood == 'social'

    def test_custom_weights_override(self, inference):
        features = NormalizedFeatures(0.5, 0.9, 0.1, 0.5, 0.5)
        default = inference.infer_mood(features)
        boosted = inference.infer_mood(features, custom_weights={'challenge_seeking': 1.0})
        assert boosted.competitive > default.competitive

    def test_dominant_mood_ties_follow_priority(self, inference):
        dominant = inference.get_dominant_mood(MoodVector(0.5, 0.5, 0.5, 0.5, 0.5))
        assert dominant.mood == 'calm'
        assert dominant.secondary_mood == 'competitive'
        assert dominant.secondary_confidence == 0.5

    def test_weak_secondary_is_omitted(self, inference):
        dominant = inference.get_dominant_mood(MoodVector(0.8, 0.2, 0.1, 0.3, 0.2))
        assert dominant.mood == 'calm'
        assert dominant.secondary_mood is None

    def test_confidence_zero_without_signals(self, inference):
        confidence = inference.get_inference_confidence(
            NormalizedFeatures.neutral(), 0, {'overall': 1.0, 'by_feature': {'a': 1.0}}
        )
        assert confidence == 0.0

    def test_confidence_blend(self, inference):
        half = {'overall': 0.5, 'by_feature': {'a': 0.5, 'b': 0.5}}
        full = {'overall': 1.0, 'by_feature': {'a': 1.0, 'b': 1.0}}

        assert inference.get_inference_confidence(NormalizedFeatures.neutral(), 10, half) == pytest.approx(0.5)
        assert inference.get_inference_confidence(NormalizedFeatures.neutral(), 40, full) == pytest.approx(1.0)

    def test_adjust_weights_renormalises(self, inference):
        current = inference.get_current_weights()
        correct = inference.adjust_weights(current, {'predicted_mood': 'calm', 'actual_mood': 'calm', 'confidence': 1})
        assert sum(correct.values()) == pytest.approx(1.0)
        assert correct['challenge_seeking'] < current['challenge_seeking']

        uniform = {name: 0.2 for name in current}
        wrong = inference.adjust_weights(uniform, {'predicted_mood': 'calm', 'actual_mood': 'social', 'confidence': 1})
        # Every weight hits the 0.1 floor, so they end up equal
        assert sum(wrong.values()) == pytest.approx(1.0)
        assert set(round(w, 6) for w in wrong.values()) == {0.2}

    def test_mood_insight(self, inference):
        insight = inference.get_mood_insight(MoodVector(0.2, 0.9, 0.3, 0.1, 0.4))
        assert insight.dominant == 'competitive'
        assert insight.confidence == 0.9
        assert 'Driven' in insight.traits
        assert inference.get_mood_description(MoodVector(0.2, 0.9, 0.3, 0.1, 0.4)).primary == 'Competitive'
        assert insight.ambiguity == pytest.approx(0.5)
        assert insight.feature_consistency is None

    def test_mood_ambiguity(self, inference):
        assert inference.calculate_mood_ambiguity(MoodVector(0.5, 0.5, 0.5, 0.5, 0.5)) == 1.0
        assert inference.calculate_mood_ambiguity(MoodVector(1.0, 0.0, 0.0, 0.0, 0.0)) == 0.0

    def test_feature_consistency(self, inference):
        assert inference.calculate_feature_consistency(NormalizedFeatures.neutral()) == 1.0
        spread = NormalizedFeatures(0.0, 1.0, 0.0, 1.0, 0.0)
        assert inference.calculate_feature_consistency(spread) == pytest.approx(0.76)

        insight = inference.get_mood_insight(MoodVector(0.2, 0.9, 0.3, 0.1, 0.4), spread)
        assert insight.feature_consistency == pytest.approx(0.76)

    def test_out_of_range_vector_is_flagged(self, inference):
        report = inference.validate_mood_vector(MoodVector(1.5, 0.5, 0.5, 0.5, -0.1))
        assert len(report.issues) == 2


class TestMoodService:
    """Per-user mood analysis service."""

    @pytest.fixture
    def service(self, store, config):
        return MoodService(store, config)

    @pytest.mark.asyncio
    async def test_analyze_persists_result(self, service, store, sample_games, recent_sessions, activities):
        result = await service.analyze_user_mood('user1', recent_sessions, sample_games, activities)

        assert result.signal_count > 10
        assert 0.0 < result.confidence <= 1.0
        assert service.validate_mood_analysis(result).is_valid

        stored = await service.get_current_mood('user1')
        assert stored.mood_vector == result.mood_vector
        assert stored.signal_count == result.signal_count

    @pytest.mark.asyncio
    async def test_analyze_accepts_raw_dicts(self, service, sample_games, recent_sessions):
        result = await service.analyze_user_mood(
            'user1',
            [s.to_dict() for s in recent_sessions],
            [g.to_dict() for g in sample_games]
        )
        assert result.signal_count > 0

    @pytest.mark.asyncio
    async def test_no_history_gives_neutral_low_confidence(self, service):
        result = await service.analyze_user_mood('user1', [], [])

        assert result.signal_count == 0
        assert result.confidence == 0.0
        assert result.features == NormalizedFeatures.neutral()
        assert max(result.mood_vector.as_dict().values()) < 0.6

    @pytest.mark.asyncio
    async def test_current_mood_absent(self, service):
        assert await service.get_current_mood('nobody') is None

    @pytest.mark.asyncio
    async def test_current_mood_read_failure_returns_none(self, service, store):
        store.get_mood_analysis = AsyncMock(side_effect=RuntimeError('store offline'))
        assert await service.get_current_mood('user1') is None

    @pytest.mark.asyncio
    async def test_store_write_failure_raises(self, service, store, sample_games, recent_sessions):
        store.save_mood_analysis = AsyncMock(side_effect=RuntimeError('store offline'))

        with pytest.raises(MoodAnalysisError) as exc_info:
            await service.analyze_user_mood('user1', recent_sessions, sample_games)
        assert exc_info.value.details == {'user_id': 'user1'}

    @pytest.mark.asyncio
    async def test_buffers_are_per_user(self, service, sample_games, recent_sessions):
        result = await service.analyze_user_mood('user1', recent_sessions, sample_games)

        assert service.get_mood_analysis_stats('user1')['total_signals'] == result.signal_count
        assert service.get_mood_analysis_stats('user2')['total_signals'] == 0

    def test_stats_lookup_does_not_track_user(self, service):
        stats = service.get_mood_analysis_stats('stranger')

        assert stats == {'total_signals': 0, 'signals_by_source': {}, 'average_confidence': 0.0, 'last_analysis': None}
        assert service.health_check()['tracked_users'] == 0

    def test_collectors_evict_least_recently_used(self, store, config):
        config.signals.max_tracked_users = 2
        service = MoodService(store, config)

        first = service.get_signal_collector('user1')
        service.get_signal_collector('user2')
        service.get_signal_collector('user1')
        third = service.get_signal_collector('user3')

        assert service.health_check()['tracked_users'] == 2
        assert service.get_signal_collector('user1') is first
        assert service.get_signal_collector('user3') is third
        assert service.get_mood_analysis_stats('user2')['total_signals'] == 0

    @pytest.mark.asyncio
    async def test_export_mood_data(self, service, sample_games, recent_sessions):
        result = await service.analyze_user_mood('user1', recent_sessions, sample_games)

        export = service.export_mood_data('user1')

        assert export['user_id'] == 'user1'
        assert len(export['signals']) == export['signal_stats']['total_signals'] == result.signal_count
        assert isinstance(export['signal_stats']['last_analysis'], str)
        assert export['feature_weights'] == service.feature_extractor.get_feature_weights()
        assert sum(export['inference_weights'].values()) == pytest.approx(1.0)

        empty = service.export_mood_data('user2')
        assert empty['signals'] == []
        assert empty['signal_stats']['last_analysis'] is None
        assert service.health_check()['tracked_users'] == 1

    @pytest.mark.asyncio
    async def test_analysis_logs_signal_throughput(self, service, sample_games, recent_sessions):
        service.performance_logger = MagicMock()

        result = await service.analyze_user_mood('user1', recent_sessions, sample_games)

        service.performance_logger.log_throughput.assert_called_once_with(
            'signal_processing', result.signal_count, ANY
        )

    @pytest.mark.asyncio
    async def test_update_and_reset(self, service, sample_games, recent_sessions):
        await service.update_mood_analysis('user1', recent_sessions[1], sample_games)
        # Completion signal plus achievement signal
        assert service.get_mood_analysis_stats('user1')['total_signals'] == 2

        service.reset_user_mood_data('user1')
        assert service.get_mood_analysis_stats('user1')['total_signals'] == 0

    def test_insights_and_health(self, service):
        insight = service.get_mood_insights(MoodVector(0.1, 0.2, 0.9, 0.3, 0.2))
        assert insight.dominant == 'curious'

        health = service.health_check()
        assert health['status'] == 'healthy'
        assert all(health['checks'].values())
