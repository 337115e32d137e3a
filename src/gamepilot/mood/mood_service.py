"""
Mood Service

Orchestrates signal collection, feature extraction and mood inference
for individual users, and persists the latest analysis per user.
"""

import time
from collections import OrderedDict
from datetime import timedelta
from typing import Dict, List, Any, Optional, Union

from .types import (
    PlaySession, Activity, NormalizedFeatures, MoodVector, MoodAnalysisResult, MoodInsight
)
from .signal_collection import SignalCollector
from .feature_extraction import FeatureExtractor
from .mood_inference import MoodInference
from ..games import Game
from ..storage.base import PersistenceStore
from ..utils.config import SystemConfig
from ..utils.exceptions import MoodAnalysisError
from ..utils.logging import setup_logger, get_performance_logger
from ..utils.time import utcnow, format_datetime
from ..utils.validation import ValidationReport

SessionLike = Union[PlaySession, Dict[str, Any]]
GameLike = Union[Game, Dict[str, Any]]
ActivityLike = Union[Activity, Dict[str, Any]]


def _sessions(items: Optional[List[SessionLike]]) -> List[PlaySession]:
    return [s if isinstance(s, PlaySession) else PlaySession.from_dict(s) for s in items or []]


def _games(items: Optional[List[GameLike]]) -> List[Game]:
    return [g if isinstance(g, Game) else Game.from_dict(g) for g in items or []]


def _activities(items: Optional[List[ActivityLike]]) -> List[Activity]:
    return [a if isinstance(a, Activity) else Activity.from_dict(a) for a in items or []]


class MoodService:
    """Per-user mood analysis"""

    def __init__(self, store: PersistenceStore, config: Optional[SystemConfig] = None):
        self.store = store
        self.config = config or SystemConfig()
        self.logger = setup_logger(__name__)
        self.performance_logger = get_performance_logger()

        self.feature_extractor = FeatureExtractor()
        self.mood_inference = MoodInference(
            weights=self.config.mood.inference_weights(),
            confidence_saturation_signals=self.config.mood.confidence_saturation_signals,
            adjustment_rate=self.config.mood.weight_adjustment_rate
        )

        # One signal collector per user, in least-recently-used order
        self._collectors: 'OrderedDict[str, SignalCollector]' = OrderedDict()

    def get_signal_collector(self, user_id: str) -> SignalCollector:
        """Get (or create) the signal collector scoped to a user"""
        collector = self._collectors.get(user_id)
        if collector is not None:
            self._collectors.move_to_end(user_id)
            return collector

        collector = SignalCollector(
            buffer_capacity=self.config.signals.buffer_capacity,
            max_signal_age=timedelta(days=self.config.signals.max_signal_age_days)
        )
        self._collectors[user_id] = collector
        while len(self._collectors) > self.config.signals.max_tracked_users:
            evicted_user, _ = self._collectors.popitem(last=False)
            self.logger.debug(f"Evicted signal buffer for user {evicted_user}")
        return collector

    async def analyze_user_mood(self, user_id: str, sessions: List[SessionLike],
                                games: List[GameLike],
                                activities: Optional[List[ActivityLike]] = None) -> MoodAnalysisResult:
        """
        Analyze mood for a user based on their gaming history

        Args:
            user_id: User identifier
            sessions: Play sessions (dataclasses or raw dicts)
            games: The user's games
            activities: Optional integration activity records

        Returns:
            The stored analysis result

        Raises:
            MoodAnalysisError: if any stage or the store write fails
        """
        start_time = time.time()
        try:
            collector = self.get_signal_collector(user_id)
            now = utcnow()

            signals = collector.collect_all(
                _sessions(sessions), _games(games), _activities(activities), now=now
            )
            features = self.feature_extractor.extract_features(signals)
            mood_vector = self.mood_inference.infer_mood(features)
            feature_confidence = self.feature_extractor.calculate_feature_confidence(signals)
            confidence = self.mood_inference.get_inference_confidence(
                features, len(signals), feature_confidence
            )

            collector.add_signals(signals, now=now)

            result = MoodAnalysisResult(
                mood_vector=mood_vector,
                confidence=confidence,
                signal_count=len(signals),
                last_updated=now,
                features=features
            )
            await self.store.save_mood_analysis(user_id, result.to_dict())

            duration = time.time() - start_time
            self.performance_logger.log_execution_time(
                "analyze_user_mood", duration, {'user_id': user_id, 'signals': len(signals)}
            )
            self.performance_logger.log_throughput("signal_processing", len(signals), duration)
            self.logger.info(
                f"Analyzed mood for user {user_id}: {len(signals)} signals, confidence {confidence:.2f}"
            )
            return result

        except Exception as e:
            self.logger.error(f"Error analyzing mood for user {user_id}: {e}")
            raise MoodAnalysisError(f"Mood analysis failed: {e}", {'user_id': user_id}) from e

    async def get_current_mood(self, user_id: str) -> Optional[MoodAnalysisResult]:
        """Latest stored analysis, or None when there is none or it cannot be read"""
        try:
            record = await self.store.get_mood_analysis(user_id)
            if record is None:
                return None
            return MoodAnalysisResult.from_dict(record)
        except Exception as e:
            self.logger.error(f"Error getting current mood for user {user_id}: {e}")
            return None

    async def update_mood_analysis(self, user_id: str, new_session: SessionLike,
                                   games: List[GameLike]) -> None:
        """Buffer the signals of a newly finished session"""
        try:
            collector = self.get_signal_collector(user_id)
            signals = collector.collect_from_session_history(_sessions([new_session]), _games(games))
            collector.add_signals(signals)
            self.logger.info(f"Updated mood analysis for user {user_id} with new session")
        except Exception as e:
            self.logger.error(f"Error updating mood analysis for user {user_id}: {e}")
            raise MoodAnalysisError(f"Mood analysis update failed: {e}", {'user_id': user_id}) from e

    def get_mood_analysis_stats(self, user_id: str) -> Dict[str, Any]:
        """Buffer statistics; users without a collector get empty stats and none is created"""
        collector = self._collectors.get(user_id)
        if collector is None:
            return {
                'total_signals': 0,
                'signals_by_source': {},
                'average_confidence': 0.0,
                'last_analysis': None
            }

        signal_stats = collector.get_signal_stats()
        return {
            'total_signals': signal_stats['total_signals'],
            'signals_by_source': signal_stats['signals_by_source'],
            'average_confidence': signal_stats['average_weight'],
            'last_analysis': signal_stats['newest_signal']
        }

    def export_mood_data(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Snapshot of a user's buffered signal statistics and the current model weights

        Returns:
            The export, or None if it could not be built
        """
        try:
            collector = self._collectors.get(user_id)
            signals = [signal.to_dict() for signal in collector.get_recent_signals()] if collector else []
            stats = self.get_mood_analysis_stats(user_id)
            stats['last_analysis'] = format_datetime(stats['last_analysis'])

            return {
                'user_id': user_id,
                'signals': signals,
                'signal_stats': stats,
                'feature_weights': self.feature_extractor.get_feature_weights(),
                'inference_weights': self.mood_inference.get_current_weights(),
                'timestamp': format_datetime(utcnow())
            }
        except Exception as e:
            self.logger.error(f"Error exporting mood data for user {user_id}: {e}")
            return None

    def validate_mood_analysis(self, result: MoodAnalysisResult) -> ValidationReport:
        """Validate mood vector, features, confidence and signal count together"""
        report = ValidationReport()
        report.merge(self.mood_inference.validate_mood_vector(result.mood_vector))
        report.merge(self.feature_extractor.validate_features(result.features))

        if result.confidence < 0 or result.confidence > 1:
            report.error('confidence', f"Confidence out of range: {result.confidence}", result.confidence)
        if result.signal_count < 0:
            report.error('signal_count', f"Invalid signal count: {result.signal_count}", result.signal_count)

        return report

    def get_mood_insights(self, mood_vector: MoodVector,
                          features: Optional[NormalizedFeatures] = None) -> MoodInsight:
        return self.mood_inference.get_mood_insight(mood_vector, features)

    def reset_user_mood_data(self, user_id: str):
        """Drop a user's buffered signals"""
        collector = self._collectors.pop(user_id, None)
        if collector is not None:
            collector.clear_signals()
        self.logger.info(f"Reset mood analysis data for user {user_id}")

    def health_check(self) -> Dict[str, Any]:
        checks = {
            'signal_collection': True,
            'feature_extractor': self.feature_extractor is not None,
            'mood_inference': self.mood_inference is not None
        }
        if all(checks.values()):
            status = 'healthy'
        elif any(checks.values()):
            status = 'degraded'
        else:
            status = 'unhealthy'

        return {
            'status': status,
            'checks': checks,
            'tracked_users': len(self._collectors),
            'timestamp': format_datetime(utcnow())
        }
