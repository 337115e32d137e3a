"""
Feature Extraction

Converts behavioral signals into five normalized features:
- Engagement volatility (session-length dispersion)
- Challenge seeking (high-intensity play, demanding genres)
- Social openness (social sessions and interactions)
- Exploration bias (genre variety, platform switching)
- Focus stability (completion, consistency, main sessions)
"""

import logging
from typing import Dict, List, Any

import numpy as np
from scipy import stats

from .types import BehavioralSignal, SignalSource, NormalizedFeatures
from ..utils.time import clamp
from ..utils.validation import ValidationReport, check_unit_range

logger = logging.getLogger(__name__)

# Every feature starts from the neutral midpoint and is nudged by ratios
# observed in the signals. Values are the multipliers applied to each ratio.
FEATURE_BLEND_WEIGHTS = {
    'challenge_seeking': {
        'intense_main_sessions': 0.3,
        'challenging_transitions': 0.2
    },
    'social_openness': {
        'social_sessions': 0.4,
        'social_interactions': 0.3
    },
    'exploration_bias': {
        'genre_variety': 0.3,
        'platform_switching': 0.3
    },
    'focus_stability': {
        'completion_rate': 0.3,
        'playtime_consistency': 0.4,
        'main_session_ratio': 0.3
    }
}

# Feature importance weights
FEATURE_IMPORTANCE = {
    'engagement_volatility': 0.25,
    'challenge_seeking': 0.20,
    'social_openness': 0.20,
    'exploration_bias': 0.20,
    'focus_stability': 0.15
}

CHALLENGING_GENRES = ('strategy', 'puzzle', 'rpg', 'action')
SOCIAL_SESSION_TYPES = ('social', 'coop')
HIGH_INTENSITY_THRESHOLD = 7
DEFAULT_INTENSITY = 5
MIN_VOLATILITY_SESSIONS = 3
MAX_PLATFORM_SWITCH_CONTRIBUTION = 0.3

# Signal counts at which per-feature coverage saturates
VOLATILITY_COVERAGE_SIGNALS = 5
FEATURE_COVERAGE_SIGNALS = 8
OVERALL_COVERAGE_SIGNALS = 10

EXTREME_VOLATILITY = 0.9


def _by_source(signals: List[BehavioralSignal], *sources: SignalSource) -> List[BehavioralSignal]:
    return [s for s in signals if s.source in sources]


class FeatureExtractor:
    """Converts raw signals into normalized features for mood analysis"""

    def __init__(self):
        self.blend_weights = FEATURE_BLEND_WEIGHTS
        self.feature_weights = dict(FEATURE_IMPORTANCE)

    def extract_features(self, signals: List[BehavioralSignal]) -> NormalizedFeatures:
        """
        Extract normalized features from behavioral signals

        Args:
            signals: Signals of any source, in any order

        Returns:
            Features in [0,1]; the neutral 0.5 sentinel when there are no signals
        """
        if not signals:
            return NormalizedFeatures.neutral()

        session_signals = _by_source(signals, SignalSource.SESSION)
        genre_signals = _by_source(signals, SignalSource.GENRE)
        playtime_signals = _by_source(signals, SignalSource.PLAYTIME)
        platform_signals = _by_source(signals, SignalSource.PLATFORM)
        integration_signals = _by_source(signals, SignalSource.INTEGRATION)

        features = NormalizedFeatures(
            engagement_volatility=self._calculate_engagement_volatility(session_signals),
            challenge_seeking=self._calculate_challenge_seeking(session_signals, genre_signals),
            social_openness=self._calculate_social_openness(session_signals, integration_signals),
            exploration_bias=self._calculate_exploration_bias(genre_signals, platform_signals),
            focus_stability=self._calculate_focus_stability(session_signals, playtime_signals)
        )
        logger.debug(f"Extracted features from {len(signals)} signals: {features.as_dict()}")
        return features

    def _calculate_engagement_volatility(self, session_signals: List[BehavioralSignal]) -> float:
        """Coefficient of variation of session durations"""
        if len(session_signals) < MIN_VOLATILITY_SESSIONS:
            return 0.5

        durations = [s.data.get('duration') or 0 for s in session_signals]
        durations = [d for d in durations if d > 0]
        if not durations:
            return 0.5

        return clamp(float(stats.variation(np.array(durations, dtype=float))))

    def _calculate_challenge_seeking(self, session_signals: List[BehavioralSignal],
                                     genre_signals: List[BehavioralSignal]) -> float:
        weights = self.blend_weights['challenge_seeking']
        score = 0.5

        if session_signals:
            intense = [
                s for s in session_signals
                if s.data.get('session_type') == 'main'
                and (s.data.get('intensity') or DEFAULT_INTENSITY) > HIGH_INTENSITY_THRESHOLD
            ]
            score += len(intense) / len(session_signals) * weights['intense_main_sessions']

        if genre_signals:
            challenging = [
                s for s in genre_signals
                if s.data.get('to_genre') in CHALLENGING_GENRES
                or s.data.get('from_genre') in CHALLENGING_GENRES
            ]
            score += len(challenging) / len(genre_signals) * weights['challenging_transitions']

        return clamp(score)

    def _calculate_social_openness(self, session_signals: List[BehavioralSignal],
                                   integration_signals: List[BehavioralSignal]) -> float:
        weights = self.blend_weights['social_openness']
        score = 0.5

        if session_signals:
            social = [s for s in session_signals if s.data.get('session_type') in SOCIAL_SESSION_TYPES]
            score += len(social) / len(session_signals) * weights['social_sessions']

        if integration_signals:
            interactions = [s for s in integration_signals if s.data.get('social_interaction') is True]
            score += len(interactions) / len(integration_signals) * weights['social_interactions']

        return clamp(score)

    def _calculate_exploration_bias(self, genre_signals: List[BehavioralSignal],
                                    platform_signals: List[BehavioralSignal]) -> float:
        weights = self.blend_weights['exploration_bias']
        score = 0.5

        if genre_signals:
            unique_genres = set()
            for signal in genre_signals:
                unique_genres.add(signal.data.get('from_genre'))
                unique_genres.add(signal.data.get('to_genre'))
            score += len(unique_genres) / (len(genre_signals) * 2) * weights['genre_variety']

        if platform_signals:
            switching = min(MAX_PLATFORM_SWITCH_CONTRIBUTION, len(platform_signals) / 10)
            score += switching * weights['platform_switching']

        return clamp(score)

    def _calculate_focus_stability(self, session_signals: List[BehavioralSignal],
                                   playtime_signals: List[BehavioralSignal]) -> float:
        weights = self.blend_weights['focus_stability']
        score = 0.5

        if session_signals:
            completed = [s for s in session_signals if s.data.get('completed') is True]
            score += len(completed) / len(session_signals) * weights['completion_rate']

        if playtime_signals:
            consistencies = [s.data.get('consistency', 0.5) for s in playtime_signals]
            score += float(np.mean(consistencies)) * weights['playtime_consistency']

        if session_signals:
            main = [s for s in session_signals if s.data.get('session_type') == 'main']
            score += len(main) / len(session_signals) * weights['main_session_ratio']

        return clamp(score)

    def get_feature_weights(self) -> Dict[str, float]:
        """Get feature importance weights"""
        return dict(self.feature_weights)

    def calculate_feature_confidence(self, signals: List[BehavioralSignal]) -> Dict[str, Any]:
        """
        Confidence in extracted features based on signal quantity and quality

        Returns:
            {'overall': float, 'by_feature': {feature: coverage}}
        """
        total_signals = len(signals)
        average_weight = float(np.mean([s.weight for s in signals])) if signals else 0.0
        overall = min(1.0, total_signals / OVERALL_COVERAGE_SIGNALS * average_weight)

        def coverage(saturation: int, *sources: SignalSource) -> float:
            return min(1.0, len(_by_source(signals, *sources)) / saturation)

        by_feature = {
            'engagement_volatility': coverage(VOLATILITY_COVERAGE_SIGNALS, SignalSource.SESSION),
            'challenge_seeking': coverage(FEATURE_COVERAGE_SIGNALS, SignalSource.SESSION, SignalSource.GENRE),
            'social_openness': coverage(FEATURE_COVERAGE_SIGNALS, SignalSource.SESSION, SignalSource.INTEGRATION),
            'exploration_bias': coverage(FEATURE_COVERAGE_SIGNALS, SignalSource.GENRE, SignalSource.PLATFORM),
            'focus_stability': coverage(FEATURE_COVERAGE_SIGNALS, SignalSource.SESSION, SignalSource.PLAYTIME)
        }

        return {'overall': overall, 'by_feature': by_feature}

    def validate_features(self, features: NormalizedFeatures) -> ValidationReport:
        """Range check plus advisory warnings for unusual combinations"""
        report = check_unit_range(features.as_dict())

        if features.engagement_volatility > EXTREME_VOLATILITY:
            report.warn('engagement_volatility',
                        'Engagement volatility is extremely high - possible data inconsistency',
                        features.engagement_volatility)

        if features.challenge_seeking > 0.9 and features.focus_stability < 0.2:
            report.warn('challenge_seeking',
                        'High challenge seeking with low focus stability - unusual pattern',
                        features.challenge_seeking)

        return report


