"""
Mood Inference

Maps normalized features to a mood vector with weighted heuristics.
Each mood dimension is a weighted sum of feature contributions passed
through a logistic squash; dimensions are independent affinities.
"""

import logging
import math
from typing import Dict, Any, Optional, Mapping

import numpy as np

from .types import (
    NormalizedFeatures, MoodVector, DominantMood, MoodDescription, MoodInsight,
    FEATURE_NAMES, MOOD_DIMENSIONS
)
from ..utils.time import clamp
from ..utils.validation import ValidationReport, check_unit_range

logger = logging.getLogger(__name__)

DEFAULT_INFERENCE_WEIGHTS = {
    'engagement_volatility': 0.15,
    'challenge_seeking': 0.25,
    'social_openness': 0.20,
    'exploration_bias': 0.20,
    'focus_stability': 0.20
}

# Contribution of each feature to each mood, in [-1, 1]
MOOD_MAPPINGS = {
    # Low volatility, high focus stability
    'calm': {
        'engagement_volatility': -0.8,
        'challenge_seeking': -0.3,
        'social_openness': -0.2,
        'exploration_bias': -0.1,
        'focus_stability': 0.9
    },
    # High challenge seeking, low social openness
    'competitive': {
        'engagement_volatility': 0.2,
        'challenge_seeking': 0.9,
        'social_openness': -0.4,
        'exploration_bias': -0.2,
        'focus_stability': 0.3
    },
    # High exploration bias, moderate social openness
    'curious': {
        'engagement_volatility': 0.3,
        'challenge_seeking': 0.4,
        'social_openness': 0.3,
        'exploration_bias': 0.8,
        'focus_stability': -0.1
    },
    # High social openness, moderate exploration
    'social': {
        'engagement_volatility': 0.1,
        'challenge_seeking': -0.2,
        'social_openness': 0.9,
        'exploration_bias': 0.4,
        'focus_stability': -0.2
    },
    # High focus stability, low volatility
    'focused': {
        'engagement_volatility': -0.6,
        'challenge_seeking': 0.3,
        'social_openness': -0.3,
        'exploration_bias': -0.4,
        'focus_stability': 0.8
    }
}

MOOD_DESCRIPTIONS = {
    'calm': MoodDescription(
        primary='Calm',
        description='Relaxed and peaceful state, ideal for low-stress gaming',
        traits=['Patient', 'Methodical', 'Steady', 'Reflective'],
        recommendations=['Puzzle games', 'Simulation games', 'Creative sandbox games', 'Story-rich adventures']
    ),
    'competitive': MoodDescription(
        primary='Competitive',
        description='Achievement-oriented and challenge-seeking state',
        traits=['Driven', 'Strategic', 'Goal-focused', 'Performance-minded'],
        recommendations=['Competitive multiplayer', 'Ranked matches', 'Speedrun challenges', 'Tournament play']
    ),
    'curious': MoodDescription(
        primary='Curious',
        description='Exploratory and discovery-oriented state',
        traits=['Inquisitive', 'Experimental', 'Open-minded', 'Adventurous'],
        recommendations=['Open-world games', 'New genres', 'Indie titles', 'Creative tools']
    ),
    'social': MoodDescription(
        primary='Social',
        description='Community-oriented and interactive state',
        traits=['Collaborative', 'Communicative', 'Team-player', 'Community-focused'],
        recommendations=['Co-op campaigns', 'Guild activities', 'Social hubs', 'Party games']
    ),
    'focused': MoodDescription(
        primary='Focused',
        description='Concentrated and goal-directed state',
        traits=['Attentive', 'Determined', 'Methodical', 'Immersed'],
        recommendations=['Strategy games', 'Complex puzzles', 'Skill-based challenges', 'Deep story experiences']
    )
}

SECONDARY_MOOD_THRESHOLD = 0.3
MIN_WEIGHT = 0.1
MAX_WEIGHT = 1.0

# Confidence blend
SIGNAL_VOLUME_SHARE = 0.5
FEATURE_QUALITY_SHARE = 0.3
FEATURE_COVERAGE_SHARE = 0.2


def _sigmoid(x: float) -> float:
    return 1 / (1 + math.exp(-x))


class MoodInference:
    """Infers mood vectors from normalized features"""

    def __init__(self, weights: Optional[Mapping[str, float]] = None,
                 confidence_saturation_signals: int = 20,
                 adjustment_rate: float = 0.1):
        self.default_weights = dict(DEFAULT_INFERENCE_WEIGHTS)
        if weights:
            self.default_weights.update(weights)
        self.mood_mappings = MOOD_MAPPINGS
        self.confidence_saturation_signals = confidence_saturation_signals
        self.adjustment_rate = adjustment_rate

    def infer_mood(self, features: NormalizedFeatures,
                   custom_weights: Optional[Mapping[str, float]] = None) -> MoodVector:
        """
        Infer a mood vector from normalized features

        Args:
            features: Extracted features
            custom_weights: Partial override of the feature importance weights

        Returns:
            Mood vector with every dimension in [0,1]
        """
        weights = dict(self.default_weights)
        if custom_weights:
            weights.update(custom_weights)

        feature_values = features.as_dict()
        scores = {}
        for mood in MOOD_DIMENSIONS:
            mapping = self.mood_mappings[mood]
            score = sum(
                feature_values[name] * mapping[name] * weights[name]
                for name in FEATURE_NAMES
            )
            scores[mood] = clamp(_sigmoid(score))

        return MoodVector(**scores)

    def get_dominant_mood(self, mood_vector: MoodVector) -> DominantMood:
        """Strongest mood, plus the runner-up when it is above 0.3"""
        values = mood_vector.as_dict()
        # sorted() is stable, so equal values keep MOOD_DIMENSIONS priority
        ranked = sorted(MOOD_DIMENSIONS, key=lambda mood: values[mood], reverse=True)

        dominant = DominantMood(mood=ranked[0], confidence=values[ranked[0]])
        secondary = ranked[1]
        if values[secondary] > SECONDARY_MOOD_THRESHOLD:
            dominant.secondary_mood = secondary
            dominant.secondary_confidence = values[secondary]

        return dominant

    def get_inference_confidence(self, features: NormalizedFeatures, signal_count: int,
                                 feature_confidence: Optional[Dict[str, Any]] = None) -> float:
        """
        Confidence in an inference from signal volume and feature quality

        The mood vector itself does not enter the calculation; zero signals
        always gives zero confidence.
        """
        if signal_count <= 0:
            return 0.0

        feature_confidence = feature_confidence or {'overall': 0.0, 'by_feature': {}}
        by_feature = feature_confidence.get('by_feature') or {}
        coverage = float(np.mean(list(by_feature.values()))) if by_feature else 0.0

        volume = min(1.0, signal_count / self.confidence_saturation_signals)
        confidence = (
            volume * SIGNAL_VOLUME_SHARE
            + feature_confidence.get('overall', 0.0) * FEATURE_QUALITY_SHARE
            + coverage * FEATURE_COVERAGE_SHARE
        )
        return clamp(confidence)

    def get_mood_description(self, mood_vector: MoodVector) -> MoodDescription:
        dominant = self.get_dominant_mood(mood_vector)
        return MOOD_DESCRIPTIONS.get(dominant.mood, MOOD_DESCRIPTIONS['calm'])

    def get_mood_insight(self, mood_vector: MoodVector,
                         features: Optional[NormalizedFeatures] = None) -> MoodInsight:
        dominant = self.get_dominant_mood(mood_vector)
        description = MOOD_DESCRIPTIONS[dominant.mood]
        return MoodInsight(
            dominant=dominant.mood,
            description=description.description,
            traits=list(description.traits),
            recommendations=list(description.recommendations),
            confidence=dominant.confidence,
            ambiguity=self.calculate_mood_ambiguity(mood_vector),
            feature_consistency=(
                self.calculate_feature_consistency(features) if features is not None else None
            )
        )

    def calculate_mood_ambiguity(self, mood_vector: MoodVector) -> float:
        """How mixed the mood is: 1 minus the gap between the two strongest dimensions"""
        top, runner_up = sorted(mood_vector.as_dict().values(), reverse=True)[:2]
        return clamp(1.0 - (top - runner_up))

    def calculate_feature_consistency(self, features: NormalizedFeatures) -> float:
        """1 minus the population variance of the feature values"""
        return clamp(1.0 - float(np.var(list(features.as_dict().values()))))

    def adjust_weights(self, current_weights: Mapping[str, float],
                       feedback: Mapping[str, Any]) -> Dict[str, float]:
        """
        Tune importance weights from user feedback

        Args:
            current_weights: Weights to adjust
            feedback: {'predicted_mood', 'actual_mood', 'confidence'}

        Returns:
            New weights, each kept in [0.1, 1] before renormalising to sum 1
        """
        step = self.adjustment_rate * float(feedback.get('confidence', 0.0))
        correct = feedback.get('predicted_mood') == feedback.get('actual_mood')

        new_weights = {}
        for name, weight in current_weights.items():
            if correct:
                new_weights[name] = min(MAX_WEIGHT, weight + step)
            else:
                new_weights[name] = max(MIN_WEIGHT, weight - step)

        total = sum(new_weights.values())
        if total > 0:
            new_weights = {name: weight / total for name, weight in new_weights.items()}

        logger.debug(f"Adjusted inference weights (correct={correct}): {new_weights}")
        return new_weights

    def get_current_weights(self) -> Dict[str, float]:
        return dict(self.default_weights)

    def validate_mood_vector(self, mood_vector: MoodVector) -> ValidationReport:
        """Range check only"""
        return check_unit_range(mood_vector.as_dict())
