"""
Mood Module

Behavioral mood analysis:
- Signal collection from play history and integrations
- Feature extraction into normalized behavioral scalars
- Heuristic mood inference and insights
- Per-user mood service
"""

from .types import (
    SignalSource,
    PlaySession,
    Activity,
    BehavioralSignal,
    NormalizedFeatures,
    MoodVector,
    DominantMood,
    MoodInsight,
    MoodAnalysisResult
)
from .signal_collection import SignalCollector, SignalBuffer
from .feature_extraction import FeatureExtractor
from .mood_inference import MoodInference
from .mood_service import MoodService

__all__ = [
    'SignalSource',
    'PlaySession',
    'Activity',
    'BehavioralSignal',
    'NormalizedFeatures',
    'MoodVector',
    'DominantMood',
    'MoodInsight',
    'MoodAnalysisResult',
    'SignalCollector',
    'SignalBuffer',
    'FeatureExtractor',
    'MoodInference',
    'MoodService'
]
