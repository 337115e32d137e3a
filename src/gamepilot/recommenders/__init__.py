"""
Recommenders Module

Game recommendation for the mood and persona core:
- Mood-forecast scoring over static genre and tag tables
- Persona-driven ranking engine
- Recommendation service with persona post-processing
"""

from .models import (
    Game,
    Recommendation,
    MoodForecast,
    RecommendationContext,
    PlayerIdentity,
    RankedRecommendations
)
from .mood_scoring import generate_mood_based_recommendations
from .ranking_engine import RankingEngine
from .recommendation_service import RecommendationService

__all__ = [
    'Game',
    'Recommendation',
    'MoodForecast',
    'RecommendationContext',
    'PlayerIdentity',
    'RankedRecommendations',
    'generate_mood_based_recommendations',
    'RankingEngine',
    'RecommendationService'
]
