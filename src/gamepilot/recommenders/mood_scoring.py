"""
Mood-based game scoring

Scores library games against a mood forecast using the static genre and
tag tables in mood_catalog.
"""

import logging
from typing import List

from .models import Game, Recommendation, MoodForecast, RankedRecommendations
from .mood_catalog import (
    FORECAST_GENRE_SCORES, FORECAST_TAG_SCORES, FORECAST_MOOD_GENRES, FORECAST_MOOD_TAGS
)
from ..utils.time import clamp, utcnow

logger = logging.getLogger(__name__)

BASE_SCORE = 50
MAX_REASONS = 3
DEFAULT_PLAYTIME = 60


def calculate_mood_game_score(game: Game, predicted_mood: str, confidence: float) -> float:
    """Best genre score plus tag bonuses, scaled by forecast confidence"""
    genre_scores = FORECAST_GENRE_SCORES.get(predicted_mood, {})
    tag_scores = FORECAST_TAG_SCORES.get(predicted_mood, {})

    score = max([BASE_SCORE] + [genre_scores[g] for g in game.genres if g in genre_scores])
    score += sum(tag_scores.get(tag, 0) for tag in game.tags)

    # Between 50% and 100% of the raw score depending on confidence
    score *= 0.5 + clamp(confidence) * 0.5
    return clamp(score, 0, 100)


def generate_recommendation_reasons(game: Game, predicted_mood: str) -> List[str]:
    reasons = []
    mood_genres = FORECAST_MOOD_GENRES.get(predicted_mood, ())
    mood_tags = FORECAST_MOOD_TAGS.get(predicted_mood, ())

    matching_genres = [g for g in game.genres if g in mood_genres]
    if matching_genres:
        reasons.append(f"Perfect {predicted_mood} match with {', '.join(matching_genres)} genres")

    matching_tags = [t for t in game.tags if t in mood_tags]
    if matching_tags:
        reasons.append(f"Features {', '.join(matching_tags)} for {predicted_mood} gaming")

    if not reasons:
        reasons.append(f"General recommendation for {predicted_mood} mood")

    return reasons[:MAX_REASONS]


def calculate_mood_match(game: Game, predicted_mood: str) -> float:
    """Percentage of genre (double weight) and tag factors that fit the mood"""
    mood_genres = FORECAST_MOOD_GENRES.get(predicted_mood, ())
    mood_tags = FORECAST_MOOD_TAGS.get(predicted_mood, ())

    total = 2 * len(game.genres) + len(game.tags)
    if total == 0:
        return 0.0
    matched = 2 * sum(g in mood_genres for g in game.genres) + sum(t in mood_tags for t in game.tags)
    return min(100.0, matched / total * 100)


def generate_mood_based_recommendations(forecast: MoodForecast, games: List[Game],
                                        max_recommendations: int = 10) -> RankedRecommendations:
    """
    Rank games for a mood forecast

    Args:
        forecast: Predicted mood and confidence
        games: Candidate games
        max_recommendations: Number of results to keep

    Returns:
        Recommendations sorted by score; equal scores keep input order
    """
    mood = forecast.predicted_mood
    scored = [
        Recommendation(
            game_id=game.id,
            name=game.name,
            genre=game.genre,
            score=calculate_mood_game_score(game, mood, forecast.confidence),
            reasons=generate_recommendation_reasons(game, mood),
            mood_match=calculate_mood_match(game, mood),
            estimated_playtime=game.estimated_playtime or DEFAULT_PLAYTIME,
            difficulty=game.difficulty,
            tags=list(game.tags)
        )
        for game in games
    ]

    ranked = sorted(scored, key=lambda rec: rec.score, reverse=True)[:max_recommendations]
    logger.debug(f"Scored {len(games)} games for mood {mood}, kept {len(ranked)}")

    return RankedRecommendations(
        recommendations=ranked,
        generated_at=utcnow(),
        total_games=len(games),
        predicted_mood=mood,
        confidence=forecast.confidence
    )
