"""
Ranking Engine

Persona-driven candidate scoring. Each game gets five component scores
(mood, playstyle, genre affinity, social fit, time fit) on a 0-100 scale,
blended around a neutral 50:

    score = 50 + 0.3(mood-50) + 0.25(playstyle-50) + 0.2(genre-50)
               + 0.15(social-50) + 0.1(time-50)
"""

import logging
from typing import List

from .models import Game, Recommendation, RecommendationContext, PlayerIdentity
from .mood_catalog import PERSONA_MOOD_GENRES, PERSONA_MOOD_TAGS, TRAIT_GAME_TAGS
from ..utils.time import clamp

logger = logging.getLogger(__name__)

COMPONENT_WEIGHTS = {
    'mood': 0.30,
    'playstyle': 0.25,
    'genre': 0.20,
    'social': 0.15,
    'time': 0.10
}

NEUTRAL_SCORE = 50.0
DEFAULT_PLAYTIME = 60
SESSION_LENGTH_FACTORS = {'short': 0.7, 'long': 1.3}
PRIMARY_TRAIT_BONUS = 8
SESSION_FIT_BONUS = 10
MAX_REASONS = 3


class RankingEngine:
    """
    Scores candidate games for a player identity in a recommendation context
    """

    def __init__(self, max_candidates: int = 20, min_candidate_score: float = 20.0):
        """
        Initialize ranking engine

        Args:
            max_candidates: Number of scored candidates returned
            min_candidate_score: Candidates at or below this score are dropped
        """
        self.max_candidates = max_candidates
        self.min_candidate_score = min_candidate_score
        self.component_weights = dict(COMPONENT_WEIGHTS)

    def get_recommendations(self, identity: PlayerIdentity, context: RecommendationContext,
                            games: List[Game]) -> List[Recommendation]:
        """
        Score, filter and rank candidate games

        Returns:
            Up to max_candidates recommendations, best first; ties keep input order
        """
        recent = set(context.recent_games) if context.exclude_recently_played else set()
        candidates = []

        for game in games:
            if game.id in recent:
                continue

            score = self.calculate_recommendation_score(game, identity, context)
            if score <= self.min_candidate_score:
                continue

            candidates.append(Recommendation(
                game_id=game.id,
                name=game.name,
                genre=game.genre,
                score=score,
                reasons=self.generate_reasons(game, identity, context, score),
                mood_match=self.calculate_mood_match(game, context),
                playstyle_match=self.calculate_playstyle_match(game, identity),
                social_match=self.calculate_social_match(game, context),
                estimated_playtime=self.estimate_playtime(game, identity),
                difficulty=game.difficulty or 'medium',
                tags=list(game.tags)
            ))

        ranked = sorted(candidates, key=lambda rec: rec.score, reverse=True)[:self.max_candidates]
        logger.debug(f"Ranked {len(ranked)} of {len(games)} games for user {identity.user_id}")
        return ranked

    def calculate_recommendation_score(self, game: Game, identity: PlayerIdentity,
                                       context: RecommendationContext) -> float:
        weights = self.component_weights
        score = NEUTRAL_SCORE

        if context.current_mood:
            score += (self.calculate_mood_match(game, context) - NEUTRAL_SCORE) * weights['mood']

        score += (self.calculate_playstyle_match(game, identity) - NEUTRAL_SCORE) * weights['playstyle']
        score += (self.calculate_genre_match(game, identity) - NEUTRAL_SCORE) * weights['genre']

        if context.social_context:
            score += (self.calculate_social_match(game, context) - NEUTRAL_SCORE) * weights['social']

        if context.time_available:
            time_score = self.calculate_time_match(game, identity, context.time_available)
            score += (time_score - NEUTRAL_SCORE) * weights['time']

        return clamp(score, 0, 100)

    def calculate_mood_match(self, game: Game, context: RecommendationContext) -> float:
        mood = context.current_mood
        if not mood or mood not in PERSONA_MOOD_GENRES:
            return NEUTRAL_SCORE

        if game.genre in PERSONA_MOOD_GENRES[mood]:
            return 85.0

        matching_tags = [tag for tag in game.tags if tag in PERSONA_MOOD_TAGS.get(mood, ())]
        if matching_tags:
            return 60.0 + len(matching_tags) * 5

        return 30.0

    def calculate_playstyle_match(self, game: Game, identity: PlayerIdentity) -> float:
        score = NEUTRAL_SCORE

        for trait in identity.traits:
            if any(tag in game.tags for tag in TRAIT_GAME_TAGS.get(trait, ())):
                score += PRIMARY_TRAIT_BONUS

        estimated = self.estimate_playtime(game, identity)
        preferred = identity.preferences.session_length
        if (
            (preferred == 'short' and estimated <= 60)
            or (preferred == 'medium' and 45 <= estimated <= 120)
            or (preferred == 'long' and estimated >= 90)
        ):
            score += SESSION_FIT_BONUS

        return clamp(score, 0, 100)

    def calculate_genre_match(self, game: Game, identity: PlayerIdentity) -> float:
        """Genre affinity on the 0-100 scale"""
        affinity = identity.genre_affinities.get(game.genre, 0.0) if game.genre else 0.0
        return clamp(affinity * 100, 0, 100)

    def calculate_social_match(self, game: Game, context: RecommendationContext) -> float:
        if not context.social_context:
            return NEUTRAL_SCORE

        if context.social_context == 'solo' and not game.is_multiplayer:
            return 90.0
        if context.social_context == 'co-op' and game.is_multiplayer:
            return 85.0
        if context.social_context == 'pvp' and 'competitive' in game.tags:
            return 85.0
        return 30.0

    def calculate_time_match(self, game: Game, identity: PlayerIdentity, time_available: float) -> float:
        estimated = self.estimate_playtime(game, identity)
        if estimated <= time_available * 0.8:
            return 85.0
        if estimated <= time_available:
            return 70.0
        return 30.0

    def estimate_playtime(self, game: Game, identity: PlayerIdentity) -> int:
        """Minutes per sitting, adjusted to the player's session-length preference"""
        base = game.estimated_playtime or DEFAULT_PLAYTIME
        base *= SESSION_LENGTH_FACTORS.get(identity.preferences.session_length, 1.0)
        return round(base)

    def generate_reasons(self, game: Game, identity: PlayerIdentity,
                         context: RecommendationContext, score: float) -> List[str]:
        reasons = []

        mood = context.current_mood
        if mood and game.genre in PERSONA_MOOD_GENRES.get(mood, ()):
            reasons.append(f"Perfect for your {mood} mood")

        if game.genre and identity.genre_affinities.get(game.genre, 0.0) > 0.7:
            reasons.append(f"You love {game.genre} games")

        if game.is_multiplayer and identity.preferences.social_preference != 'solo':
            reasons.append('Great for social gaming')

        if score > 80:
            reasons.append('Highly personalized match')

        return reasons[:MAX_REASONS]
