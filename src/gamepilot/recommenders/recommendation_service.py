"""
Recommendation Service

Mood-forecast and persona-driven game recommendations over a user's
library.
"""

from typing import Dict, List, Any, Optional, Union

from .models import (
    Game, Recommendation, MoodForecast, RecommendationContext, PlayerIdentity,
    PlaystylePreferences, RankedRecommendations
)
from .mood_catalog import ARCHETYPE_TRAITS
from .mood_scoring import generate_mood_based_recommendations
from .ranking_engine import RankingEngine
from ..persona.models import PersonaState
from ..storage.base import PersistenceStore
from ..utils.config import SystemConfig
from ..utils.exceptions import RecommendationError
from ..utils.logging import setup_logger
from ..utils.time import clamp, utcnow

GameLike = Union[Game, Dict[str, Any]]

CONTEXT_GENRE_AFFINITY = 0.5
STRONG_GENRE_AFFINITY = 0.7
STRONG_MOOD_MATCH = 70


def _games(items: Optional[List[GameLike]]) -> List[Game]:
    return [g if isinstance(g, Game) else Game.from_dict(g) for g in items or []]


def session_length_preference(minutes: float) -> str:
    if minutes > 60:
        return 'long'
    if minutes > 30:
        return 'medium'
    return 'short'


def difficulty_preference(scale: float) -> str:
    if scale > 0.75:
        return 'expert'
    if scale > 0.5:
        return 'hard'
    if scale > 0.25:
        return 'normal'
    return 'casual'


def social_preference(scale: float) -> str:
    if scale > 0.66:
        return 'competitive'
    if scale > 0.33:
        return 'cooperative'
    return 'solo'


class RecommendationService:
    """Mood- and persona-based recommendations"""

    def __init__(self, store: PersistenceStore, config: Optional[SystemConfig] = None,
                 ranking_engine: Optional[RankingEngine] = None):
        self.store = store
        self.config = config or SystemConfig()
        self.recommendation_config = self.config.recommendation
        self.ranking_engine = ranking_engine or RankingEngine(
            max_candidates=self.recommendation_config.max_candidates,
            min_candidate_score=self.recommendation_config.min_candidate_score
        )
        self.logger = setup_logger(__name__)

    async def _resolve_games(self, user_id: str, games: Optional[List[GameLike]]) -> List[Game]:
        if games:
            return _games(games)
        return _games(await self.store.get_user_games(user_id))

    async def get_mood_based_recommendations(self, user_id: str, forecast: MoodForecast,
                                             games: Optional[List[GameLike]] = None,
                                             limit: Optional[int] = None) -> RankedRecommendations:
        """
        Recommend games for a forecast mood

        Falls back to the user's stored library when no games are given.

        Raises:
            RecommendationError: if the library cannot be read or scoring fails
        """
        try:
            library = await self._resolve_games(user_id, games)
            if limit is None:
                limit = self.recommendation_config.max_recommendations
            result = generate_mood_based_recommendations(forecast, library, limit)
            self.logger.info(
                f"Generated {len(result.recommendations)} {forecast.predicted_mood} "
                f"recommendations for user {user_id}"
            )
            return result
        except Exception as e:
            self.logger.error(f"Failed to generate mood-based recommendations for user {user_id}: {e}")
            raise RecommendationError("Recommendation generation failed", {'user_id': user_id}) from e

    async def get_persona_based_recommendations(self, user_id: str, persona_state: PersonaState,
                                                games: Optional[List[GameLike]] = None,
                                                options: Optional[Dict[str, Any]] = None) -> RankedRecommendations:
        """
        Recommend games for a persona state

        Args:
            user_id: User identifier
            persona_state: Output of PersonaService.build_persona_state
            games: Candidate games; the stored library when omitted
            options: {'max_recommendations': int, 'context': {'time_available',
                     'social_context', 'intensity', 'exclude_recently_played'}}

        Raises:
            RecommendationError: if the library cannot be read or ranking fails
        """
        options = options or {}
        try:
            library = await self._resolve_games(user_id, games)
            context = self.build_recommendation_context(persona_state, options.get('context') or {})
            identity = self.build_player_identity(user_id, persona_state)

            candidates = self.ranking_engine.get_recommendations(identity, context, library)
            for recommendation in candidates:
                recommendation.persona_explanation = self.generate_persona_explanation(recommendation, persona_state)
                recommendation.intent_match = self.calculate_intent_match(recommendation, persona_state)
                recommendation.behavior_match = self.calculate_behavior_match(recommendation, persona_state)

            limit = options.get('max_recommendations')
            if limit is None:
                limit = self.recommendation_config.max_recommendations
            self.logger.info(
                f"Generated {min(limit, len(candidates))} persona recommendations for user {user_id} "
                f"({persona_state.archetype}, {persona_state.mood})"
            )
            return RankedRecommendations(
                recommendations=candidates[:limit],
                generated_at=utcnow(),
                total_games=len(library)
            )
        except Exception as e:
            self.logger.error(f"Failed to generate persona-based recommendations for user {user_id}: {e}")
            raise RecommendationError("Persona-based recommendation generation failed", {'user_id': user_id}) from e

    def build_recommendation_context(self, persona_state: PersonaState,
                                     overrides: Dict[str, Any]) -> RecommendationContext:
        exclude = overrides.get('exclude_recently_played')
        if exclude is None:
            exclude = self.recommendation_config.exclude_recently_played

        return RecommendationContext(
            current_mood=persona_state.mood,
            time_available=overrides.get('time_available') or persona_state.session_length_preference,
            social_context=overrides.get('social_context') or 'solo',
            intensity=overrides.get('intensity') or 'medium',
            exclude_recently_played=bool(exclude),
            genres=[
                genre for genre, affinity in persona_state.genre_affinities.items()
                if affinity > CONTEXT_GENRE_AFFINITY
            ],
            recent_games=list(persona_state.recent_games)
        )

    def build_player_identity(self, user_id: str, persona_state: PersonaState) -> PlayerIdentity:
        return PlayerIdentity(
            user_id=user_id,
            archetype=persona_state.archetype,
            traits=list(ARCHETYPE_TRAITS.get(persona_state.archetype, ())),
            preferences=PlaystylePreferences(
                session_length=session_length_preference(persona_state.session_length_preference),
                difficulty=difficulty_preference(persona_state.difficulty_preference),
                social_preference=social_preference(persona_state.social_preference)
            ),
            genre_affinities=dict(persona_state.genre_affinities)
        )

    def generate_persona_explanation(self, recommendation: Recommendation,
                                     persona_state: PersonaState) -> List[str]:
        explanations = []

        if recommendation.mood_match > STRONG_MOOD_MATCH:
            explanations.append(f"Perfect match for your {persona_state.mood} mood")

        intent = persona_state.intent
        if intent == 'short_session' and recommendation.estimated_playtime <= 30:
            explanations.append('Great for a quick gaming session')
        elif intent == 'social' and 'multiplayer' in recommendation.tags:
            explanations.append('Perfect for social gaming')
        elif intent == 'challenge' and recommendation.difficulty == 'hard':
            explanations.append('Will satisfy your desire for a challenge')

        affinity = persona_state.genre_affinities.get(recommendation.genre, 0.0)
        if affinity > STRONG_GENRE_AFFINITY:
            explanations.append(f"You highly enjoy {recommendation.genre} games")

        return explanations[:self.recommendation_config.max_explanations]

    def calculate_intent_match(self, recommendation: Recommendation,
                               persona_state: PersonaState) -> float:
        """How well a recommendation serves the current intent, 0-100"""
        score = 50.0
        tags = recommendation.tags
        playtime = recommendation.estimated_playtime
        recently_played = recommendation.game_id in persona_state.recent_games

        intent = persona_state.intent
        if intent == 'short_session':
            if playtime <= 30:
                score += 30
            elif playtime <= 60:
                score += 15
            else:
                score -= 20
        elif intent == 'comfort':
            if 'relaxing' in tags or 'casual' in tags:
                score += 25
            if recently_played:
                score += 15
        elif intent == 'novelty':
            if not recently_played:
                score += 20
            if 'innovative' in tags or 'unique' in tags:
                score += 15
        elif intent == 'social':
            if 'multiplayer' in tags or 'co-op' in tags:
                score += 30
        elif intent == 'challenge':
            if recommendation.difficulty in ('hard', 'expert'):
                score += 25
            if 'competitive' in tags:
                score += 15

        return clamp(score, 0, 100)

    def calculate_behavior_match(self, recommendation: Recommendation,
                                 persona_state: PersonaState) -> float:
        """How well a recommendation fits observed play habits, 0-100"""
        score = 50.0

        time_diff = abs(recommendation.estimated_playtime - persona_state.session_length_preference)
        if time_diff <= 15:
            score += 20
        elif time_diff <= 30:
            score += 10
        else:
            score -= 10

        affinity = persona_state.genre_affinities.get(recommendation.genre, 0.0)
        score += (affinity - 0.5) * 40

        multiplayer = 'multiplayer' in recommendation.tags
        if multiplayer and persona_state.social_preference > 0.66:
            score += 15
        if not multiplayer and persona_state.social_preference < 0.33:
            score += 15

        return clamp(score, 0, 100)
