"""
Main pipeline for the GamePilot mood and persona core.
Wires the mood, persona and recommendation services over one store and
exposes the operations served at the HTTP boundary.
"""

from typing import Dict, Any, List, Optional, Union

from .mood import MoodService
from .mood.types import MoodAnalysisResult
from .persona import PersonaService
from .persona.models import UnifiedPersona, PersonaState, PersonaUpdateRequest, PersonaAnalysisResult
from .recommenders import RecommendationService, MoodForecast, RankedRecommendations
from .recommenders.mood_catalog import MOOD_TO_FORECAST
from .storage import PersistenceStore, create_store
from .utils.config import SystemConfig
from .utils.logging import setup_logger
from .utils.time import utcnow, format_datetime

logger = setup_logger(__name__)


class MoodPersonaPipeline:
    """
    Facade over the mood, persona and recommendation services.
    Every service shares the same store and configuration.
    """

    def __init__(self, store: PersistenceStore, config: Optional[SystemConfig] = None):
        self.store = store
        self.config = config or SystemConfig()
        self.mood_service = MoodService(store, self.config)
        self.persona_service = PersonaService(store, self.config)
        self.recommendation_service = RecommendationService(store, self.config)

    @classmethod
    def from_config(cls, config: SystemConfig) -> 'MoodPersonaPipeline':
        """Build a pipeline with the store selected by config.store"""
        return cls(create_store(config.store), config)

    # Mood

    async def analyze_user_mood(self, user_id: str, sessions: List[Any], games: List[Any],
                                activities: Optional[List[Any]] = None) -> MoodAnalysisResult:
        return await self.mood_service.analyze_user_mood(user_id, sessions, games, activities)

    async def get_current_mood(self, user_id: str) -> Optional[MoodAnalysisResult]:
        return await self.mood_service.get_current_mood(user_id)

    def forecast_from_mood(self, result: MoodAnalysisResult) -> MoodForecast:
        """Map a mood analysis onto the forecast moods used for mood-based recommendations"""
        dominant = self.mood_service.mood_inference.get_dominant_mood(result.mood_vector)
        return MoodForecast(
            predicted_mood=MOOD_TO_FORECAST[dominant.mood],
            confidence=result.confidence
        )

    # Persona

    async def get_persona(self, user_id: str) -> Optional[UnifiedPersona]:
        return await self.persona_service.get_persona(user_id)

    async def get_persona_state(self, user_id: str) -> Optional[PersonaState]:
        return await self.persona_service.get_persona_state(user_id)

    async def update_persona(self, user_id: str,
                             update: Union[PersonaUpdateRequest, Dict[str, Any]]) -> UnifiedPersona:
        if not isinstance(update, PersonaUpdateRequest):
            update = PersonaUpdateRequest.from_dict(update or {})
        return await self.persona_service.update_persona(user_id, update)

    async def analyze_persona(self, user_id: str) -> PersonaAnalysisResult:
        return await self.persona_service.analyze_persona(user_id)

    # Recommendations

    async def get_mood_based_recommendations(self, user_id: str,
                                             forecast: Optional[MoodForecast] = None,
                                             games: Optional[List[Any]] = None,
                                             limit: Optional[int] = None) -> Optional[RankedRecommendations]:
        """
        Mood-based recommendations for a forecast, or for the user's latest
        stored mood analysis when no forecast is given.

        Returns:
            None when no forecast is given and no analysis is stored
        """
        if forecast is None:
            current = await self.get_current_mood(user_id)
            if current is None:
                logger.info(f"No mood analysis stored for user {user_id}")
                return None
            forecast = self.forecast_from_mood(current)

        return await self.recommendation_service.get_mood_based_recommendations(
            user_id, forecast, games=games, limit=limit
        )

    async def get_persona_based_recommendations(self, user_id: str,
                                                games: Optional[List[Any]] = None,
                                                options: Optional[Dict[str, Any]] = None,
                                                persona_state: Optional[PersonaState] = None
                                                ) -> Optional[RankedRecommendations]:
        """
        Persona-based recommendations; the state is read from the store when
        not supplied.

        Returns:
            None when the persona cannot be read
        """
        if persona_state is None:
            persona_state = await self.get_persona_state(user_id)
            if persona_state is None:
                logger.warning(f"No persona state available for user {user_id}")
                return None

        return await self.recommendation_service.get_persona_based_recommendations(
            user_id, persona_state, games=games, options=options
        )

    def health_check(self) -> Dict[str, Any]:
        mood_health = self.mood_service.health_check()
        return {
            'status': mood_health['status'],
            'components': {
                'mood': mood_health,
                'persona': {'status': 'healthy'},
                'recommendations': {'status': 'healthy'},
                'store': {'backend': self.config.store.backend}
            },
            'timestamp': format_datetime(utcnow())
        }
