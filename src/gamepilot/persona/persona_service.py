"""
Persona Service

Manages the persona lifecycle: default creation on first access, event and
update application, full re-analysis from raw gaming data when stale, and
projection to the state consumed by the recommenders.
"""

import time
from datetime import datetime
from typing import Dict, Optional, Tuple

from .models import (
    UnifiedPersona, PersonaState, PersonaUpdateRequest, PersonaAnalysisResult,
    TraitEvolutionEntry
)
from .events import MoodEvent, IntentEvent, BehaviorEvent, SessionEvent, AchievementEvent
from . import builders
from . import analysis
from ..games import Game
from ..mood.types import PlaySession
from ..storage.base import PersistenceStore
from ..utils.config import SystemConfig
from ..utils.exceptions import PersonaUpdateError, PersonaAnalysisError
from ..utils.logging import setup_logger, get_performance_logger
from ..utils.time import utcnow, hours_between


class PersonaService:
    """Per-user persona management backed by a persistence store"""

    def __init__(self, store: PersistenceStore, config: Optional[SystemConfig] = None):
        self.store = store
        self.config = config or SystemConfig()
        self.persona_config = self.config.persona
        self.logger = setup_logger(__name__)
        self.performance_logger = get_performance_logger()

    async def get_persona(self, user_id: str) -> Optional[UnifiedPersona]:
        """
        Get the user's current persona

        Creates and stores a default persona on first access and refreshes
        a stale one through analyze_persona.

        Returns:
            The persona, or None if it could not be read or built
        """
        try:
            record = await self.store.get_persona(user_id)
            if record is None:
                self.logger.info(f"No persona found, creating default for user {user_id}")
                return await self._create_default_persona(user_id)

            persona = UnifiedPersona.from_dict(record)
            if self._should_refresh(persona):
                self.logger.info(f"Refreshing stale persona for user {user_id}")
                return (await self.analyze_persona(user_id)).persona

            return persona

        except Exception as e:
            self.logger.error(f"Error getting persona for user {user_id}: {e}")
            return None

    async def update_persona(self, user_id: str,
                             update: PersonaUpdateRequest) -> UnifiedPersona:
        """
        Apply mood, intent, behavior and event updates, in that order,
        then recompute derived values and write once.

        A missing persona starts from the default and a stale one is
        re-analyzed in memory; neither is persisted before the final write.

        Raises:
            PersonaUpdateError: if the persona cannot be read or the write fails
        """
        try:
            record = await self.store.get_persona(user_id)
            if record is None:
                current = UnifiedPersona.default(user_id, confidence=self.persona_config.default_confidence)
            else:
                current = UnifiedPersona.from_dict(record)
                if self._should_refresh(current):
                    self.logger.info(f"Refreshing stale persona for user {user_id} before update")
                    current, _ = await self._build_analyzed_persona(user_id, current)

            now = utcnow()
            updated = current
            if update.mood is not None:
                updated = builders.apply_mood_update(
                    updated, update.mood, now=now, max_history=self.persona_config.max_mood_history
                )
            if update.intent is not None:
                updated = builders.apply_intent_update(
                    updated, update.intent, now=now, max_history=self.persona_config.max_intent_history
                )
            if update.behavior is not None:
                updated = builders.apply_behavior_update(
                    updated, update.behavior, now=now,
                    max_recent_games=self.persona_config.max_recent_games,
                    max_preferred_times=self.persona_config.max_preferred_times
                )
            if update.event is not None:
                updated = self.process_persona_event(updated, update.event)

            updated = self.recompute_persona(updated)
            updated.last_updated = now

            if record is None:
                await self.store.create_persona(user_id, updated.to_dict())
            else:
                await self.store.update_persona(user_id, updated.to_dict())
            self.logger.info(f"Persona updated for user {user_id}")
            return updated

        except Exception as e:
            self.logger.error(f"Error updating persona for user {user_id}: {e}")
            raise PersonaUpdateError(f"Persona update failed: {e}", {'user_id': user_id}) from e

    def recompute_persona(self, persona: UnifiedPersona) -> UnifiedPersona:
        return builders.recompute_persona(persona, self.persona_config.confidence_saturation_points)

    def process_persona_event(self, persona: UnifiedPersona, event) -> UnifiedPersona:
        """Apply one persona event; unknown event types leave the persona unchanged"""
        if isinstance(event, MoodEvent):
            return builders.apply_mood_event(persona, event, self.persona_config.max_mood_history)
        if isinstance(event, IntentEvent):
            return builders.apply_intent_event(persona, event, self.persona_config.max_intent_history)
        if isinstance(event, BehaviorEvent):
            return builders.apply_behavior_update(
                persona, event.behavior, now=event.timestamp,
                max_recent_games=self.persona_config.max_recent_games,
                max_preferred_times=self.persona_config.max_preferred_times
            )
        if isinstance(event, SessionEvent):
            return builders.apply_session_event(persona, event, self.persona_config.max_preferred_times)
        if isinstance(event, AchievementEvent):
            return builders.apply_achievement_event(persona, event)

        self.logger.warning(f"Ignoring unknown persona event type: {type(event).__name__}")
        return persona

    async def get_persona_state(self, user_id: str) -> Optional[PersonaState]:
        persona = await self.get_persona(user_id)
        if persona is None:
            return None
        try:
            return self.build_persona_state(persona)
        except Exception as e:
            self.logger.error(f"Error building persona state for user {user_id}: {e}")
            return None

    def build_persona_state(self, persona: UnifiedPersona,
                            now: Optional[datetime] = None) -> PersonaState:
        return builders.build_persona_state(
            persona, now=now,
            recent_games=self.persona_config.state_recent_games,
            decay_hours=self.persona_config.freshness_decay_hours
        )

    async def analyze_persona(self, user_id: str) -> PersonaAnalysisResult:
        """
        Rebuild the persona from the user's games and session history

        Existing history is kept and a trait-evolution entry is appended.

        Raises:
            PersonaAnalysisError: if the data cannot be read or the result stored
        """
        start_time = time.time()
        try:
            existing_record = await self.store.get_persona(user_id)
            existing = UnifiedPersona.from_dict(existing_record) if existing_record else None

            persona, scores = await self._build_analyzed_persona(user_id, existing)
            now = persona.last_analysis_date
            traits = persona.traits
            state = self.build_persona_state(persona, now=now)
            insights = analysis.generate_persona_insights(persona, scores)

            if existing is None:
                await self.store.create_persona(user_id, persona.to_dict())
            else:
                await self.store.update_persona(user_id, persona.to_dict())

            computation_time = time.time() - start_time
            self.performance_logger.log_execution_time(
                "analyze_persona", computation_time, {'user_id': user_id, 'data_points': persona.data_points}
            )
            self.logger.info(
                f"Persona analysis completed for user {user_id}: {traits.archetype_id}, "
                f"{persona.data_points} data points"
            )

            return PersonaAnalysisResult(
                persona=persona,
                state=state,
                insights=insights,
                analysis_date=now,
                data_points_used=persona.data_points,
                computation_time=computation_time
            )

        except Exception as e:
            self.logger.error(f"Error analyzing persona for user {user_id}: {e}")
            raise PersonaAnalysisError(f"Persona analysis failed: {e}", {'user_id': user_id}) from e

    async def delete_persona(self, user_id: str) -> bool:
        deleted = await self.store.delete_persona(user_id)
        self.logger.info(f"Deleted persona for user {user_id}: {deleted}")
        return deleted

    async def _build_analyzed_persona(self, user_id: str, existing: Optional[UnifiedPersona]
                                      ) -> Tuple[UnifiedPersona, Dict[str, float]]:
        """Re-derive the persona from stored games and sessions without writing it"""
        games = [Game.from_dict(g) for g in await self.store.get_user_games(user_id)]
        sessions = [
            PlaySession.from_dict(s) for s in await self.store.get_game_session_history(user_id)
        ]

        now = utcnow()
        signals = analysis.build_persona_signals(games, sessions)
        scores = analysis.score_traits(signals)
        traits = analysis.derive_traits(scores)
        mood_signals = analysis.extract_mood_signals(games, sessions)

        persona = UnifiedPersona(
            user_id=user_id,
            created_at=existing.created_at if existing else now,
            last_updated=now,
            traits=traits,
            current_mood=analysis.infer_current_mood(mood_signals),
            current_intent=analysis.infer_current_intent(traits, mood_signals),
            mood_intensity=analysis.calculate_mood_intensity(mood_signals),
            patterns=analysis.extract_behavioral_patterns(
                games, sessions, now=now,
                max_recent_games=self.persona_config.max_recent_games,
                max_preferred_times=self.persona_config.max_preferred_times
            ),
            signals=signals,
            data_points=len(games) + len(sessions),
            last_analysis_date=now
        )
        if existing is not None:
            persona.history = existing.history

        persona.history.trait_evolution.append(TraitEvolutionEntry(
            date=now,
            traits=traits,
            confidence=traits.confidence,
            trigger_event='analysis'
        ))
        persona.history.trait_evolution = persona.history.trait_evolution[
            -self.persona_config.max_trait_evolution:
        ]

        return self.recompute_persona(persona), scores

    async def _create_default_persona(self, user_id: str) -> UnifiedPersona:
        persona = UnifiedPersona.default(user_id, confidence=self.persona_config.default_confidence)
        await self.store.create_persona(user_id, persona.to_dict())
        return persona

    def _should_refresh(self, persona: UnifiedPersona) -> bool:
        if persona.last_analysis_date is None:
            return True
        return hours_between(persona.last_analysis_date, utcnow()) > self.persona_config.stale_after_hours
