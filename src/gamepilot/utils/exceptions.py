"""
Exception hierarchy for the GamePilot core

Validation problems are reported through ValidationReport objects and are
never raised; the types below cover dependency and lifecycle failures.
"""

from typing import Dict, Any, Optional


class GamePilotError(Exception):
    """Base exception for all GamePilot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StoreError(GamePilotError):
    """Raised when the persistence collaborator fails."""


class MoodAnalysisError(GamePilotError):
    """Raised when a mood analysis pass fails."""


class PersonaUpdateError(GamePilotError):
    """Raised when a persona update cannot be read, applied or persisted."""


class PersonaAnalysisError(GamePilotError):
    """Raised when a full persona analysis fails."""


class RecommendationError(GamePilotError):
    """Raised when recommendation generation fails."""
