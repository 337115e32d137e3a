"""
Persistence collaborator interface

The core treats persistence as an async key-value façade of JSON-serializable
records keyed by user id. Implementations serialize writes per key
externally; the core performs no version checks (last write wins).
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional


class PersistenceStore(ABC):
    """Async record store used by the mood, persona and recommendation services"""

    @abstractmethod
    async def get_user_games(self, user_id: str) -> List[Dict[str, Any]]:
        """Game records in the user's library"""

    @abstractmethod
    async def get_game_session_history(self, user_id: str, game_id: Optional[str] = None,
                                       limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        """Play session records, oldest first, optionally filtered to one game"""

    @abstractmethod
    async def get_persona(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Stored persona record, or None"""

    @abstractmethod
    async def create_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        """Store a new persona record"""

    @abstractmethod
    async def update_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        """Overwrite the persona record"""

    @abstractmethod
    async def delete_persona(self, user_id: str) -> bool:
        """Delete the persona record; True when something was removed"""

    @abstractmethod
    async def get_mood_analysis(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Latest stored mood analysis record, or None"""

    @abstractmethod
    async def save_mood_analysis(self, user_id: str, analysis: Dict[str, Any]) -> None:
        """Store the latest mood analysis record"""


def page_sessions(sessions: List[Dict[str, Any]], game_id: Optional[str] = None,
                  limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
    """Apply the game filter and offset/limit paging shared by store implementations"""
    if game_id is not None:
        sessions = [s for s in sessions if str(s.get('game_id')) == str(game_id)]
    sessions = sessions[offset:]
    if limit is not None:
        sessions = sessions[:limit]
    return sessions
