"""
In-process persistence store

Records are deep-copied on the way in and out so callers never share
mutable state with the store.
"""

import copy
from collections import defaultdict
from typing import Dict, List, Any, Optional

from .base import PersistenceStore, page_sessions


class InMemoryStore(PersistenceStore):
    """Dictionary-backed store for tests and local runs"""

    def __init__(self):
        self.games: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.sessions: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.personas: Dict[str, Dict[str, Any]] = {}
        self.mood_analyses: Dict[str, Dict[str, Any]] = {}
        self.write_count = 0

    # Seeding helpers (platform integrations write through these)

    def add_games(self, user_id: str, games: List[Dict[str, Any]]):
        self.games[user_id].extend(copy.deepcopy(games))

    def add_sessions(self, user_id: str, sessions: List[Dict[str, Any]]):
        self.sessions[user_id].extend(copy.deepcopy(sessions))

    # PersistenceStore

    async def get_user_games(self, user_id: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self.games.get(user_id, []))

    async def get_game_session_history(self, user_id: str, game_id: Optional[str] = None,
                                       limit: Optional[int] = None, offset: int = 0) -> List[Dict[str, Any]]:
        sessions = page_sessions(self.sessions.get(user_id, []), game_id, limit, offset)
        return copy.deepcopy(sessions)

    async def get_persona(self, user_id: str) -> Optional[Dict[str, Any]]:
        record = self.personas.get(user_id)
        return copy.deepcopy(record) if record is not None else None

    async def create_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        self.personas[user_id] = copy.deepcopy(persona)
        self.write_count += 1

    async def update_persona(self, user_id: str, persona: Dict[str, Any]) -> None:
        self.personas[user_id] = copy.deepcopy(persona)
        self.write_count += 1

    async def delete_persona(self, user_id: str) -> bool:
        return self.personas.pop(user_id, None) is not None

    async def get_mood_analysis(self, user_id: str) -> Optional[Dict[str, Any]]:
        record = self.mood_analyses.get(user_id)
        return copy.deepcopy(record) if record is not None else None

    async def save_mood_analysis(self, user_id: str, analysis: Dict[str, Any]) -> None:
        self.mood_analyses[user_id] = copy.deepcopy(analysis)
