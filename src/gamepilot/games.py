"""
Game library record shared by the mood, persona and recommendation stages
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any, Optional

from .utils.time import parse_datetime, format_datetime


def _genre_name(genre: Any) -> str:
    if isinstance(genre, dict):
        genre = genre.get('id') or genre.get('name') or ''
    return str(genre).strip().lower()


@dataclass
class Game:
    """A candidate or library game"""
    id: str
    name: str = ''
    genres: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    estimated_playtime: Optional[float] = None  # minutes per sitting
    difficulty: str = 'medium'
    hours_played: float = 0.0
    completed: bool = False
    last_played: Optional[datetime] = None

    @property
    def genre(self) -> Optional[str]:
        """Primary genre"""
        return self.genres[0] if self.genres else None

    @property
    def is_multiplayer(self) -> bool:
        return 'multiplayer' in self.tags

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Game':
        genres = data.get('genres')
        if genres is None:
            genres = [data['genre']] if data.get('genre') else []
        return cls(
            id=str(data.get('id') or data.get('app_id') or data.get('game_id')),
            name=data.get('name') or data.get('title') or '',
            genres=[_genre_name(g) for g in genres if _genre_name(g)],
            tags=[str(t).lower() for t in data.get('tags') or []],
            estimated_playtime=data.get('estimated_playtime', data.get('average_playtime')),
            difficulty=str(data.get('difficulty') or 'medium').lower(),
            hours_played=float(data.get('hours_played') or 0.0),
            completed=bool(data.get('completed', False)),
            last_played=parse_datetime(data.get('last_played'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'genres': list(self.genres),
            'tags': list(self.tags),
            'estimated_playtime': self.estimated_playtime,
            'difficulty': self.difficulty,
            'hours_played': self.hours_played,
            'completed': self.completed,
            'last_played': format_datetime(self.last_played)
        }
