from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Union

EpisodeNumber = Union[int, float, str]


@dataclass(slots=True)
class Episode:
    number: EpisodeNumber
    id: Union[int, str]


@dataclass(slots=True)
class VideoServer:
    name: str
    url: str


@dataclass(slots=True)
class ResolvedAnime:
    slug: str
    url: str = ""
    description: str = ""
    genres: List[str] = field(default_factory=list)
    status: str = ""
    rate: str = ""
    episodes: List[Episode] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "slug": self.slug,
            "description": self.description,
            "genres": list(self.genres),
            "status": self.status,
            "rate": self.rate,
            "episodes": [asdict(ep) for ep in self.episodes],
        }


@dataclass(slots=True)
class Comment:
    content_id: str
    author: str
    text: str
    created_at: float

    def to_dict(self) -> dict:
        return asdict(self)
