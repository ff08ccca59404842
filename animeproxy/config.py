from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://www3.animeflv.net"


@dataclass(slots=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    anime_ttl: float = 6 * 60 * 60
    videos_ttl: float = 30 * 60
    comments_path: str = os.path.join("data", "comments.json")
    comment_interval: float = 30.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            base_url=env.get("ANIMEPROXY_BASE_URL", defaults.base_url).rstrip("/"),
            timeout=float(env.get("ANIMEPROXY_TIMEOUT", defaults.timeout)),
            anime_ttl=float(env.get("ANIMEPROXY_ANIME_TTL", defaults.anime_ttl)),
            videos_ttl=float(env.get("ANIMEPROXY_VIDEOS_TTL", defaults.videos_ttl)),
            comments_path=env.get("ANIMEPROXY_COMMENTS_PATH", defaults.comments_path),
            comment_interval=float(env.get("ANIMEPROXY_COMMENT_INTERVAL", defaults.comment_interval)),
            log_level=env.get("ANIMEPROXY_LOG_LEVEL", defaults.log_level).upper(),
            host=env.get("HOST", defaults.host),
            port=int(env.get("PORT", defaults.port)),
        )
