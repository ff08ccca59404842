from __future__ import annotations

import copy
import logging
from typing import List, Optional

from animeproxy.cache import TTLCache
from animeproxy.errors import FetchError, NoServersFound, ParseError, VideoPageUnreachable
from animeproxy.fetcher import PageFetcher
from animeproxy.models import EpisodeNumber, VideoServer
from animeproxy.parser import SUBTITLED_TRACK, extract_assignment, parse_video_servers

logger = logging.getLogger(__name__)


class VideoServerParser:
    """Video servers of one episode, subtitled track, in upstream order."""

    VIDEOS_VARIABLE = "videos"

    def __init__(
        self,
        fetcher: PageFetcher,
        cache: TTLCache,
        base_url: str,
        ttl: Optional[float] = None,
        track: str = SUBTITLED_TRACK,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.ttl = ttl
        self.track = track

    @staticmethod
    def cache_key(slug: str, episode: EpisodeNumber) -> str:
        return f"videos:{slug}:{episode}"

    def episode_url(self, slug: str, episode: EpisodeNumber) -> str:
        return f"{self.base_url}/ver/{slug}-{episode}"

    def get_servers(self, slug: str, episode: EpisodeNumber) -> List[VideoServer]:
        key = self.cache_key(slug, episode)
        cached = self.cache.get(key)
        if cached is not None:
            return copy.deepcopy(cached)

        logger.info("Looking up videos for %s episode %s", slug, episode)
        try:
            soup = self.fetcher.fetch(self.episode_url(slug, episode))
        except FetchError as e:
            raise VideoPageUnreachable() from e

        try:
            raw = extract_assignment(soup, self.VIDEOS_VARIABLE)
            servers = parse_video_servers(raw, self.track, self.VIDEOS_VARIABLE)
        except ParseError as e:
            logger.warning("No video data for %s-%s: %s", slug, episode, e.message)
            raise NoServersFound() from e

        if not servers:
            raise NoServersFound(f"No {self.track} servers for {slug} episode {episode}")

        self.cache.set(key, copy.deepcopy(servers), ttl=self.ttl)
        return servers
