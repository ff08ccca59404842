"""Title to anime resolution.

The resolver walks a fixed path of states::

    GUESSING_SLUG -> DIRECT_FETCH -> SUCCESS
                                  -> FALLBACK_SEARCH -> FALLBACK_FETCH -> SUCCESS
                                                     -> NOT_FOUND

There is exactly one fallback (the upstream search page) and no retries of the
same request. ``last_path`` keeps the states visited by the latest call made on the
current thread.
"""

from __future__ import annotations

import copy
import enum
import logging
import threading
from typing import List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from animeproxy.cache import TTLCache
from animeproxy.errors import AnimeNotFound, EpisodesUnavailable, FetchError, ParseError
from animeproxy.fetcher import PageFetcher
from animeproxy.models import ResolvedAnime
from animeproxy.parser import extract_assignment, parse_anime_details, parse_episodes, parse_search_result, sort_episodes
from animeproxy.slug import slugify

logger = logging.getLogger(__name__)


class ResolutionState(enum.Enum):
    GUESSING_SLUG = "guessing_slug"
    DIRECT_FETCH = "direct_fetch"
    FALLBACK_SEARCH = "fallback_search"
    FALLBACK_FETCH = "fallback_fetch"
    SUCCESS = "success"
    NOT_FOUND = "not_found"


class AnimeResolver:
    EPISODES_VARIABLE = "episodes"

    def __init__(self, fetcher: PageFetcher, cache: TTLCache, base_url: str, ttl: Optional[float] = None):
        self.fetcher = fetcher
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.ttl = ttl
        self._local = threading.local()

    @property
    def last_path(self) -> List[ResolutionState]:
        """States visited by the latest call made from the current thread."""
        return getattr(self._local, "path", [])

    @staticmethod
    def cache_key(title: str) -> str:
        return f"anime:{title}"

    def anime_url(self, slug: str) -> str:
        return f"{self.base_url}/anime/{slug}"

    def search_url(self, title: str) -> str:
        return f"{self.base_url}/browse?q={quote(title, safe='')}"

    def resolve(self, title: str) -> ResolvedAnime:
        self._local.path = [ResolutionState.GUESSING_SLUG]
        slug = slugify(title)

        cached = self.cache.get(self.cache_key(title))
        if cached is not None:
            self.last_path.append(ResolutionState.SUCCESS)
            return copy.deepcopy(cached)

        logger.info("Resolving %r (guessed slug: %s)", title, slug)
        slug, url, soup = self._fetch_page(title, slug)

        anime = self._parse_page(soup, slug, url)
        self.last_path.append(ResolutionState.SUCCESS)
        self.cache.set(self.cache_key(title), copy.deepcopy(anime), ttl=self.ttl)
        logger.info("Resolved %r to %s (%d episodes)", title, anime.slug, len(anime.episodes))
        return anime

    def _fetch_page(self, title: str, slug: str):
        self.last_path.append(ResolutionState.DIRECT_FETCH)
        url = self.anime_url(slug)
        try:
            return slug, url, self.fetcher.fetch(url)
        except FetchError as e:
            logger.info("Direct slug %s failed (%s), trying search", slug, e.message)

        self.last_path.append(ResolutionState.FALLBACK_SEARCH)
        found = self._search(title)
        if found is None:
            self.last_path.append(ResolutionState.NOT_FOUND)
            raise AnimeNotFound(f"Anime not found upstream: {title}")

        slug, url = found
        logger.info("Found %r by search: %s", title, url)
        self.last_path.append(ResolutionState.FALLBACK_FETCH)
        return slug, url, self.fetcher.fetch(url)

    def _search(self, title: str):
        try:
            soup = self.fetcher.fetch(self.search_url(title))
        except FetchError:
            return None
        return parse_search_result(soup, self.base_url)

    def _parse_page(self, soup: BeautifulSoup, slug: str, url: str) -> ResolvedAnime:
        try:
            raw = extract_assignment(soup, self.EPISODES_VARIABLE)
            episodes = parse_episodes(raw, self.EPISODES_VARIABLE)
        except ParseError as e:
            logger.warning("No episodes for %s: %s", slug, e.message)
            raise EpisodesUnavailable() from e

        anime = parse_anime_details(soup, slug, url)
        anime.episodes = sort_episodes(episodes)
        return anime
