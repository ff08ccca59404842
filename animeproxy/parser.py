"""Everything that knows what upstream pages look like.

Upstream embeds its data as inline script assignments (``var episodes = [...]``,
``var videos = {...}``) and renders metadata in a handful of CSS classes. Both
couplings live here: the script extractor below and the selector chains, which
are plain ordered lists so a markup change means editing a list.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from animeproxy.errors import ScriptVariableNotFound, ScriptVariableParseError
from animeproxy.models import Episode, ResolvedAnime, VideoServer

SUBTITLED_TRACK = "SUB"
SEARCH_RESULT_SELECTOR = ".ListAnimes li article a"

Extracted = Union[str, List[str]]
Strategy = Callable[[BeautifulSoup], Extracted]

_CLOSERS = {"[": "]", "{": "}"}


def slug_from_url(url: str) -> str:
    p = urlparse(url)
    return p.path.strip("/").split("/")[-1]


# Selector chains


def text_of(selector: str) -> Strategy:
    def strategy(soup: BeautifulSoup) -> str:
        texts = (el.get_text(" ", strip=True) for el in soup.select(selector))
        return " ".join(t for t in texts if t)

    return strategy


def texts_of(selector: str) -> Strategy:
    def strategy(soup: BeautifulSoup) -> List[str]:
        texts = (el.get_text(strip=True) for el in soup.select(selector))
        return [t for t in texts if t]

    return strategy


def attr_of(selector: str, attr: str) -> Strategy:
    def strategy(soup: BeautifulSoup) -> str:
        el = soup.select_one(selector)
        value = el.get(attr) if el else None
        return value.strip() if isinstance(value, str) else ""

    return strategy


def first_non_empty(soup: BeautifulSoup, chain: Sequence[Strategy], default: Extracted = "") -> Extracted:
    for strategy in chain:
        value = strategy(soup)
        if value:
            return value
    return default


DESCRIPTION_CHAIN: Tuple[Strategy, ...] = (
    text_of(".Description p"),
    text_of(".Description"),
    attr_of('meta[property="og:description"]', "content"),
    attr_of('meta[name="description"]', "content"),
)
GENRES_CHAIN: Tuple[Strategy, ...] = (
    texts_of(".Genres a"),
    texts_of(".Nvgnrs a"),
)
STATUS_CHAIN: Tuple[Strategy, ...] = (text_of(".AnmStts"),)
RATE_CHAIN: Tuple[Strategy, ...] = (text_of(".vtprmd"),)


# Script variables


def _script_texts(soup: BeautifulSoup):
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        content = script.string or script.get_text()
        if content:
            yield content


def _balanced_literal(text: str, start: int, variable_name: str) -> int:
    """Return the index just past the bracket closing the literal opened at ``start``."""
    depth = 0
    quote = None
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 0:
                return i + 1
    raise ScriptVariableParseError(variable_name, "unbalanced literal")


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def extract_assignment(soup: BeautifulSoup, variable_name: str) -> Any:
    """Parse the JSON literal assigned to ``var <variable_name>`` in the first script that has one."""
    assignment = re.compile(r"\bvar\s+" + re.escape(variable_name) + r"\s*=")

    for content in _script_texts(soup):
        match = assignment.search(content)
        if not match:
            continue

        start = match.end()
        while start < len(content) and content[start].isspace():
            start += 1
        if start >= len(content) or content[start] not in _CLOSERS:
            raise ScriptVariableParseError(variable_name, "value is not an array or object literal")

        end = _balanced_literal(content, start, variable_name)
        tail = content[end:].lstrip(" \t")
        if tail and tail[0] not in ";\r\n":
            raise ScriptVariableParseError(variable_name, "statement is not terminated")

        try:
            return json.loads(content[start:end], parse_constant=_reject_constant)
        except ValueError as e:
            raise ScriptVariableParseError(variable_name, str(e)) from e

    raise ScriptVariableNotFound(variable_name)


# Episodes


def episode_number_value(number: Any) -> float:
    """Numeric value used for ordering; anything non-numeric sorts last."""
    if isinstance(number, bool):
        return float("-inf")
    try:
        value = float(number)
    except (TypeError, ValueError):
        return float("-inf")
    return float("-inf") if value != value else value


def parse_episodes(raw: Any, variable_name: str = "episodes") -> List[Episode]:
    """Map upstream ``[[number, id], ...]`` tuples to episodes, keeping input order."""
    if not isinstance(raw, list):
        raise ScriptVariableParseError(variable_name, "expected a list of [number, id] pairs")

    episodes = []
    for item in raw:
        if not isinstance(item, (list, tuple)) or len(item) < 2:
            raise ScriptVariableParseError(variable_name, f"unexpected episode entry {item!r}")
        number, ep_id = item[0], item[1]
        if isinstance(number, bool) or not isinstance(number, (int, float, str)):
            raise ScriptVariableParseError(variable_name, f"unexpected episode number {number!r}")
        episodes.append(Episode(number=number, id=ep_id))
    return episodes


def sort_episodes(episodes: Sequence[Episode]) -> List[Episode]:
    # list.sort is stable with reverse=True as well, so equal numbers keep their order
    return sorted(episodes, key=lambda ep: episode_number_value(ep.number), reverse=True)


# Video servers


def parse_video_servers(raw: Any, track: str = SUBTITLED_TRACK, variable_name: str = "videos") -> List[VideoServer]:
    """Servers of one audio track in upstream order. The first one is the default."""
    if not isinstance(raw, dict):
        raise ScriptVariableParseError(variable_name, "expected an object keyed by track")

    entries = raw.get(track) or []
    if not isinstance(entries, list):
        raise ScriptVariableParseError(variable_name, f"track {track!r} is not a list")

    servers = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ScriptVariableParseError(variable_name, f"unexpected server entry {entry!r}")
        name, url = entry.get("server"), entry.get("code")
        if not isinstance(name, str) or not isinstance(url, str) or not url:
            raise ScriptVariableParseError(variable_name, f"server entry without server/code {entry!r}")
        servers.append(VideoServer(name=name, url=url))
    return servers


# Detail and search pages


def parse_anime_details(soup: BeautifulSoup, slug: str, url: str = "") -> ResolvedAnime:
    """Metadata of an anime detail page; episodes are filled in by the caller."""
    return ResolvedAnime(
        slug=slug,
        url=url,
        description=first_non_empty(soup, DESCRIPTION_CHAIN),
        genres=list(first_non_empty(soup, GENRES_CHAIN, default=[])),
        status=first_non_empty(soup, STATUS_CHAIN),
        rate=first_non_empty(soup, RATE_CHAIN),
    )


def parse_search_result(soup: BeautifulSoup, base_url: str) -> Optional[Tuple[str, str]]:
    """``(slug, absolute url)`` of the first search hit, or None."""
    for link in soup.select(SEARCH_RESULT_SELECTOR):
        href = (link.get("href") or "").strip()
        if href:
            url = urljoin(base_url + "/", href)
            return slug_from_url(url), url
    return None
