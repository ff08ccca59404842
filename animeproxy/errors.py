"""Failure kinds reported by the scrape pipeline.

Every exception carries a stable ``kind`` string so callers (the web layer and
the front end behind it) can tell failures apart without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class AnimeProxyError(Exception):
    kind = "error"
    status_code = 200
    default_message = "Unexpected error."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class FetchError(AnimeProxyError):
    kind = "fetch_error"
    default_message = "Could not reach the upstream site."

    def __init__(self, url: str, status: Optional[int] = None, message: Optional[str] = None):
        if message is None:
            message = f"Upstream request failed for {url}" + (f" (HTTP {status})" if status else "")
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(AnimeProxyError):
    kind = "parse_error"
    default_message = "Could not read the upstream page."


class ScriptVariableNotFound(ParseError):
    def __init__(self, variable_name: str):
        super().__init__(f"No script assigns 'var {variable_name}'")
        self.variable_name = variable_name


class ScriptVariableParseError(ParseError):
    def __init__(self, variable_name: str, reason: str):
        super().__init__(f"Could not parse 'var {variable_name}': {reason}")
        self.variable_name = variable_name
        self.reason = reason


class AnimeNotFound(AnimeProxyError):
    kind = "anime_not_found"
    default_message = "Anime not found upstream."


class EpisodesUnavailable(AnimeProxyError):
    kind = "episodes_unavailable"
    default_message = "No episodes found."


class VideoPageUnreachable(AnimeProxyError):
    kind = "video_page_unreachable"
    default_message = "Could not load the episode page."


class NoServersFound(AnimeProxyError):
    kind = "no_servers_found"
    default_message = "No video servers found."


class RateLimited(AnimeProxyError):
    kind = "rate_limited"
    status_code = 429
    default_message = "Too many requests, try again later."

    def __init__(self, retry_after: float):
        super().__init__()
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["retry_after"] = round(self.retry_after, 1)
        return payload


class InvalidComment(AnimeProxyError):
    kind = "invalid_comment"
    status_code = 400
    default_message = "Comment is empty or too long."
