"""File-backed comment log with a per-client rate limit.

Comments are appended per content id and kept in a single JSON document. The
rate limiter only remembers the last action time of each client.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List

from animeproxy.errors import InvalidComment, RateLimited
from animeproxy.models import Comment

logger = logging.getLogger(__name__)

MAX_AUTHOR_LENGTH = 40
MAX_TEXT_LENGTH = 500


class RateLimiter:
    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._last_action: Dict[str, float] = {}
        self._lock = threading.Lock()

    def check(self, client_key: str) -> None:
        """Raise ``RateLimited`` if ``client_key`` acted less than ``interval`` ago."""
        now = self._clock()
        with self._lock:
            last = self._last_action.get(client_key)
        if last is not None and now - last < self.interval:
            raise RateLimited(retry_after=self.interval - (now - last))

    def record(self, client_key: str) -> None:
        with self._lock:
            self._last_action[client_key] = self._clock()


class CommentStore:
    def __init__(self, path: Path, clock: Callable[[], float] = time.time):
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, List[dict]]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, List[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def list(self, content_id: str) -> List[Comment]:
        with self._lock:
            rows = self._load().get(content_id, [])
        return [Comment(**row) for row in rows]

    def add(self, content_id: str, author: str, text: str) -> Comment:
        if not isinstance(text, str) or not isinstance(author, str):
            raise InvalidComment()
        text = text.strip()
        author = (author or "").strip()[:MAX_AUTHOR_LENGTH] or "Anonymous"
        if not text or len(text) > MAX_TEXT_LENGTH:
            raise InvalidComment()

        comment = Comment(content_id=content_id, author=author, text=text, created_at=self._clock())
        with self._lock:
            data = self._load()
            data.setdefault(content_id, []).append(comment.to_dict())
            self._save(data)
        logger.info("Comment added to %s by %s", content_id, author)
        return comment
