from __future__ import annotations

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup

from animeproxy.errors import FetchError

logger = logging.getLogger(__name__)


class PageFetcher:
    HEADERS = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
    }

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(self.HEADERS)

    def fetch(self, url: str, timeout: Optional[float] = None) -> BeautifulSoup:
        """GET ``url`` and parse it; any network or HTTP failure becomes ``FetchError``."""
        try:
            response = self.session.get(url, timeout=timeout or self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning("Error fetching %s: HTTP %s", url, status)
            raise FetchError(url, status=status) from e
        except requests.RequestException as e:
            logger.warning("Error fetching %s: %s", url, e)
            raise FetchError(url) from e
        return BeautifulSoup(response.content, "lxml")

    def close(self) -> None:
        self.session.close()
