import pytest
from bs4 import BeautifulSoup

from animeproxy.errors import FetchError

BASE_URL = "https://anime.test"

ANIME_PAGE = """
<html>
<head><meta property="og:description" content="Meta description."></head>
<body>
    <div class="Description"><p>Humanity fights the titans.</p></div>
    <nav class="Nvgnrs">
        <a href="/browse?genre[]=accion">Acción</a>
        <a href="/browse?genre[]=drama">Drama</a>
    </nav>
    <p class="AnmStts"><span>Finalizado</span></p>
    <span class="vtprmd">4.7</span>
    <script src="/js/app.js"></script>
    <script>
        var anime_info = ["3","Attack on Titan","attack-on-titan"];
        var episodes = [[25,"ep25id"],[1,"ep1id"]];
        var last_seen = 0;
    </script>
</body>
</html>
"""

SEARCH_PAGE = """
<html><body>
<ul class="ListAnimes">
    <li><article class="Anime"><a href="/anime/shingeki-no-kyojin"><h3>Shingeki no Kyojin</h3></a></article></li>
    <li><article class="Anime"><a href="/anime/shingeki-no-kyojin-2"><h3>Shingeki no Kyojin 2</h3></a></article></li>
</ul>
</body></html>
"""

EMPTY_SEARCH_PAGE = '<html><body><ul class="ListAnimes"></ul></body></html>'

VIDEOS_PAGE = """
<html><body>
<script>
    var anime_id = 3;
    var videos = {"SUB":[{"server":"A","title":"A","code":"url1"},{"server":"B","title":"B","code":"url2"}]};
</script>
</body></html>
"""


class FakeFetcher:
    """Serves canned pages by URL; anything else answers like a 404."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    def fetch(self, url, timeout=None):
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, status=404)
        return BeautifulSoup(self.pages[url], "lxml")


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def pages():
    return {
        "anime": ANIME_PAGE,
        "search": SEARCH_PAGE,
        "empty_search": EMPTY_SEARCH_PAGE,
        "videos": VIDEOS_PAGE,
    }


@pytest.fixture
def base_url():
    return BASE_URL


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
