import itertools

import pytest
from bs4 import BeautifulSoup

from animeproxy.errors import ScriptVariableNotFound, ScriptVariableParseError
from animeproxy.models import Episode
from animeproxy.parser import (
    attr_of,
    episode_number_value,
    extract_assignment,
    first_non_empty,
    parse_anime_details,
    parse_episodes,
    parse_search_result,
    parse_video_servers,
    sort_episodes,
    text_of,
)


def soup_with_script(body):
    return BeautifulSoup(f"<html><body><script>{body}</script></body></html>", "lxml")


def test_extract_episodes_from_page(pages):
    soup = BeautifulSoup(pages["anime"], "lxml")
    assert extract_assignment(soup, "episodes") == [[25, "ep25id"], [1, "ep1id"]]


def test_extract_first_script_wins():
    soup = BeautifulSoup(
        "<script>var videos = {\"SUB\": []};</script><script>var videos = {\"SUB\": [1]};</script>",
        "lxml",
    )
    assert extract_assignment(soup, "videos") == {"SUB": []}


def test_extract_ignores_brackets_inside_strings():
    soup = soup_with_script('var episodes = [[1, "a]b;c"], [2, "d{e"]]; var x = 1;')
    assert extract_assignment(soup, "episodes") == [[1, "a]b;c"], [2, "d{e"]]


def test_extract_does_not_match_longer_names():
    soup = soup_with_script('var episodes_seen = [1]; var episodes = [[3, "x"]];')
    assert extract_assignment(soup, "episodes") == [[3, "x"]]


def test_extract_missing_variable():
    soup = soup_with_script("var anime_info = [];")
    with pytest.raises(ScriptVariableNotFound):
        extract_assignment(soup, "episodes")


@pytest.mark.parametrize("body", [
    "var videos = {SUB: []};",
    "var videos = {\"SUB\": [}",
    "var videos = loadVideos();",
    "var videos = {\"SUB\": []} + extra;",
])
def test_extract_malformed_literal(body):
    with pytest.raises(ScriptVariableParseError):
        extract_assignment(soup_with_script(body), "videos")


def test_parse_episodes_keeps_input_order():
    episodes = parse_episodes([[1, "a"], [3, "c"], ["2.5", "b"]])
    assert [ep.number for ep in episodes] == [1, 3, "2.5"]
    assert episodes[1] == Episode(number=3, id="c")


@pytest.mark.parametrize("raw", [{"1": "a"}, [[1]], [1, 2], [[None, "a"]], [[True, "a"]]])
def test_parse_episodes_rejects_other_shapes(raw):
    with pytest.raises(ScriptVariableParseError):
        parse_episodes(raw)


def test_sort_descending_for_every_permutation():
    raw = [[12, "a"], ["12.5", "b"], [13, "c"], [1, "d"]]
    for perm in itertools.permutations(raw):
        ordered = sort_episodes(parse_episodes(list(perm)))
        values = [episode_number_value(ep.number) for ep in ordered]
        assert values == sorted(values, reverse=True)
        assert len(set(values)) == len(values)
        assert [ep.id for ep in ordered] == ["c", "b", "a", "d"]


def test_sort_tolerates_non_numeric_numbers():
    ordered = sort_episodes([Episode("OVA", "x"), Episode(2, "y"), Episode("1.5", "z")])
    assert [ep.id for ep in ordered] == ["y", "z", "x"]


def test_sort_is_stable_on_ties():
    ordered = sort_episodes([Episode(1, "first"), Episode("1", "second"), Episode(2, "top")])
    assert [ep.id for ep in ordered] == ["top", "first", "second"]


def test_already_descending_is_unchanged(pages):
    soup = BeautifulSoup(pages["anime"], "lxml")
    ordered = sort_episodes(parse_episodes(extract_assignment(soup, "episodes")))
    assert ordered == [Episode(25, "ep25id"), Episode(1, "ep1id")]


def test_video_servers_preserve_order():
    raw = {"SUB": [{"server": "A", "code": "url1"}, {"server": "B", "code": "url2"}], "LAT": [{"server": "C", "code": "url3"}]}
    servers = parse_video_servers(raw)
    assert [(s.name, s.url) for s in servers] == [("A", "url1"), ("B", "url2")]


def test_video_servers_other_track_or_missing():
    raw = {"LAT": [{"server": "C", "code": "url3"}]}
    assert parse_video_servers(raw) == []
    assert [s.name for s in parse_video_servers(raw, track="LAT")] == ["C"]


def test_video_servers_reject_other_shapes():
    with pytest.raises(ScriptVariableParseError):
        parse_video_servers([["A", "url1"]])
    with pytest.raises(ScriptVariableParseError):
        parse_video_servers({"SUB": ["url1"]})


@pytest.mark.parametrize("entry", [
    {"server": "A"},
    {"server": "A", "code": ""},
    {"server": "A", "url": "url1"},
    {"title": "A", "code": "url1"},
    {"server": 1, "code": "url1"},
])
def test_video_servers_require_server_and_code(entry):
    with pytest.raises(ScriptVariableParseError):
        parse_video_servers({"SUB": [{"server": "B", "code": "url2"}, entry]})


@pytest.mark.parametrize("literal", ["[[NaN, \"x\"]]", "[[Infinity, \"x\"]]", "[[-Infinity, \"x\"]]"])
def test_extract_rejects_non_json_constants(literal):
    with pytest.raises(ScriptVariableParseError):
        extract_assignment(soup_with_script(f"var episodes = {literal};"), "episodes")


def test_anime_details(pages):
    soup = BeautifulSoup(pages["anime"], "lxml")
    anime = parse_anime_details(soup, "attack-on-titan")
    assert anime.description == "Humanity fights the titans."
    assert anime.genres == ["Acción", "Drama"]
    assert anime.status == "Finalizado"
    assert anime.rate == "4.7"
    assert anime.episodes == []


def test_description_falls_back_to_meta():
    soup = BeautifulSoup(
        '<html><head><meta name="description" content=" Plain meta. "></head><body></body></html>',
        "lxml",
    )
    anime = parse_anime_details(soup, "x")
    assert anime.description == "Plain meta."
    assert anime.genres == []
    assert anime.status == ""


def test_first_non_empty_order():
    soup = BeautifulSoup('<div class="a"></div><div class="b">second</div><meta property="p" content="third">', "lxml")
    chain = (text_of(".a"), text_of(".b"), attr_of('meta[property="p"]', "content"))
    assert first_non_empty(soup, chain) == "second"
    assert first_non_empty(soup, chain[2:]) == "third"
    assert first_non_empty(soup, (text_of(".missing"),), default="none") == "none"


def test_search_result_takes_first_link(pages, base_url):
    soup = BeautifulSoup(pages["search"], "lxml")
    assert parse_search_result(soup, base_url) == (
        "shingeki-no-kyojin",
        "https://anime.test/anime/shingeki-no-kyojin",
    )


def test_search_without_results(pages, base_url):
    assert parse_search_result(BeautifulSoup(pages["empty_search"], "lxml"), base_url) is None
