import pytest
import requests

from cityindex.DB.api import ArtifactFetchError, ArtifactNotFound, make_source
from cityindex.DB.dir_source import DirectorySource
from cityindex.DB.http_source import HttpSource
from cityindex.search import SearchClient


class FakeResponse:
    def __init__(self, status: int, payload=None) -> None:
        self.status_code = status
        self.ok = 200 <= status < 300
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeSession:
    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.requested: list[str] = []
        self.closed = False

    def get(self, url, timeout=None):
        self.requested.append(url)
        if url == "boom":
            raise requests.ConnectionError("refused")
        return self.routes.get(url, FakeResponse(404))

    def close(self):
        self.closed = True


BASE = "http://example.test/cities"


def test_make_source_dispatch(tmp_path):
    assert isinstance(make_source(BASE), HttpSource)
    assert isinstance(make_source(str(tmp_path)), DirectorySource)
    assert isinstance(make_source(f"file://{tmp_path}"), DirectorySource)
    with pytest.raises(ValueError):
        make_source("file://")


def test_get_json_ok():
    session = FakeSession({f"{BASE}/slug-map.json": FakeResponse(200, {"69-123-lyon": 3})})
    src = HttpSource(BASE + "/", session=session)
    assert src.fetch("slug-map.json") == {"69-123-lyon": 3}
    assert session.requested == [f"{BASE}/slug-map.json"]


def test_non_ok_status_raises():
    src = HttpSource(BASE, session=FakeSession({}))
    with pytest.raises(ArtifactFetchError) as info:
        src.fetch("search-s.json")
    assert "HTTP 404" in str(info.value)


def test_network_error_and_bad_json_raise():
    src = HttpSource(BASE, session=FakeSession({f"{BASE}/bad.json": FakeResponse(200)}))
    with pytest.raises(ArtifactFetchError):
        src.fetch("bad.json")
    src.url_for = lambda name: "boom"
    with pytest.raises(ArtifactFetchError):
        src.fetch("search-s.json")


def test_client_over_http_never_raises():
    partition = {"lyon": [[3, "Lyon", "69"]]}
    session = FakeSession({f"{BASE}/search-l.json": FakeResponse(200, partition)})
    client = SearchClient(HttpSource(BASE, session=session))

    assert client.search("Lyon").hits[0].to_row() == [3, "Lyon", "69"]
    assert client.search("Paris").status == "error"      # search-p.json -> 404
    assert client.city_by_slug("69-123-lyon") is None    # slug-map.json -> 404
    client.close()
    assert session.closed


def test_only_404_is_not_found():
    src = HttpSource(BASE, session=FakeSession({f"{BASE}/search-s.json": FakeResponse(500)}))
    with pytest.raises(ArtifactNotFound):
        src.fetch("search/lyon.json")
    with pytest.raises(ArtifactFetchError) as info:
        src.fetch("search-s.json")
    assert not isinstance(info.value, ArtifactNotFound)


def test_per_key_client_over_http():
    session = FakeSession({
        f"{BASE}/search/lyon.json": FakeResponse(200, [[3, "Lyon", "69"]]),
        f"{BASE}/search/pa.json": FakeResponse(503),
    })
    client = SearchClient(HttpSource(BASE, session=session), layout="per_key")

    assert client.search("Lyon").hits[0].to_row() == [3, "Lyon", "69"]
    assert client.search("Zzz").status == "empty"        # search/zzz.json -> 404
    assert client.search("Pa").status == "error"         # search/pa.json -> 503
