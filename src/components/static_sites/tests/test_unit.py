"""
Static site component unit tests.

Covers path normalization, cache-control selection, origin override via
cookie, the cache -> object -> redirect -> 404 lookup order, and purge.
"""

from __future__ import annotations

import pytest

from src.components.static_sites import (
    SiteResponse,
    StaticSitesConfig,
    StoredObject,
    get_cache_control,
    get_cache_key,
    get_extension,
    is_purge_authorized,
    normalize_pathname,
    purge,
    resolve_origin,
    serve,
)

ORIGIN = "https://docs.example.com"


class MockObjectStore:
    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects = objects or {}
        self.reads: list[str] = []

    def get(self, key: str) -> StoredObject | None:
        self.reads.append(key)
        body = self.objects.get(key)
        if body is None:
            return None
        content_type = "text/html" if key.endswith(".html") else "text/css"
        return StoredObject(body=body, content_type=content_type, etag='"v1"')


class MockRedirects:
    def __init__(self, redirects: dict[str, str] | None = None) -> None:
        self.redirects = redirects or {}

    def get(self, source: str) -> str | None:
        return self.redirects.get(source)


class MockCache:
    def __init__(self) -> None:
        self.entries: dict[str, SiteResponse] = {}

    def match(self, key: str) -> SiteResponse | None:
        return self.entries.get(key)

    def put(self, key: str, response: SiteResponse) -> None:
        self.entries[key] = response

    def delete(self, key: str) -> bool:
        return self.entries.pop(key, None) is not None


@pytest.fixture
def cache() -> MockCache:
    return MockCache()


# --- Pure Functions ---


class TestNormalizePathname:
    @pytest.mark.parametrize(
        ("pathname", "expected"),
        [
            ("", "/index.html"),
            ("/", "/index.html"),
            ("/docs/", "/docs/index.html"),
            ("/docs", "/docs/index.html"),
            ("/app.js", "/app.js"),
            ("a.css", "/a.css"),
            ("docs", "/docs/index.html"),
            ("/v1.2/", "/v1.2/index.html"),
        ],
    )
    def test_normalize(self, pathname: str, expected: str) -> None:
        assert normalize_pathname(pathname) == expected

    def test_custom_index_name(self) -> None:
        assert normalize_pathname("/docs/", StaticSitesConfig(index_name="default.htm")) == (
            "/docs/default.htm"
        )

    def test_extension_from_first_dot(self) -> None:
        assert get_extension("/archive.tar.gz") == ".tar.gz"
        assert get_extension("/readme") == ""


class TestCacheControl:
    def test_html_is_content(self) -> None:
        assert get_cache_control("/index.html") == "public, max-age=3600"

    def test_other_is_asset(self) -> None:
        assert get_cache_control("/app.js") == "public, max-age=7200"

    def test_extension_list_from_config(self) -> None:
        config = StaticSitesConfig(content_extensions=(".html", ".json"))
        assert get_cache_control("/feed.json", config) == "public, max-age=3600"


class TestResolveOrigin:
    def test_no_cookie(self) -> None:
        assert resolve_origin(ORIGIN, None) == ORIGIN

    def test_cookie_overrides_host(self) -> None:
        assert resolve_origin("http://localhost:8000", "blog.example.com") == (
            "https://blog.example.com"
        )

    @pytest.mark.parametrize("cookie", ["blog.example.com/path", "a.com?x=1", "[bad"])
    def test_malformed_cookie_ignored(self, cookie: str) -> None:
        assert resolve_origin(ORIGIN, cookie) == ORIGIN


class TestPurgeAuthorization:
    def test_matching_bearer(self) -> None:
        assert is_purge_authorized("s3cret", "Bearer s3cret")

    @pytest.mark.parametrize("authorization", [None, "", "s3cret", "Bearer wrong"])
    def test_rejected(self, authorization) -> None:
        assert not is_purge_authorized("s3cret", authorization)

    def test_unconfigured_token_rejects_everything(self) -> None:
        assert not is_purge_authorized(None, "Bearer ")


# --- Operations ---


class TestServe:
    def test_serves_object(self, cache) -> None:
        objects = MockObjectStore({"docs.example.com/guide/index.html": b"<h1>Guide</h1>"})

        response = serve(ORIGIN, "/guide", objects=objects, redirects=MockRedirects(), cache=cache)

        assert response.status_code == 200
        assert response.body == b"<h1>Guide</h1>"
        assert response.headers["Content-Type"] == "text/html"
        assert response.headers["ETag"] == '"v1"'
        assert response.headers["Cache-Control"] == "public, max-age=3600"

    def test_asset_cache_control(self, cache) -> None:
        objects = MockObjectStore({"docs.example.com/site.css": b"body{}"})

        response = serve(ORIGIN, "/site.css", objects=objects, redirects=MockRedirects(), cache=cache)

        assert response.headers["Cache-Control"] == "public, max-age=7200"

    def test_redirect_when_no_object(self, cache) -> None:
        redirects = MockRedirects({"docs.example.com/old/index.html": "https://docs.example.com/new/"})

        response = serve(ORIGIN, "/old/", objects=MockObjectStore(), redirects=redirects, cache=cache)

        assert response.status_code == 301
        assert response.headers["Location"] == "https://docs.example.com/new/"

    def test_not_found(self, cache) -> None:
        response = serve(
            ORIGIN, "/missing", objects=MockObjectStore(), redirects=MockRedirects(), cache=cache
        )

        assert response.status_code == 404
        assert response.body == b"Not found"
        assert response.headers["Cache-Control"] == "public, max-age=3600"

    def test_response_is_cached_under_normalized_url(self, cache) -> None:
        objects = MockObjectStore({"docs.example.com/index.html": b"home"})

        serve(ORIGIN, "/", objects=objects, redirects=MockRedirects(), cache=cache)
        objects.objects.clear()
        again = serve(ORIGIN, "", objects=objects, redirects=MockRedirects(), cache=cache)

        assert again.body == b"home"
        assert objects.reads == ["docs.example.com/index.html"]
        assert get_cache_key(ORIGIN, "/") in cache.entries

    def test_not_found_is_cached(self, cache) -> None:
        objects = MockObjectStore()
        serve(ORIGIN, "/nope", objects=objects, redirects=MockRedirects(), cache=cache)
        objects.objects["docs.example.com/nope/index.html"] = b"late"

        again = serve(ORIGIN, "/nope", objects=objects, redirects=MockRedirects(), cache=cache)

        assert again.status_code == 404

    def test_hostnames_are_isolated(self, cache) -> None:
        objects = MockObjectStore({"docs.example.com/index.html": b"docs"})

        response = serve(
            "https://blog.example.com", "/", objects=objects, redirects=MockRedirects(), cache=cache
        )

        assert response.status_code == 404


class TestPurge:
    def test_purge_drops_cached_response(self, cache) -> None:
        objects = MockObjectStore()
        serve(ORIGIN, "/page", objects=objects, redirects=MockRedirects(), cache=cache)
        objects.objects["docs.example.com/page/index.html"] = b"now here"

        response = purge(ORIGIN, "/page/", cache=cache)
        again = serve(ORIGIN, "/page", objects=objects, redirects=MockRedirects(), cache=cache)

        assert response.status_code == 200
        assert response.body == b"Purged"
        assert again.status_code == 200
        assert again.body == b"now here"

    def test_purge_uncached_url(self, cache) -> None:
        assert purge(ORIGIN, "/never", cache=cache).status_code == 200
