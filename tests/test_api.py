"""Tests for the HTTP API layer."""

import httpx
import pytest
from fastapi.testclient import TestClient

from shopscraper.clients import EbayBrowseClient, TokenCache
from shopscraper.config import settings
from shopscraper.core.exceptions import ConfigError
from shopscraper.dependencies import get_ebay_client, get_naver_client, get_scrape_config, get_scraper
from shopscraper.main import app
from shopscraper.scrapers import Record


class FakeScraper:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls = []

    async def run(self, url, selector, deadline=None):
        self.calls.append((url, selector))
        if self.error:
            raise self.error
        return self.records


class FakeSearchClient:
    def __init__(self, data=None, error=None):
        self.data = data or {}
        self.error = error
        self.params = None

    async def search(self, params):
        self.params = params
        if self.error:
            raise self.error
        return self.data


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# SCRAPE
# ============================================================================

class TestScrapeEndpoint:
    def test_returns_envelope(self, client):
        scraper = FakeScraper([
            Record(title="A Light in the Attic", url="a.html", image="https://books.toscrape.com/a.jpg"),
            Record(title="Soumission"),
        ])
        app.dependency_overrides[get_scraper] = lambda: scraper

        response = client.get("/api/v1/scrape", params={"url": "https://books.toscrape.com/", "selector": "h3 a"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["data"][0] == {
            "title": "A Light in the Attic",
            "url": "a.html",
            "image": "https://books.toscrape.com/a.jpg",
        }
        assert body["data"][1]["url"] is None
        assert scraper.calls == [("https://books.toscrape.com/", "h3 a")]

    def test_empty_result(self, client):
        app.dependency_overrides[get_scraper] = lambda: FakeScraper([])

        response = client.get("/api/v1/scrape", params={"url": "https://books.toscrape.com/", "selector": "h3 a"})

        assert response.json() == {"success": True, "count": 0, "data": []}

    @pytest.mark.parametrize(
        "params",
        [{}, {"url": "https://books.toscrape.com/"}, {"selector": "h3 a"}, {"url": "", "selector": "h3 a"}],
    )
    def test_missing_params(self, client, params):
        scraper = FakeScraper()
        app.dependency_overrides[get_scraper] = lambda: scraper

        response = client.get("/api/v1/scrape", params=params)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Missing url or selector"}
        assert scraper.calls == []

    def test_invalid_url(self, client):
        app.dependency_overrides[get_scraper] = lambda: FakeScraper(error=ConfigError("url must be an absolute http(s) URL"))

        response = client.get("/api/v1/scrape", params={"url": "books", "selector": "h3 a"})

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestScrapeConfigDependency:
    def test_paginate_override(self):
        assert get_scrape_config(paginate=False).paginate is False

    def test_defaults_from_settings(self):
        config = get_scrape_config(paginate=None)
        assert config.paginate == settings.PAGINATE
        assert config.max_retries == settings.MAX_RETRIES
        assert config.rate_limit_ms == settings.RATE_LIMIT_MS


# ============================================================================
# SEARCH
# ============================================================================

class TestSearchEndpoints:
    def test_ebay_forwards_query_string(self, client):
        fake = FakeSearchClient({"itemSummaries": [{"title": "Lego"}]})
        app.dependency_overrides[get_ebay_client] = lambda: fake

        response = client.get("/api/v1/ebay/search", params={"q": "lego", "limit": "5"})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert fake.params == {"q": "lego", "limit": "5"}

    def test_ebay_requires_q(self, client):
        app.dependency_overrides[get_ebay_client] = lambda: FakeSearchClient()
        assert client.get("/api/v1/ebay/search").status_code == 422

    def test_ebay_without_credentials(self, client, monkeypatch):
        monkeypatch.setattr(settings, "EBAY_CLIENT_ID", "")

        response = client.get("/api/v1/ebay/search", params={"q": "lego"})

        assert response.status_code == 503
        assert response.json()["success"] is False
        assert "EBAY_CLIENT_ID" in response.json()["message"]

    def test_upstream_error_maps_to_502(self, client):
        request = httpx.Request("GET", "https://api.ebay.com/buy/browse/v1/item_summary/search")
        error = httpx.HTTPStatusError("server error", request=request, response=httpx.Response(500, request=request))
        app.dependency_overrides[get_ebay_client] = lambda: FakeSearchClient(error=error)

        response = client.get("/api/v1/ebay/search", params={"q": "lego"})

        assert response.status_code == 502
        assert response.json() == {"success": False, "message": "Upstream API returned 500"}

    def test_naver_search(self, client):
        fake = FakeSearchClient({"total": 2, "items": [{"title": "a"}, {"title": "b"}]})
        app.dependency_overrides[get_naver_client] = lambda: fake

        response = client.get("/api/v1/naver/search", params={"query": "노트북", "sort": "asc"})

        assert response.status_code == 200
        assert response.json()["count"] == 2
        assert fake.params == {"query": "노트북", "display": 10, "start": 1, "sort": "asc"}

    def test_naver_rejects_unknown_sort(self, client):
        app.dependency_overrides[get_naver_client] = lambda: FakeSearchClient()
        assert client.get("/api/v1/naver/search", params={"query": "tv", "sort": "random"}).status_code == 422


class TestEbayTokenCacheLifecycle:
    """The eBay token cache is created per app startup, not at import."""

    def test_fresh_cache_per_startup(self):
        with TestClient(app):
            first = app.state.ebay_token_cache
        with TestClient(app):
            second = app.state.ebay_token_cache

        assert isinstance(first, TokenCache)
        assert first is not second

    def test_requests_share_the_app_cache(self, monkeypatch):
        monkeypatch.setattr(settings, "EBAY_CLIENT_ID", "client-id")
        monkeypatch.setattr(settings, "EBAY_CLIENT_SECRET", "client-secret")
        caches = []

        async def fake_search(self, params):
            caches.append(self.token_cache)
            return {"itemSummaries": []}

        monkeypatch.setattr(EbayBrowseClient, "search", fake_search)

        with TestClient(app) as client:
            client.get("/api/v1/ebay/search", params={"q": "lego"})
            client.get("/api/v1/ebay/search", params={"q": "duplo"})
            assert len(caches) == 2
            assert caches[0] is caches[1] is app.state.ebay_token_cache


# ============================================================================
# SERVICE
# ============================================================================

class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "browser": "idle"}

    def test_root(self, client):
        body = client.get("/").json()
        assert body["name"] == "ShopScraper API"
        assert body["health"] == "/api/v1/health"
