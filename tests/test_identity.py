"""Tests for user-agent rotation."""

from shopscraper.scrapers.utils import DEFAULT_USER_AGENT, IdentityRotator, build_headers


class TestIdentityRotator:
    def test_uses_generator(self):
        agents = iter(["Agent/1", "Agent/2"])
        rotator = IdentityRotator(generator=lambda: next(agents))
        assert [rotator.next(), rotator.next()] == ["Agent/1", "Agent/2"]

    def test_generator_failure_falls_back(self):
        def broken():
            raise RuntimeError("no data")

        assert IdentityRotator(generator=broken).next() == DEFAULT_USER_AGENT

    def test_empty_value_falls_back(self):
        assert IdentityRotator(generator=lambda: "").next() == DEFAULT_USER_AGENT

    def test_default_generator_returns_browser_string(self):
        identity = IdentityRotator().next()
        assert identity
        assert identity.startswith("Mozilla/")


class TestBuildHeaders:
    def test_browser_like_headers(self):
        headers = build_headers("Agent/1")
        assert headers["User-Agent"] == "Agent/1"
        assert headers["Accept-Language"] == "en-US,en;q=0.5"
        assert headers["Sec-Fetch-Mode"] == "navigate"
