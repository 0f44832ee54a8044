"""Scraper utilities for identity rotation, robots checks, extraction and export."""

from .user_agents import IdentityRotator, DEFAULT_USER_AGENT, build_headers
from .robots import RobotsPolicy, body_disallows, robots_url_for
from .extractor import RecordExtractor
from .exporter import save_records
from .retry import backoff_wait, backoff_delay_ms, http_retry


__all__ = [
    # Identity
    "IdentityRotator",
    "DEFAULT_USER_AGENT",
    "build_headers",
    # robots.txt
    "RobotsPolicy",
    "body_disallows",
    "robots_url_for",
    # Extraction / export
    "RecordExtractor",
    "save_records",
    # Retry
    "backoff_wait",
    "backoff_delay_ms",
    "http_retry",
]
