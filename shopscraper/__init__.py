"""Listing scraper service: scrape storefront listings and proxy search APIs."""

__version__ = "0.1.0"
