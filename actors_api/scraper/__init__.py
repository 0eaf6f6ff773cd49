"""
Web scraping components for the actors API.

This package contains all scraping-related functionality including:
- The provider protocol the seeder depends on
- The IMDb list scraper with per-item error isolation
- HTTP client management with fail-fast error handling
"""

from actors_api.scraper.base import ScraperProvider
from actors_api.scraper.http_client import HttpClient
from actors_api.scraper.imdb_scraper import ImdbScraper

__all__ = ["HttpClient", "ImdbScraper", "ScraperProvider"]
