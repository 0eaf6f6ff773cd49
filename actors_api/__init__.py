"""
Actors API.

A small CRUD web service over ranked actor records. The in-memory store is
seeded once at startup by scraping a ranked IMDb list; afterwards actors can
be listed, filtered, created, updated and deleted over HTTP.

Main Components:
- Store: async in-memory SQLite with a unique rank index
- Scraper: IMDb list parsing with per-item error isolation
- Service: validation, conflict detection and view shaping
- Seeder: idempotent one-shot population at startup
- API: FastAPI app with bearer-token authentication

Usage:
    # Run web server
    python -m actors_api.main

    # Use programmatically
    from actors_api.database import ActorStore
    from actors_api.services import ActorService

    async with ActorStore() as store:
        service = ActorService(store)
        page = await service.list(ActorFilter(name="Streep"))
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Public API for external usage
from actors_api.api import create_app
from actors_api.database import ActorStore
from actors_api.models import ActorFilter
from actors_api.models import ActorRecord
from actors_api.scraper.imdb_scraper import ImdbScraper
from actors_api.seeder import DataSeeder
from actors_api.services import ActorService

__all__ = [
    "ActorFilter",
    "ActorRecord",
    "ActorService",
    "ActorStore",
    "DataSeeder",
    "ImdbScraper",
    "create_app",
]
