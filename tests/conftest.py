from pathlib import Path
from typing import List
from typing import Optional

import pytest
import pytest_asyncio

from actors_api.database import ActorStore
from actors_api.errors import UpstreamFetchError
from actors_api.models import ActorRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_actor(name: str, rank: int, **fields) -> ActorRecord:
    return ActorRecord(name=name, rank=rank, **fields)


class FakeScraper:
    """Scraper double that returns canned actors or fails like a broken fetch."""

    provider_name = "IMDb"

    def __init__(self, actors: Optional[List[ActorRecord]] = None, fail: bool = False):
        self.actors = actors or []
        self.fail = fail
        self.calls = 0

    async def scrape_actors(self) -> List[ActorRecord]:
        self.calls += 1
        if self.fail:
            raise UpstreamFetchError("https://www.imdb.com/list/test/", "unexpected status 503")
        return [actor.model_copy() for actor in self.actors]


@pytest.fixture
def imdb_list_html() -> str:
    return (FIXTURES_DIR / "imdb_actors_list.html").read_text(encoding="utf-8")


@pytest.fixture
def sample_actors() -> List[ActorRecord]:
    return [
        make_actor("Meryl Streep", 1, known_for=["The Devil Wears Prada"], source="IMDb"),
        make_actor("Marlon Brando", 2, known_for=["The Godfather"], source="IMDb"),
        make_actor("Denzel Washington", 3, source="IMDb"),
        make_actor("Tom Hanks", 4, source="IMDb"),
        make_actor("Daniel Day-Lewis", 5, source="IMDb"),
    ]


@pytest_asyncio.fixture
async def store():
    """Provides an initialized in-memory store for each test."""
    store_instance = ActorStore(db_path=":memory:")
    await store_instance.initialize()
    yield store_instance
    await store_instance.close()
