"""
Startup seeding of the actor store from a scraper provider.
"""

from typing import List
from typing import Set

import structlog

from actors_api.database import ActorRepository
from actors_api.models import ActorRecord
from actors_api.scraper.base import ScraperProvider

logger = structlog.get_logger(__name__)


class DataSeeder:
    """
    Populates an empty store once from a provider.

    Seeding is idempotent: a store that already holds actors is left alone.
    Fetch or parse failures of the provider page propagate to the caller.
    """

    def __init__(self, store: ActorRepository, scraper: ScraperProvider) -> None:
        self.store = store
        self.scraper = scraper

    async def seed(self) -> int:
        """
        Seed the store if it is empty.

        Returns:
            Number of actors inserted (0 when skipped or nothing was found)

        Raises:
            UpstreamFetchError: If the provider page cannot be fetched or parsed
        """
        existing = await self.store.count()
        if existing > 0:
            logger.info("seed_skipped", reason="store_not_empty", actors=existing)
            return 0

        provider = self.scraper.provider_name
        logger.info("seed_started", provider=provider)

        actors = await self.scraper.scrape_actors()
        if not actors:
            logger.warning("seed_empty", provider=provider)
            return 0

        created = await self.store.add_many(self._unique_ranks(actors))
        logger.info("seed_completed", provider=provider, actors=len(created))
        return len(created)

    @staticmethod
    def _unique_ranks(actors: List[ActorRecord]) -> List[ActorRecord]:
        """Keep the first actor for each rank, in the original order."""
        seen: Set[int] = set()
        unique = []
        for actor in actors:
            if actor.rank in seen:
                logger.warning("seed_duplicate_rank", rank=actor.rank, name=actor.name)
                continue
            seen.add(actor.rank)
            unique.append(actor)
        return unique
