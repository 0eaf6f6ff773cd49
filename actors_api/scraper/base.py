"""
Scraper provider interface.

A provider fetches one listing page from an external source and turns it into
actor records. The seeder depends only on this protocol.
"""

from abc import abstractmethod
from typing import List
from typing import Protocol

from actors_api.models import ActorRecord


class ScraperProvider(Protocol):
    """
    Protocol for actor scrapers.

    Implementations raise UpstreamFetchError when the page cannot be fetched
    or parsed, and drop individual malformed items without raising.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name recorded in the source field of every produced record."""
        pass

    @abstractmethod
    async def scrape_actors(self) -> List[ActorRecord]:
        """
        Fetch the provider page and extract its actors.

        Returns:
            Actors in document order, each with id 0

        Raises:
            UpstreamFetchError: If fetching or parsing the page fails
        """
        pass
