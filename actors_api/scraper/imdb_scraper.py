"""
IMDb listing scraper.

Extracts ranked actors from an IMDb list page. The selectors below mirror the
current IMDb markup and are fragile: they will need updating whenever IMDb
changes its list layout. Tests run against saved pages in tests/fixtures.
"""

import logging
import re
from datetime import datetime
from typing import List
from typing import Optional
from typing import Tuple

from bs4 import BeautifulSoup
from bs4 import Tag
from bs4.builder import ParserRejectedMarkup

from actors_api.errors import UpstreamFetchError
from actors_api.models import ActorRecord
from actors_api.models import ScrapeReport
from actors_api.scraper.http_client import HttpClient
from actors_api.settings import get_settings

logger = logging.getLogger(__name__)

# Fragile: tied to IMDb list markup
ITEM_SELECTOR = "li.ipc-metadata-list-summary-item"
TITLE_SELECTOR = '[data-testid="nlib-title"] h3'
IMAGE_SELECTOR = 'img[class*="ipc-image"]'
KNOWN_FOR_SELECTOR = '[data-testid="nlib-known-for-title"]'
BIO_SELECTOR = '[data-testid="dli-item-description"] div[class*="ipc-html-content-inner-div"]'

_RANK_PREFIX = re.compile(r"^\s*(\d+)\s*\.(.*)$", re.DOTALL)


def clean_text(node: Tag) -> str:
    """Visible text of a node with whitespace collapsed (the parser decodes entities)."""
    return " ".join(node.get_text(" ", strip=True).split())


def parse_title(title: str, fallback_rank: int) -> Tuple[int, str]:
    """
    Split a list title such as "3. Meryl Streep" into rank and name.

    Titles without a numeric "<rank>." prefix keep their full text as the
    name and get the fallback rank.
    """
    match = _RANK_PREFIX.match(title)
    if match:
        return int(match.group(1)), match.group(2).strip()
    return fallback_rank, title.strip()


class ImdbScraper:
    """
    Scraper for an IMDb ranked list of actors.

    Example:
        scraper = ImdbScraper()
        actors = await scraper.scrape_actors()
        print(scraper.last_report.actors_extracted)
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        source_url: Optional[str] = None,
        provider_name: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.http_client = http_client or HttpClient(settings)
        self.source_url = source_url or settings.source_url
        self._provider_name = provider_name or settings.provider_name
        self.last_report: Optional[ScrapeReport] = None

    @property
    def provider_name(self) -> str:
        return self._provider_name

    async def scrape_actors(self) -> List[ActorRecord]:
        """Fetch the list page once and extract its actors."""
        logger.info(f"Scraping actors from {self.provider_name} at {self.source_url}")
        page = await self.http_client.fetch_text(self.source_url)
        return self.parse_actors(page)

    def parse_actors(self, page: str) -> List[ActorRecord]:
        """
        Extract actors from the HTML of a list page.

        Items without a title are not actor entries and are skipped silently;
        items whose extraction fails are dropped and recorded as errors in
        `last_report`. Neither aborts the batch.

        Args:
            page: Raw HTML of the list page

        Returns:
            Actors in document order

        Raises:
            UpstreamFetchError: If the document cannot be parsed at all
        """
        report = ScrapeReport(provider=self.provider_name, started_at=datetime.now())
        self.last_report = report

        if not isinstance(page, (str, bytes)):
            raise UpstreamFetchError(self.source_url, f"expected HTML text, got {type(page).__name__}")

        try:
            soup = BeautifulSoup(page, "html.parser")
        except (TypeError, ParserRejectedMarkup) as e:
            raise UpstreamFetchError(self.source_url, f"unparseable document: {e}") from e

        nodes = soup.select(ITEM_SELECTOR)
        report.items_found = len(nodes)
        if not nodes:
            report.add_warning("No list items found in document")
            logger.warning(f"No actor items found on {self.source_url}")

        actors: List[ActorRecord] = []
        fallback_rank = 1
        for position, node in enumerate(nodes, start=1):
            try:
                actor = self._extract_actor(node, fallback_rank)
            except Exception as e:
                message = f"item {position}: {type(e).__name__}: {e}"
                logger.warning(f"Error extracting actor, {message}")
                report.add_error(message)
                continue

            if actor is None:
                report.items_skipped += 1
                continue

            actors.append(actor)
            fallback_rank += 1

        report.actors_extracted = len(actors)
        report.completed_at = datetime.now()
        logger.info(
            f"Extracted {report.actors_extracted}/{report.items_found} actors "
            f"from {self.provider_name} (skipped={report.items_skipped} errors={len(report.errors)})"
        )
        return actors

    def _extract_actor(self, node: Tag, fallback_rank: int) -> Optional[ActorRecord]:
        title_node = node.select_one(TITLE_SELECTOR)
        if title_node is None:
            return None

        rank, name = parse_title(clean_text(title_node), fallback_rank)
        if not name:
            return None

        image_node = node.select_one(IMAGE_SELECTOR)
        image_url = image_node.get("src", "") if image_node is not None else ""

        known_for: List[str] = []
        known_for_node = node.select_one(KNOWN_FOR_SELECTOR)
        if known_for_node is not None:
            known_for_title = clean_text(known_for_node)
            if known_for_title:
                known_for.append(known_for_title)

        bio_node = node.select_one(BIO_SELECTOR)
        bio = clean_text(bio_node) if bio_node is not None else ""

        # The list page carries no birth dates
        return ActorRecord(
            name=name,
            rank=rank,
            bio=bio,
            birth_date=None,
            image_url=image_url,
            known_for=known_for,
            source=self.provider_name,
        )
