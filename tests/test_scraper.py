import pytest
from aiohttp import web
from aiohttp import test_utils

from actors_api.errors import UpstreamFetchError
from actors_api.scraper import imdb_scraper
from actors_api.scraper.http_client import HttpClient
from actors_api.scraper.imdb_scraper import ImdbScraper
from actors_api.scraper.imdb_scraper import parse_title
from actors_api.settings import Settings

SOURCE_URL = "https://www.imdb.com/list/ls054840033/"


class StubHttpClient:
    def __init__(self, page: str = "", error: Exception = None):
        self.page = page
        self.error = error
        self.requested = []

    async def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        if self.error:
            raise self.error
        return self.page


def item(title: str, extra: str = "") -> str:
    return (
        '<li class="ipc-metadata-list-summary-item">'
        f'<div data-testid="nlib-title"><h3>{title}</h3></div>{extra}'
        "</li>"
    )


def page_with(*items: str) -> str:
    return f"<html><body><ul>{''.join(items)}</ul></body></html>"


@pytest.fixture
def scraper() -> ImdbScraper:
    return ImdbScraper(StubHttpClient(), source_url=SOURCE_URL, provider_name="IMDb")


def test_parse_title_with_rank_prefix():
    assert parse_title("3. Meryl Streep", fallback_rank=1) == (3, "Meryl Streep")


def test_parse_title_without_prefix_uses_fallback():
    assert parse_title("Meryl Streep", fallback_rank=7) == (7, "Meryl Streep")


@pytest.mark.parametrize(
    "title, expected",
    [
        ("12.Audrey Hepburn", (12, "Audrey Hepburn")),
        ("Dr. Strangelove", (4, "Dr. Strangelove")),
        ("Jr. 5. Someone", (4, "Jr. 5. Someone")),
        ("100. Robert De Niro", (100, "Robert De Niro")),
    ],
)
def test_parse_title_edge_cases(title, expected):
    assert parse_title(title, fallback_rank=4) == expected


def test_parse_fixture_skips_item_without_title(scraper: ImdbScraper, imdb_list_html: str):
    """Five actor entries and one promo slot yield exactly five actors."""
    actors = scraper.parse_actors(imdb_list_html)

    assert [a.name for a in actors] == [
        "Meryl Streep",
        "Marlon Brando",
        "Denzel Washington",
        "Tom Hanks",
        "Daniel Day-Lewis",
    ]
    report = scraper.last_report
    assert report.items_found == 6
    assert report.items_skipped == 1
    assert report.actors_extracted == 5
    assert not report.has_errors
    assert report.completed_at is not None


def test_parse_fixture_fields(scraper: ImdbScraper, imdb_list_html: str):
    """Test ranks, images, known-for, bios, entities and provenance."""
    actors = {a.name: a for a in scraper.parse_actors(imdb_list_html)}

    streep = actors["Meryl Streep"]
    assert streep.rank == 1
    assert streep.id == 0
    assert streep.source == "IMDb"
    assert streep.birth_date is None
    assert streep.image_url == "https://m.media-amazon.com/images/M/meryl-streep.jpg"
    assert streep.known_for == ["The Devil Wears Prada"]
    assert "21 times & has won it three times." in streep.bio

    # No rank prefix: fallback is the 4th successfully extracted item
    hanks = actors["Tom Hanks"]
    assert hanks.rank == 4
    assert hanks.image_url == ""
    assert hanks.known_for == []
    assert hanks.bio == "Thomas Jeffrey Hanks was born in Concord, California."

    denzel = actors["Denzel Washington"]
    assert denzel.rank == 3
    assert denzel.bio == ""

    assert actors["Daniel Day-Lewis"].bio == "Day-Lewis's commitment to his roles is legendary."


def test_failing_item_is_dropped_and_recorded(monkeypatch, scraper: ImdbScraper, imdb_list_html: str):
    """An exception inside one item drops only that item."""
    original = imdb_scraper.parse_title

    def flaky_parse_title(title, fallback_rank):
        if "Brando" in title:
            raise ValueError("malformed title")
        return original(title, fallback_rank)

    monkeypatch.setattr(imdb_scraper, "parse_title", flaky_parse_title)

    actors = scraper.parse_actors(imdb_list_html)

    assert [a.name for a in actors] == [
        "Meryl Streep",
        "Denzel Washington",
        "Tom Hanks",
        "Daniel Day-Lewis",
    ]
    # Fallback ranks only count successfully extracted items
    assert next(a for a in actors if a.name == "Tom Hanks").rank == 3
    assert len(scraper.last_report.errors) == 1
    assert "ValueError" in scraper.last_report.errors[0]


def test_overlong_name_is_isolated(scraper: ImdbScraper):
    page = page_with(item("1. " + "x" * 300), item("2. Cary Grant"))

    actors = scraper.parse_actors(page)

    assert [a.name for a in actors] == ["Cary Grant"]
    assert len(scraper.last_report.errors) == 1


def test_rank_prefix_without_name_is_skipped(scraper: ImdbScraper):
    actors = scraper.parse_actors(page_with(item("7."), item("Grace Kelly")))

    assert [(a.rank, a.name) for a in actors] == [(1, "Grace Kelly")]
    assert scraper.last_report.items_skipped == 1


def test_title_entities_are_decoded(scraper: ImdbScraper):
    actors = scraper.parse_actors(page_with(item("1. Lupita Nyong&#39;o &amp; Co")))

    assert actors[0].name == "Lupita Nyong'o & Co"


def test_escaped_entities_are_decoded_once(scraper: ImdbScraper):
    bio = (
        '<div data-testid="dli-item-description">'
        '<div class="ipc-html-content-inner-div">Uses &amp;lt;b&amp;gt; tags</div></div>'
    )
    actors = scraper.parse_actors(page_with(item("1. A &amp;lt;B&amp;gt;", bio)))

    assert actors[0].name == "A &lt;B&gt;"
    assert actors[0].bio == "Uses &lt;b&gt; tags"


def test_document_without_items_returns_empty(scraper: ImdbScraper):
    actors = scraper.parse_actors("<html><body><p>Nothing to see</p></body></html>")

    assert actors == []
    assert scraper.last_report.items_found == 0
    assert scraper.last_report.warnings


def test_unparseable_document_raises(scraper: ImdbScraper):
    with pytest.raises(UpstreamFetchError):
        scraper.parse_actors(None)


@pytest.mark.asyncio
async def test_scrape_actors_fetches_configured_url(imdb_list_html: str):
    client = StubHttpClient(page=imdb_list_html)
    scraper = ImdbScraper(client, source_url=SOURCE_URL, provider_name="IMDb")

    actors = await scraper.scrape_actors()

    assert client.requested == [SOURCE_URL]
    assert len(actors) == 5


@pytest.mark.asyncio
async def test_scrape_actors_propagates_fetch_failure():
    client = StubHttpClient(error=UpstreamFetchError(SOURCE_URL, "unexpected status 503"))
    scraper = ImdbScraper(client, source_url=SOURCE_URL, provider_name="IMDb")

    with pytest.raises(UpstreamFetchError):
        await scraper.scrape_actors()


async def _serve(handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_get("/list", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


@pytest.mark.asyncio
async def test_http_client_returns_page_and_sends_user_agent():
    seen_headers = {}

    async def handler(request: web.Request) -> web.Response:
        seen_headers["User-Agent"] = request.headers.get("User-Agent")
        return web.Response(text="<html>ok</html>", content_type="text/html")

    server = await _serve(handler)
    try:
        client = HttpClient(Settings(user_agent="actors-test/1.0"))
        text = await client.fetch_text(str(server.make_url("/list")))
    finally:
        await server.close()

    assert text == "<html>ok</html>"
    assert seen_headers["User-Agent"] == "actors-test/1.0"


@pytest.mark.asyncio
async def test_http_client_raises_on_error_status():
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=503, text="unavailable")

    server = await _serve(handler)
    try:
        client = HttpClient(Settings())
        with pytest.raises(UpstreamFetchError) as excinfo:
            await client.fetch_text(str(server.make_url("/list")))
    finally:
        await server.close()

    assert "503" in str(excinfo.value)
