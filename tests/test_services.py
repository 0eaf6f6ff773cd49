import pytest

from actors_api.database import ActorStore
from actors_api.errors import ErrorKind
from actors_api.models import ActorCreate
from actors_api.models import ActorFilter
from actors_api.models import ActorUpdate
from actors_api.services import ActorService

from tests.conftest import make_actor

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(store: ActorStore) -> ActorService:
    return ActorService(store)


async def test_get_by_id(service: ActorService, store: ActorStore):
    created = await store.add(make_actor("Meryl Streep", 1, known_for=["Doubt"], source="IMDb"))

    result = await service.get_by_id(created.id)
    assert result.ok
    assert result.value.id == created.id
    assert result.value.known_for == ["Doubt"]
    assert result.value.source == "IMDb"

    missing = await service.get_by_id(999)
    assert not missing.ok
    assert missing.error_kind is ErrorKind.NOT_FOUND
    assert missing.message == "Actor with ID 999 not found."


async def test_list_returns_summaries_and_echoes_paging(service: ActorService, store: ActorStore, sample_actors):
    await store.add_many(sample_actors)

    page = await service.list(ActorFilter(page_number=2, page_size=2))

    assert page.total_count == 5
    assert page.page_number == 2
    assert page.page_size == 2
    assert [s.name for s in page.data] == ["Denzel Washington", "Tom Hanks"]
    assert set(page.data[0].model_dump()) == {"id", "name"}


async def test_list_page_past_the_end_is_empty(service: ActorService, store: ActorStore, sample_actors):
    await store.add_many(sample_actors)

    page = await service.list(ActorFilter(page_number=4, page_size=2))

    assert page.data == []
    assert page.total_count == 5


async def test_create(service: ActorService):
    """Test creating an actor returns its detail view."""
    result = await service.create(
        ActorCreate(name="Cate Blanchett", rank=6, known_for=["Tár"], source="manual")
    )

    assert result.ok
    detail = result.value
    assert detail.id > 0
    assert detail.rank == 6
    assert detail.known_for == ["Tár"]
    assert detail.source == "manual"


@pytest.mark.parametrize("name", ["", "   "])
async def test_create_rejects_blank_name(service: ActorService, name: str):
    result = await service.create(ActorCreate(name=name, rank=1))

    assert result.error_kind is ErrorKind.VALIDATION
    assert result.message == "Actor name is required."


async def test_create_conflicts_on_taken_rank(service: ActorService, store: ActorStore):
    await store.add(make_actor("Daniel Day-Lewis", 5))

    conflict = await service.create(ActorCreate(name="Someone", rank=5))
    assert conflict.error_kind is ErrorKind.CONFLICT
    assert conflict.message == "An actor with rank 5 already exists."

    created = await service.create(ActorCreate(name="Someone", rank=6))
    assert created.ok


async def test_update(service: ActorService, store: ActorStore):
    """Test that update replaces fields but never the source."""
    created = await store.add(make_actor("Tom Hanks", 4, source="IMDb"))

    result = await service.update(
        created.id, ActorUpdate(name="Tom Hanks", rank=4, bio="Two-time Oscar winner.")
    )

    assert result.ok
    assert result.value.bio == "Two-time Oscar winner."
    assert result.value.rank == 4
    assert result.value.source == "IMDb"


async def test_update_errors(service: ActorService, store: ActorStore):
    first = await store.add(make_actor("Meryl Streep", 1))
    await store.add(make_actor("Marlon Brando", 2))

    missing = await service.update(999, ActorUpdate(name="Nobody", rank=50))
    assert missing.error_kind is ErrorKind.NOT_FOUND

    # Missing id wins over a blank name
    missing_blank = await service.update(999, ActorUpdate(name="", rank=50))
    assert missing_blank.error_kind is ErrorKind.NOT_FOUND

    blank = await service.update(first.id, ActorUpdate(name=" ", rank=1))
    assert blank.error_kind is ErrorKind.VALIDATION

    conflict = await service.update(first.id, ActorUpdate(name="Meryl Streep", rank=2))
    assert conflict.error_kind is ErrorKind.CONFLICT


async def test_delete(service: ActorService, store: ActorStore):
    """Deleting id then looking it up yields not-found."""
    await store.add(make_actor("Meryl Streep", 1))
    second = await store.add(make_actor("Marlon Brando", 2))

    deleted = await service.delete(second.id)
    assert deleted.ok
    assert deleted.value is True

    lookup = await service.get_by_id(second.id)
    assert lookup.error_kind is ErrorKind.NOT_FOUND

    again = await service.delete(second.id)
    assert again.error_kind is ErrorKind.NOT_FOUND
