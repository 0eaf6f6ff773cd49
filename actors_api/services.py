"""
Business logic for actor operations.

ActorService validates requests, enforces the unique-rank rule through the
store, and shapes records into summary and detail views. Refusals come back
as ServiceResult values carrying an ErrorKind instead of raised exceptions.
"""

import logging

from actors_api.database import ActorRepository
from actors_api.errors import ConflictError
from actors_api.errors import ErrorKind
from actors_api.errors import NotFoundError
from actors_api.models import ActorCreate
from actors_api.models import ActorDetail
from actors_api.models import ActorFilter
from actors_api.models import ActorRecord
from actors_api.models import ActorSummary
from actors_api.models import ActorUpdate
from actors_api.models import PagedResult
from actors_api.models import ServiceResult

logger = logging.getLogger(__name__)

NAME_REQUIRED = "Actor name is required."


def _not_found(actor_id: int) -> str:
    return f"Actor with ID {actor_id} not found."


def _rank_taken(rank: int) -> str:
    return f"An actor with rank {rank} already exists."


class ActorService:
    """Query and command operations over an actor repository."""

    def __init__(self, store: ActorRepository) -> None:
        self.store = store

    async def get_by_id(self, actor_id: int) -> ServiceResult[ActorDetail]:
        actor = await self.store.get(actor_id)
        if actor is None:
            return ServiceResult[ActorDetail].failure(ErrorKind.NOT_FOUND, _not_found(actor_id))
        return ServiceResult[ActorDetail].success(ActorDetail.from_record(actor))

    async def list(self, actor_filter: ActorFilter) -> PagedResult[ActorSummary]:
        """
        Return one page of actor summaries.

        Page number and size must already be validated by the caller
        (page_number >= 1, 1 <= page_size <= 100).
        """
        actors, total_count = await self.store.list(
            actor_filter, actor_filter.page_number, actor_filter.page_size
        )
        return PagedResult[ActorSummary](
            data=[ActorSummary.from_record(actor) for actor in actors],
            total_count=total_count,
            page_number=actor_filter.page_number,
            page_size=actor_filter.page_size,
        )

    async def create(self, data: ActorCreate) -> ServiceResult[ActorDetail]:
        if not data.name or not data.name.strip():
            return ServiceResult[ActorDetail].failure(ErrorKind.VALIDATION, NAME_REQUIRED)

        if await self.store.exists_by_rank(data.rank):
            return ServiceResult[ActorDetail].failure(ErrorKind.CONFLICT, _rank_taken(data.rank))

        record = ActorRecord(**data.model_dump())
        try:
            created = await self.store.add(record)
        except ConflictError as e:
            # Another request took the rank after the check above
            return ServiceResult[ActorDetail].failure(e.kind, e.message)

        logger.info(f"Created actor {created.id} ({created.name}, rank {created.rank})")
        return ServiceResult[ActorDetail].success(ActorDetail.from_record(created))

    async def update(self, actor_id: int, data: ActorUpdate) -> ServiceResult[ActorDetail]:
        existing = await self.store.get(actor_id)
        if existing is None:
            return ServiceResult[ActorDetail].failure(ErrorKind.NOT_FOUND, _not_found(actor_id))

        if not data.name or not data.name.strip():
            return ServiceResult[ActorDetail].failure(ErrorKind.VALIDATION, NAME_REQUIRED)

        if await self.store.exists_by_rank(data.rank, exclude_id=actor_id):
            return ServiceResult[ActorDetail].failure(ErrorKind.CONFLICT, _rank_taken(data.rank))

        record = existing.model_copy(update=data.model_dump())
        try:
            updated = await self.store.update(actor_id, record)
        except (NotFoundError, ConflictError) as e:
            return ServiceResult[ActorDetail].failure(e.kind, e.message)

        logger.info(f"Updated actor {actor_id}")
        return ServiceResult[ActorDetail].success(ActorDetail.from_record(updated))

    async def delete(self, actor_id: int) -> ServiceResult[bool]:
        try:
            deleted = await self.store.delete(actor_id)
        except NotFoundError as e:
            return ServiceResult[bool].failure(e.kind, e.message)

        logger.info(f"Deleted actor {actor_id}")
        return ServiceResult[bool].success(deleted)
