"""
Record store for the actors API.

Provides an async SQLite interface (in memory by default) with connection
management, schema creation, and the CRUD and listing operations used by the
service layer and the seeder.
"""

import asyncio
import json
import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncGenerator
from typing import Iterable
from typing import List
from typing import Optional
from typing import Protocol
from typing import Tuple

import aiosqlite

from actors_api.errors import ConflictError
from actors_api.errors import NotFoundError
from actors_api.models import ActorFilter
from actors_api.models import ActorRecord
from actors_api.settings import get_settings

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, rank, bio, birth_date, image_url, known_for, source"


class ActorRepository(Protocol):
    """Operations the service layer and the seeder rely on."""

    async def get(self, actor_id: int) -> Optional[ActorRecord]: ...

    async def list_all(self) -> List[ActorRecord]: ...

    async def list(
        self, actor_filter: ActorFilter, page_number: int, page_size: int
    ) -> Tuple[List[ActorRecord], int]: ...

    async def count(self) -> int: ...

    async def add(self, record: ActorRecord) -> ActorRecord: ...

    async def add_many(self, records: Iterable[ActorRecord]) -> List[ActorRecord]: ...

    async def update(self, actor_id: int, record: ActorRecord) -> ActorRecord: ...

    async def delete(self, actor_id: int) -> bool: ...

    async def exists_by_rank(self, rank: int, exclude_id: Optional[int] = None) -> bool: ...


class ActorStore:
    """
    Async SQLite store for actor records.

    Every operation runs behind a single lock, so mutations are serialized
    and reads never observe a half-applied write. Rank uniqueness is checked
    explicitly and backed by a unique index.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        """Initialize the store; defaults to the configured (in-memory) path."""
        self.db_path = db_path or get_settings().db_path
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the schema if it does not exist yet."""
        async with self._get_connection() as conn:
            await conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS actors (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    rank INTEGER NOT NULL,
                    bio TEXT NOT NULL DEFAULT '',
                    birth_date DATE,
                    image_url TEXT NOT NULL DEFAULT '',
                    known_for TEXT NOT NULL DEFAULT '[]',
                    source TEXT NOT NULL DEFAULT ''
                );

                CREATE UNIQUE INDEX IF NOT EXISTS idx_actors_rank ON actors(rank);
                """
            )
            await conn.commit()
        logger.info(f"Actor store initialized at {self.db_path}")

    async def close(self) -> None:
        """Close database connection cleanly."""
        async with self._lock:
            if self._connection:
                await self._connection.close()
                self._connection = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Hold the store lock and yield the shared connection."""
        async with self._lock:
            if not self._connection:
                self._connection = await aiosqlite.connect(self.db_path, timeout=30.0)
            yield self._connection

    @staticmethod
    def _row_to_record(row: Tuple) -> ActorRecord:
        return ActorRecord(
            id=row[0],
            name=row[1],
            rank=row[2],
            bio=row[3],
            birth_date=date.fromisoformat(row[4]) if row[4] else None,
            image_url=row[5],
            known_for=json.loads(row[6]) if row[6] else [],
            source=row[7],
        )

    @staticmethod
    async def _rank_taken(
        conn: aiosqlite.Connection, rank: int, exclude_id: Optional[int] = None
    ) -> bool:
        if exclude_id is None:
            cursor = await conn.execute("SELECT 1 FROM actors WHERE rank = ? LIMIT 1", (rank,))
        else:
            cursor = await conn.execute(
                "SELECT 1 FROM actors WHERE rank = ? AND id != ? LIMIT 1",
                (rank, exclude_id),
            )
        return await cursor.fetchone() is not None

    async def get(self, actor_id: int) -> Optional[ActorRecord]:
        """Return the actor with this id, or None."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT {_COLUMNS} FROM actors WHERE id = ?", (actor_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_record(row) if row else None

    async def list_all(self) -> List[ActorRecord]:
        """Return every actor ordered by rank."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(f"SELECT {_COLUMNS} FROM actors ORDER BY rank")
            rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def list(
        self, actor_filter: ActorFilter, page_number: int, page_size: int
    ) -> Tuple[List[ActorRecord], int]:
        """
        Return one page of filtered actors and the filtered total.

        Args:
            actor_filter: Name substring (case-sensitive, ignored when blank)
                and inclusive rank bounds; all given conditions must hold
            page_number: 1-based page index
            page_size: Number of actors per page

        Returns:
            Tuple of (actors on the page ordered by rank, total matching actors)
        """
        clauses = []
        params: list = []

        if actor_filter.name and actor_filter.name.strip():
            # instr() is case-sensitive, unlike LIKE
            clauses.append("instr(name, ?) > 0")
            params.append(actor_filter.name)

        if actor_filter.min_rank is not None:
            clauses.append("rank >= ?")
            params.append(actor_filter.min_rank)

        if actor_filter.max_rank is not None:
            clauses.append("rank <= ?")
            params.append(actor_filter.max_rank)

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        offset = (page_number - 1) * page_size

        async with self._get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM actors{where}", params)
            total_count = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"SELECT {_COLUMNS} FROM actors{where} ORDER BY rank LIMIT ? OFFSET ?",
                [*params, page_size, offset],
            )
            rows = await cursor.fetchall()

        return [self._row_to_record(row) for row in rows], total_count

    async def count(self) -> int:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM actors")
            return (await cursor.fetchone())[0]

    async def exists_by_rank(self, rank: int, exclude_id: Optional[int] = None) -> bool:
        """Check whether a rank is taken, optionally ignoring one actor."""
        async with self._get_connection() as conn:
            return await self._rank_taken(conn, rank, exclude_id)

    async def _insert(self, conn: aiosqlite.Connection, record: ActorRecord) -> ActorRecord:
        cursor = await conn.execute(
            """
            INSERT INTO actors (name, rank, bio, birth_date, image_url, known_for, source)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.name, record.rank, record.bio,
                record.birth_date.isoformat() if record.birth_date else None,
                record.image_url, json.dumps(record.known_for), record.source,
            )
        )
        return record.model_copy(update={"id": cursor.lastrowid})

    async def add(self, record: ActorRecord) -> ActorRecord:
        """
        Insert a new actor.

        Args:
            record: Actor to insert; its id is ignored

        Returns:
            Copy of the actor carrying the assigned id

        Raises:
            ConflictError: If another actor already holds the rank
        """
        async with self._get_connection() as conn:
            if await self._rank_taken(conn, record.rank):
                raise ConflictError(f"An actor with rank {record.rank} already exists.")

            try:
                created = await self._insert(conn, record)
                await conn.commit()
            except sqlite3.IntegrityError as e:
                await conn.rollback()
                raise ConflictError(f"An actor with rank {record.rank} already exists.") from e
            except BaseException:
                await conn.rollback()
                raise

        logger.debug(f"Inserted actor {created.id}: {created.name} (rank {created.rank})")
        return created

    async def add_many(self, records: Iterable[ActorRecord]) -> List[ActorRecord]:
        """
        Insert a batch of actors in one transaction, preserving order.

        Either every actor is inserted or none is.

        Raises:
            ConflictError: If any rank is already stored or repeats within the batch
        """
        created: List[ActorRecord] = []
        async with self._get_connection() as conn:
            try:
                for record in records:
                    created.append(await self._insert(conn, record))
                await conn.commit()
            except sqlite3.IntegrityError as e:
                await conn.rollback()
                raise ConflictError(f"Batch insert rejected, duplicate rank: {e}") from e
            except BaseException:
                await conn.rollback()
                raise

        logger.info(f"Inserted {len(created)} actors in one batch")
        return created

    async def update(self, actor_id: int, record: ActorRecord) -> ActorRecord:
        """
        Replace the mutable fields of an actor; id and source stay unchanged.

        Raises:
            NotFoundError: If no actor has this id
            ConflictError: If a different actor already holds the new rank
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT {_COLUMNS} FROM actors WHERE id = ?", (actor_id,)
            )
            row = await cursor.fetchone()
            if not row:
                raise NotFoundError(f"Actor with ID {actor_id} not found.")

            if await self._rank_taken(conn, record.rank, exclude_id=actor_id):
                raise ConflictError(f"An actor with rank {record.rank} already exists.")

            try:
                await conn.execute(
                    """
                    UPDATE actors SET
                        name = ?, rank = ?, bio = ?, birth_date = ?,
                        image_url = ?, known_for = ?
                    WHERE id = ?
                    """,
                    (
                        record.name, record.rank, record.bio,
                        record.birth_date.isoformat() if record.birth_date else None,
                        record.image_url, json.dumps(record.known_for), actor_id,
                    )
                )
                await conn.commit()
            except sqlite3.IntegrityError as e:
                await conn.rollback()
                raise ConflictError(f"An actor with rank {record.rank} already exists.") from e
            except BaseException:
                await conn.rollback()
                raise

        existing = self._row_to_record(row)
        updated = record.model_copy(update={"id": actor_id, "source": existing.source})
        logger.debug(f"Updated actor {actor_id}")
        return updated

    async def delete(self, actor_id: int) -> bool:
        """
        Remove an actor.

        Raises:
            NotFoundError: If no actor has this id
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute("DELETE FROM actors WHERE id = ?", (actor_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Actor with ID {actor_id} not found.")
            await conn.commit()

        logger.debug(f"Deleted actor {actor_id}")
        return True

    async def __aenter__(self) -> "ActorStore":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
