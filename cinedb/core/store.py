# cinedb/core/store.py
"""
Movie storage.

Two interchangeable implementations of MovieStore live here: the asyncpg
backed PostgresMovieStore and the do-nothing MockMovieStore used when
exercising handlers without a database.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, List, Optional, Protocol, Sequence, Tuple, TypeVar, runtime_checkable

import asyncpg

from cinedb.core.errors import (
    CineDBError,
    EditConflictError,
    QueryTimeoutError,
    RecordNotFoundError,
    StorageError,
)
from cinedb.core.models.filters import Filters, Metadata
from cinedb.core.models.movie import Movie, Runtime

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0

T = TypeVar("T")


@runtime_checkable
class MovieStore(Protocol):
    async def insert(self, movie: Movie) -> Movie: ...

    async def get(self, id: int) -> Optional[Movie]: ...

    async def update(self, movie: Movie) -> Movie: ...

    async def delete(self, id: int) -> None: ...

    async def get_all(
        self, title: str, genres: Sequence[str], filters: Filters
    ) -> Tuple[List[Movie], Metadata]: ...


def _row_to_movie(row: asyncpg.Record) -> Movie:
    return Movie(
        id=row["id"],
        created_at=row["created_at"],
        title=row["title"],
        year=row["year"],
        runtime=Runtime(row["runtime"]),
        genres=list(row["genres"]),
        version=row["version"],
    )


def _affected(status: str) -> int:
    # asyncpg returns the command tag, e.g. "DELETE 1"
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class PostgresMovieStore:
    """
    MovieStore over an asyncpg pool.

    Every operation borrows one connection for its whole duration and is
    bounded by `timeout` seconds, including the wait for a free connection.
    """

    def __init__(self, pool: asyncpg.Pool, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.pool = pool
        self.timeout = timeout

    async def _run(self, op: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(op, timeout=self.timeout)
        except CineDBError:
            raise
        except asyncio.TimeoutError as e:
            raise QueryTimeoutError(f"query exceeded {self.timeout}s") from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StorageError(str(e)) from e

    # ─── Insert ──────────────────────────────────────────────────────────────
    async def insert(self, movie: Movie) -> Movie:
        query = """
            INSERT INTO movies (title, year, runtime, genres)
            VALUES ($1, $2, $3, $4)
            RETURNING id, created_at, version"""
        args = (movie.title, movie.year, int(movie.runtime), list(movie.genres or []))

        async def _op() -> asyncpg.Record:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(query, *args)

        row = await self._run(_op())
        movie.id = row["id"]
        movie.created_at = row["created_at"]
        movie.version = row["version"]
        return movie

    # ─── Get ─────────────────────────────────────────────────────────────────
    async def get(self, id: int) -> Movie:
        # bigserial starts at 1, so there is nothing to look up
        if id < 1:
            raise RecordNotFoundError()

        query = """
            SELECT id, created_at, title, year, runtime, genres, version
              FROM movies
             WHERE id = $1"""

        async def _op() -> Optional[asyncpg.Record]:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(query, id)

        row = await self._run(_op())
        if row is None:
            raise RecordNotFoundError()
        return _row_to_movie(row)

    # ─── Update (optimistic concurrency) ─────────────────────────────────────
    async def update(self, movie: Movie) -> Movie:
        """
        Write the movie only if the stored row still carries movie.version.

        The row's version is bumped in the same statement and copied back
        onto `movie`. If no row matched, the record was edited or deleted
        since it was read and EditConflictError is raised.
        """
        query = """
            UPDATE movies
               SET title = $1, year = $2, runtime = $3, genres = $4, version = version + 1
             WHERE id = $5 AND version = $6
            RETURNING version"""
        args = (
            movie.title,
            movie.year,
            int(movie.runtime),
            list(movie.genres or []),
            movie.id,
            movie.version,
        )

        async def _op() -> Optional[int]:
            async with self.pool.acquire() as conn:
                return await conn.fetchval(query, *args)

        version = await self._run(_op())
        if version is None:
            logger.info("edit conflict on movie %d at version %d", movie.id, movie.version)
            raise EditConflictError()
        movie.version = version
        return movie

    # ─── Delete ──────────────────────────────────────────────────────────────
    async def delete(self, id: int) -> None:
        if id < 1:
            raise RecordNotFoundError()

        query = "DELETE FROM movies WHERE id = $1"

        async def _op() -> str:
            async with self.pool.acquire() as conn:
                return await conn.execute(query, id)

        status = await self._run(_op())
        if _affected(status) == 0:
            raise RecordNotFoundError()

    # ─── List ────────────────────────────────────────────────────────────────
    async def get_all(
        self,
        title: str = "",
        genres: Sequence[str] = (),
        filters: Optional[Filters] = None,
    ) -> Tuple[List[Movie], Metadata]:
        """
        Movies whose title contains `title` (case-insensitive) and whose
        genres include all of `genres`, ordered by id and paged.
        """
        filters = filters or Filters()
        query = """
            SELECT count(*) OVER() AS total, id, created_at, title, year, runtime, genres, version
              FROM movies
             WHERE ($1 = '' OR strpos(lower(title), lower($1)) > 0)
               AND (genres @> $2 OR $2 = '{}')
             ORDER BY id ASC
             LIMIT $3 OFFSET $4"""
        args: Tuple[Any, ...] = (title, list(genres), filters.limit(), filters.offset())

        async def _op() -> List[asyncpg.Record]:
            async with self.pool.acquire() as conn:
                return await conn.fetch(query, *args)

        rows = await self._run(_op())
        movies = [_row_to_movie(r) for r in rows]
        total = rows[0]["total"] if rows else 0
        return movies, Metadata.calculate(total, filters.page, filters.page_size)


class MockMovieStore:
    """Satisfies MovieStore without touching anything. Never reports errors."""

    async def insert(self, movie: Movie) -> Movie:
        return movie

    async def get(self, id: int) -> Optional[Movie]:
        return None

    async def update(self, movie: Movie) -> Movie:
        return movie

    async def delete(self, id: int) -> None:
        return None

    async def get_all(
        self,
        title: str = "",
        genres: Sequence[str] = (),
        filters: Optional[Filters] = None,
    ) -> Tuple[List[Movie], Metadata]:
        return [], Metadata()


@dataclass
class Models:
    movies: MovieStore


def new_models(pool: asyncpg.Pool, timeout: float = DEFAULT_TIMEOUT) -> Models:
    return Models(movies=PostgresMovieStore(pool, timeout=timeout))


def new_mock_models() -> Models:
    return Models(movies=MockMovieStore())
