"""
pytest configuration and fixtures.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Generator, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from cinedb.core.config import Settings
from cinedb.core.errors import EditConflictError, RecordNotFoundError
from cinedb.core.models.filters import Filters, Metadata
from cinedb.core.models.movie import Movie, Runtime
from cinedb.core.store import Models, new_mock_models
from cinedb.main import create_app


class InMemoryMovieStore:
    """
    Dict-backed MovieStore with the same not-found and version-check
    behaviour as the PostgreSQL store. No awaits happen between the check
    and the write, so each call is atomic on the event loop.
    """

    def __init__(self) -> None:
        self.rows: Dict[int, Movie] = {}
        self._next_id = 1

    @staticmethod
    def _copy(m: Movie) -> Movie:
        return Movie(
            id=m.id,
            created_at=m.created_at,
            title=m.title,
            year=m.year,
            runtime=Runtime(m.runtime),
            genres=list(m.genres or []),
            version=m.version,
        )

    async def insert(self, movie: Movie) -> Movie:
        movie.id = self._next_id
        movie.created_at = datetime.now(timezone.utc)
        movie.version = 1
        self._next_id += 1
        self.rows[movie.id] = self._copy(movie)
        return movie

    async def get(self, id: int) -> Movie:
        if id < 1 or id not in self.rows:
            raise RecordNotFoundError()
        return self._copy(self.rows[id])

    async def update(self, movie: Movie) -> Movie:
        current = self.rows.get(movie.id)
        if current is None or current.version != movie.version:
            raise EditConflictError()
        movie.version += 1
        self.rows[movie.id] = self._copy(movie)
        self.rows[movie.id].created_at = current.created_at
        return movie

    async def delete(self, id: int) -> None:
        if id < 1 or self.rows.pop(id, None) is None:
            raise RecordNotFoundError()

    async def get_all(
        self, title: str = "", genres: Sequence[str] = (), filters: Optional[Filters] = None
    ) -> Tuple[List[Movie], Metadata]:
        filters = filters or Filters()
        hits = [
            self._copy(m)
            for _, m in sorted(self.rows.items())
            if title.lower() in m.title.lower() and set(genres) <= set(m.genres or [])
        ]
        page = hits[filters.offset():filters.offset() + filters.limit()]
        total = len(hits) if page else 0
        return page, Metadata.calculate(total, filters.page, filters.page_size)

    def seed(self, **fields) -> Movie:
        """Insert a movie synchronously; defaults to Casablanca."""
        movie = Movie(
            title=fields.get("title", "Casablanca"),
            year=fields.get("year", 1942),
            runtime=Runtime(fields.get("runtime", 102)),
            genres=fields.get("genres", ["drama", "romance", "war"]),
        )
        return asyncio.run(self.insert(movie))


@pytest.fixture
def settings() -> Settings:
    return Settings(env="development")


@pytest.fixture
def store() -> InMemoryMovieStore:
    return InMemoryMovieStore()


@pytest.fixture
def client(settings: Settings, store: InMemoryMovieStore) -> Generator[TestClient, None, None]:
    app = create_app(settings, models=Models(movies=store))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def mock_client(settings: Settings) -> Generator[TestClient, None, None]:
    app = create_app(settings, models=new_mock_models())
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def postgres_dsn() -> Generator[str, None, None]:
    """DSN of a throwaway PostgreSQL container; skips when Docker is absent."""
    try:
        from testcontainers.postgres import PostgresContainer
        container = PostgresContainer("postgres:16-alpine")
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    from cinedb.core.db import asyncpg_dsn
    try:
        yield asyncpg_dsn(container.get_connection_url())
    finally:
        container.stop()
