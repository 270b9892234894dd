# cinedb/core/db.py
"""Database-access layer: connection pool and movies table."""

import asyncio
import logging

import asyncpg

from cinedb.core.config import DatabaseSettings

logger = logging.getLogger(__name__)

MOVIES_DDL = """
CREATE TABLE IF NOT EXISTS movies (
  id         BIGSERIAL                   PRIMARY KEY,
  created_at TIMESTAMP(0) WITH TIME ZONE NOT NULL DEFAULT NOW(),
  title      TEXT                        NOT NULL,
  year       INTEGER                     NOT NULL,
  runtime    INTEGER                     NOT NULL,
  genres     TEXT[]                      NOT NULL,
  version    INTEGER                     NOT NULL DEFAULT 1
);
"""

MOVIES_CONSTRAINTS = {
    "movies_runtime_check": "CHECK (runtime >= 0)",
    "movies_year_check": "CHECK (year BETWEEN 1888 AND date_part('year', now()))",
    "movies_genres_length_check": "CHECK (array_length(genres, 1) BETWEEN 1 AND 5)",
}

MOVIES_INDEXES = (
    "CREATE INDEX IF NOT EXISTS movies_genres_idx ON movies USING GIN (genres);",
)


# ─────────────────────────────────────────────────────────────────────────────
# Connection Pool
# ─────────────────────────────────────────────────────────────────────────────
async def open_pool(cfg: DatabaseSettings) -> asyncpg.Pool:
    """
    Create the asyncpg pool from DatabaseSettings and make sure the server
    answers within connect_timeout. The pool is closed again on failure.
    """
    pool = await asyncpg.create_pool(
        dsn=cfg.dsn,
        min_size=min(cfg.max_idle_conns, cfg.max_open_conns),
        max_size=cfg.max_open_conns,
        max_inactive_connection_lifetime=cfg.max_idle_seconds,
        timeout=cfg.connect_timeout,
    )
    try:
        await asyncio.wait_for(pool.fetchval("SELECT 1"), timeout=cfg.connect_timeout)
    except BaseException:
        await pool.close()
        raise
    logger.info("database connection pool established")
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    """Close the asyncpg connection pool."""
    if pool is not None:
        await pool.close()


async def ensure_schema(pool: asyncpg.Pool) -> None:
    """Create the movies table, its check constraints and indexes if missing."""
    async with pool.acquire() as conn:
        await conn.execute(MOVIES_DDL)
        existing = {
            r["conname"]
            for r in await conn.fetch(
                "SELECT conname FROM pg_constraint WHERE conrelid = 'movies'::regclass"
            )
        }
        for name, clause in MOVIES_CONSTRAINTS.items():
            if name not in existing:
                await conn.execute(f"ALTER TABLE movies ADD CONSTRAINT {name} {clause};")
        for ddl in MOVIES_INDEXES:
            await conn.execute(ddl)


def asyncpg_dsn(url: str) -> str:
    """Strip a SQLAlchemy-style driver suffix ("postgresql+psycopg2://")."""
    scheme, sep, rest = url.partition("://")
    if sep and "+" in scheme:
        return "postgresql://" + rest
    return url
