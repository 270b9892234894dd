# cinedb/__main__.py
"""
Run the API server.

    python -m cinedb --port 4000 --env development --db-dsn postgres://...

Flags override values from the JSON config file (--config or
CINEDB_CONFIG) and the CINEDB_DB_DSN environment variable.
"""

import argparse
from pathlib import Path

import uvicorn

from cinedb.core.config import load_settings
from cinedb.core.logger import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="cinedb", description="Movie CRUD API")
    p.add_argument("--config", type=Path, default=None, help="JSON config file")
    p.add_argument("--port", type=int, help="API server port")
    p.add_argument("--env", choices=["development", "staging", "production"], help="Environment")
    p.add_argument("--db-dsn", dest="dsn", help="PostgreSQL DSN")
    p.add_argument("--db-max-open-conns", dest="max_open_conns", type=int, help="PostgreSQL max open connections")
    p.add_argument("--db-max-idle-conns", dest="max_idle_conns", type=int, help="PostgreSQL max idle connections")
    p.add_argument("--db-max-idle-time", dest="max_idle_time", help="PostgreSQL max connection idle time")
    return p.parse_args(argv)


def build_settings(args: argparse.Namespace):
    settings = load_settings(args.config)
    top = {k: getattr(args, k) for k in ("port", "env") if getattr(args, k) is not None}
    db = {
        k: getattr(args, k)
        for k in ("dsn", "max_open_conns", "max_idle_conns", "max_idle_time")
        if getattr(args, k) is not None
    }
    merged = settings.model_dump()
    merged.update(top)
    merged["db"].update(db)
    return type(settings).model_validate(merged)


def main(argv=None) -> None:
    settings = build_settings(parse_args(argv))
    logger = setup_logger("cinedb", settings.log_level)

    from cinedb.main import create_app
    app = create_app(settings)

    logger.info("starting %s server on :%d", settings.env, settings.port)
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        timeout_keep_alive=60,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
