# airmaint/cli/__main__.py
from __future__ import annotations

import argparse

import uvicorn

from airmaint.config import Settings
from airmaint.logging_config import configure_logging
from airmaint.seed.demo_data import seed_demo
from airmaint.storage.factory import connect_sql


def _sql_storage(settings: Settings):
    url = settings.resolved_database_url()
    if url is None:
        raise SystemExit("DATABASE_URL is not set; nothing to initialise (the in-memory store lives per process)")
    return connect_sql(url, retries=settings.db_connect_retries, base_delay=settings.db_retry_base_delay)


def cmd_serve(args: argparse.Namespace) -> None:
    uvicorn.run(
        "airmaint.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


def cmd_init_db(_args: argparse.Namespace) -> None:
    storage = _sql_storage(Settings())
    try:
        storage.create_schema()
        print({"ok": True, "backend": storage.backend, "counts": storage.counts()})
    finally:
        storage.dispose()


def cmd_seed(_args: argparse.Namespace) -> None:
    storage = _sql_storage(Settings())
    try:
        if storage.list_users():
            print({"ok": True, "skipped": True, "reason": "store already has users"})
            return
        out = seed_demo(storage)
        print(
            {
                "ok": True,
                "users": out.users,
                "cities": out.cities,
                "buildings": out.buildings,
                "apartments": out.apartments,
                "tasks": out.tasks,
                "materials": out.materials,
                "purchase_orders": out.purchase_orders,
            }
        )
    finally:
        storage.dispose()


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="airmaint")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the API with uvicorn")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    init_db = sub.add_parser("init-db", help="create tables in DATABASE_URL")
    init_db.set_defaults(func=cmd_init_db)

    seed = sub.add_parser("seed", help="load demo data into DATABASE_URL")
    seed.set_defaults(func=cmd_seed)

    args = p.parse_args(argv)
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
