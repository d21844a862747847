"""Terminal CLI entrypoint for MindVision."""

from __future__ import annotations

import argparse
from pathlib import Path

from backend.core.config import AppConfig, resolve_database_url
from backend.core.log import setup_logging
from backend.journal.errors import StoreError
from backend.journal.store import EntryStore
from backend.practice.catalog import format_clock, list_exercises
from backend.practice.model import Exercise
from backend.practice.parser import CatalogParseError, load_catalog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MindVision visualization practice")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI) with the journal API (default)",
    )
    parser.add_argument(
        "--api-only",
        action="store_true",
        help="Serve only the JSON journal API (no web UI)",
    )
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host bind for --ui-web / --api-only",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=8090,
        help="Port for --ui-web / --api-only",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (default: sqlite under ~/.mindvision)",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Load exercises from a .json or .csv catalog instead of the built-in set",
    )
    parser.add_argument(
        "--list-exercises",
        action="store_true",
        help="Print the exercise catalog and exit",
    )
    parser.add_argument(
        "--list-entries",
        action="store_true",
        help="Print the demo user's journal entries and exit",
    )
    parser.add_argument(
        "--tick-interval",
        type=float,
        default=1.0,
        help="Seconds per timer tick (testing aid)",
    )
    parser.add_argument("--log-level", default="INFO", help="Loguru level for service logs")
    return parser


def print_exercises(exercises: tuple[Exercise, ...]) -> int:
    for index, exercise in enumerate(exercises, start=1):
        print(
            f"{index:>2}. {exercise.title:<28} {format_clock(exercise.duration_sec):>6} "
            f"[{exercise.difficulty}]"
        )
        for prompt in exercise.prompts:
            print(f"      - {prompt}")
    return 0


def print_entries(database_url: str) -> int:
    store = EntryStore(database_url)
    try:
        store.init_db()
        user = store.ensure_demo_user()
        entries = store.list_entries(user.user_id)
    except StoreError as exc:
        print(f"Error: {exc.message}")
        return 1
    finally:
        store.dispose()

    if not entries:
        print("No journal entries yet")
        return 0
    for entry in entries:
        print(f"{entry.date.isoformat()}  {entry.exercise}")
        print(f"    {entry.content}")
    return 0


def run_api(config: AppConfig, exercises: tuple[Exercise, ...]) -> int:
    import uvicorn

    from backend.api.routes import create_api_app

    store = EntryStore(config.database_url)
    store.init_db()
    try:
        uvicorn.run(
            create_api_app(store, exercises),
            host=config.web_host,
            port=config.web_port,
            log_level=config.log_level.lower(),
        )
    finally:
        store.dispose()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    config = AppConfig(
        database_url=resolve_database_url(args.database_url),
        catalog_path=args.catalog,
        web_host=args.web_host,
        web_port=args.web_port,
        log_level=args.log_level,
        tick_interval_sec=max(0.01, float(args.tick_interval)),
    )

    try:
        exercises = (
            load_catalog(config.catalog_path) if config.catalog_path else list_exercises()
        )
    except (CatalogParseError, OSError) as exc:
        print(f"Error: {exc}")
        return 1

    if args.list_exercises:
        return print_exercises(exercises)
    if args.list_entries:
        return print_entries(config.database_url)
    if args.api_only:
        return run_api(config, exercises)

    from backend.ui.web_app import run_web_ui

    return run_web_ui(config, exercises)


if __name__ == "__main__":
    raise SystemExit(main())
