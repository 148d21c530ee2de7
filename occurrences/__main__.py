"""Application entry point."""

import argparse
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .app.app_config import AppConfig, load_config, save_config
from .common.app import app_dirs
from .search.errors import SearchConfigError
from .search.session import SearchSettings, search


def reset_all() -> None:
    """Delete the app data directory."""
    if app_dirs.remove_app_data_dir():
        print(f"App data directory deleted: {app_dirs.app_data_dir}")
    else:
        print(f"App data directory does not exist: {app_dirs.app_data_dir}")


def build_parser() -> argparse.ArgumentParser:
    """Command line parser."""
    parser = argparse.ArgumentParser(description="Occurrences - find every occurrence of a string in a directory")
    parser.add_argument("pattern", nargs="?", help="Literal string to search for")
    parser.add_argument("directory", nargs="?", type=Path, default=Path.cwd(), help="Directory to search")
    parser.add_argument("--hidden", action="store_true", default=None, help="Search hidden files and directories")
    parser.add_argument("--workers", type=int, help="Number of worker threads")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    parser.add_argument("--temp", action="store_true", help="Run in temporary mode")
    parser.add_argument("--reset", action="store_true", help="Delete all app data")
    return parser


def run_search(config: AppConfig, pattern: str, directory: Path) -> int:
    """Print every occurrence and return the exit status."""
    try:
        stream = search(pattern, directory, config.search_hidden, settings=config.search)
    except SearchConfigError as e:
        print(f"--- ERROR ---\n{e}", file=sys.stderr)
        return 2

    print(f"Started searching for {pattern} in {stream.config.root}\n")
    found = False
    with stream:
        try:
            for occurrence in stream:
                print(occurrence)
                found = True
        except KeyboardInterrupt:
            stream.close()
        except Exception as e:
            print(f"--- ERROR ---\nSearch failed: {e}", file=sys.stderr)
            return 1

    if stream.cancelled:
        print("\n--- Search cancelled ---")
    elif found:
        print("\n--- Searching completed ---")
    else:
        print("--- Nothing found ---")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.reset:
        reset_all()
        return 0

    if args.pattern is None:
        parser.error("the following arguments are required: pattern")

    if args.temp:
        app_dirs.use_temp_app_data_dir()

    config = load_config()
    # Command line flags apply to this run only
    effective = config.model_copy(deep=True)
    if args.hidden is not None:
        effective.search_hidden = args.hidden
    if args.workers is not None:
        try:
            effective.search = SearchSettings.model_validate({**config.search.model_dump(), "workers": args.workers})
        except ValidationError as e:
            parser.error(f"invalid --workers value: {e.errors()[0]['msg']}")

    logger.remove()
    handler_id = logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")
    try:
        return run_search(effective, args.pattern, args.directory)
    finally:
        logger.remove(handler_id)
        save_config(config)


if __name__ == "__main__":
    sys.exit(main())
