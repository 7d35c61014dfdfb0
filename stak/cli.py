"""
Command line entry point: parses flags, loads config, sets up logging and
storage, then hands the terminal to StakTUI.
"""
import argparse
import curses
import logging
import sys
from pathlib import Path

from . import __version__
from .app import StakTUI
from .config import ConfigError, config_search_paths, create_sample_config, load_config
from .service import EntryService
from .storage import DayFileStore, StorageError

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stak",
        description="Your intelligent terminal scratchpad.",
    )
    parser.add_argument("--config", default="", help="Path to config file")
    parser.add_argument("--dir", default="", help="Directory to store stak files")
    parser.add_argument("--create-config", action="store_true", help="Create sample config file")
    parser.add_argument("--show-config", action="store_true", help="Show current config file location")
    parser.add_argument("--version", action="store_true", help="Show version information")
    return parser


def setup_logging(config: dict):
    level = getattr(logging, str(config.get("log_level", "info")).upper(), logging.INFO)
    logging.basicConfig(filename=config["log_file"], level=level, format=LOG_FORMAT)


def show_config(config: dict):
    print(f"Data directory: {config['data_dir']}")
    print("Config file search order:")
    for i, path in enumerate(config_search_paths(), start=1):
        exists = " (exists)" if path.exists() else ""
        print(f"  {i}. {path}{exists}")


def run_tui(stdscr, service: EntryService, theme: str):
    StakTUI(stdscr, service, theme=theme).run()


def main(argv=None) -> int:
    args = create_parser().parse_args(argv)

    if args.version:
        print(f"stak v{__version__} - Your intelligent terminal scratchpad")
        return 0

    try:
        config = load_config(args.config or None)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if args.dir:
        config["data_dir"] = str(Path(args.dir).expanduser().resolve())

    if args.create_config:
        try:
            path = create_sample_config()
        except OSError as e:
            print(f"Error creating sample config: {e}", file=sys.stderr)
            return 1
        print(f"Sample config created at {path}")
        print("Edit this file to customise your stak settings, then run stak again.")
        return 0

    if args.show_config:
        show_config(config)
        return 0

    setup_logging(config)
    logging.info(f"Starting stak, data dir {config['data_dir']}")

    store = DayFileStore(config["data_dir"], config["date_format"])
    try:
        store.initialize()
    except StorageError as e:
        print(f"Error initializing storage: {e}", file=sys.stderr)
        return 1

    service = EntryService(store)
    try:
        curses.wrapper(run_tui, service, config["theme"])
    except Exception as e:
        logging.critical(f"Unhandled exception: {e}", exc_info=True)
        print(f"Error running program: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
