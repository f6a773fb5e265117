#!/usr/bin/env python3
"""
syncauto: Mirror named local folders to rclone remotes.

Main entry point for the sync application.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from syncauto.activity import SyncLog
from syncauto.config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    create_default_config,
    load_config,
)
from syncauto.exceptions import SyncAutoError
from syncauto.paths import expand_home
from syncauto.sync_manager import SyncOrchestrator

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
ACTIVITY_LOGGER = "syncauto.activity"


def setup_logging(config: AppConfig, cli_mode: bool = False) -> logging.Logger:
    """
    Set up logging configuration.

    ``log_level`` applies to diagnostic messages only; activity entries are
    always written at INFO and above.
    """
    log_file_path = Path(expand_home(config.log_file))
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("syncauto")
    logger.setLevel(config.log_level)
    logger.propagate = False

    file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    if cli_mode:
        # Interactive runs also log to the console
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    logging.getLogger(ACTIVITY_LOGGER).setLevel(logging.INFO)

    return logger


def teardown_logging(logger: logging.Logger) -> None:
    """Flush and close the handlers installed by setup_logging."""
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Sync local folders to rclone remotes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                           # Sync every configured folder (cron mode)
  python main.py --verbose                 # Also log to the console
  python main.py --init                    # Only create the default config file
  python main.py -c ./config.yaml -j 2     # Custom config, two folders at a time
        """,
    )

    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--init",
        action="store_true",
        help="Create the default configuration file and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log to the console as well as the log file",
    )

    parser.add_argument(
        "--max-concurrent",
        "-j",
        type=int,
        default=None,
        help="Override the number of folders processed at the same time",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    start_time = datetime.now()
    args = parse_arguments(argv)

    if args.max_concurrent is not None and args.max_concurrent < 1:
        print("ERROR: --max-concurrent must be at least 1", file=sys.stderr)
        return 1

    logger = None
    try:
        config_path = expand_home(args.config)
        created = create_default_config(args.config)
        if args.init:
            print(f"Configuration file: {config_path}")
            return 0

        config = load_config(args.config)
        if args.max_concurrent is not None:
            config = config.model_copy(
                update={"max_concurrent_folders": args.max_concurrent}
            )

        logger = setup_logging(config, cli_mode=args.verbose)
        if created:
            logger.info(f"Config file created at: {config_path}")
        else:
            logger.info(f"Note: config file already exists at: {config_path}")
        logger.info(f"Configuration loaded with {len(config.folders)} folders")

        with SyncLog(logging.getLogger(ACTIVITY_LOGGER)) as sync_log:
            orchestrator = SyncOrchestrator.from_config(config, sync_log)
            orchestrator.run(config.folders)

        total_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Sync process completed in {total_time:.2f} seconds")
        return 0

    except FileNotFoundError as e:
        print(f"ERROR: Configuration file error: {e}", file=sys.stderr)
        return 1

    except (ValueError, SyncAutoError, OSError) as e:
        error_msg = f"Configuration error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg)
        return 1

    except KeyboardInterrupt:
        error_msg = "Sync process interrupted by user"
        print(f"\nINTERRUPTED: {error_msg}", file=sys.stderr)
        if logger:
            logger.warning(error_msg)
        return 130

    finally:
        if logger:
            teardown_logging(logger)


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
