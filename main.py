"""
Main entry point for the APOD Viewer application.
Author: Oliver Ernster

This module sets up logging, loads the configuration, validates the
requested date and runs a single fetch through the coordinator, printing
the result to the console. Maintenance options save the API key, show the
configuration or clear the picture cache instead.
"""

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, TextIO

from PySide6.QtCore import QCoreApplication, QEventLoop

from apod_viewer.api.apod_api_manager import APODGatewayFactory
from apod_viewer.cache.image_cache import ImageCache
from apod_viewer.managers.apod_config import APODConfig, ConfigManager, ConfigurationError
from apod_viewer.managers.fetch_coordinator import SingleFlightCoordinator
from apod_viewer.models.apod_data import (
    APOD_START_DATE,
    Displayable,
    RequestStatus,
    is_valid_apod_date,
)
from apod_viewer.ui.console_presenter import ConsolePresenter
from version import __app_name__, __version__, get_version_string


def get_log_dir() -> Path:
    """Get the per-platform log directory."""
    if sys.platform == "darwin":  # macOS
        return Path.home() / "Library" / "Logs" / "APODViewer"
    if sys.platform == "win32":  # Windows
        return Path(os.environ.get("APPDATA", Path.home())) / "APODViewer" / "logs"
    return Path.home() / ".local" / "share" / "apod-viewer" / "logs"


def setup_logging(level: int = logging.WARNING, log_to_file: bool = True):
    """Setup application logging with file and console output."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_dir / "apod_viewer.log")))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    # Set specific log levels for different modules
    logging.getLogger("apod_viewer.api").setLevel(level)
    logging.getLogger("apod_viewer.managers").setLevel(level)
    logging.getLogger("apod_viewer.workers").setLevel(level)
    # aiohttp is chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))


def parse_picture_date(text: str) -> date:
    """Parse a YYYY-MM-DD command line date."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not a date in YYYY-MM-DD format")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apod-viewer",
        description="Show the NASA Astronomy Picture of the Day.",
    )
    parser.add_argument(
        "--date",
        type=parse_picture_date,
        default=None,
        help="picture date (YYYY-MM-DD), today if omitted",
    )
    parser.add_argument("--config", default=None, help="path to config.json")
    parser.add_argument("--api-key", default=None, help="NASA API key for this run")
    parser.add_argument("--cache-dir", default=None, help="picture cache directory")
    parser.add_argument("--verbose", action="store_true", help="log at DEBUG level")
    parser.add_argument(
        "--no-log-file", action="store_true", help="log to the console only"
    )
    parser.add_argument(
        "--save-api-key",
        metavar="KEY",
        default=None,
        help="store a NASA API key in the config file and exit",
    )
    parser.add_argument(
        "--show-config", action="store_true", help="print the configuration and exit"
    )
    parser.add_argument(
        "--clear-cache", action="store_true", help="delete cached pictures and exit"
    )
    parser.add_argument("--version", action="version", version=get_version_string())
    return parser


def run_maintenance(
    args: argparse.Namespace,
    config_manager: ConfigManager,
    config: APODConfig,
    out: TextIO,
) -> int:
    """Handle --save-api-key, --show-config and --clear-cache."""
    logger = logging.getLogger(__name__)

    if args.save_api_key:
        try:
            config_manager.update_api_key(args.save_api_key)
        except ConfigurationError as e:
            logger.error(f"Could not save API key: {e}")
            out.write(f"Configuration error: {e}\n")
            return 1
        if not args.api_key:
            config = config.model_copy(
                update={"nasa_api_key": config_manager.config.nasa_api_key}
            )
        out.write(f"API key saved to {config_manager.config_path}\n")

    image_cache = ImageCache(config.cache_directory)

    if args.show_config:
        summary = config_manager.get_config_summary(config)
        cache_info = image_cache.get_cache_info()
        summary["cache_path"] = cache_info["cache_dir"]
        summary["cached_pictures"] = (
            f"{cache_info['file_count']} ({cache_info['total_bytes']} bytes)"
        )
        summary["config_file"] = str(config_manager.config_path)
        width = max(len(key) for key in summary)
        for key, value in summary.items():
            out.write(f"{key.ljust(width)}  {value}\n")

    if args.clear_cache:
        removed = image_cache.clear()
        out.write(f"Removed {removed} cached pictures from {image_cache.cache_dir}\n")

    return 0


def run(
    argv: Optional[List[str]] = None,
    gateway=None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Fetch and show one picture, or run a maintenance option.

    Returns:
        int: 0 if a picture was shown or maintenance succeeded, 1 for any
        other outcome, 2 for a bad date
    """
    args = build_parser().parse_args(argv)
    out = stream or sys.stdout

    config_manager = ConfigManager(args.config)
    try:
        config = config_manager.load_config()
    except ConfigurationError as e:
        setup_logging(log_to_file=not args.no_log_file)
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        out.write(f"Configuration error: {e}\n")
        return 1

    if args.verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, config.log_level, logging.WARNING)
    setup_logging(level, log_to_file=not args.no_log_file)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {__app_name__} {__version__}")

    overrides = {}
    if args.api_key:
        overrides["nasa_api_key"] = args.api_key
    if args.cache_dir:
        overrides["cache_directory"] = args.cache_dir
    if overrides:
        config = config.model_copy(update=overrides)

    if args.save_api_key or args.show_config or args.clear_cache:
        return run_maintenance(args, config_manager, config, out)

    picture_date = args.date or date.today()
    if not is_valid_apod_date(picture_date):
        out.write(
            f"Date must be between {APOD_START_DATE.isoformat()} and "
            f"{date.today().isoformat()}\n"
        )
        return 2

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName(__app_name__)
    app.setApplicationVersion(__version__)

    presenter = ConsolePresenter(out)
    if gateway is None:
        gateway = APODGatewayFactory.create_gateway(config)
    coordinator = SingleFlightCoordinator(gateway, on_outcome=presenter.present)

    loop = QEventLoop()

    def on_busy_changed(busy: bool):
        presenter.on_busy_changed(busy)
        if not busy:
            loop.quit()

    coordinator.busy_changed.connect(on_busy_changed)

    status = coordinator.request_fetch(picture_date)
    if status is RequestStatus.BUSY:
        presenter.show_busy_notice()
        return 1

    loop.exec()
    coordinator.shutdown()

    outcome = coordinator.last_outcome
    logger.info(f"Fetch finished with {type(outcome).__name__}")
    return 0 if isinstance(outcome, Displayable) else 1


def main():
    """Main application entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
