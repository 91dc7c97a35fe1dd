"""Command-line entry point: ``doorguard`` / ``python -m doorguard``."""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import structlog
from telegram.error import TelegramError

from .config.manager import ConfigError, load_settings
from .devices.bus import BusError
from .observability.logging_config import configure_logging
from .runtime.bootstrap import DeviceNotFoundError, run_guard

logger = structlog.get_logger(__name__)


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="doorguard",
        description="Relay door and motion sensor alerts to a Telegram chat.",
    )
    parser.add_argument("--env-file", type=Path, default=Path(".env"), help="dotenv file to load (default: .env)")
    parser.add_argument("--log-level", default=None, help="override GUARD_LOG_LEVEL")
    return parser.parse_args(argv)


async def _serve(settings) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops lack add_signal_handler; Ctrl+C still raises KeyboardInterrupt
            pass
    await run_guard(settings, stop_event)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level or "INFO")

    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        logger.error("startup_config_error", error=str(e))
        return 1

    configure_logging(args.log_level or settings.log_level)

    try:
        asyncio.run(_serve(settings))
    except DeviceNotFoundError as e:
        logger.error("startup_failed", error=str(e), missing=e.missing)
        return 1
    except BusError as e:
        logger.error("startup_failed", error=str(e))
        return 1
    except TelegramError as e:
        logger.error("startup_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
