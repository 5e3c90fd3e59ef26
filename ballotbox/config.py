"""Settings read from the environment (and an optional .env file)."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Service-wide defaults."""

    # Whether new elections seed a placeholder proposal at id 0
    SEED_GENESIS = _env_flag("BALLOTBOX_SEED_GENESIS")
    GENESIS_DESCRIPTION = os.getenv("BALLOTBOX_GENESIS_DESCRIPTION", "GENESIS")

    LOG_LEVEL = os.getenv("BALLOTBOX_LOG_LEVEL", "INFO")

    # Target of scripts/simulate_election.py
    API_URL = os.getenv("BALLOTBOX_API_URL", "http://localhost:3000/api/election")


def configure_logging(level: str | int | None = None) -> None:
    """Send ballotbox logs to the console.

    Only entry points (the API handler, scripts) call this; the library
    itself just logs to its module loggers.
    """
    level = level or Config.LOG_LEVEL
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("ballotbox")
    logger.setLevel(level)

    # Already configured
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
