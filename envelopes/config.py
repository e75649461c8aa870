"""Runtime settings.

Values come from environment variables, optionally loaded from a ``.env``
file at the project root.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_SEED_PATH = PROJECT_ROOT / "data" / "seed.json"
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "envelopes.db"


@dataclass(frozen=True)
class Settings:
    storage: str
    seed_path: Path
    db_path: Path
    user_id: str
    log_level: str


def load_settings() -> Settings:
    return Settings(
        storage=os.getenv("ENVELOPES_STORAGE", "json").lower(),
        seed_path=Path(os.getenv("ENVELOPES_SEED_PATH", DEFAULT_SEED_PATH)),
        db_path=Path(os.getenv("ENVELOPES_DB_PATH", DEFAULT_DB_PATH)),
        user_id=os.getenv("ENVELOPES_USER_ID", "demo"),
        log_level=os.getenv("ENVELOPES_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
