import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_AUTO_PLAY_DELAY_MS = 800


def get_project_root() -> Path:
    """Returns the project root directory (where run_trainer.py lives)."""
    # src/opening_drills/lib/utils.py -> project root
    return Path(__file__).resolve().parents[3]


def get_output_dir(subdir: str = "data") -> str:
    """Returns the path to an output directory within the project root."""
    return str(get_project_root() / subdir)


def setup_logging():
    """Configures the logging format and level based on environment variables."""
    load_dotenv()
    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger("opening_drills")


@dataclass
class TrainerSettings:
    """
    Runtime configuration read from the environment.

    Attributes:
        store_path: JSON file holding all repertoires.
        auto_play_delay: Seconds to pause between auto-played moves.
        lichess_token: Optional API token, only needed for study imports.
    """
    store_path: str
    auto_play_delay: float
    lichess_token: Optional[str] = None


def load_settings() -> TrainerSettings:
    """Reads TrainerSettings from the environment (and .env, if present)."""
    load_dotenv()
    store_path = os.getenv("REPERTOIRE_STORE") or os.path.join(get_output_dir("data"), "repertoires.json")

    raw_delay = os.getenv("AUTO_PLAY_DELAY_MS", str(DEFAULT_AUTO_PLAY_DELAY_MS))
    try:
        delay_ms = max(0, int(raw_delay))
    except ValueError:
        logging.getLogger("opening_drills").warning(
            f"Invalid AUTO_PLAY_DELAY_MS={raw_delay!r}, using {DEFAULT_AUTO_PLAY_DELAY_MS}."
        )
        delay_ms = DEFAULT_AUTO_PLAY_DELAY_MS

    return TrainerSettings(
        store_path=store_path,
        auto_play_delay=delay_ms / 1000.0,
        lichess_token=os.getenv("LICHESS_TOKEN") or None,
    )
