"""
Engine defaults for grid, floor and setback dimensions.

Each value can be overridden with a SITEPLAN_* environment variable or a
.env file at the project root. Values that fail to parse, and values
outside their valid range, fall back to the built-in default with a
warning so that a bad deployment variable never yields a zero-size grid.

    from siteplan.config import settings
    settings.grid_size_m   # 0.6
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
if _ENV_FILE.is_file():
    load_dotenv(_ENV_FILE)

DEFAULT_GRID_SIZE_M = 0.6
DEFAULT_FLOOR_HEIGHT_M = 3.0
DEFAULT_SETBACK_M = 1.0
DEFAULT_MAX_GRID_CELLS = 250_000
DEFAULT_MAX_RECT_STEPS = 400

T = TypeVar("T")


def _parse_env(key: str, default: T, parse: Callable[[str], T]) -> T:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        logger.warning(f"{key}={raw!r} is not valid, using {default}")
        return default


def get_float(key: str, default: float) -> float:
    return _parse_env(key, default, float)


def get_int(key: str, default: int) -> int:
    return _parse_env(key, default, int)


@dataclass
class Settings:
    """Engine settings, read from the environment at construction."""

    grid_size_m: float = field(default_factory=lambda: get_float("SITEPLAN_GRID_SIZE_M", DEFAULT_GRID_SIZE_M))
    floor_height_m: float = field(default_factory=lambda: get_float("SITEPLAN_FLOOR_HEIGHT_M", DEFAULT_FLOOR_HEIGHT_M))
    default_setback_m: float = field(default_factory=lambda: get_float("SITEPLAN_DEFAULT_SETBACK_M", DEFAULT_SETBACK_M))
    max_grid_cells: int = field(default_factory=lambda: get_int("SITEPLAN_MAX_GRID_CELLS", DEFAULT_MAX_GRID_CELLS))
    max_rect_steps: int = field(default_factory=lambda: get_int("SITEPLAN_MAX_RECT_STEPS", DEFAULT_MAX_RECT_STEPS))

    def __post_init__(self):
        # (attribute, default, smallest allowed value, inclusive)
        bounds = (
            ("grid_size_m", DEFAULT_GRID_SIZE_M, 0, False),
            ("floor_height_m", DEFAULT_FLOOR_HEIGHT_M, 0, False),
            ("default_setback_m", DEFAULT_SETBACK_M, 0, True),
            ("max_grid_cells", DEFAULT_MAX_GRID_CELLS, 0, False),
            ("max_rect_steps", DEFAULT_MAX_RECT_STEPS, 0, False),
        )
        for name, default, low, inclusive in bounds:
            value = getattr(self, name)
            ok = value >= low if inclusive else value > low
            if not ok:
                logger.warning(f"{name}={value} is out of range, using {default}")
                setattr(self, name, default)


settings = Settings()


def get_settings() -> Settings:
    """Module-level settings instance."""
    return settings
