"""Configuration for the arena elimination bracket."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'arena.db'}",
)


def _parse_int(value: str, default: int | None) -> int | None:
    if not value:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


# Elimination schedule
ELIM_MATCH_SPACING_SEC = _parse_int(os.getenv("ELIM_MATCH_SPACING_SEC", ""), 600)
ELIM_SHUFFLE_SEED = _parse_int(os.getenv("ELIM_SHUFFLE_SEED", ""), None)  # Unset = nondeterministic slot shuffles
