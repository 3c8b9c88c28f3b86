from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import os

from .engine import DEFAULT_MINE_PROBABILITY, ConfigurationError

DIFFICULTIES: Dict[str, float] = {
    "Beginner": DEFAULT_MINE_PROBABILITY,
    "Intermediate": 1 / 10,
    "Advanced": 1 / 8,
    "Hardcore": 1 / 5,
}

DEFAULT_DIFFICULTY = "Beginner"
DEFAULT_WIDTH = 20
DEFAULT_HEIGHT = 20


def mine_probability(difficulty: Optional[str]) -> float:
    """Per-tile mine probability for a named difficulty; unknown names fall back to Beginner."""
    return DIFFICULTIES.get(difficulty or "", DIFFICULTIES[DEFAULT_DIFFICULTY])


def normalize_difficulty(difficulty: Optional[str]) -> str:
    return difficulty if difficulty in DIFFICULTIES else DEFAULT_DIFFICULTY


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"invalid_{name.lower()}")


@dataclass(frozen=True)
class Settings:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    difficulty: str = DEFAULT_DIFFICULTY
    rng_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        width = _env_int("MINEFIELD_WIDTH", DEFAULT_WIDTH)
        height = _env_int("MINEFIELD_HEIGHT", DEFAULT_HEIGHT)
        if width <= 0 or height <= 0:
            raise ConfigurationError("invalid_dimensions")
        return cls(
            width=width,
            height=height,
            difficulty=normalize_difficulty(os.getenv("MINEFIELD_DIFFICULTY", DEFAULT_DIFFICULTY)),
            rng_seed=_env_int("MINEFIELD_SEED", None),
        )
