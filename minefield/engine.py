from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple
import logging
import random

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 10_000
DEFAULT_MINE_PROBABILITY = 1 / 12


class ConfigurationError(ValueError):
    """Raised for malformed field parameters; the message is a short error code."""


class RevealState(str, Enum):
    HIDDEN = "hidden"
    FLAGGED = "flagged"
    REVEALED = "revealed"


class Outcome(str, Enum):
    NONE = "none"
    LOSS = "loss"
    WIN = "win"


class Status(str, Enum):
    PLAYING = "playing"
    LOSS = "loss"
    WIN = "win"


@dataclass(frozen=True)
class Coordinate:
    x: int
    y: int


@dataclass(frozen=True)
class TileView:
    state: RevealState
    adjacent_count: int
    is_mine: bool
    triggered: bool


def index(x: int, y: int, width: int) -> int:
    return y * width + x


def coords(idx: int, width: int) -> Tuple[int, int]:
    y, x = divmod(idx, width)
    return x, y


def neighbors(x: int, y: int, w: int, h: int) -> Iterator[Tuple[int, int]]:
    for ny in range(max(0, y - 1), min(h, y + 2)):
        for nx in range(max(0, x - 1), min(w, x + 2)):
            if nx == x and ny == y:
                continue
            yield nx, ny


class Field:
    """Rectangular minefield with per-tile mine probability.

    All mutating calls return an :class:`Outcome`. Coordinates are assumed to be
    in bounds; callers validate them before invoking the field.
    """

    def __init__(self, width: int, height: int, mine_probability: float, rng: Optional[random.Random] = None) -> None:
        if any(isinstance(v, bool) or not isinstance(v, int) for v in (width, height)) or width <= 0 or height <= 0:
            raise ConfigurationError("invalid_dimensions")
        if not 0 < mine_probability <= 1:
            raise ConfigurationError("invalid_mine_probability")
        self.width = width
        self.height = height
        self.mine_probability = float(mine_probability)
        self.rng = rng or random.Random()
        n = width * height
        self._mines: List[bool] = [False] * n
        self._nums: List[int] = [0] * n
        self._states: List[RevealState] = [RevealState.HIDDEN] * n
        self.mine_count = 0
        self.flag_count = 0
        self.flagged_mine_count = 0
        self.hidden_safe_count = 0
        self.triggered_mine: Optional[Coordinate] = None
        self.status = Status.PLAYING

    @classmethod
    def from_layout(
        cls, width: int, height: int, mines: Iterable[Tuple[int, int]], mine_probability: float = DEFAULT_MINE_PROBABILITY
    ) -> "Field":
        # mine_probability only matters if the field is regenerated later
        field = cls(width, height, mine_probability)
        field.plant(mines)
        return field

    @property
    def generated(self) -> bool:
        return self.mine_count > 0

    @property
    def is_over(self) -> bool:
        return self.status != Status.PLAYING

    def generate(self) -> None:
        n = self.width * self.height
        for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
            mines = [i for i in range(n) if self.rng.random() < self.mine_probability]
            if mines:
                logger.debug(
                    f"[minefield] generate attempt={attempt} width={self.width} height={self.height} mines={len(mines)}"
                )
                self._install(mines)
                return
        logger.warning(
            f"[minefield] generate exhausted attempts={MAX_GENERATION_ATTEMPTS} "
            f"tiles={n} mine_probability={self.mine_probability}"
        )
        raise ConfigurationError("mine_generation_exhausted")

    def plant(self, mines: Iterable[Tuple[int, int]]) -> None:
        idxs = set()
        for x, y in mines:
            if not (0 <= x < self.width and 0 <= y < self.height):
                raise ConfigurationError("out_of_bounds")
            idxs.add(index(x, y, self.width))
        if not idxs:
            raise ConfigurationError("no_mines")
        self._install(sorted(idxs))

    def _install(self, mines: List[int]) -> None:
        n = self.width * self.height
        self._mines = [False] * n
        for i in mines:
            self._mines[i] = True
        nums = [0] * n
        for i in mines:
            x, y = coords(i, self.width)
            for nx, ny in neighbors(x, y, self.width, self.height):
                nums[index(nx, ny, self.width)] += 1
        self._nums = nums
        self._states = [RevealState.HIDDEN] * n
        self.mine_count = len(mines)
        self.hidden_safe_count = n - self.mine_count
        self.flag_count = 0
        self.flagged_mine_count = 0
        self.triggered_mine = None
        self.status = Status.PLAYING

    def reveal(self, x: int, y: int) -> Outcome:
        if self.is_over or not self.generated:
            return Outcome.NONE
        i = index(x, y, self.width)
        if self._states[i] != RevealState.HIDDEN:
            return Outcome.NONE
        if self._mines[i]:
            self.triggered_mine = Coordinate(x, y)
            self.status = Status.LOSS
            return Outcome.LOSS
        stack = [(x, y)]
        while stack:
            cx, cy = stack.pop()
            ci = index(cx, cy, self.width)
            if self._states[ci] != RevealState.HIDDEN:
                continue
            self._states[ci] = RevealState.REVEALED
            self.hidden_safe_count -= 1
            if self._nums[ci] == 0:
                for nx, ny in neighbors(cx, cy, self.width, self.height):
                    if self._states[index(nx, ny, self.width)] == RevealState.HIDDEN:
                        stack.append((nx, ny))
        # flagged safe tiles still count as unrevealed
        if self.hidden_safe_count == 0:
            self.status = Status.WIN
            return Outcome.WIN
        return Outcome.NONE

    def toggle_flag(self, x: int, y: int) -> Outcome:
        if self.is_over or not self.generated:
            return Outcome.NONE
        i = index(x, y, self.width)
        state = self._states[i]
        if state == RevealState.REVEALED:
            return Outcome.NONE
        if state == RevealState.HIDDEN:
            self._states[i] = RevealState.FLAGGED
            self.flag_count += 1
            if self._mines[i]:
                self.flagged_mine_count += 1
        else:
            self._states[i] = RevealState.HIDDEN
            self.flag_count -= 1
            if self._mines[i]:
                self.flagged_mine_count -= 1
        if self.flagged_mine_count == self.mine_count:
            self.status = Status.WIN
            return Outcome.WIN
        return Outcome.NONE

    def remaining_flags_text(self) -> Tuple[int, int]:
        return self.flag_count, self.mine_count

    def tile_view(self, x: int, y: int) -> TileView:
        i = index(x, y, self.width)
        return TileView(
            state=self._states[i],
            adjacent_count=self._nums[i],
            is_mine=self._mines[i],
            triggered=self.triggered_mine == Coordinate(x, y),
        )
