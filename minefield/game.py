from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging
import random

from .config import mine_probability, normalize_difficulty
from .engine import Field, Outcome, RevealState, Status, TileView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Glyphs:
    """Glyph bundle used by :func:`render_board`.

    Owned by whoever renders the board; the field never sees it.
    """

    cover: str = "H"
    flag: str = "F"
    digits: Tuple[str, ...] = tuple("012345678")
    mine_triggered: str = "X"
    mine_undiscovered: str = "M"
    misflagged: str = "W"


DEFAULT_GLYPHS = Glyphs()


def _glyph(tile: TileView, over: bool, glyphs: Glyphs) -> str:
    if tile.state == RevealState.REVEALED:
        return glyphs.digits[tile.adjacent_count]
    if not over:
        return glyphs.flag if tile.state == RevealState.FLAGGED else glyphs.cover
    if tile.triggered:
        return glyphs.mine_triggered
    if tile.state == RevealState.FLAGGED:
        return glyphs.flag if tile.is_mine else glyphs.misflagged
    return glyphs.mine_undiscovered if tile.is_mine else glyphs.cover


def render_board(f: Field, glyphs: Glyphs = DEFAULT_GLYPHS) -> List[List[str]]:
    board: List[List[str]] = []
    over = f.is_over
    for y in range(f.height):
        row: List[str] = []
        for x in range(f.width):
            row.append(_glyph(f.tile_view(x, y), over, glyphs))
        board.append(row)
    return board


class GameSession:
    """Single-player game holder: starts, plays, restarts and closes one field."""

    def __init__(self, glyphs: Glyphs = DEFAULT_GLYPHS) -> None:
        self.glyphs = glyphs
        self.field: Optional[Field] = None
        self.difficulty: Optional[str] = None

    def get_field(self) -> Optional[Field]:
        return self.field

    def _require(self) -> Field:
        if self.field is None:
            raise KeyError("game_not_found")
        return self.field

    def start_game(self, width: int, height: int, difficulty: Optional[str], rng_seed: Optional[int] = None) -> Field:
        name = normalize_difficulty(difficulty)
        rng = random.Random(rng_seed) if rng_seed is not None else None
        f = Field(width, height, mine_probability(name), rng=rng)
        f.generate()
        self.field = f
        self.difficulty = name
        logger.info(f"[minefield] start width={width} height={height} difficulty={name} mines={f.mine_count}")
        return f

    def restart(self) -> Field:
        f = self._require()
        f.generate()
        logger.info(f"[minefield] restart width={f.width} height={f.height} mines={f.mine_count}")
        return f

    def close(self) -> None:
        self._require()
        self.field = None
        self.difficulty = None

    def _log_end(self, outcome: Outcome, action: str, x: int, y: int) -> None:
        if outcome != Outcome.NONE:
            f = self._require()
            logger.info(
                f"[minefield] game_over outcome={outcome.value} action={action} x={x} y={y} "
                f"flags={f.flag_count} mines={f.mine_count}"
            )

    def reveal(self, x: int, y: int) -> Outcome:
        outcome = self._require().reveal(x, y)
        self._log_end(outcome, "reveal", x, y)
        return outcome

    def flag(self, x: int, y: int) -> Outcome:
        outcome = self._require().toggle_flag(x, y)
        self._log_end(outcome, "flag", x, y)
        return outcome

    def to_client(self) -> Dict[str, Any]:
        f = self._require()
        flags, mines = f.remaining_flags_text()
        doc: Dict[str, Any] = {
            "board_width": f.width,
            "board_height": f.height,
            "difficulty": self.difficulty,
            "mine_probability": f.mine_probability,
            "status": f.status.value,
            "flags_total": flags,
            "mines_total": mines,
            "flags_text": f"Flags: {flags}/{mines}",
            "board": render_board(f, self.glyphs),
        }
        if f.status == Status.LOSS and f.triggered_mine is not None:
            doc["triggered_mine"] = {"x": f.triggered_mine.x, "y": f.triggered_mine.y}
        return doc
