import logging
from enum import IntEnum

import numpy as np

logger = logging.getLogger(__name__)

SIZE = 4
TWO_PROBABILITY = 0.75
TILE_VALUES = (2, 4)


class Direction(IntEnum):
    """Shift directions: 0 - Right, 1 - Up, 2 - Left, 3 - Down."""

    RIGHT = 0
    UP = 1
    LEFT = 2
    DOWN = 3

    @property
    def horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def toward_end(self) -> bool:
        """Whether tiles travel to the right/bottom end of their line."""
        return self in (Direction.RIGHT, Direction.DOWN)


class ProtocolViolation(RuntimeError):
    """Raised when a caller breaks the engine's calling contract."""


def _as_direction(direction) -> Direction:
    if isinstance(direction, bool):
        raise ProtocolViolation(f"invalid direction: {direction!r}")
    try:
        return Direction(direction)
    except (ValueError, TypeError) as e:
        raise ProtocolViolation(f"invalid direction: {direction!r}") from e


def merge_line(line: list[int], direction) -> list[int]:
    """
    Merge and compact a single row or column in the given direction.

    Each tile merges at most once, and pairs are taken from the edge the
    tiles travel toward, so [2, 2, 2, 0] moved left gives [4, 2, 0, 0].
    """
    direction = _as_direction(direction)
    non_zeros = [int(e) for e in line if e != 0]
    if direction.toward_end:
        non_zeros.reverse()

    merged = []
    i = 0
    while i < len(non_zeros):
        if i + 1 < len(non_zeros) and non_zeros[i] == non_zeros[i + 1]:
            merged.append(non_zeros[i] * 2)
            i += 2
        else:
            merged.append(non_zeros[i])
            i += 1

    padding = [0] * (len(line) - len(merged))
    if direction.toward_end:
        return padding + merged[::-1]
    return merged + padding


class GridEngine:
    """2048 grid state"""

    size: int
    changed: bool

    def __init__(self, size=SIZE, rng=None, two_probability=TWO_PROBABILITY):
        if size < 2:
            raise ValueError(f"grid size must be at least 2, got {size}")
        if not 0.0 <= two_probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {two_probability}")
        self.size = size
        self.rng = rng if rng is not None else np.random.default_rng()
        self.two_probability = two_probability
        self.changed = False
        self._grid = np.zeros((size, size), dtype=np.uint32)

    @classmethod
    def from_rows(cls, rows, rng=None, two_probability=TWO_PROBABILITY) -> "GridEngine":
        grid = np.array(rows, dtype=np.int64)
        if grid.ndim != 2 or grid.shape[0] != grid.shape[1]:
            raise ValueError(f"rows must form a square grid, got shape {grid.shape}")
        tiles = grid[grid != 0]
        if (tiles < 2).any() or (tiles & (tiles - 1)).any():
            raise ValueError("cells must be 0 or a power of two >= 2")
        if (tiles > np.iinfo(np.uint32).max).any():
            raise ValueError(f"tiles above {np.iinfo(np.uint32).max} do not fit the grid")
        engine = cls(grid.shape[0], rng, two_probability)
        engine._grid[:] = grid
        return engine

    @property
    def cells(self) -> np.ndarray:
        """Read-only row-major view of the grid."""
        view = self._grid.view()
        view.flags.writeable = False
        return view

    def spawn_tile(self) -> tuple[int, int, int]:
        empty = np.argwhere(self._grid == 0)
        if len(empty) == 0:
            raise ProtocolViolation("spawn_tile called on a full grid")
        row, col = (int(e) for e in empty[self.rng.integers(len(empty))])
        if self.rng.random() < self.two_probability:
            value = TILE_VALUES[0]
        else:
            value = TILE_VALUES[1]
        self._grid[row, col] = value
        logger.debug("spawned %d at (%d, %d)", value, row, col)
        return row, col, value

    def shift(self, direction) -> bool:
        """
        Shift every line toward one edge. Return whether the grid changed.

        Only lines that differ are written back. ``changed`` is set when any
        line moved and is left for the caller to clear.
        """
        direction = _as_direction(direction)
        changed = False
        for i in range(self.size):
            line = self._grid[i, :] if direction.horizontal else self._grid[:, i]
            last = line.tolist()
            moved = merge_line(last, direction)
            if moved != last:
                line[:] = moved
                changed = True
        if changed:
            self.changed = True
        logger.debug("shift %s changed=%s", direction.name, changed)
        return changed

    def has_no_moves(self) -> bool:
        grid = self._grid
        if (grid == 0).any():
            return False
        if (grid[:, :-1] == grid[:, 1:]).any():
            return False
        if (grid[:-1, :] == grid[1:, :]).any():
            return False
        return True

    def clone(self) -> "GridEngine":
        engine = GridEngine(self.size, self.rng, self.two_probability)
        engine._grid = self._grid.copy()
        engine.changed = self.changed
        return engine

    def can_shift(self, direction) -> bool:
        return self.clone().shift(direction)

    def __str__(self) -> str:
        return "\n".join(
            "".join(f"{'.' if e == 0 else e:<5}" for e in row)
            for row in self._grid.tolist()
        )
