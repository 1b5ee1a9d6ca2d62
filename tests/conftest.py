"""Shared fixtures for the shift2048 tests."""

import numpy as np
import pytest

from shift2048.game import GridEngine


class ScriptedRng:
    """Random source that replays fixed draws, failing loudly when it runs dry."""

    def __init__(self, indices: list[int] | None = None, draws: list[float] | None = None) -> None:
        self.indices = list(indices or [])
        self.draws = list(draws or [])

    def integers(self, high: int) -> int:
        value = self.indices.pop(0)
        assert 0 <= value < high
        return value

    def random(self) -> float:
        return self.draws.pop(0)


@pytest.fixture()
def scripted_rng() -> type[ScriptedRng]:
    return ScriptedRng


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(2048)


@pytest.fixture()
def stuck_rows() -> list[list[int]]:
    """Full board with no two orthogonal neighbours equal."""
    return [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 4, 2],
    ]


@pytest.fixture()
def random_boards(rng: np.random.Generator) -> list[GridEngine]:
    """A spread of seeded 4x4 boards mixing empty cells and small tiles."""
    values = np.array([0, 0, 2, 2, 4, 8, 16])
    return [
        GridEngine.from_rows(rng.choice(values, size=(4, 4)).tolist(), rng=rng)
        for _ in range(200)
    ]
