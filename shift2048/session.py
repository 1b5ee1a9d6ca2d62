import logging
from enum import Enum

from shift2048.game import Direction, GridEngine, ProtocolViolation

logger = logging.getLogger(__name__)


class State(Enum):
    STARTING = "starting"
    RUNNING = "running"
    GAME_OVER = "game_over"


class Quit(Enum):
    QUIT = "quit"


Command = Direction | Quit


class Session:
    """One game: a grid engine plus the turn rules around it."""

    engine: GridEngine
    state: State

    def __init__(self, engine: GridEngine):
        self.engine = engine
        self.state = State.STARTING
        self.turns = 0
        self.quit = False

    @property
    def over(self) -> bool:
        return self.state is State.GAME_OVER

    def start(self):
        if self.state is not State.STARTING:
            raise ProtocolViolation(f"session already {self.state.value}")
        self.engine.spawn_tile()
        self.state = State.RUNNING
        logger.info("game started")

    def handle(self, command: Command) -> bool:
        """
        Play one command. Return whether the board changed.

        A direction that moves nothing spawns no tile; if the board is also
        stuck the game ends. Commands after the game is over are ignored.
        """
        if self.state is State.STARTING:
            raise ProtocolViolation("session not started")
        if self.over:
            return False
        if command is Quit.QUIT:
            self.quit = True
            self._finish("player quit")
            return False

        changed = self.engine.shift(command)
        self.engine.changed = False
        if changed:
            self.engine.spawn_tile()
            self.turns += 1
            return True
        if self.engine.has_no_moves():
            self._finish("no moves left")
        return False

    def _finish(self, reason: str):
        self.state = State.GAME_OVER
        logger.info("game over after %d turns: %s", self.turns, reason)
