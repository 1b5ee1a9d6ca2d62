"""
Terminal front end: raw mode, key decoding and box-drawing output.

Everything here writes to the stream it is given; nothing holds on to a
global stdout.
"""

import codecs
import logging
import os
import select
import shutil
import termios
import tty
from contextlib import contextmanager

from shift2048.game import Direction
from shift2048.session import Command, Quit, Session, State

logger = logging.getLogger(__name__)

ESC = "\x1b"
CLEAR_SCREEN = ESC + "[2J"
CURSOR_HOME = ESC + "[H"
HIDE_CURSOR = ESC + "[?25l"
SHOW_CURSOR = ESC + "[?25h"

CELL_WIDTH = 5
READ_SIZE = 32
ESCAPE_TIMEOUT = 0.05

KEYMAP: dict[str, Command] = {
    ESC + "[A": Direction.UP,
    ESC + "[B": Direction.DOWN,
    ESC + "[C": Direction.RIGHT,
    ESC + "[D": Direction.LEFT,
    # application cursor mode
    ESC + "OA": Direction.UP,
    ESC + "OB": Direction.DOWN,
    ESC + "OC": Direction.RIGHT,
    ESC + "OD": Direction.LEFT,
    "w": Direction.UP,
    "s": Direction.DOWN,
    "d": Direction.RIGHT,
    "a": Direction.LEFT,
    "q": Quit.QUIT,
    ESC: Quit.QUIT,
    "\x03": Quit.QUIT,  # Ctrl+C
    "\x04": Quit.QUIT,  # Ctrl+D
}


@contextmanager
def raw_mode(stdin, stdout):
    """Put the terminal in raw mode with the cursor hidden, restoring both on exit."""
    fd = stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        stdout.write(HIDE_CURSOR)
        stdout.flush()
        yield
    finally:
        stdout.write(SHOW_CURSOR)
        stdout.flush()
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def split_keys(text: str) -> list[str]:
    """Split raw terminal input into keystrokes, keeping escape sequences whole."""
    keys = []
    i = 0
    while i < len(text):
        if text[i] == ESC and text[i + 1 : i + 2] in ("[", "O") and i + 2 < len(text):
            keys.append(text[i : i + 3])
            i += 3
        else:
            keys.append(text[i])
            i += 1
    return keys


def _escape_tail(text: str) -> int:
    """Length of an escape sequence cut off at the end of ``text``."""
    if text.endswith(ESC):
        return 1
    if text[-2:] in (ESC + "[", ESC + "O"):
        return 2
    return 0


def _input_pending(fd: int) -> bool:
    return bool(select.select([fd], [], [], ESCAPE_TIMEOUT)[0])


def iter_keys(fd: int):
    """
    Yield keystrokes read from a raw-mode file descriptor until end of input.

    An escape sequence or UTF-8 character split between two reads is held
    back and completed by the next read. A trailing ``ESC`` is a key of its
    own only when no more input follows.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while True:
        data = os.read(fd, READ_SIZE)
        if not data:
            yield from split_keys(pending + decoder.decode(b"", final=True))
            return
        text = pending + decoder.decode(data)
        tail = _escape_tail(text)
        if tail and _input_pending(fd):
            text, pending = text[:-tail], text[-tail:]
        else:
            pending = ""
        yield from split_keys(text)


def decode_key(key: str) -> Command | None:
    if len(key) == 1:
        key = key.lower()
    return KEYMAP.get(key)


def board_extent(size: int) -> tuple[int, int]:
    """Width and height of the rendered board in characters."""
    return (CELL_WIDTH + 1) * size + 1, 2 * size + 1


def _border(size: int, left: str, middle: str, right: str) -> str:
    return left + middle.join(["─" * CELL_WIDTH] * size) + right


def render(cells) -> list[str]:
    size = len(cells)
    lines = [_border(size, "┌", "┬", "┐")]
    for i, row in enumerate(cells):
        labels = ("." if e == 0 else str(e) for e in row)
        lines.append("│" + "".join(f"{label:^{CELL_WIDTH}}│" for label in labels))
        if i != size - 1:
            lines.append(_border(size, "├", "┼", "┤"))
    lines.append(_border(size, "└", "┴", "┘"))
    return lines


def draw(cells, out, terminal_size: tuple[int, int]):
    columns, rows = terminal_size
    width, height = board_extent(len(cells))
    left = max((columns - width) // 2, 0)
    top = max((rows - height) // 2, 0)

    out.write(CLEAR_SCREEN + CURSOR_HOME)
    out.write("\r\n" * top)
    out.write("\r\n".join(" " * left + line for line in render(cells)))
    out.write("\r\n")
    out.flush()


def play(session: Session, keys, out, terminal_size=shutil.get_terminal_size):
    """Run the read-evaluate-draw loop until the game ends or input runs out."""
    if session.state is State.STARTING:
        session.start()
    draw(session.engine.cells, out, tuple(terminal_size()))

    for key in keys:
        command = decode_key(key)
        if command is None:
            logger.debug("ignored key %r", key)
            continue
        if session.handle(command):
            draw(session.engine.cells, out, tuple(terminal_size()))
        if session.over:
            break

    if session.over and not session.quit:
        out.write("Game over!\r\n")
        out.flush()
