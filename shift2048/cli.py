import argparse
import logging
import sys

import numpy as np

from shift2048.game import TWO_PROBABILITY, GridEngine
from shift2048.session import Session
from shift2048.terminal import iter_keys, play, raw_mode


def _probability(value: str) -> float:
    p = float(value)
    if not 0.0 <= p <= 1.0:
        raise argparse.ArgumentTypeError(f"{value} is not within [0, 1]")
    return p


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shift2048", description="Play 2048 in the terminal with the arrow keys or WASD."
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible tile spawns")
    parser.add_argument(
        "--two-probability",
        type=_probability,
        default=TWO_PROBABILITY,
        help=f"Chance that a new tile is a 2 rather than a 4 (default: {TWO_PROBABILITY})",
    )
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    if not sys.stdin.isatty():
        print("shift2048 needs an interactive terminal", file=sys.stderr)
        return 1

    engine = GridEngine(rng=np.random.default_rng(args.seed), two_probability=args.two_probability)
    session = Session(engine)
    with raw_mode(sys.stdin, sys.stdout):
        play(session, iter_keys(sys.stdin.fileno()), sys.stdout)
    return 0
