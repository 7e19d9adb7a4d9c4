"""
Command line entry point for the sudoku cube.
"""

import argparse
import logging
import sys

from puzzle import SudobixPuzzle, load_config


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for all subcommands."""
    parser = argparse.ArgumentParser(description="9x9x9 sudoku cube (Sudobix).")
    parser.add_argument("--config", default="sudobix", help="Config name (<name>.json)")
    parser.add_argument("--seed", type=int, help="Seed for shuffles")
    parser.add_argument(
        "--six-symmetries",
        action="store_true",
        help="Canonicalize over the 6 tried rotations instead of all 24",
    )
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("view", help="Interactive terminal viewer")
    for name, text in (
        ("fingerprint", "Print the encoding and canonical state after moves"),
        ("validate", "Print per-face sudoku validity after moves"),
    ):
        cmd = sub.add_parser(name, help=text)
        cmd.add_argument("moves", nargs="*", help="Moves such as y4 x-2' z02")
        cmd.add_argument("--shuffle", action="store_true", help="Shuffle before the moves")
    return parser


def make_puzzle(args) -> SudobixPuzzle:
    """Puzzle from the config file with command line overrides."""
    cfg = load_config(args.config)
    if args.seed is not None:
        cfg.seed = args.seed
    if args.six_symmetries:
        cfg.full_symmetry = False
    if args.debug:
        cfg.debug = True
    return SudobixPuzzle(cfg)


def apply_moves(puzzle: SudobixPuzzle, args):
    """Queue the requested shuffle and moves, then commit them."""
    if args.shuffle:
        puzzle.shuffle()
    puzzle.queue_sequence(" ".join(args.moves))
    puzzle.drain()


def main(argv=None) -> int:
    """Main logic"""
    args = build_parser().parse_args(argv)
    command = args.command or "view"
    level = logging.DEBUG if args.debug else logging.INFO
    if command == "view":
        logging.basicConfig(level=level, filename="sudobix.log")
    else:
        logging.basicConfig(level=level)

    try:
        puzzle = make_puzzle(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if command == "view":
        from viewer import run

        run(puzzle)
        return 0

    try:
        apply_moves(puzzle, args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if command == "fingerprint":
        fingerprint = puzzle.compute_sudobix()
        print(f"encoding:  {fingerprint.encoding}")
        print(f"canonical: {fingerprint.canonical}")
    else:
        for face, valid in puzzle.validity.items():
            print(f"{face:7s} {'valid' if valid else 'invalid'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
