from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Optional

from .config import load_settings
from .layout import LayoutError, SeatLayoutRequest, build_request, build_rng
from .render import render_ascii
from .session import SeatingSession


def _parse_depths(text: str) -> list[int]:
    try:
        return [int(part) for part in text.split(",") if part.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"depths must be comma separated integers: {text!r}") from e


def _parse_swap(text: str) -> tuple[int, int]:
    try:
        a, b = text.split(":", 1)
        return int(a), int(b)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"swap must look like A:B, got {text!r}") from e


def _build_request(args: argparse.Namespace) -> SeatLayoutRequest:
    return build_request(
        student_count=args.students,
        column_count=args.columns,
        depths=args.depths,
        default_columns=args.settings.default_columns,
        default_depth=args.settings.default_depth,
    )


def cmd_balance(args: argparse.Namespace) -> int:
    session = SeatingSession(args.settings)
    depths = session.optimize(args.students, args.columns)
    print(",".join(str(d) for d in depths))
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    session = SeatingSession(args.settings, rng=build_rng(seed=args.seed))
    session.generate(_build_request(args), title=args.title)
    for a, b in args.swap:
        if session.swap_numbers(a, b) is not None:
            print(f"Swapped {a} <-> {b}")
        else:
            print(f"Skipped {a} <-> {b}: nothing to swap")

    print(render_ascii(session.require_board(), cell_width=args.width, title=session.heading))

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["row", "col", "seat"])
            for row, col, number in session.roster():
                w.writerow([row + 1, col + 1, number])
        print(f"Exported roster to {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seat_shuffler", description="Random classroom seat assignment.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_balance = sub.add_parser("balance", help="Spread seats evenly over columns, center first")
    p_balance.add_argument("--students", type=int, required=True)
    p_balance.add_argument("--columns", type=int, required=True)
    p_balance.set_defaults(func=cmd_balance)

    p_gen = sub.add_parser("generate", help="Shuffle seat numbers onto the classroom grid")
    p_gen.add_argument("--students", type=int, help="Number of seats (balanced over --columns)")
    p_gen.add_argument("--columns", type=int, help="Number of columns")
    p_gen.add_argument("--depths", type=_parse_depths, help="Manual seats per column, e.g. 4,3,3")
    p_gen.add_argument("--seed", type=int, help="Seed for a reproducible shuffle")
    p_gen.add_argument("--title", default="", help="Class name shown above the board")
    p_gen.add_argument("--width", type=int, default=6, help="Cell width for display")
    p_gen.add_argument(
        "--swap",
        type=_parse_swap,
        action="append",
        default=[],
        help="Swap two seat numbers after shuffling, e.g. 7:2 (repeatable)",
    )
    p_gen.add_argument("--output", help="Write the roster to this CSV file")
    p_gen.set_defaults(func=cmd_generate)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    try:
        args.settings = load_settings()
        return int(args.func(args))
    except LayoutError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
