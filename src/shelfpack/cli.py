#!/usr/bin/env python3
"""Command-line interface for laying out rectangles with the shelf packer.

Each rectangle is given as ``ID:WIDTHxHEIGHT`` (or just ``WIDTHxHEIGHT``
to let the packer mint an id). Placements are printed one per line.

Usage:
    shelfpack pack icon:32x32 banner:200x40 16x16
    shelfpack pack a:10x10 b:5x5 --width 64 --height 64 --no-auto-resize
    shelfpack pack a:10x10 b:5x5 --sort none --padding 2 -v
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import List, Optional, Sequence

from shelfpack.layout import SpriteLayout
from shelfpack.logger import setup_logging
from shelfpack.packer_types import PackerOptions, PackerResult, PackRequest

_ITEM_PATTERN = re.compile(r"^(?:(?P<id>[^:]+):)?(?P<width>\d+)[xX](?P<height>\d+)$")

VALID_SORT_VALUES = ("area", "max-side", "none")


def parse_item(token: str) -> PackRequest:
    """Parse an ``ID:WIDTHxHEIGHT`` token.

    Ids made of digits only are treated as integer ids.

    Raises:
        ValueError: If the token is malformed.
    """
    match = _ITEM_PATTERN.match(token.strip())
    if not match:
        raise ValueError(f"Invalid item '{token}', expected ID:WIDTHxHEIGHT")

    raw_id = match.group("id")
    item_id = None
    if raw_id is not None:
        item_id = int(raw_id) if raw_id.isdigit() else raw_id
    return PackRequest(item_id, int(match.group("width")), int(match.group("height")))


def print_result(result: PackerResult) -> None:
    """Print a layout result to stdout.

    Args:
        result: The layout result to display.
    """
    status = "SUCCESS" if result.success else "FAILED"
    print(f"\n[PACK] {status}")

    if result.packed:
        print("\nPlacements:")
        for item in result.packed:
            print(f"  {item.id!s:<16} x={item.x:<6} y={item.y:<6} {item.width}x{item.height}")
        print(
            f"\nAtlas: {result.atlas_width}x{result.atlas_height} "
            f"(canvas {result.canvas_width}x{result.canvas_height}, "
            f"efficiency {result.efficiency * 100:.1f}%)"
        )

    if result.errors:
        print("\nErrors:")
        for error in result.errors:
            print(f" {error}")


def cmd_pack(items: List[PackRequest], options: PackerOptions) -> int:
    """Lay out the given items.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    result = SpriteLayout(options).pack(items)
    print_result(result)
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="shelfpack",
        description="Shelf packing for sprite sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s pack a:10x10 b:5x5             Pack two rectangles, growing the canvas
  %(prog)s pack a:10x10 --width 8 --no-auto-resize
                                          Fail instead of growing
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log packer decisions",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    pack_parser = subparsers.add_parser(
        "pack",
        help="Lay out rectangles and print their positions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pack_parser.add_argument(
        "items",
        nargs="+",
        help="Rectangles as ID:WIDTHxHEIGHT or WIDTHxHEIGHT",
    )
    pack_parser.add_argument("--width", type=int, default=1, help="Initial canvas width")
    pack_parser.add_argument("--height", type=int, default=1, help="Initial canvas height")
    pack_parser.add_argument(
        "--no-auto-resize",
        action="store_false",
        dest="auto_resize",
        help="Fail instead of growing the canvas",
    )
    pack_parser.add_argument(
        "--padding", type=int, default=0, help="Pixels reserved after each rectangle"
    )
    pack_parser.add_argument(
        "--sort",
        choices=VALID_SORT_VALUES,
        default="area",
        help="Packing order (default: area)",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point.

    Args:
        argv: Command-line arguments; uses sys.argv if None.

    Returns:
        Exit code for the process.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        items = [parse_item(token) for token in args.items]
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    options = PackerOptions(
        width=args.width,
        height=args.height,
        auto_resize=args.auto_resize,
        padding=args.padding,
        sort_by_area=args.sort == "area",
        sort_by_max_side=args.sort == "max-side",
    )
    return cmd_pack(items, options)


if __name__ == "__main__":
    sys.exit(main())
