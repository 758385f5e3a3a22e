"""Bankforge - Command line interface.

Usage:
    bankforge build                 build every bank under generated/banks
    bankforge build <path|alias>    build one bank
    bankforge build --root DIR      use DIR as the invocation root

Exit code 0 when every requested bank built, 1 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from bankforge import __version__
from bankforge.builder import build_all, build_bank
from bankforge.config import get_log_level, get_root
from bankforge.errors import BankError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bankforge",
        description="Package Devalang sample banks into distributable archives",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-file details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build one bank or all banks")
    build.add_argument(
        "target",
        nargs="?",
        help="Bank directory, path to bank.toml, or alias bank.<author>.<name> / bank.<name>. "
        "Leave empty to build all banks.",
    )
    build.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Invocation root (default: $BANKFORGE_ROOT or the current directory)",
    )
    return parser


def _run_build(target: str | None, root: Path) -> int:
    if target:
        try:
            result = build_bank(root, target)
        except BankError as e:
            print(f"Error building bank: {e.message}", file=sys.stderr)
            return 1
        print(f"Bank built: {result.archive_path}")
        return 0

    try:
        summary = build_all(root)
    except BankError as e:
        print(f"Error building banks: {e.message}", file=sys.stderr)
        return 1

    for result in summary.built:
        print(f"Bank built: {result.archive_path}")
    if summary.ok:
        print(summary.report())
        return 0
    print(f"Error building banks: {summary.report()}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_log_level(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = args.root.resolve() if args.root is not None else get_root()

    if args.command == "build":
        return _run_build(args.target, root)
    return 2  # pragma: no cover - argparse rejects unknown commands


if __name__ == "__main__":
    raise SystemExit(main())
