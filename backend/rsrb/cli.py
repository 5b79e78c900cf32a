"""Command line runner: ``rsrb FILE`` / ``python -m backend.rsrb FILE``.

Printed output goes to stdout as it is produced and warnings go to stderr.
Exit status is 0 for a completed run, 1 when the file cannot be read or a
runtime limit stopped the run, and 2 (argparse) for usage errors.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .interpreter import Interpreter


MAX_CALL_DEPTH_CEILING = 1000


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{raw}'")
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def _call_depth(raw: str) -> int:
    value = _positive_int(raw)
    if value > MAX_CALL_DEPTH_CEILING:
        raise argparse.ArgumentTypeError(f"must be at most {MAX_CALL_DEPTH_CEILING}")
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rsrb", description="Run an rsrb program")
    p.add_argument("file", help="path of the .rsrb source file to run")
    p.add_argument("--max-steps", type=_positive_int, default=None, help="Statements executed before the run is stopped")
    p.add_argument(
        "--max-call-depth",
        type=_call_depth,
        default=None,
        help=f"Nested calls allowed before a call is refused (1-{MAX_CALL_DEPTH_CEILING})",
    )
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        source = Path(args.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    it = Interpreter(stdout=sys.stdout, stderr=sys.stderr)
    res = it.run(source, settings={"max_steps": args.max_steps, "max_call_depth": args.max_call_depth})
    if res["errors"]:
        print(f"error: {res['errors']['message']}", file=sys.stderr)
        return 1
    return 0
