"""Command line entry point: parse a file and print its tree."""

import argparse
import sys
from pathlib import Path

from .parser import MiniHTML, StrictModeError
from .serialize import to_html, to_test_format, to_tree
from .tokens import UnclosedElementError

FORMATTERS = {
    "tree": to_tree,
    "test": to_test_format,
    "html": to_html,
}


def _read_source(path):
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="minihtml", description="Parse an HTML file and print its tree")
    parser.add_argument("file", help="HTML file to parse ('-' reads stdin)")
    parser.add_argument(
        "--format", "-f",
        choices=sorted(FORMATTERS),
        default="tree",
        help="Output format (default: tree)",
    )
    parser.add_argument("--errors", "-e", action="store_true", help="Print parse errors to stderr")
    parser.add_argument("--strict", action="store_true", help="Fail on the first parse error")
    parser.add_argument("--debug", action="store_true", help="Trace recognized units")
    args = parser.parse_args(argv)

    try:
        html = _read_source(args.file)
    except OSError as e:
        print(f"ERROR: cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    try:
        doc = MiniHTML(html, collect_errors=args.errors, strict=args.strict, debug=args.debug)
    except (UnclosedElementError, StrictModeError) as e:
        print(f"ERROR: {e.error}", file=sys.stderr)
        return 1

    print(FORMATTERS[args.format](doc.root))
    for error in doc.errors:
        print(error, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
