#!/usr/bin/env python3
"""
lifo: LIFO Script interpreter CLI

Usage:
    python lifo.py <script.lifo> [--tokens] [--allow-unresolved-labels]
                                 [--verbose] [--quiet] [--log-file PATH]
    python lifo.py -e 'PUSH_INT 6 PUSH_INT 5 ADD'
    python lifo.py - < script.lifo

The final stack is printed top-first, one ``value : type`` line per element.
LOG instructions print the stack at that point as ``current stack: [...]``.

Exit status:
    0  script ran to completion
    1  script error (the single error is printed on stderr)
    2  internal error
"""

import argparse
import logging
import sys

from lifoscript import ScriptError, __version__, format_stack, run_source, tokenize
from lifoscript.log_setup import setup_logging

log = logging.getLogger("lifoscript.cli")


def _read_source(args) -> str:
    if args.expr is not None:
        return args.expr
    if args.input == "-":
        return sys.stdin.read()
    with open(args.input, "r", encoding="utf-8") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifo",
        description="Single-pass interpreter for LIFO Script",
    )
    parser.add_argument("input", nargs="?", default="-",
                        help="Script file, or - for stdin (default)")
    parser.add_argument("-e", "--expr", default=None,
                        help="Run SOURCE given on the command line instead of a file")
    parser.add_argument("--tokens", action="store_true",
                        help="Dump the token stream and exit (debug)")
    parser.add_argument("--allow-unresolved-labels", action="store_true",
                        help="Do not fail when a jump target is never declared")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log execution details to stderr (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", default=None,
                        help="Write a full debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"lifo {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    elif args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    setup_logging(console_level=level, log_file=args.log_file)

    # Read input
    try:
        source = _read_source(args)
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        # Token dump mode
        if args.tokens:
            for tok in tokenize(source):
                print(tok)
            return 0

        result = run_source(
            source,
            strict_labels=not args.allow_unresolved_labels,
            on_log=lambda stack: print(f"current stack: {format_stack(stack)}"),
        )
        for el in result.stack:
            print(el)
    except ScriptError as e:
        print(e, file=sys.stderr)
        return 1
    except Exception as e:
        log.exception("Internal interpreter error: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
