import argparse
import logging
import sys
from functools import reduce
from typing import List, Optional

from treelox.lox import MODES, Lox
from treelox.utilities import eprint
from treelox.utilities.configuration import DEFAULT_MAX_CALL_DEPTH, Debug
from treelox.utilities.error import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, LoxExit


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treelox",
        description="A tree-walking interpreter for the Lox language",
        allow_abbrev=False
    )
    parser.add_argument(
        "mode",
        choices=(*MODES, "repl"),
        help="what to do with the source"
    )
    parser.add_argument(
        "source",
        metavar="FILE",
        nargs="?",
        type=str,
        default=None,
        help="the .lox file to process, stdin if omitted"
    )
    parser.add_argument(
        "-c",
        metavar="STRING",
        type=str,
        required=False,
        help="source string to process"
    )
    parser.add_argument(
        "--dbg",
        choices=tuple(option.name for option in Debug),
        default=list(),
        action="append",
        help="debugging options, multiple --dbg arguments can be passed"
    )
    parser.add_argument(
        "--max-call-depth",
        metavar="N",
        type=int,
        default=DEFAULT_MAX_CALL_DEPTH,
        help="deepest interpreted call allowed before reporting a stack overflow"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log interpreter internals to stderr"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_argument_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    debug_flags = reduce(lambda a, b: a | Debug[b], args.dbg, Debug(0))  # Collapse all flags passed.
    lox = Lox(debug_flags, max_call_depth=args.max_call_depth)

    if args.mode == "repl":
        lox.run_interactive()
        return EXIT_SUCCESS

    if args.c is not None:
        source = args.c
    elif args.source is not None:
        with open(args.source, "r") as fil:
            source = fil.read()
    else:
        source = sys.stdin.read()

    try:
        getattr(lox, args.mode)(source)
    except LoxExit as exit_:
        return exit_.code
    except RecursionError:
        if debug_flags & Debug.BACKTRACE:
            raise
        eprint("Internal error: host recursion limit exceeded.")
        return EXIT_RUNTIME_ERROR
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
