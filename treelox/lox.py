import logging
import sys
from typing import List

from treelox.language.lox_types import lox_object_to_str
from treelox.lexing.scanner import Scanner
from treelox.lexing.token import Token
from treelox.parsing.expr import Expr
from treelox.parsing.parser import Parser
from treelox.runtime.interpreter import Interpreter
from treelox.utilities.configuration import DEFAULT_MAX_CALL_DEPTH, Debug
from treelox.utilities.error import EXIT_SUCCESS, LoxErrorHandler, LoxExit

logger = logging.getLogger(__name__)


class Lox:
    """Drives source text through the scanner, the parser, and the interpreter.

    Each mode either returns normally or raises `LoxExit` carrying the exit code:
    65 once any lexical or syntax error has been reported, 70 after a runtime error.
    The global scope persists between calls, which is what the interactive prompt relies on.
    """
    PROMPT_CHARACTER = ">>> "

    def __init__(self, debug_flags: Debug = Debug(0), *, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> None:
        self.error_handler = LoxErrorHandler()
        self.debug_flags = debug_flags
        self.interpreter = Interpreter(self.error_handler, max_call_depth=max_call_depth)

    def run_file(self, path: str) -> None:
        with open(path, 'r') as fil:
            self.run(fil.read())

    def run_interactive(self) -> None:
        while True:
            try:
                self.run(input(self.PROMPT_CHARACTER))
            except LoxExit:
                continue
            except (KeyboardInterrupt, EOFError):  # Exit gracefully on ctrl-c or ctrl-d.
                print()
                return

    def tokenize(self, source: str) -> None:
        """Print every token, then fail if any of the source could not be scanned."""
        tokens = self._scan(source)
        print(*(token.to_string() for token in tokens), sep="\n")
        self.error_handler.checkpoint()

    def parse(self, source: str) -> None:
        """Print the syntax tree of a single expression."""
        expr = self._parse_expression(source)
        print(expr)

    def evaluate(self, source: str) -> None:
        """Evaluate a single expression and print its value."""
        expr = self._parse_expression(source)
        if self.debug_flags & Debug.NO_INTERPRET:
            return
        print(lox_object_to_str(self.interpreter.evaluate(expr)))

    def run(self, source: str) -> None:
        """Execute a whole program."""
        tokens = self._scan(source)
        statements = Parser(
            tokens,
            self.error_handler,
            dump=bool(self.debug_flags & Debug.DUMP_AST)
        ).parse()
        logger.debug("Parsed %d top-level statements", len(statements))

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.NO_INTERPRET:
            return
        self.interpreter.interpret(statements)

    # ~~~ Pipeline stages ~~~

    def _scan(self, source: str) -> List[Token]:
        self.error_handler.reset()
        source = source.replace("\r\n", "\n")
        tokens = Scanner(source, self.error_handler, debug_flags=self.debug_flags).scan_tokens()
        logger.debug("Scanned %d tokens", len(tokens))
        return tokens

    def _parse_expression(self, source: str) -> Expr:
        tokens = self._scan(source)
        expr = Parser(tokens, self.error_handler, dump=bool(self.debug_flags & Debug.DUMP_AST)).parse_expression()
        self.error_handler.checkpoint()
        assert expr is not None  # A missing expression always comes with a reported error.
        return expr


MODES = ("tokenize", "parse", "evaluate", "run")


def run_source(source: str, mode: str = "run", debug_flags: Debug = Debug(0)) -> int:
    """Process `source` in the given mode with a fresh interpreter and return the exit code."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode}")
    lox = Lox(debug_flags)
    try:
        getattr(lox, mode)(source)
    except LoxExit as exit_:
        return exit_.code
    finally:
        sys.stdout.flush()
    return EXIT_SUCCESS
