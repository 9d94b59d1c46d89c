from typing import List, Optional

from treelox.language.lox_types import (LoxLiteral, lox_is_digit, lox_is_valid_identifier_name,
                                        lox_is_valid_identifier_start)
from treelox.lexing.token import COMPOUND_TOKENS, KEYWORDS, SINGLE_CHAR_TOKENS, Tk, Token
from treelox.utilities import dump_internal
from treelox.utilities.configuration import Debug
from treelox.utilities.error import LoxErrorHandler, LoxLexicalError
from treelox.utilities.streamview import StreamView

WHITESPACE = frozenset(" \r\t")


class Scanner:
    """Turns source text into a list of Tokens terminated by EOF.

    Scanning never stops early: an unexpected character or an unterminated string is
    reported to the error handler and the scanner resumes right after it.
    """

    def __init__(
            self,
            source: str,
            error_handler: LoxErrorHandler,
            *,
            debug_flags: Debug = Debug(0)
    ) -> None:
        self._tokens: List[Token] = list()
        self._sv = StreamView(source)
        self._error_handler = error_handler
        self._debug_flags = debug_flags
        self._line = 1

    def scan_tokens(self) -> List[Token]:
        while self._sv.has_next():
            self._sv.set_marker()  # Start of the next lexeme.
            self._lexeme(self._sv.advance())
        self._tokens.append(Token(Tk.EOF, "", None, self._line))

        if self._debug_flags & Debug.DUMP_TOKENS:
            dump_internal("Token", *self._tokens)
        return self._tokens

    def _lexeme(self, char: str) -> None:
        if char + str(self._sv.peek()) in COMPOUND_TOKENS:  # Maximal munch.
            self._sv.advance()
            self._emit(Tk(self._sv.get_slice_from_marker()))
        elif char in SINGLE_CHAR_TOKENS:
            self._emit(Tk(char))
        elif char == "/":
            self._slash()
        elif char == '"':
            self._string()
        elif char == "\n":
            self._line += 1
        elif char in WHITESPACE:
            pass
        elif lox_is_digit(char):
            self._number()
        elif lox_is_valid_identifier_start(char):
            self._identifier()
        else:
            self._error(f"Unexpected character: {char}")

    def _emit(self, token_type: Tk, literal: Optional[LoxLiteral] = None) -> None:
        self._tokens.append(Token(token_type, self._sv.get_slice_from_marker(), literal, self._line))

    def _error(self, message: str) -> None:
        self._error_handler.err(LoxLexicalError(self._line, message))

    # ~~~ Multi-character lexemes ~~~

    def _slash(self) -> None:
        if self._sv.advance_if_match("/"):
            self._sv.advance_while(lambda c: c != "\n")  # Comment until the end of the line.
        else:
            self._emit(Tk.SLASH)

    def _string(self) -> None:
        """Strings may span lines and have no escapes. The token's line is the closing quote's."""
        while self._sv.has_next() and not self._sv.match('"'):
            if self._sv.advance() == "\n":
                self._line += 1
        if not self._sv.advance_if_match('"'):
            self._error("Unterminated string.")
            return
        self._emit(Tk.STRING, self._sv.get_slice_from_marker()[1:-1])

    def _number(self) -> None:
        self._sv.advance_while(lox_is_digit)
        # "1234." is the number 1234 followed by a dot.
        if self._sv.match(".") and lox_is_digit(self._sv.peek(1)):
            self._sv.advance()
            self._sv.advance_while(lox_is_digit)
        self._emit(Tk.NUMBER, float(self._sv.get_slice_from_marker()))

    def _identifier(self) -> None:
        self._sv.advance_while(lox_is_valid_identifier_name)
        self._emit(KEYWORDS.get(self._sv.get_slice_from_marker(), Tk.IDENTIFIER))
