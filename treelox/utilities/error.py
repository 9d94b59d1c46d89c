"""Structured Lox errors and the handler that reports them.

Lexical and syntax errors are "static": they are collected while scanning and parsing,
and any one of them prevents the program from running at all. Runtime errors are fatal:
the first one aborts the run.
"""
from __future__ import annotations

from enum import Enum
from typing import ClassVar, List, Optional

from treelox.lexing.token import Tk, Token
from treelox.utilities import eprint

EXIT_SUCCESS = 0
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70


class ErrorKind(Enum):
    LEXICAL = "LexicalError"
    SYNTAX = "SyntaxError"
    TYPE_MISMATCH = "TypeMismatch"
    UNDEFINED_VARIABLE = "UndefinedVariable"
    ARITY_MISMATCH = "ArityMismatch"
    NOT_CALLABLE = "NotCallable"
    STACK_OVERFLOW = "StackOverflow"


class LoxExit(Exception):
    """Request to stop processing the current source with the given exit code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class LoxError(Exception):
    default_kind: ClassVar[ErrorKind]

    def __init__(self, line: int, message: str, *, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        self.line = line
        self.message = message
        self.kind = kind if kind is not None else self.default_kind

    def __str__(self) -> str:
        return f"[line {self.line}] Error: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.name}, line={self.line}, message={self.message!r})"


class LoxLexicalError(LoxError):
    default_kind = ErrorKind.LEXICAL


class LoxSyntaxError(LoxError):
    default_kind = ErrorKind.SYNTAX

    def __init__(self, line: int, message: str, *, where: str = "") -> None:
        super().__init__(line, message)
        self.where = where

    @classmethod
    def at_token(cls, token: Token, message: str) -> LoxSyntaxError:
        where = " at end" if token.token_type is Tk.EOF else f" at '{token.lexeme}'"
        return cls(token.line, message, where=where)

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


class LoxRuntimeError(LoxError):
    default_kind = ErrorKind.TYPE_MISMATCH

    @classmethod
    def at_token(cls, token: Token, message: str, *, kind: Optional[ErrorKind] = None) -> LoxRuntimeError:
        return cls(token.line, message, kind=kind)

    def __str__(self) -> str:
        return f"{self.message}\n[line {self.line}]"


class LoxErrorHandler:
    def __init__(self) -> None:
        self.errors: List[LoxError] = list()
        self.error_state = False
        self.runtime_error_state = False

    def reset(self) -> None:
        self.errors.clear()
        self.error_state = False
        self.runtime_error_state = False

    def err(self, error: LoxError) -> None:
        """Report an error. Runtime errors end the run immediately."""
        eprint(error)
        self.errors.append(error)
        if isinstance(error, LoxRuntimeError):
            self.runtime_error_state = True
            raise LoxExit(EXIT_RUNTIME_ERROR)
        self.error_state = True

    def checkpoint(self) -> None:
        """Stop if any static error has been reported so far."""
        if self.error_state:
            raise LoxExit(EXIT_STATIC_ERROR)


NOT_REACHED = AssertionError("Unreachable code reached")
