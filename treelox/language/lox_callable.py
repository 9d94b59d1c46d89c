from __future__ import annotations

from abc import ABC
from itertools import repeat
from typing import TYPE_CHECKING, Callable, List, Optional

from treelox.language.lox_types import LoxObject
from treelox.lexing.token import Token
from treelox.parsing.stmt import FunctionDeclarationStmt, Stmt

if TYPE_CHECKING:
    from treelox.runtime.environment import Environment


class LoxCallable(ABC):
    name: str
    arity: int

    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(repeat('arg', self.arity))})>"


class LoxFunction(LoxCallable):
    """A user-defined function and the environment it closes over."""

    def __init__(self, declaration: FunctionDeclarationStmt, closure: Environment) -> None:
        self.name = declaration.name.lexeme
        self.params: List[Token] = declaration.params
        self.arity = len(self.params)
        self.body: List[Stmt] = declaration.body
        self.closure = closure

    def __str__(self) -> str:
        return f"<fn {self.name}>"


class LoxNativeFunction(LoxCallable):
    """A function implemented in Python and exposed to Lox programs."""

    def __init__(self, name: str, arity: int, function: Callable[..., LoxObject]) -> None:
        self.name = name
        self.arity = arity
        self.function = function

    def __str__(self) -> str:
        return "<native fn>"


class LoxReturn(Exception):
    """Unwinds the interpreter from a `return` statement to the enclosing call."""

    def __init__(self, value: Optional[LoxObject]) -> None:  # pylint: disable=super-init-not-called
        self.value = value
