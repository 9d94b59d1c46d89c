from __future__ import annotations

from typing import Dict, Optional

from treelox.language.lox_types import LoxObject
from treelox.lexing.token import Token
from treelox.utilities.error import ErrorKind, LoxRuntimeError


class Environment:
    """A scope: bindings from names to values, chained to the scope enclosing it.

    The global scope is simply an `Environment` without an enclosing one. Closures keep
    a reference to the `Environment` they were defined in, which keeps it (and its
    enclosing chain) alive after the block or call that created it has finished.
    """

    def __init__(self, enclosing: Optional[Environment] = None) -> None:
        self._values: Dict[str, LoxObject] = dict()
        self.enclosing = enclosing

    def child(self) -> Environment:
        return Environment(self)

    def define(self, name: str, value: LoxObject) -> None:
        """Bind `name` in this scope, shadowing or overwriting any previous binding."""
        self._values[name] = value

    def assign(self, name: Token, value: LoxObject) -> None:
        """Rebind `name` in the nearest scope that defines it. Never creates a binding."""
        environment: Optional[Environment] = self
        while environment is not None:
            if name.lexeme in environment._values:
                environment._values[name.lexeme] = value
                return
            environment = environment.enclosing
        raise _undefined(name)

    def get(self, name: Token) -> LoxObject:
        environment: Optional[Environment] = self
        while environment is not None:
            try:
                return environment._values[name.lexeme]
            except KeyError:
                environment = environment.enclosing
        raise _undefined(name)


def _undefined(name: Token) -> LoxRuntimeError:
    return LoxRuntimeError.at_token(
        name, f"Undefined variable '{name.lexeme}'.", kind=ErrorKind.UNDEFINED_VARIABLE
    )
