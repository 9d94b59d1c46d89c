"""Expression nodes.

The `__str__` of every node produces the canonical parenthesized-prefix form of the
expression, e.g. `(+ 1 (* 2 3))`.
"""
from dataclasses import dataclass
from typing import List

from treelox.language.lox_types import LoxPrimitive, lox_object_to_str
from treelox.lexing.token import Token


class Expr:
    """Base class for expressions which have differing attributes."""


@dataclass
class AssignmentExpr(Expr):
    target: Token
    value: Expr

    def __str__(self) -> str:
        return f"(= {self.target.lexeme} {self.value})"


@dataclass
class BinaryExpr(Expr):
    operator: Token
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.left} {self.right})"


@dataclass
class LogicalExpr(BinaryExpr):
    """A short-circuiting `and` or `or`."""


@dataclass
class CallExpr(Expr):
    callee: Expr
    paren: Token  # The closing parenthesis, for error reporting.
    arguments: List[Expr]

    def __str__(self) -> str:
        return f"(call {' '.join(map(str, (self.callee, *self.arguments)))})"


@dataclass
class GroupingExpr(Expr):
    expression: Expr

    def __str__(self) -> str:
        return f"(group {self.expression})"


@dataclass
class LiteralExpr(Expr):
    value: LoxPrimitive

    def __str__(self) -> str:
        return lox_object_to_str(self.value)


@dataclass
class UnaryExpr(Expr):
    operator: Token
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.right})"


@dataclass
class VariableExpr(Expr):
    target: Token

    def __str__(self) -> str:
        return self.target.lexeme
