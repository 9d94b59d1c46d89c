from dataclasses import dataclass
from typing import List, Optional

from treelox.lexing.token import Token
from treelox.parsing.expr import Expr
from treelox.utilities import indent, node_fields


class Stmt:
    """Base class for Lox statements."""

    def __str__(self) -> str:
        name, values = node_fields(self, "Stmt")
        return f"<{name}: {', '.join(values)}>"


@dataclass
class BlockStmt(Stmt):
    """A group of statements evaluated in their own scope."""
    body: List[Stmt]

    def __str__(self) -> str:
        inner_text = "".join(indent(str(stmt)) for stmt in self.body)
        return f"<block:\n{inner_text}>"


@dataclass
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass
class FunctionDeclarationStmt(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]

    def __str__(self) -> str:
        params_text = ", ".join(param.lexeme for param in self.params)
        body_text = "".join(indent(str(stmt)) for stmt in self.body)
        return f"<function: {self.name.lexeme}, [{params_text}],\n{body_text}>"


@dataclass
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]

    def __str__(self) -> str:
        inner_text = "".join(indent(str(attr)) for attr in vars(self).values() if attr is not None)
        return f"<if:\n{inner_text}>"


@dataclass
class PrintStmt(Stmt):
    expression: Expr


@dataclass
class ReturnStmt(Stmt):
    keyword: Token
    expression: Optional[Expr]


@dataclass
class VariableDeclarationStmt(Stmt):
    ident: Token
    initializer: Optional[Expr]


@dataclass
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt

    def __str__(self) -> str:
        return f"<while: {self.condition},\n{indent(str(self.body))}>"
