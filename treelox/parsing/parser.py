from __future__ import annotations

from enum import IntEnum, auto
from typing import Callable, List, Optional, Tuple, TypeVar

from treelox.lexing.token import Tk, Token
from treelox.parsing.expr import *
from treelox.parsing.stmt import *
from treelox.utilities import dump_internal
from treelox.utilities.error import LoxErrorHandler, LoxSyntaxError
from treelox.utilities.streamview import StreamView

RIGHT_ASSOCIATIVE_OPERATORS = {
    Tk.EQUAL,
}

# Tokens that begin a statement, where synchronization may safely resume.
STATEMENT_KEYWORDS = (Tk.CLASS, Tk.FUN, Tk.VAR, Tk.FOR, Tk.IF, Tk.WHILE, Tk.PRINT, Tk.RETURN)

LITERAL_KEYWORDS = {
    Tk.FALSE: False,
    Tk.TRUE: True,
    Tk.NIL: None,
}


class Prec(IntEnum):
    NONE = auto()
    ASSIGNMENT = auto()
    OR = auto()
    AND = auto()
    EQUALITY = auto()
    COMPARISON = auto()
    TERM = auto()
    FACTOR = auto()
    UNARY = auto()
    CALL = auto()
    PRIMARY = auto()

    def adjust_for_operator_associativity(self, op: Tk) -> Prec:
        if op in RIGHT_ASSOCIATIVE_OPERATORS:
            return self.__class__(self.value - 1)
        return self


OPERATOR_PRECEDENCE = {
    Tk.LEFT_PAREN: Prec.CALL,
    Tk.STAR: Prec.FACTOR,
    Tk.SLASH: Prec.FACTOR,
    Tk.PLUS: Prec.TERM,
    Tk.MINUS: Prec.TERM,
    Tk.GREATER: Prec.COMPARISON,
    Tk.GREATER_EQUAL: Prec.COMPARISON,
    Tk.LESS: Prec.COMPARISON,
    Tk.LESS_EQUAL: Prec.COMPARISON,
    Tk.EQUAL_EQUAL: Prec.EQUALITY,
    Tk.BANG_EQUAL: Prec.EQUALITY,
    Tk.AND: Prec.AND,
    Tk.OR: Prec.OR,
    Tk.EQUAL: Prec.ASSIGNMENT,
}


class Parser:
    """A simple Pratt parser.

    Its logic is derived from `clox`'s implementation, though the implementation
    is motivated by Aleksey Kladov's article on the subject:
    https://matklad.github.io/2020/04/13/simple-but-powerful-pratt-parsing.html.

    Syntax errors are reported to the error handler as they are found. The parser then
    skips ahead to the next statement boundary and carries on, so that a single pass
    reports as many errors as possible.
    """

    def __init__(
            self,
            tokens: List[Token],
            error_handler: LoxErrorHandler,
            *,
            dump: bool = False
    ) -> None:
        self._tv = StreamView(tokens)
        self._error_handler = error_handler
        self._dump = dump
        self._statements: List[Stmt] = list()
        self._function_depth = 0

    def parse(self) -> List[Stmt]:
        """Parse a whole program."""
        while self._has_next():
            if (declaration := self._declaration()) is not None:
                self._statements.append(declaration)
        if self._dump and not self._error_handler.error_state:
            dump_internal("AST", *self._statements)
        return self._statements

    def parse_expression(self) -> Optional[Expr]:
        """Parse a source consisting of exactly one expression."""
        try:
            expr = self._expression()
            if self._has_next():
                raise LoxSyntaxError.at_token(self._tv.peek_unwrap(), "Expect end of expression.")
        except LoxSyntaxError as error:
            self._error_handler.err(error)
            return None
        except RecursionError:
            self._error_handler.err(self._nesting_error())
            return None
        if self._dump and not self._error_handler.error_state:
            dump_internal("AST", expr)
        return expr

    # ~~~ Helper functions ~~~

    def _has_next(self) -> bool:
        if self._tv.has_next():
            if self._tv.peek_unwrap().token_type is not Tk.EOF:
                return True
        return False

    def _advance(self) -> Token:
        """Consume the next token. The EOF token is never consumed."""
        if self._has_next():
            return self._tv.advance()
        return self._tv.peek_unwrap()

    def _expect_next(self, expected: Tk, message: str) -> Token:
        if self._tv.match(expected):
            return self._advance()
        raise LoxSyntaxError.at_token(self._tv.peek_unwrap(), message)

    def _expect_punct(self, symbol: Tk, message: str) -> Token:
        return self._expect_next(symbol, f"Expect '{symbol.value}' {message}.")

    def _nesting_error(self) -> LoxSyntaxError:
        return LoxSyntaxError.at_token(self._tv.peek_unwrap(), "Too much nesting.")

    def _synchronize(self) -> None:
        self._advance()
        while self._has_next():
            if self._tv.previous().token_type is Tk.SEMICOLON:
                return
            if self._tv.match(*STATEMENT_KEYWORDS):
                return
            self._advance()

    T = TypeVar("T")

    def _parse_repeatedly(
            self,
            parselet: Callable[[], Optional[T]],
            *,
            separator: Optional[Tk] = Tk.COMMA,
            terminator: Tk = Tk.RIGHT_PAREN,
            terminator_expect_message: str = "after arguments"
    ) -> Tuple[List[T], Token]:
        """Parse items until the terminator, which is consumed and returned alongside them."""
        results: List[Parser.T] = list()
        if not self._tv.match(terminator):
            while True:
                if (result := parselet()) is not None:
                    results.append(result)
                if separator is not None:
                    if not self._tv.advance_if_match(separator):
                        break
                elif self._tv.match(terminator) or not self._has_next():
                    break
        return results, self._expect_punct(terminator, terminator_expect_message)

    # ~~~ Parsers ~~~

    def _declaration(self) -> Optional[Stmt]:
        decl: Optional[Stmt]
        try:
            if self._tv.advance_if_match(Tk.VAR):
                decl = self._variable_declaration_parselet()
            elif self._tv.advance_if_match(Tk.FUN):
                decl = self._function_declaration_parselet()
            else:
                decl = self._statement()
        except LoxSyntaxError as error:
            self._error_handler.err(error)
            self._synchronize()
            decl = None
        except RecursionError:
            self._error_handler.err(self._nesting_error())
            self._synchronize()
            decl = None

        return decl

    def _variable_declaration_parselet(self) -> VariableDeclarationStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect variable name.")
        expr = self._expression() if self._tv.advance_if_match(Tk.EQUAL) else None
        self._expect_punct(Tk.SEMICOLON, "after variable declaration")
        return VariableDeclarationStmt(name, expr)

    def _function_declaration_parselet(self) -> FunctionDeclarationStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect function name.")
        self._expect_punct(Tk.LEFT_PAREN, "after function name")
        params, _ = self._parse_repeatedly(
            lambda: self._expect_next(Tk.IDENTIFIER, "Expect parameter name."),
            terminator_expect_message="after parameters"
        )
        self._expect_punct(Tk.LEFT_BRACE, "before function body")
        self._function_depth += 1
        try:
            body = self._block_statement_parselet().body
        finally:
            self._function_depth -= 1
        return FunctionDeclarationStmt(name, params, body)

    def _statement(self) -> Stmt:
        stmt: Stmt
        if self._tv.advance_if_match(Tk.FOR):
            stmt = self._for_statement_parselet()
        elif self._tv.advance_if_match(Tk.IF):
            stmt = self._if_statement_parselet()
        elif self._tv.advance_if_match(Tk.LEFT_BRACE):
            stmt = self._block_statement_parselet()
        elif self._tv.advance_if_match(Tk.PRINT):
            stmt = PrintStmt(self._expression())
            self._expect_punct(Tk.SEMICOLON, "after value")
        elif self._tv.advance_if_match(Tk.RETURN):
            stmt = self._return_statement_parselet()
        elif self._tv.advance_if_match(Tk.WHILE):
            stmt = self._while_statement_parselet()
        else:
            stmt = self._expression_statement_parselet()
        return stmt

    def _block_statement_parselet(self) -> BlockStmt:
        stmts, _ = self._parse_repeatedly(
            self._declaration,
            separator=None,
            terminator=Tk.RIGHT_BRACE,
            terminator_expect_message="after block"
        )
        return BlockStmt(stmts)

    def _expression_statement_parselet(self) -> ExpressionStmt:
        stmt = ExpressionStmt(self._expression())
        self._expect_punct(Tk.SEMICOLON, "after expression")
        return stmt

    def _for_statement_parselet(self) -> Stmt:
        """Desugar a for loop into a while loop wrapped in blocks."""
        self._expect_punct(Tk.LEFT_PAREN, "after 'for'")

        initializer: Optional[Stmt]
        if self._tv.advance_if_match(Tk.SEMICOLON):
            initializer = None
        elif self._tv.advance_if_match(Tk.VAR):
            initializer = self._variable_declaration_parselet()
        else:
            initializer = self._expression_statement_parselet()

        condition = self._expression() if not self._tv.match(Tk.SEMICOLON) else LiteralExpr(True)
        self._expect_punct(Tk.SEMICOLON, "after loop condition")

        increment = self._expression() if not self._tv.match(Tk.RIGHT_PAREN) else None
        self._expect_punct(Tk.RIGHT_PAREN, "after for clauses")

        body = self._statement()

        if increment is not None:
            body = BlockStmt([body, ExpressionStmt(increment)])
        body = WhileStmt(condition, body)
        if initializer is not None:
            body = BlockStmt([initializer, body])

        return body

    def _if_statement_parselet(self) -> IfStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'if'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after if condition")
        then_branch = self._statement()
        else_branch = self._statement() if self._tv.advance_if_match(Tk.ELSE) else None
        return IfStmt(condition, then_branch, else_branch)

    def _return_statement_parselet(self) -> ReturnStmt:
        keyword = self._tv.previous()
        if self._function_depth == 0:
            # Reported, but the statement is still well-formed, so parsing carries on.
            self._error_handler.err(LoxSyntaxError.at_token(keyword, "Can't return from top-level code."))
        value = self._expression() if not self._tv.match(Tk.SEMICOLON) else None
        self._expect_punct(Tk.SEMICOLON, "after return value")
        return ReturnStmt(keyword, value)

    def _while_statement_parselet(self) -> WhileStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'while'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after condition")
        return WhileStmt(condition, body=self._statement())

    def _expression(self, min_precedence: Prec = Prec.NONE) -> Expr:
        """Pratt parser.

            Ex. parsing "a / b * c + -d"
            > Parsed (a).
            > Next operator is /, stronger than NONE -> grab (a), parse the RHS expr until FACTOR.
              > Parsed (b).
              > Next operator is *, not stronger than FACTOR -> unwind.
            > Received (b) as the RHS.
            > Parsed (/ a b) as LHS.
            > Next operator is *, stronger than NONE -> parse the RHS until FACTOR.
              > Parsed (c).
              > Next operator is +, weaker than FACTOR -> unwind.
            > Parsed (* (/ a b) c) as LHS.
            > Next operator is +, stronger than NONE -> parse RHS until TERM.
              > Parsed (-) -> parse its operand until UNARY.
                > Parsed (d). No more tokens -> unwind.
              > Parsed (- d) as LHS.
            > Received (- d) as RHS.
            > Parsed (+ (* (/ a b) c) (- d)) as LHS.
            > No more tokens -> unwind.
            > Complete.

        Right associativity (for assignment) is achieved by parsing the RHS up to one
        precedence level below the operator's own, so that the same operator can grab it.
        """
        left = self._prefix_parselet()

        # Parse the operator and the RHS, if possible.
        while self._has_next():
            op = self._tv.peek_unwrap()
            op_type = op.token_type

            prec = OPERATOR_PRECEDENCE.get(op_type)
            # Check if the operator has high enough relative precedence for the parsed LHS to be
            # bound to itself. If not, then we break out of this pass and return so that the LHS
            # becomes the RHS of a previously half-parsed, higher-precedence operation.
            if prec is None or prec <= min_precedence:
                break

            # Consume the operator.
            self._advance()

            if op_type is Tk.LEFT_PAREN:  # Calls are postfix: there is no RHS expression.
                arguments, paren = self._parse_repeatedly(self._expression)
                left = CallExpr(left, paren, arguments)
                continue

            right = self._expression(prec.adjust_for_operator_associativity(op_type))

            # Build the new LHS.
            if op_type is Tk.EQUAL:
                left = self._assignment_expression_parselet(op, left, right)
            elif op_type in {Tk.AND, Tk.OR}:
                left = LogicalExpr(op, left, right)
            else:
                left = BinaryExpr(op, left, right)

        return left

    def _prefix_parselet(self) -> Expr:
        """Parse prefix operators and literals."""
        token = self._tv.peek_unwrap()
        token_type = token.token_type
        if token_type is Tk.LEFT_PAREN:
            self._advance()
            enclosed = self._expression()
            self._expect_punct(Tk.RIGHT_PAREN, "after expression")
            return GroupingExpr(enclosed)
        if token_type in {Tk.BANG, Tk.MINUS}:
            self._advance()
            return UnaryExpr(token, self._expression(Prec.UNARY))
        if token_type in LITERAL_KEYWORDS:
            self._advance()
            return LiteralExpr(LITERAL_KEYWORDS[token_type])
        if token_type in {Tk.NUMBER, Tk.STRING}:
            self._advance()
            return LiteralExpr(token.literal)
        if token_type is Tk.IDENTIFIER:
            self._advance()
            return VariableExpr(token)
        raise LoxSyntaxError.at_token(token, "Expect expression.")

    def _assignment_expression_parselet(self, op: Token, left: Expr, right: Expr) -> AssignmentExpr:
        if isinstance(left, VariableExpr):
            return AssignmentExpr(left.target, right)
        raise LoxSyntaxError.at_token(op, "Invalid assignment target.")


__all__ = ("Parser", "Prec")
