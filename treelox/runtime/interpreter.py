import logging
import sys
from contextlib import contextmanager
from operator import ge, gt, le, lt, mul, sub
from typing import Any, Callable, Dict, Iterator, List, Sequence, Union

from treelox.language.lox_callable import LoxCallable, LoxFunction, LoxNativeFunction, LoxReturn
from treelox.language.lox_types import (LoxObject, LoxPrimitive, lox_are_numbers, lox_division, lox_equality,
                                        lox_object_to_str, lox_truth)
from treelox.language.natives import NATIVE_FUNCTIONS
from treelox.lexing.token import Tk, Token
from treelox.parsing.expr import *
from treelox.parsing.stmt import *
from treelox.runtime.environment import Environment
from treelox.utilities.configuration import DEFAULT_MAX_CALL_DEPTH, HOST_FRAMES_PER_CALL
from treelox.utilities.error import NOT_REACHED, ErrorKind, LoxErrorHandler, LoxRuntimeError
from treelox.utilities.visitor import Visitor

logger = logging.getLogger(__name__)

NUMERIC_OPERATORS: Dict[Tk, Callable[[Any, Any], Union[bool, float]]] = {
    Tk.MINUS: sub,
    Tk.STAR: mul,
    Tk.SLASH: lox_division,
    Tk.GREATER: gt,
    Tk.GREATER_EQUAL: ge,
    Tk.LESS: lt,
    Tk.LESS_EQUAL: le,
}


class Interpreter(Visitor[Union[Expr, Stmt], Union[None, LoxObject]]):
    # pylint: disable=invalid-name

    def __init__(self, error_handler: LoxErrorHandler, *, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> None:
        self._error_handler = error_handler
        self._max_call_depth = max_call_depth
        self._call_depth = 0
        self._line = 1  # Line of the last token-bearing expression evaluated.
        self.globals = Environment()
        self._environment = self.globals
        self.reinitialize_environment()
        # Make room on the host stack for the deepest interpreted recursion allowed.
        required_limit = max_call_depth * HOST_FRAMES_PER_CALL
        if sys.getrecursionlimit() < required_limit:
            sys.setrecursionlimit(required_limit)

    def interpret(self, stmts: List[Stmt]) -> None:
        """Execute a program. The first runtime error is reported and ends the run."""
        try:
            for stmt in stmts:
                self._execute(stmt)
        except RecursionError:
            self._abort(self._stack_overflow())
        except LoxRuntimeError as error:
            self._abort(error)

    def evaluate(self, expr: Expr) -> LoxObject:
        """Evaluate a single expression against the global scope."""
        try:
            return self._evaluate(expr)
        except RecursionError:
            self._abort(self._stack_overflow())
        except LoxRuntimeError as error:
            self._abort(error)
        raise NOT_REACHED

    def reinitialize_environment(self) -> None:
        self.globals = Environment()
        for native in NATIVE_FUNCTIONS:
            self.globals.define(native.name, native)
        self._environment = self.globals

    # ~~~ Helper functions ~~~

    def _abort(self, error: LoxRuntimeError) -> None:
        self._environment = self.globals
        self._call_depth = 0
        self._error_handler.err(error)

    def _stack_overflow(self) -> LoxRuntimeError:
        return LoxRuntimeError(self._line, "Stack overflow.", kind=ErrorKind.STACK_OVERFLOW)

    def _execute(self, stmt: Stmt) -> None:
        self.visit(stmt)

    def _evaluate(self, expr: Expr) -> LoxObject:
        return self.visit(expr)

    def _execute_block(self, stmts: Sequence[Stmt], environment: Environment) -> None:
        with self._sub_environment(environment):
            for stmt in stmts:
                self._execute(stmt)

    @contextmanager
    def _sub_environment(self, environment: Environment) -> Iterator[None]:
        outer = self._environment
        self._environment = environment
        try:
            yield
        finally:
            self._environment = outer

    def _expect_number_operand(self, operator: Token, *operand: LoxObject) -> None:
        """Enforce that the `operand`s passed are numbers. Otherwise,
        emit an error at the given `operator` token."""
        if not lox_are_numbers(*operand):
            raise LoxRuntimeError.at_token(
                operator,
                "Operand must be a number." if len(operand) == 1 else "Operands must be numbers."
            )

    # ~~~ Callable interpreter ~~~

    def _call(self, callee: LoxCallable, arguments: Sequence[LoxObject], paren: Token) -> LoxObject:
        if isinstance(callee, LoxNativeFunction):
            return callee.function(*arguments)
        if not isinstance(callee, LoxFunction):
            raise NOT_REACHED

        if self._call_depth >= self._max_call_depth:
            raise LoxRuntimeError.at_token(paren, "Stack overflow.", kind=ErrorKind.STACK_OVERFLOW)
        self._call_depth += 1
        # The call's scope encloses the closure, not the caller's scope.
        environment = callee.closure.child()
        for param, arg in zip(callee.params, arguments):
            environment.define(param.lexeme, arg)
        logger.debug("Calling %s at depth %d", callee, self._call_depth)
        try:
            self._execute_block(callee.body, environment)
        except LoxReturn as value:
            return value.value
        except RecursionError:
            raise LoxRuntimeError.at_token(paren, "Stack overflow.", kind=ErrorKind.STACK_OVERFLOW) from None
        finally:
            self._call_depth -= 1
        return None

    # ~~~ Statement interpreters ~~~

    def _visit_BlockStmt__(self, stmt: BlockStmt) -> None:
        self._execute_block(stmt.body, self._environment.child())

    def _visit_ExpressionStmt__(self, stmt: ExpressionStmt) -> None:
        self._evaluate(stmt.expression)

    def _visit_FunctionDeclarationStmt__(self, stmt: FunctionDeclarationStmt) -> None:
        self._environment.define(stmt.name.lexeme, LoxFunction(stmt, self._environment))

    def _visit_IfStmt__(self, stmt: IfStmt) -> None:
        if lox_truth(self._evaluate(stmt.condition)):
            self._execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self._execute(stmt.else_branch)

    def _visit_PrintStmt__(self, stmt: PrintStmt) -> None:
        print(lox_object_to_str(self._evaluate(stmt.expression)))

    def _visit_ReturnStmt__(self, stmt: ReturnStmt) -> None:
        if stmt.expression is not None:
            raise LoxReturn(self._evaluate(stmt.expression))
        raise LoxReturn(None)

    def _visit_VariableDeclarationStmt__(self, stmt: VariableDeclarationStmt) -> None:
        value: LoxObject = None
        if stmt.initializer is not None:
            value = self._evaluate(stmt.initializer)
        self._environment.define(stmt.ident.lexeme, value)

    def _visit_WhileStmt__(self, stmt: WhileStmt) -> None:
        while lox_truth(self._evaluate(stmt.condition)):
            self._execute(stmt.body)

    # ~~~ Expression interpreters ~~~

    def _visit_AssignmentExpr__(self, expr: AssignmentExpr) -> LoxObject:
        self._line = expr.target.line
        value = self._evaluate(expr.value)
        self._environment.assign(expr.target, value)
        return value

    def _visit_BinaryExpr__(self, expr: BinaryExpr) -> Union[bool, float, str]:
        """Evaluate the two operands, ensure that their types fit the operator, and finally
        apply the correct binary operation.

        The binary operations include comparisons, the four arithmetic operations,
        and string concatenation."""
        self._line = expr.operator.line
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)
        op = expr.operator.token_type

        if op is Tk.EQUAL_EQUAL:  # Equality comparisons are valid on all objects.
            return lox_equality(left, right)
        if op is Tk.BANG_EQUAL:
            return not lox_equality(left, right)
        if op is Tk.PLUS:  # Used for both arithmetic addition and string concatenation.
            if isinstance(left, str) or isinstance(right, str):
                return lox_object_to_str(left) + lox_object_to_str(right)
            if lox_are_numbers(left, right):
                return left + right  # type: ignore
            raise LoxRuntimeError.at_token(expr.operator, "Operands must be two numbers or two strings.")
        if op in NUMERIC_OPERATORS:  # Arithmetic operations and comparisons.
            self._expect_number_operand(expr.operator, left, right)
            return NUMERIC_OPERATORS[op](left, right)

        raise NOT_REACHED

    def _visit_CallExpr__(self, expr: CallExpr) -> LoxObject:
        self._line = expr.paren.line
        callee = self._evaluate(expr.callee)
        arguments = [self._evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError.at_token(
                expr.paren, "Can only call functions and classes.", kind=ErrorKind.NOT_CALLABLE
            )
        if (found := len(arguments)) != (expected := callee.arity):
            raise LoxRuntimeError.at_token(
                expr.paren, f"Expected {expected} arguments but got {found}.", kind=ErrorKind.ARITY_MISMATCH
            )
        return self._call(callee, arguments, expr.paren)

    def _visit_GroupingExpr__(self, expr: GroupingExpr) -> LoxObject:
        """Evaluate a group by evaluating the expression contained within."""
        return self._evaluate(expr.expression)

    def _visit_LiteralExpr__(self, expr: LiteralExpr) -> LoxPrimitive:
        """A literal is evaluated by extracting its value."""
        return expr.value

    def _visit_LogicalExpr__(self, expr: LogicalExpr) -> LoxObject:
        self._line = expr.operator.line
        left = self._evaluate(expr.left)
        if expr.operator.token_type is Tk.OR:
            if lox_truth(left):
                return left
        else:
            if not lox_truth(left):
                return left
        return self._evaluate(expr.right)

    def _visit_UnaryExpr__(self, expr: UnaryExpr) -> Union[bool, float]:
        """Evaluate the operand and then apply the correct unary operation.

        There are two unary operations: logical negation and arithmetic negation."""
        self._line = expr.operator.line
        right = self._evaluate(expr.right)

        if (op := expr.operator.token_type) is Tk.BANG:
            return not lox_truth(right)
        if op is Tk.MINUS:
            self._expect_number_operand(expr.operator, right)
            return -right  # type: ignore  # Previous line ensures that right is of type float.

        raise NOT_REACHED

    def _visit_VariableExpr__(self, expr: VariableExpr) -> LoxObject:
        self._line = expr.target.line
        return self._environment.get(expr.target)
