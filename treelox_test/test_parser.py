import io
import unittest
from contextlib import redirect_stderr

from treelox.lexing.scanner import Scanner
from treelox.parsing.expr import AssignmentExpr, CallExpr, LogicalExpr
from treelox.parsing.parser import Parser
from treelox.parsing.stmt import (BlockStmt, ExpressionStmt, FunctionDeclarationStmt, IfStmt, PrintStmt, ReturnStmt,
                                  VariableDeclarationStmt, WhileStmt)
from treelox.utilities.error import ErrorKind, LoxErrorHandler


def parse_expression(source):
    handler = LoxErrorHandler()
    with redirect_stderr(io.StringIO()):
        tokens = Scanner(source, handler).scan_tokens()
        expr = Parser(tokens, handler).parse_expression()
    return expr, handler


def parse_program(source):
    handler = LoxErrorHandler()
    with redirect_stderr(io.StringIO()) as err:
        tokens = Scanner(source, handler).scan_tokens()
        statements = Parser(tokens, handler).parse()
    return statements, handler, err.getvalue()


class ExpressionParsingTestCase(unittest.TestCase):

    def assertParsesTo(self, source, expected):
        expr, handler = parse_expression(source)
        self.assertFalse(handler.error_state, handler.errors)
        self.assertEqual(expected, str(expr))

    def test_precedence(self):
        self.assertParsesTo("1 + 2 * 3", "(+ 1 (* 2 3))")
        self.assertParsesTo("(1 + 2) * 3", "(* (group (+ 1 2)) 3)")
        self.assertParsesTo("1 < 2 == 3 >= 4", "(== (< 1 2) (>= 3 4))")
        self.assertParsesTo("a or b and c", "(or a (and b c))")
        self.assertParsesTo("-a * b", "(* (- a) b)")
        self.assertParsesTo("!!true", "(! (! true))")

    def test_left_associativity(self):
        self.assertParsesTo("1 - 2 - 3", "(- (- 1 2) 3)")
        self.assertParsesTo("8 / 4 / 2", "(/ (/ 8 4) 2)")

    def test_assignment_is_right_associative(self):
        self.assertParsesTo("a = b = 3", "(= a (= b 3))")
        self.assertParsesTo("a = b or c", "(= a (or b c))")

    def test_literals(self):
        self.assertParsesTo("2.5", "2.5")
        self.assertParsesTo('"text"', "text")
        self.assertParsesTo("nil", "nil")
        self.assertParsesTo("false", "false")

    def test_calls(self):
        self.assertParsesTo("f(1, g(2))(3)", "(call (call f 1 (call g 2)) 3)")
        self.assertParsesTo("-f()", "(- (call f))")
        expr, _ = parse_expression("f(a)")
        self.assertIsInstance(expr, CallExpr)

    def test_node_types(self):
        expr, _ = parse_expression("a = 1")
        self.assertIsInstance(expr, AssignmentExpr)
        expr, _ = parse_expression("a and b")
        self.assertIsInstance(expr, LogicalExpr)

    def test_invalid_assignment_target(self):
        expr, handler = parse_expression("a + b = c")
        self.assertIsNone(expr)
        self.assertEqual("Invalid assignment target.", handler.errors[0].message)
        self.assertEqual(ErrorKind.SYNTAX, handler.errors[0].kind)

    def test_unbalanced_grouping(self):
        _, handler = parse_expression("(1 + 2")
        self.assertEqual("[line 1] Error at end: Expect ')' after expression.", str(handler.errors[0]))

    def test_trailing_tokens(self):
        _, handler = parse_expression("1 2")
        self.assertEqual("[line 1] Error at '2': Expect end of expression.", str(handler.errors[0]))


class ProgramParsingTestCase(unittest.TestCase):

    def test_statement_kinds(self):
        statements, handler, _ = parse_program(
            "var a = 1; fun f(x, y) { return x; } print a; { a; } if (a) a; else a; while (a) a;"
        )
        self.assertFalse(handler.error_state)
        self.assertEqual(
            [VariableDeclarationStmt, FunctionDeclarationStmt, PrintStmt, BlockStmt, IfStmt, WhileStmt],
            [type(stmt) for stmt in statements]
        )
        function = statements[1]
        self.assertEqual(["x", "y"], [param.lexeme for param in function.params])
        self.assertIsInstance(function.body[0], ReturnStmt)

    def test_for_desugars_into_while(self):
        statements, handler, _ = parse_program("for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertFalse(handler.error_state)
        (outer,) = statements
        self.assertIsInstance(outer, BlockStmt)
        initializer, loop = outer.body
        self.assertIsInstance(initializer, VariableDeclarationStmt)
        self.assertIsInstance(loop, WhileStmt)
        self.assertEqual("(< i 3)", str(loop.condition))
        body, increment = loop.body.body
        self.assertIsInstance(body, PrintStmt)
        self.assertIsInstance(increment, ExpressionStmt)

    def test_for_without_clauses_loops_on_true(self):
        statements, _, _ = parse_program("for (;;) print 1;")
        (loop,) = statements
        self.assertIsInstance(loop, WhileStmt)
        self.assertEqual("true", str(loop.condition))

    def test_synchronization_collects_several_errors(self):
        statements, handler, err = parse_program("var = 1;\nprint (;\nprint 3;\nvar ok = 2;")
        self.assertEqual(2, len(handler.errors))
        self.assertEqual(
            "[line 1] Error at '=': Expect variable name.\n"
            "[line 2] Error at ';': Expect expression.\n",
            err
        )
        # The statements after the errors are still parsed.
        self.assertEqual([PrintStmt, VariableDeclarationStmt], [type(stmt) for stmt in statements])

    def test_error_inside_block_recovers(self):
        statements, handler, _ = parse_program("{ print ; print 1; }\nprint 2;")
        self.assertEqual(1, len(handler.errors))
        block, tail = statements
        self.assertEqual(1, len(block.body))
        self.assertIsInstance(tail, PrintStmt)

    def test_missing_closing_brace(self):
        _, handler, err = parse_program("{ print 1;")
        self.assertEqual("[line 1] Error at end: Expect '}' after block.\n", err)
        self.assertTrue(handler.error_state)

    def test_return_at_top_level(self):
        statements, handler, err = parse_program("return 1;")
        self.assertEqual("[line 1] Error at 'return': Can't return from top-level code.\n", err)
        self.assertEqual(1, len(statements))

    def test_missing_semicolon(self):
        _, handler, err = parse_program("print 1\nprint 2;")
        self.assertEqual("[line 2] Error at 'print': Expect ';' after value.\n", err)


if __name__ == '__main__':
    unittest.main()
