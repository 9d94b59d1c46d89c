import io
import unittest
from contextlib import redirect_stderr

from treelox.lexing.scanner import Scanner
from treelox.lexing.token import Tk
from treelox.utilities.error import ErrorKind, LoxErrorHandler


def scan(source):
    handler = LoxErrorHandler()
    with redirect_stderr(io.StringIO()) as err:
        tokens = Scanner(source, handler).scan_tokens()
    return tokens, handler, err.getvalue()


class ScannerTestCase(unittest.TestCase):

    def test_empty_source_is_just_eof(self):
        tokens, handler, _ = scan("")
        self.assertEqual([Tk.EOF], [token.token_type for token in tokens])
        self.assertEqual("EOF  null", tokens[0].to_string())
        self.assertFalse(handler.error_state)

    def test_maximal_munch(self):
        tokens, _, _ = scan("== = != ! <= < >= >")
        self.assertEqual(
            [Tk.EQUAL_EQUAL, Tk.EQUAL, Tk.BANG_EQUAL, Tk.BANG, Tk.LESS_EQUAL, Tk.LESS,
             Tk.GREATER_EQUAL, Tk.GREATER, Tk.EOF],
            [token.token_type for token in tokens]
        )
        self.assertEqual("===", "".join(token.lexeme for token in scan("===")[0]))
        self.assertEqual([Tk.EQUAL_EQUAL, Tk.EQUAL, Tk.EOF], [token.token_type for token in scan("===")[0]])

    def test_punctuation(self):
        tokens, _, _ = scan("(){},.-+;*/")
        self.assertEqual(
            [Tk.LEFT_PAREN, Tk.RIGHT_PAREN, Tk.LEFT_BRACE, Tk.RIGHT_BRACE, Tk.COMMA, Tk.DOT,
             Tk.MINUS, Tk.PLUS, Tk.SEMICOLON, Tk.STAR, Tk.SLASH, Tk.EOF],
            [token.token_type for token in tokens]
        )

    def test_slash_and_comment_share_a_first_character(self):
        self.assertTrue(all(isinstance(kind.value, str) for kind in Tk))
        tokens, _, _ = scan("a / b // c")
        self.assertEqual([Tk.IDENTIFIER, Tk.SLASH, Tk.IDENTIFIER, Tk.EOF], [token.token_type for token in tokens])

    def test_numbers(self):
        tokens, _, _ = scan("42 3.14 7.")
        self.assertEqual("NUMBER 42 42.0", tokens[0].to_string())
        self.assertEqual("NUMBER 3.14 3.14", tokens[1].to_string())
        # A trailing dot is not part of the number.
        self.assertEqual([Tk.NUMBER, Tk.DOT], [tokens[2].token_type, tokens[3].token_type])
        self.assertEqual(7.0, tokens[2].literal)

    def test_strings(self):
        tokens, _, _ = scan('"hello world" ""')
        self.assertEqual('STRING "hello world" hello world', tokens[0].to_string())
        self.assertEqual("", tokens[1].literal)

    def test_multiline_string_advances_line(self):
        tokens, _, _ = scan('"a\nb" x')
        self.assertEqual("a\nb", tokens[0].literal)
        self.assertEqual(2, tokens[1].line)

    def test_keywords_are_case_sensitive(self):
        tokens, _, _ = scan("and class else false for fun if nil or print return super this true var while")
        self.assertTrue(all(token.token_type is not Tk.IDENTIFIER for token in tokens))
        tokens, _, _ = scan("Print orchid _var var1")
        self.assertEqual([Tk.IDENTIFIER] * 4, [token.token_type for token in tokens[:-1]])

    def test_comments_and_line_numbers(self):
        tokens, _, _ = scan("a // comment ( ) \"\nb\n\n c")
        self.assertEqual(["a", "b", "c", ""], [token.lexeme for token in tokens])
        self.assertEqual([1, 2, 4, 4], [token.line for token in tokens])

    def test_unexpected_character_recovers(self):
        tokens, handler, err = scan("a @ b\n# c")
        self.assertEqual(["a", "b", "c", ""], [token.lexeme for token in tokens])
        self.assertEqual(
            "[line 1] Error: Unexpected character: @\n[line 2] Error: Unexpected character: #\n", err
        )
        self.assertEqual([ErrorKind.LEXICAL] * 2, [error.kind for error in handler.errors])
        self.assertTrue(handler.error_state)

    def test_unterminated_string_reports_and_continues(self):
        tokens, handler, err = scan('print "oops')
        self.assertEqual([Tk.PRINT, Tk.EOF], [token.token_type for token in tokens])
        self.assertEqual("[line 1] Error: Unterminated string.\n", err)
        self.assertEqual(1, len(handler.errors))

    def test_every_error_is_reported_once(self):
        _, handler, _ = scan("$ % ^")
        self.assertEqual(3, len(handler.errors))


if __name__ == '__main__':
    unittest.main()
