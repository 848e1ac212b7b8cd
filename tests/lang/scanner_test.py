import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.scanner import Scanner
from lox.lang.tokens import TokenType


def scan(source):
    error_handler = ErrorHandler(stream=io.StringIO())
    return Scanner(source, error_handler).scan_tokens(), error_handler


class ScannerTestCase(unittest.TestCase):

    def test_token_types(self):
        cases = {
            "(){},.-+;*?:": [TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
                             TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS, TokenType.SEMICOLON,
                             TokenType.STAR, TokenType.QUESTION_MARK, TokenType.COLON],
            "! != = == < <= > >=": [TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL,
                                    TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL],
            "a / b // comment": [TokenType.IDENTIFIER, TokenType.SLASH, TokenType.IDENTIFIER],
            "var x = nil;": [TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL, TokenType.SEMICOLON],
            "fun f() { break; }": [TokenType.FUN, TokenType.IDENTIFIER, TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
                                   TokenType.LEFT_BRACE, TokenType.BREAK, TokenType.SEMICOLON, TokenType.RIGHT_BRACE],
            "orchid or_ or": [TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.OR],
            "1 /* block\ncomment */ 2": [TokenType.NUMBER, TokenType.NUMBER],
        }
        for case, expected in cases.items():
            tokens, error_handler = scan(case)
            self.assertFalse(error_handler.had_error, case)
            self.assertEqual(expected + [TokenType.EOF], [token.type for token in tokens], case)

    def test_literals(self):
        cases = {
            "123": 123.0,
            "3.25": 3.25,
            '"hello world"': "hello world",
            '""': "",
            '"two\nlines"': "two\nlines",
        }
        for case, expected in cases.items():
            tokens, __ = scan(case)
            self.assertEqual(expected, tokens[0].literal, case)

    def test_trailing_dot_is_not_fractional(self):
        tokens, __ = scan("1.")
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.EOF], [token.type for token in tokens])
        self.assertEqual(1.0, tokens[0].literal)

    def test_positions(self):
        tokens, __ = scan('var a;\n  print "x\ny";\nb')
        positions = [(token.lexeme, token.line, token.column) for token in tokens]
        self.assertEqual([
            ("var", 1, 1), ("a", 1, 5), (";", 1, 6),
            ("print", 2, 3), ('"x\ny"', 2, 9), (";", 3, 3),
            ("b", 4, 1), ("", 4, 2),
        ], positions)

    def test_errors(self):
        should_fail = {
            "var @ = 1;": "Unexpected character '@'.",
            '"never closed': "Unterminated string.",
            "/* never closed": "Unterminated block comment.",
        }
        for case, msg in should_fail.items():
            tokens, error_handler = scan(case)
            self.assertTrue(error_handler.had_error, case)
            self.assertEqual([msg], [error.msg for error in error_handler.errors], case)
            self.assertEqual(TokenType.EOF, tokens[-1].type, case)

    def test_scanning_continues_after_error(self):
        tokens, error_handler = scan("# 1 $ 2")
        self.assertEqual(2, len(error_handler.errors))
        self.assertEqual([1.0, 2.0], [token.literal for token in tokens if token.type == TokenType.NUMBER])


if __name__ == '__main__':
    unittest.main()
