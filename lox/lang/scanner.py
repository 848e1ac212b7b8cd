"""Lexical analysis for lox: turns raw source text into a list of Tokens, always terminated by an EOF token.

Bad characters, unterminated strings and unterminated block comments are reported to the ErrorHandler and skipped, so a
single pass reports every scan error in the source.
"""

from lox.lang.tokens import KEYWORDS, Token, TokenType


def is_digit(char):
    """ASCII digits only: str.isdigit also accepts characters that float() rejects."""
    return "0" <= char <= "9"


class Scanner:
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
        "?": TokenType.QUESTION_MARK,
        ":": TokenType.COLON,
    }
    # char: (type if followed by '=', type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }

    def __init__(self, source, error_handler, line=1):
        self.source = source
        self.error_handler = error_handler
        self.tokens = []

        self.start = 0
        self.current = 0
        self.line = line  # number of the first line of source, for shell lines after the first
        self.line_start = 0  # index of the first character of the current line

        self.start_line = line
        self.start_column = 1

    def scan_tokens(self):
        """Scans the whole source. Returns the token list."""
        while not self.is_at_end():
            self.start = self.current
            self.start_line = self.line
            self.start_column = self.current - self.line_start + 1
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line, self.current - self.line_start + 1))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])
        elif char in Scanner.DOUBLE:
            with_equal, without = Scanner.DOUBLE[char]
            self.add_token(with_equal if self.match("=") else without)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self.newline()
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif char.isalpha() or char == "_":
            self.identifier()
        else:
            self.error_handler.error_at(self.start_line, self.start_column, f"Unexpected character '{char}'.")

    def block_comment(self):
        """Skips a /* ... */ comment. Block comments do not nest."""
        while not (self.peek() == "*" and self.peek_next() == "/"):
            if self.is_at_end():
                self.error_handler.error_at(self.start_line, self.start_column, "Unterminated block comment.")
                return
            if self.advance() == "\n":
                self.newline()

        self.advance()
        self.advance()

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.advance() == "\n":
                self.newline()

        if self.is_at_end():
            self.error_handler.error_at(self.start_line, self.start_column, "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        # a trailing '.' is not part of the number: 1. is NUMBER DOT
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while self.peek().isalnum() or self.peek() == "_":
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def newline(self):
        self.line += 1
        self.line_start = self.current

    def add_token(self, token_type, literal=None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.start_line, self.start_column))

    def advance(self):
        self.current += 1
        return self.source[self.current - 1]

    def match(self, expected):
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "\0" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def is_at_end(self):
        return self.current >= len(self.source)
