"""Session control for lox. Runs source through scanner, parser and interpreter, either for a whole file or one shell
line at a time.
"""

from lox.lang.error import LoxError
from lox.lang.interpreter import Interpreter
from lox.lang.parser import Parser
from lox.lang.scanner import Scanner
from lox.lang.tokens import Token, TokenType
from lox.tree import stmt as st
from lox.tree.printer import display


class Session:
    """Governs a lox session. Holds a single Interpreter, so globals defined by one run are visible to the next."""
    SH_FILE = "<in>"  # command-line interpreter filename
    OPENERS = {"(": ")", "{": "}"}

    def __init__(self, error_handler, path, cmd_line, out=None, show_ast=False):
        self.error_handler = error_handler

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.show_ast = show_ast    # print the parsed tree before running it
        self.out = out

        self.interpreter = Interpreter(error_handler, out)
        self.source = ""

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    self.source = file.read()
            except OSError:
                raise LoxError(None, "'{}' could not be opened", path)

        elif not cmd_line:
            raise LoxError(None, "'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line):
        """Strips trailing whitespace from a shell line and returns (line, add_to_prev), where add_to_prev says whether
        the line has unclosed braces/parentheses and should be continued by the next one. Brackets inside strings and
        comments do not count.
        """
        line = line.rstrip()

        depth = 0
        in_string = False
        idx = 0
        while idx < len(line):
            char = line[idx]
            if in_string:
                in_string = char != '"'
            elif char == '"':
                in_string = True
            elif line.startswith("//", idx):
                break
            elif char in Session.OPENERS:
                depth += 1
            elif char in Session.OPENERS.values():
                depth -= 1
            idx += 1

        return line, depth > 0 or in_string

    @staticmethod
    def terminate(tokens):
        """Supplies the ';' a shell line may leave off. Done on tokens rather than text, so a trailing comment does not
        swallow it.
        """
        *body, eof = tokens
        if body and body[-1].type not in (TokenType.SEMICOLON, TokenType.RIGHT_BRACE):
            body.append(Token(TokenType.SEMICOLON, ";", None, eof.line, eof.column))
        return body + [eof]

    def parse(self, source, line=1):
        """Scans and parses source, numbering its lines from line. Returns the statements, which are only complete if no
        error was reported.
        """
        tokens = Scanner(source, self.error_handler, line).scan_tokens()
        if self.cmd_line:
            tokens = Session.terminate(tokens)  # so '1 + 2' is accepted as an expression statement
        return Parser(tokens, self.error_handler).parse()

    def run(self, source=None):
        """Runs source (the session's file if None). Nothing is executed if scanning or parsing reported an error. In
        command-line mode, a missing final ';' is supplied, line numbers carry on from the previous line and a line
        consisting of a single expression statement prints its value.
        """
        if source is None:
            source = self.source

        if self.cmd_line:
            line_num = self.error_handler.register_line(self.path, source)
        else:
            self.error_handler.register_file(self.path, source)
            line_num = 1

        statements = self.parse(source, line_num)
        if self.error_handler.had_error:
            return

        if self.show_ast:
            for statement in statements:
                print(display(statement), file=self.out)

        if self.cmd_line and len(statements) == 1 and isinstance(statements[0], st.Expression):
            statements = [st.Print(statements[0].expression)]

        self.interpreter.interpret(statements)
