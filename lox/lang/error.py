"""Error handling for the lox language. Only LoxErrors should be encountered while running a program: if another type of
error makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Scanner and parser errors are reported through ErrorHandler.error/error_at and set had_error; runtime errors are raised
as LoxRuntimeError, caught once per top-level statement by the interpreter and reported through
ErrorHandler.runtime_error, which sets had_runtime_error.
"""

import sys

from termcolor import colored


class LoxError(Exception):
    """Templates an error message so that it can be used to throw a lox error/warning. msg may contain '{}' fields,
    which are filled with exprs (bolded when displayed).
    """

    def __init__(self, token, msg, exprs=None, internal=False, line=None):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.token = token  # offending token, or None if the error has no source position
        if exprs:
            self.msg = msg.format(*exprs)
            self.display = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))
        else:
            self.msg = self.display = msg  # may contain literal braces
        self.internal = internal
        self._line = line  # for errors without a token

        super().__init__(self.msg)

    @property
    def line(self):
        return self.token.line if self.token is not None else self._line


class ParseError(LoxError):
    """Raised inside the parser to unwind to the next statement boundary. Always reported before it is raised."""


class LoxRuntimeError(LoxError):
    """Undefined variables, operand type mismatches, bad calls. Aborts the current top-level statement."""


class ErrorHandler:
    """Process-wide diagnostic sink. Also a context manager that suppresses Python errors and reports them as lox
    errors instead.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=False, stream=None):
        self.fatal = fatal
        self.stream = stream  # None means sys.stdout at the time of printing

        self.path = "<in>"
        self.source_lines = []

        self.had_error = False
        self.had_runtime_error = False

        self.errors = []    # every LoxError reported, in order
        self.warnings = []

    def register_file(self, path, source):
        """Registers the file currently being run, so diagnostics can quote its lines."""
        self.path = path
        self.source_lines = source.splitlines()

    def register_line(self, path, source):
        """Appends a shell line (possibly several lines, if continued) to the registered source. Earlier lines are kept,
        since functions defined on them can still raise errors. Returns the line number source starts at.
        """
        if path != self.path:
            self.path = path
            self.source_lines = []

        line_num = len(self.source_lines) + 1
        self.source_lines.extend(source.split("\n"))
        return line_num

    def reset(self):
        """Clears error flags and records. Called by the shell before each new line."""
        self.had_error = False
        self.had_runtime_error = False
        self.errors = []
        self.warnings = []

    def _print(self, text):
        print(text, file=self.stream)

    def _location(self, line, column=None):
        where = f"{self.path}:{line}:" if column is None else f"{self.path}:{line}:{column}:"
        return colored(where + " ", attrs=["bold"])

    def diagnose(self, line, column, length=1, warning=False):
        """Returns the offending source line with the offending lexeme highlighted and underlined, or None if the line
        is not known.
        """
        if line is None or not 0 < line <= len(self.source_lines):
            return None

        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        text = self.source_lines[line - 1]
        start = max(column - 1, 0)
        end = min(start + max(length, 1), len(text))

        diagnosis = "  " + text[:start]
        diagnosis += colored(text[start:end], color, attrs=["bold"])
        diagnosis += text[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    @staticmethod
    def _where(token):
        if not token.lexeme:
            return "at end: "
        return f"at '{token.lexeme}': "

    def _report(self, token, msg, warning=False):
        kind = colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) if warning \
            else colored("error: ", ErrorHandler.ERROR, attrs=["bold"])
        self._print(self._location(token.line, token.column) + kind + ErrorHandler._where(token) + msg)

        diagnosis = self.diagnose(token.line, token.column, len(token.lexeme), warning)
        if diagnosis:
            self._print(diagnosis)

    def error(self, token, msg):
        """Reports a parse error at token."""
        self.had_error = True
        self.errors.append(ParseError(token, msg))
        self._report(token, msg)

    def error_at(self, line, column, msg):
        """Reports a scan error at a source position that has no token."""
        self.had_error = True
        self.errors.append(LoxError(None, msg, line=line))
        self._print(self._location(line, column) + colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + msg)

        diagnosis = self.diagnose(line, column)
        if diagnosis:
            self._print(diagnosis)

    def warn(self, token, msg):
        """Reports a non-fatal problem at token. Does not set any error flag."""
        self.warnings.append(LoxError(token, msg))
        self._report(token, msg, warning=True)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError raised while executing a statement."""
        self.had_runtime_error = True
        self.errors.append(error)

        error_msg = self._location(error.line) if error.line is not None else ""
        error_msg += colored("runtime error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.display
        self._print(error_msg)

        if error.token is not None:
            diagnosis = self.diagnose(error.token.line, error.token.column, len(error.token.lexeme))
            if diagnosis:
                self._print(diagnosis)

    def throw(self, error):
        """Reports an error that escaped to the driver. Exits if self.fatal."""
        error_msg = ""
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        elif error.line is not None:
            error_msg += self._location(error.line)

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.display
        self._print(error_msg)
        self.had_error = True
        self.errors.append(error)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LoxError(None, "keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LoxError(None, "maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxError(None, "unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
