"""Runs a .lox file, or the interactive shell when no file is given. Errors that escape a session are reported by the
ErrorHandler context manager. Called from the lox console script.

Exit status for files: 65 if the source had scan/parse errors (nothing is run), 70 if a runtime error was reported.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell

EX_DATAERR = 65
EX_SOFTWARE = 70


def main(argv=None):
    """Runs lox interpreter. Called from lox executable script."""
    with ErrorHandler(fatal=True) as error_handler:
        parser = argparse.ArgumentParser(prog="lox", description="Tree-walking interpreter for the lox language.")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--ast", action="store_true", help="print the parsed syntax tree before running it")
        parser.add_argument("--recursion-limit", type=int, default=5000,
                            help="host recursion limit; bounds how deeply lox functions can recurse (default: 5000)")
        args = parser.parse_args(argv)

        sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, show_ast=args.ast)
            sess.run()

            if error_handler.had_error:
                sys.exit(EX_DATAERR)
            if error_handler.had_runtime_error:
                sys.exit(EX_SOFTWARE)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, show_ast=args.ast)).cmdloop()


if __name__ == "__main__":
    main()
