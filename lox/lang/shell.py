"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "lox :: tree-walking interpreter\nType 'help' for more information, 'exit' or Ctrl-D to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.error_handler.reset()
            self.sess.run(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "Statements end with ';'. Try 'var greeting = \"hi\";' and then 'print greeting;'.\n"
              "A bare expression such as '1 + 2' is evaluated and its value printed.\n"
              "Lines with unclosed '{' or '(' continue on the next line.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
