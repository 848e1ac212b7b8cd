"""Lexical scopes. Each Environment maps names to values and points at its enclosing Environment; the chain ends at the
interpreter's globals. Names are resolved at run time by walking the chain outward.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """A single scope. Closures keep a reference to the Environment they were defined in, so a scope stays alive for as
    long as any function created in it.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this scope only, overwriting any previous binding here. Never looks at enclosing scopes."""
        self.values[name] = value

    def get(self, name):
        """Returns the value bound to the name token in the nearest scope that defines it."""
        return self._resolve(name).values[name.lexeme]

    def assign(self, name, value):
        """Rebinds the name token in the nearest scope that defines it. Assignment never creates a binding."""
        self._resolve(name).values[name.lexeme] = value

    def _resolve(self, name):
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment
            environment = environment.enclosing

        raise LoxRuntimeError(name, "Undefined variable '{}'.", name.lexeme)
