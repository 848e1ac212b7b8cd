"""Callable values: user-defined functions (closures) and native functions provided by the host."""

from abc import ABC, abstractmethod

from lox.lang.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.lang.signals import BreakSignal, ReturnSignal


class LoxCallable(ABC):
    """Anything that can appear on the left of a call expression."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this callable with already-evaluated arguments and returns the result value."""


class LoxFunction(LoxCallable):
    """A function declaration bundled with the Environment it was declared in."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self):
        return self.declaration.name.lexeme

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        """Runs the body in a fresh scope enclosed by the closure, not by the caller's scope. Parameters live in that
        same scope: the body is not wrapped in another block.
        """
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        signal = interpreter.execute_block(self.declaration.body, environment)

        if isinstance(signal, ReturnSignal):
            return signal.value
        if isinstance(signal, BreakSignal):
            raise LoxRuntimeError(signal.keyword, "Cannot break outside of a loop.")
        return None

    def __repr__(self):
        return f"<fn {self.name}>"


class NativeFunction(LoxCallable):
    """A callable implemented in Python. function receives the interpreter and the argument list."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(interpreter, arguments)

    def __repr__(self):
        return "<native fn>"
