"""Tree-walking evaluator for lox.

Basic program flow:
    1. Scanner: produces tokens from source (lox/lang/scanner.py)
    2. Parser: produces a list of statements by recursive descent (lox/lang/parser.py)
    3. Interpreter: walks each statement, reading and mutating a chain of Environments, and prints to self.out

Statements are executed by execute, which returns None on normal completion or a BreakSignal/ReturnSignal (see
lox/lang/signals.py). Expressions are evaluated by evaluate, which returns a value:

    nil -> None, booleans -> bool, numbers -> float, strings -> str, functions -> LoxCallable

Runtime errors are raised as LoxRuntimeError and abort the current top-level statement only. Nothing that statement
already did (output, assignments) is undone.
"""

import math
import operator
import time

from lox.lang.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.lang.functions import LoxCallable, LoxFunction, NativeFunction
from lox.lang.signals import BreakSignal, ReturnSignal
from lox.lang.tokens import TokenType
from lox.tree import expr as ex
from lox.tree import stmt as st
from lox.tree.printer import number_text


def divide(left, right):
    """IEEE division: dividing by zero gives an infinity or NaN instead of raising."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class Interpreter:
    """Evaluates statements against a persistent global Environment, so several calls to interpret (one per shell line,
    for example) share state.
    """
    # operators whose operands must both be numbers
    NUMERIC = {
        TokenType.MINUS: operator.sub,
        TokenType.STAR: operator.mul,
        TokenType.SLASH: divide,
        TokenType.GREATER: operator.gt,
        TokenType.GREATER_EQUAL: operator.ge,
        TokenType.LESS: operator.lt,
        TokenType.LESS_EQUAL: operator.le,
    }

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out  # None means sys.stdout at the time of printing

        self.globals = Environment()
        self.environment = self.globals

        self.globals.define("clock", NativeFunction("clock", 0, lambda interpreter, arguments: time.time()))

        self._statements = {
            st.Expression: self._expression_stmt,
            st.Print: self._print_stmt,
            st.Var: self._var_stmt,
            st.Block: self._block_stmt,
            st.If: self._if_stmt,
            st.While: self._while_stmt,
            st.Break: self._break_stmt,
            st.Return: self._return_stmt,
            st.Function: self._function_stmt,
        }
        self._expressions = {
            ex.Literal: self._literal,
            ex.Grouping: self._grouping,
            ex.Unary: self._unary,
            ex.Binary: self._binary,
            ex.Logical: self._logical,
            ex.Ternary: self._ternary,
            ex.Variable: self._variable,
            ex.Assign: self._assign,
            ex.Call: self._call,
        }

    def interpret(self, statements):
        """Executes top-level statements in order. A runtime error is reported and only skips the rest of the statement
        that raised it.
        """
        for statement in statements:
            try:
                signal = self.execute(statement)
                if isinstance(signal, BreakSignal):
                    raise LoxRuntimeError(signal.keyword, "Cannot break outside of a loop.")
                if isinstance(signal, ReturnSignal):
                    raise LoxRuntimeError(signal.keyword, "Cannot return from top-level code.")
            except LoxRuntimeError as error:
                self.error_handler.runtime_error(error)

    # ---------- STATEMENTS ----------
    def execute(self, stmt):
        return self._statements[type(stmt)](stmt)

    def execute_block(self, statements, environment):
        """Executes statements inside environment, restoring the current environment afterwards even if an error is
        raised. Stops at, and returns, the first control-flow signal.
        """
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    return signal
            return None
        finally:
            self.environment = previous

    def _expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def _print_stmt(self, stmt):
        value = self.evaluate(stmt.expression)
        print(self.stringify(value), file=self.out)

    def _var_stmt(self, stmt):
        # the initializer runs before the name is bound, so 'var a = a;' reads an outer 'a'
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def _block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def _if_stmt(self, stmt):
        if self.is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def _while_stmt(self, stmt):
        while self.is_truthy(self.evaluate(stmt.condition)):
            signal = self.execute(stmt.body)
            if isinstance(signal, BreakSignal):
                break
            if signal is not None:
                return signal
        return None

    def _break_stmt(self, stmt):
        return BreakSignal(stmt.keyword)

    def _return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnSignal(stmt.keyword, value)

    def _function_stmt(self, stmt):
        # the function is defined in the scope it closes over, so it can call itself
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

    # ---------- EXPRESSIONS ----------
    def evaluate(self, expr):
        return self._expressions[type(expr)](expr)

    def _literal(self, expr):
        return expr.value

    def _grouping(self, expr):
        return self.evaluate(expr.expression)

    def _unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type == TokenType.BANG:
            return not self.is_truthy(right)

        Interpreter.check_number_operand(expr.operator, right)
        return -right

    def _binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op_type = expr.operator.type

        if op_type == TokenType.COMMA:
            return right
        if op_type == TokenType.EQUAL_EQUAL:
            return Interpreter.is_equal(left, right)
        if op_type == TokenType.BANG_EQUAL:
            return not Interpreter.is_equal(left, right)

        if op_type == TokenType.PLUS:
            if Interpreter.is_number(left) and Interpreter.is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(expr.operator, "Operands of '{}' must be two numbers or two strings.",
                                  expr.operator.lexeme)

        Interpreter.check_number_operands(expr.operator, left, right)
        return Interpreter.NUMERIC[op_type](left, right)

    def _logical(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.type == TokenType.OR:
            if self.is_truthy(left):
                return left
        elif not self.is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def _ternary(self, expr):
        if self.is_truthy(self.evaluate(expr.condition)):
            return self.evaluate(expr.truthy)
        return self.evaluate(expr.falsy)

    def _variable(self, expr):
        return self.environment.get(expr.name)

    def _assign(self, expr):
        value = self.evaluate(expr.value)
        self.environment.assign(expr.name, value)
        return value

    def _call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions, not {}.", self.stringify(callee))

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, "Expected {} arguments but got {}.",
                                  [str(callee.arity()), str(len(arguments))])

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    # ---------- VALUES ----------
    @staticmethod
    def is_truthy(value):
        """nil and false are falsy, everything else (including 0 and "") is truthy."""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    @staticmethod
    def is_number(value):
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    @staticmethod
    def is_equal(left, right):
        """Values of different types are never equal; in particular true != 1."""
        if Interpreter.is_number(left) and Interpreter.is_number(right):
            return left == right
        if type(left) is not type(right):
            return False
        return left == right

    @staticmethod
    def check_number_operand(op, operand):
        if not Interpreter.is_number(operand):
            raise LoxRuntimeError(op, "Operand of '{}' must be a number.", op.lexeme)

    @staticmethod
    def check_number_operands(op, left, right):
        if not (Interpreter.is_number(left) and Interpreter.is_number(right)):
            raise LoxRuntimeError(op, "Operands of '{}' must be numbers.", op.lexeme)

    @staticmethod
    def stringify(value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if math.isnan(value):
                return "NaN"
            if math.isinf(value):
                return "Infinity" if value > 0 else "-Infinity"
            return number_text(value)
        return str(value)
