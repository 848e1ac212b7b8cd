"""Non-local control flow. Executing a statement yields None when it completes normally, or one of these signals when
a 'break' or 'return' was reached. Every statement that runs other statements passes a signal straight up, until a loop
consumes a BreakSignal or a function call consumes a ReturnSignal. Signals are results, not errors: they are never
reported unless they escape their boundary.
"""

from dataclasses import dataclass

from lox.lang.tokens import Token


@dataclass(frozen=True)
class BreakSignal:
    keyword: Token


@dataclass(frozen=True)
class ReturnSignal:
    keyword: Token
    value: object = None
