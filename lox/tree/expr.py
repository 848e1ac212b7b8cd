"""Expression nodes of the lox syntax tree.

Nodes are frozen dataclasses holding only data: the parser builds them and nothing mutates them afterwards, so the
same tree can be evaluated any number of times. Behaviour lives in whatever walks the tree (see
lox/lang/interpreter.py and lox/tree/printer.py), which dispatches on the node class.

```
<expr> ::= <literal> | <grouping> | <unary> | <binary> | <logical> | <ternary>
         | <variable> | <assign> | <call>
```
"""

from dataclasses import dataclass
from typing import Tuple

from lox.lang.tokens import Token


class Expr:
    """Superclass of every expression node."""


@dataclass(frozen=True)
class Literal(Expr):
    value: object  # None, bool, float or str


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    """Arithmetic, comparison and equality operators, plus the comma (sequencing) operator."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """Short-circuiting 'and'/'or'."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Ternary(Expr):
    condition: Expr
    truthy: Expr
    falsy: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to report errors at the call site
    arguments: Tuple[Expr, ...]
