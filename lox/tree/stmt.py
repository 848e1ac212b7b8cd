"""Statement nodes of the lox syntax tree. Like expression nodes, these are immutable once the parser returns them."""

from dataclasses import dataclass
from typing import Optional, Tuple

from lox.lang.tokens import Token
from lox.tree.expr import Expr


class Stmt:
    """Superclass of every statement node."""


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class Break(Stmt):
    keyword: Token


@dataclass(frozen=True)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]
