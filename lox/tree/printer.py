"""Text renderings of syntax trees.

- AstPrinter: unambiguous, if ugly, Lisp-style form of an expression, e.g. `(* (- 123) (group 45.67))`
- SourcePrinter: fully parenthesized lox source for an expression. Parsing that text again gives a tree that evaluates
  to the same value as the original.
- display: indented dump of a whole statement/expression tree, used by `lox --ast`
"""

from decimal import Decimal

from lox.tree import expr as ex
from lox.tree import stmt as st


def literal_text(value):
    """Source text of a literal value. Strings are quoted, numbers lose a trailing '.0'."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return number_text(value)
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def number_text(value):
    """Decimal text of a finite number, without exponent (the scanner has no exponent syntax) or trailing '.0'."""
    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text[:-2] if text.endswith(".0") else text


class AstPrinter:

    def print(self, expr):
        if isinstance(expr, ex.Literal):
            return literal_text(expr.value)
        if isinstance(expr, ex.Grouping):
            return self.parenthesize("group", expr.expression)
        if isinstance(expr, ex.Unary):
            return self.parenthesize(expr.operator.lexeme, expr.right)
        if isinstance(expr, (ex.Binary, ex.Logical)):
            return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)
        if isinstance(expr, ex.Ternary):
            return f"(: {self.parenthesize('?', expr.condition, expr.truthy)} {self.print(expr.falsy)})"
        if isinstance(expr, ex.Variable):
            return expr.name.lexeme
        if isinstance(expr, ex.Assign):
            return self.parenthesize(f"= {expr.name.lexeme}", expr.value)
        if isinstance(expr, ex.Call):
            return self.parenthesize("call", expr.callee, *expr.arguments)
        raise TypeError(f"not an expression: {expr!r}")

    def parenthesize(self, name, *exprs):
        return f"({' '.join([name] + [self.print(expr) for expr in exprs])})"


class SourcePrinter:
    """Every compound expression is wrapped in its own parentheses, so precedence never has to be reconstructed."""

    def print(self, expr):
        if isinstance(expr, ex.Literal):
            return literal_text(expr.value)
        if isinstance(expr, ex.Grouping):
            return f"({self.print(expr.expression)})"
        if isinstance(expr, ex.Unary):
            return f"({expr.operator.lexeme}{self.print(expr.right)})"
        if isinstance(expr, ex.Binary) and expr.operator.lexeme == ",":
            return f"({self.print(expr.left)}, {self.print(expr.right)})"
        if isinstance(expr, (ex.Binary, ex.Logical)):
            return f"({self.print(expr.left)} {expr.operator.lexeme} {self.print(expr.right)})"
        if isinstance(expr, ex.Ternary):
            return f"({self.print(expr.condition)} ? {self.print(expr.truthy)} : {self.print(expr.falsy)})"
        if isinstance(expr, ex.Variable):
            return expr.name.lexeme
        if isinstance(expr, ex.Assign):
            return f"({expr.name.lexeme} = {self.print(expr.value)})"
        if isinstance(expr, ex.Call):
            arguments = ", ".join(self.print(argument) for argument in expr.arguments)
            return f"{self.print(expr.callee)}({arguments})"
        raise TypeError(f"not an expression: {expr!r}")


def display(node, indents=0):
    """Recursively displays a tree with readable format.

    Format:
    <Node>(<field>=<value>, nodes=[
        <Node>(...),
        ...
    ])

    Expressions are shown on one line in AstPrinter form; statements nest.
    """
    pad = "    " * indents

    if isinstance(node, ex.Expr):
        return f"{pad}{AstPrinter().print(node)}"

    cls = type(node).__name__
    if isinstance(node, (st.Expression, st.Print)):
        return f"{pad}{cls}({AstPrinter().print(node.expression)})"
    if isinstance(node, st.Var):
        initializer = "" if node.initializer is None else f" = {AstPrinter().print(node.initializer)}"
        return f"{pad}{cls}({node.name.lexeme}{initializer})"
    if isinstance(node, st.Break):
        return f"{pad}{cls}()"
    if isinstance(node, st.Return):
        value = "" if node.value is None else AstPrinter().print(node.value)
        return f"{pad}{cls}({value})"

    if isinstance(node, st.Block):
        header, nodes = f"{cls}(", node.statements
    elif isinstance(node, st.If):
        header = f"{cls}(condition={AstPrinter().print(node.condition)}, "
        nodes = [node.then_branch] + ([node.else_branch] if node.else_branch is not None else [])
    elif isinstance(node, st.While):
        header, nodes = f"{cls}(condition={AstPrinter().print(node.condition)}, ", [node.body]
    elif isinstance(node, st.Function):
        params = ", ".join(param.lexeme for param in node.params)
        header, nodes = f"{cls}(name={node.name.lexeme}, params=[{params}], ", node.body
    else:
        raise TypeError(f"not a statement: {node!r}")

    result = f"{pad}{header}nodes=["
    if not nodes:
        return result + "])"
    for child in nodes:
        result += "\n" + display(child, indents + 1) + ","
    return result[:-1] + f"\n{pad}])"
