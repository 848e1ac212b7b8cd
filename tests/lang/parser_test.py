import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.parser import Parser
from lox.lang.scanner import Scanner
from lox.tree import expr as ex
from lox.tree import stmt as st
from lox.tree.printer import AstPrinter


def parse(source):
    error_handler = ErrorHandler(stream=io.StringIO())
    tokens = Scanner(source, error_handler).scan_tokens()
    return Parser(tokens, error_handler).parse(), error_handler


def parse_expr(source):
    """Parses source as a single expression statement and returns it in AstPrinter form."""
    statements, error_handler = parse(source + ";")
    assert not error_handler.had_error, [error.msg for error in error_handler.errors]
    assert len(statements) == 1 and isinstance(statements[0], st.Expression), statements
    return AstPrinter().print(statements[0].expression)


class ExpressionTestCase(unittest.TestCase):

    def test_precedence(self):
        cases = {
            "1 + 2 * 3": "(+ 1 (* 2 3))",
            "(1 + 2) * 3": "(* (group (+ 1 2)) 3)",
            "1 - 2 - 3": "(- (- 1 2) 3)",
            "-1 * 2": "(* (- 1) 2)",
            "!!true": "(! (! true))",
            "1 < 2 == 3 >= 4": "(== (< 1 2) (>= 3 4))",
            "a or b and c": "(or a (and b c))",
            "a and b == c": "(and a (== b c))",
            "x = y = 3": "(= x (= y 3))",
            "f(1)(2)": "(call (call f 1) 2)",
            "f()": "(call f)",
            '"s" + nil': '(+ "s" nil)',
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expr(case), case)

    def test_ternary_is_right_associative(self):
        cases = {
            "a ? b : c ? d : e": "(: (? a b) (: (? c d) e))",
            "a ? b ? c : d : e": "(: (? a (: (? b c) d)) e)",
            "1 < 2 ? \"yes\" : \"no\"": '(: (? (< 1 2) "yes") "no")',
            "a or b ? c : d": "(: (? (or a b) c) d)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expr(case), case)

    def test_comma_groups_left_to_right(self):
        cases = {
            "1, 2": "(, 1 2)",
            "1, 2, 3": "(, (, 1 2) 3)",
            "a ? b : c, d": "(, (: (? a b) c) d)",
            "x = 1, 2": "(= x (, 1 2))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expr(case), case)

    def test_arguments_are_not_separators(self):
        self.assertEqual("(call f 1 2 3)", parse_expr("f(1, 2, 3)"))
        self.assertEqual("(call f (group (, 1 2)) 3)", parse_expr("f((1, 2), 3)"))
        self.assertEqual("(call f (: (? a b) c))", parse_expr("f(a ? b : c)"))

    def test_call_keeps_closing_paren(self):
        statements, __ = parse("f(\n1\n);")
        call = statements[0].expression
        self.assertIsInstance(call, ex.Call)
        self.assertEqual(")", call.paren.lexeme)
        self.assertEqual(3, call.paren.line)


class StatementTestCase(unittest.TestCase):

    def test_declarations(self):
        statements, error_handler = parse("var a; var b = 1; fun f(x, y) { return x; } print a;")
        self.assertFalse(error_handler.had_error)
        self.assertEqual([st.Var, st.Var, st.Function, st.Print], [type(stmt) for stmt in statements])

        var_a, var_b, function, __ = statements
        self.assertIsNone(var_a.initializer)
        self.assertEqual(ex.Literal(1.0), var_b.initializer)
        self.assertEqual(["x", "y"], [param.lexeme for param in function.params])
        self.assertIsInstance(function.body[0], st.Return)

    def test_if_else(self):
        statements, __ = parse("if (a) print 1; else if (b) print 2; else print 3;")
        outer = statements[0]
        self.assertIsInstance(outer, st.If)
        self.assertIsInstance(outer.else_branch, st.If)
        self.assertIsInstance(outer.else_branch.else_branch, st.Print)

        statements, __ = parse("if (a) if (b) print 1; else print 2;")
        self.assertIsNone(statements[0].else_branch)  # dangling else binds to the nearest if
        self.assertIsNotNone(statements[0].then_branch.else_branch)

    def test_for_desugars_to_while(self):
        statements, error_handler = parse("for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertFalse(error_handler.had_error)

        outer = statements[0]
        self.assertIsInstance(outer, st.Block)
        initializer, loop = outer.statements
        self.assertIsInstance(initializer, st.Var)
        self.assertIsInstance(loop, st.While)
        self.assertEqual("(< i 3)", AstPrinter().print(loop.condition))

        body, increment = loop.body.statements
        self.assertIsInstance(body, st.Print)
        self.assertEqual("(= i (+ i 1))", AstPrinter().print(increment.expression))

    def test_for_without_clauses(self):
        statements, error_handler = parse("for (;;) break;")
        self.assertFalse(error_handler.had_error)

        loop = statements[0]
        self.assertIsInstance(loop, st.While)
        self.assertEqual(ex.Literal(True), loop.condition)
        self.assertIsInstance(loop.body, st.Break)

    def test_for_expression_initializer(self):
        statements, __ = parse("for (i = 0; i < 1;) print i;")
        initializer, loop = statements[0].statements
        self.assertIsInstance(initializer, st.Expression)
        self.assertIsInstance(loop.body, st.Print)

    def test_nodes_are_immutable(self):
        statements, __ = parse("{ var a = 1; }")
        block = statements[0]
        self.assertIsInstance(block.statements, tuple)
        with self.assertRaises(AttributeError):
            block.statements = ()


class ErrorTestCase(unittest.TestCase):

    def test_errors(self):
        should_fail = {
            "print 1": "Expect ';' after value.",
            "var 1 = 2;": "Expect variable name.",
            "1 + ;": "Expect expression.",
            "(1 + 2;": "Expect ')' after expression.",
            "a ? b;": "Expect ':' after then branch of conditional expression.",
            "if a) print 1;": "Expect '(' after 'if'.",
            "fun (a) {}": "Expect function name.",
            "fun f(a {}": "Expect ')' after parameters.",
            "fun f() print 1;": "Expect '{' before function body.",
            "{ print 1;": "Expect '}' after block.",
            "f(1;": "Expect ')' after arguments.",
            "* 3;": "Binary operator '*' requires a left operand.",
            "== nil;": "Binary operator '==' requires a left operand.",
        }
        for case, msg in should_fail.items():
            __, error_handler = parse(case)
            self.assertTrue(error_handler.had_error, case)
            self.assertEqual(msg, error_handler.errors[0].msg, case)

    def test_invalid_assignment_target_keeps_statement(self):
        statements, error_handler = parse("1 + a = 3; print 2;")
        self.assertEqual(["Invalid assignment target."], [error.msg for error in error_handler.errors])
        self.assertEqual(2, len(statements))
        self.assertEqual("(+ 1 a)", AstPrinter().print(statements[0].expression))

    def test_synchronize_reports_once_per_statement(self):
        statements, error_handler = parse("var = 1 2 3; print 1; var x = ) ; print 2;")
        self.assertEqual(2, len(error_handler.errors))
        self.assertEqual([st.Print, st.Print], [type(stmt) for stmt in statements])

    def test_synchronize_stops_at_keyword(self):
        statements, error_handler = parse("1 + ) var a = 1; print a;")
        self.assertEqual(1, len(error_handler.errors))
        self.assertEqual([st.Var, st.Print], [type(stmt) for stmt in statements])

    def test_too_many_arguments_is_not_fatal(self):
        args = ", ".join(str(num) for num in range(9))
        statements, error_handler = parse(f"f({args}); print 1;")
        self.assertEqual(["Cannot have more than 8 arguments."], [error.msg for error in error_handler.errors])
        self.assertEqual(2, len(statements))
        self.assertEqual(9, len(statements[0].expression.arguments))

        statements, error_handler = parse(f"f({', '.join(str(num) for num in range(8))});")
        self.assertFalse(error_handler.had_error)

    def test_too_many_parameters_is_not_fatal(self):
        params = ", ".join(f"p{num}" for num in range(9))
        statements, error_handler = parse(f"fun f({params}) {{}} print 1;")
        self.assertEqual(["Cannot have more than 8 parameters."], [error.msg for error in error_handler.errors])
        self.assertEqual([st.Function, st.Print], [type(stmt) for stmt in statements])

    def test_error_inside_block_keeps_rest_of_block(self):
        statements, error_handler = parse("{ var a = ; print 1; } print 2;")
        self.assertEqual(1, len(error_handler.errors))
        block, after = statements
        self.assertEqual([st.Print], [type(stmt) for stmt in block.statements])
        self.assertIsInstance(after, st.Print)


class WarningTestCase(unittest.TestCase):

    def test_misplaced_jumps_warn(self):
        cases = {
            "break;": ["'break' outside of a loop."],
            "return 1;": ["'return' outside of a function."],
            "while (true) { fun f() { break; } }": ["'break' outside of a loop."],
            "while (true) break;": [],
            "for (;;) { if (a) break; }": [],
            "fun f() { while (true) { return; } }": [],
        }
        for case, expected in cases.items():
            statements, error_handler = parse(case)
            self.assertFalse(error_handler.had_error, case)
            self.assertEqual(expected, [warning.msg for warning in error_handler.warnings], case)
            self.assertTrue(statements, case)


if __name__ == '__main__':
    unittest.main()
