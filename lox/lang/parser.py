"""Recursive-descent parser for lox. Consumes the scanner's token list through a small cursor (peek/advance/previous)
and produces a list of statements.

All grammar can be loosely defined as follows (lowest precedence first for expressions):

```
<program>     ::= <declaration>* EOF
<declaration> ::= "fun" <function> | "var" IDENTIFIER ("=" <expression>)? ";" | <statement>
<function>    ::= IDENTIFIER "(" (IDENTIFIER ("," IDENTIFIER)*)? ")" <block>
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt>
                | <while_stmt> | <break_stmt> | <block>
<for_stmt>    ::= "for" "(" (<var_decl> | <expr_stmt> | ";") <expression>? ";" <expression>? ")" <statement>
<if_stmt>     ::= "if" "(" <expression> ")" <statement> ("else" <statement>)?
<print_stmt>  ::= "print" <expression> ";"
<return_stmt> ::= "return" <expression>? ";"
<while_stmt>  ::= "while" "(" <expression> ")" <statement>
<break_stmt>  ::= "break" ";"
<block>       ::= "{" <declaration>* "}"

<expression>  ::= <assignment>
<assignment>  ::= IDENTIFIER "=" <assignment> | <separator>
<separator>   ::= <ternary> ("," <ternary>)*                  ; sequencing, evaluates to the rightmost value
<ternary>     ::= <logic_or> ("?" <ternary> ":" <ternary>)?   ; right-associative
<logic_or>    ::= <logic_and> ("or" <logic_and>)*
<logic_and>   ::= <equality> ("and" <equality>)*
<equality>    ::= <comparison> (("!=" | "==") <comparison>)*
<comparison>  ::= <addition> ((">" | ">=" | "<" | "<=") <addition>)*
<addition>    ::= <multiplication> (("-" | "+") <multiplication>)*
<multiplication> ::= <unary> (("/" | "*") <unary>)*
<unary>       ::= ("!" | "-") <unary> | <call>
<call>        ::= <primary> ("(" <arguments>? ")")*          ; arguments are <ternary>s, so ',' is a delimiter
<primary>     ::= "true" | "false" | "nil" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
```

`for` loops are desugared here into blocks and while loops, so the interpreter never sees them.
"""

from lox.lang.error import ParseError
from lox.lang.tokens import TokenType
from lox.tree import expr as ex
from lox.tree import stmt as st


class Parser:
    """Parses a token list into statements. Errors are reported to error_handler and the broken declaration is skipped,
    so one call to parse reports at most one error per statement.
    """
    MAX_ARGS = 8

    # tokens that can start a new statement, used to resynchronize after an error
    BOUNDARIES = (
        TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
        TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
    )
    # binary operators that cannot also start an expression (unlike '-')
    LEFT_OPERAND_REQUIRED = (
        TokenType.STAR, TokenType.SLASH, TokenType.PLUS,
        TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL,
    )

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

        self.loop_depth = 0
        self.function_depth = 0

    def parse(self):
        """Parses declarations until EOF. Declarations that failed to parse are left out of the result."""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # ---------- DECLARATIONS ----------
    def declaration(self):
        try:
            if self.match(TokenType.FUN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def function(self, kind):
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Cannot have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")

        # a loop around the declaration does not make 'break' legal inside the body
        enclosing_loops, self.loop_depth = self.loop_depth, 0
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.function_depth -= 1
            self.loop_depth = enclosing_loops

        return st.Function(name, tuple(params), tuple(body))

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return st.Var(name, initializer)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.BREAK):
            return self.break_statement()
        if self.match(TokenType.LEFT_BRACE):
            return st.Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self):
        """Desugars
            for (init; cond; incr) body
        into
            { init; while (cond) { body; incr; } }
        leaving out the pieces that are absent. A missing condition loops forever.
        """
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.loop_body()

        if increment is not None:
            body = st.Block((body, st.Expression(increment)))
        if condition is None:
            condition = ex.Literal(True)
        body = st.While(condition, body)
        if initializer is not None:
            body = st.Block((initializer, body))

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return st.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return st.Print(value)

    def return_statement(self):
        keyword = self.previous()
        if self.function_depth == 0:
            self.error_handler.warn(keyword, "'return' outside of a function.")

        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return st.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after while condition.")
        return st.While(condition, self.loop_body())

    def loop_body(self):
        self.loop_depth += 1
        try:
            return self.statement()
        finally:
            self.loop_depth -= 1

    def break_statement(self):
        keyword = self.previous()
        if self.loop_depth == 0:
            self.error_handler.warn(keyword, "'break' outside of a loop.")

        self.consume(TokenType.SEMICOLON, "Expect ';' after 'break'.")
        return st.Break(keyword)

    def block(self):
        """Parses declarations up to the closing brace. Assumes '{' has been consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return st.Expression(expr)

    # ---------- EXPRESSIONS ----------
    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.separator()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ex.Variable):
                return ex.Assign(expr.name, value)

            # reported, but the statement is still parsed to the end
            self.error(equals, "Invalid assignment target.")

        return expr

    def separator(self):
        expr = self.ternary()

        while self.match(TokenType.COMMA):
            operator = self.previous()
            right = self.ternary()
            expr = ex.Binary(expr, operator, right)

        return expr

    def ternary(self):
        expr = self.logic_or()

        if self.match(TokenType.QUESTION_MARK):
            truthy = self.ternary()
            self.consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            falsy = self.ternary()
            expr = ex.Ternary(expr, truthy, falsy)

        return expr

    def logic_or(self):
        return self.logical(self.logic_and, TokenType.OR)

    def logic_and(self):
        return self.logical(self.equality, TokenType.AND)

    def logical(self, operand, operator_type):
        expr = operand()

        while self.match(operator_type):
            operator = self.previous()
            right = operand()
            expr = ex.Logical(expr, operator, right)

        return expr

    def equality(self):
        return self.binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(self.addition, TokenType.GREATER, TokenType.GREATER_EQUAL,
                           TokenType.LESS, TokenType.LESS_EQUAL)

    def addition(self):
        return self.binary(self.multiplication, TokenType.MINUS, TokenType.PLUS)

    def multiplication(self):
        return self.binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def binary(self, operand, *operator_types):
        """Left-associative binary level: operand (operator operand)*"""
        expr = operand()

        while self.match(*operator_types):
            operator = self.previous()
            right = operand()
            expr = ex.Binary(expr, operator, right)

        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return ex.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()

        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Cannot have more than {Parser.MAX_ARGS} arguments.")
                # ternary, not expression: a separator would swallow the remaining arguments
                arguments.append(self.ternary())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return ex.Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenType.FALSE):
            return ex.Literal(False)
        if self.match(TokenType.TRUE):
            return ex.Literal(True)
        if self.match(TokenType.NIL):
            return ex.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return ex.Literal(self.previous().literal)

        if self.match(TokenType.IDENTIFIER):
            return ex.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return ex.Grouping(expr)

        if self.match(*Parser.LEFT_OPERAND_REQUIRED):
            # parse and discard the right operand so recovery starts after it
            operator = self.previous()
            self.multiplication()
            raise self.error(operator, f"Binary operator '{operator.lexeme}' requires a left operand.")

        raise self.error(self.peek(), "Expect expression.")

    # ---------- HELPERS ----------
    def consume(self, token_type, msg):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), msg)

    def error(self, token, msg):
        """Reports msg at token and returns (does not raise) a ParseError for the caller to raise if it must unwind."""
        self.error_handler.error(token, msg)
        return ParseError(token, msg)

    def synchronize(self):
        """Discards tokens until the start of the next statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.BOUNDARIES:
                return
            self.advance()

    def match(self, *token_types):
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type):
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type == TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]
