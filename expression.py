"""
Expression engine: a recursive-descent parser that computes the value while
it parses. There is no tree; the only state is the cursor into the text.

    expr       := term (('+'|'-') term)*
    term       := factor (('*'|'/') factor)*
    factor     := ('+'|'-') factor | '(' expr ')' | NUMBER | IDENT ['(' args ')']
    args       := expr (',' expr)*
    comparison := expr ('>'|'<'|'>='|'<='|'='|'<>') expr
"""
import operator

from errors import (ArityMismatch, BasicSyntaxError, DivisionByZero,
                    ResourceExhausted, UndefinedVariable, UnknownFunction)
from lexer import Lexer

COMPARISONS = {
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
    '=': operator.eq,
    '<>': operator.ne,
}

default_lexer = Lexer()


class ExpressionParser:
    def __init__(self, text, variables, functions):
        self.text = text
        self.pos = 0
        self.variables = variables
        self.functions = functions
        self.lexer = default_lexer

    # Cursor

    def peek(self):
        return self.lexer.scan(self.text, self.pos)

    def accept(self, type, value=None):
        tok = self.peek()
        if tok.type == type and (value is None or tok.value == value):
            self.pos = tok.end
            return tok
        return None

    def accept_word(self, word):
        tok = self.peek()
        if tok.is_word(word):
            self.pos = tok.end
            return tok
        return None

    def expect(self, type, message):
        tok = self.accept(type)
        if tok is None:
            raise BasicSyntaxError(message)
        return tok

    def at_end(self):
        return self.peek().type == 'EOF'

    def parse_whole(self, parse):
        """Runs parse and insists it consumed the whole text."""
        try:
            result = parse()
        except RecursionError:
            raise ResourceExhausted("expression nested too deeply") from None
        if not self.at_end():
            raise BasicSyntaxError("Unexpected characters at end")
        return result

    # Grammar

    def parse_expr(self):
        value = self.parse_term()
        while True:
            tok = self.peek()
            if tok.type != 'OP' or tok.value not in '+-':
                return value
            self.pos = tok.end
            rhs = self.parse_term()
            value = value + rhs if tok.value == '+' else value - rhs

    def parse_term(self):
        value = self.parse_factor()
        while True:
            tok = self.peek()
            if tok.type != 'OP' or tok.value not in '*/':
                return value
            self.pos = tok.end
            rhs = self.parse_factor()
            if tok.value == '*':
                value *= rhs
            else:
                if rhs == 0.0:
                    raise DivisionByZero()
                value /= rhs

    def parse_factor(self):
        tok = self.peek()

        # Unary +/- chains: --5, -+-x
        if tok.type == 'OP' and tok.value in '+-':
            self.pos = tok.end
            value = self.parse_factor()
            return -value if tok.value == '-' else value

        if tok.type == 'LPAREN':
            self.pos = tok.end
            value = self.parse_expr()
            self.expect('RPAREN', "expected ')'")
            return value

        if tok.type == 'IDENT':
            self.pos = tok.end
            if self.peek().type == 'LPAREN':
                return self.parse_function_call(tok.value)
            return self.lookup_variable(tok.value)

        if tok.type == 'NUMBER':
            self.pos = tok.end
            return tok.value

        raise BasicSyntaxError("expected number")

    def parse_function_call(self, name):
        func = self.functions.find(name)
        if func is None:
            raise UnknownFunction(name)
        self.expect('LPAREN', "expected '('")

        args = []
        if not self.accept('RPAREN'):
            while True:
                args.append(self.parse_expr())
                if not self.accept('COMMA'):
                    break
            self.expect('RPAREN', "expected ')'")

        if func.arity >= 0 and len(args) != func.arity:
            raise ArityMismatch(name, func.arity, len(args))
        return func(args)

    def lookup_variable(self, name):
        try:
            return self.variables[name]
        except KeyError:
            raise UndefinedVariable(name) from None

    def parse_comparison(self):
        """Only reachable from IF; yields exactly 1.0 or 0.0."""
        left = self.parse_expr()
        tok = self.peek()
        if tok.type not in ('RELOP', 'ASSIGN'):
            raise BasicSyntaxError("expected comparison operator")
        self.pos = tok.end
        right = self.parse_expr()
        return 1.0 if COMPARISONS[tok.value](left, right) else 0.0
