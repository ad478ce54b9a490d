import re

class Token:
    def __init__(self, type, value, pos, end, spaced=False):
        self.type = type
        self.value = value
        self.pos = pos
        self.end = end
        # True when followed by whitespace or end of input (keyword boundary)
        self.spaced = spaced

    def is_word(self, word):
        """Case-insensitive keyword test guarded by the whitespace boundary."""
        return self.type == 'IDENT' and self.spaced and self.value.upper() == word

    def __repr__(self):
        return f"Token({self.type}, {self.value!r})"

class Lexer:
    def __init__(self):
        # Token specification, tried in order
        self.token_specification = [
            ('NUMBER',   r'(?:\d+\.?\d*|\.\d+)(?:[eE][+\-]?\d+)?'),  # 12, 1.5, .5, 1e-3
            ('IDENT',    r'[A-Za-z_][A-Za-z0-9_]*'),  # Variable, function or keyword
            ('RELOP',    r'<>|<=|>=|<|>'),  # Relational operators (= is ASSIGN)
            ('ASSIGN',   r'='),            # Assignment / equality
            ('OP',       r'[+\-*/]'),       # Arithmetic operators
            ('LPAREN',   r'\('),           # (
            ('RPAREN',   r'\)'),           # )
            ('COMMA',    r','),            # ,
            ('SKIP',     r'\s+'),          # Whitespace is insignificant
            ('MISMATCH', r'.'),            # Any other character
        ]
        self.regex = re.compile('|'.join('(?P<%s>%s)' % pair for pair in self.token_specification))

    def scan(self, text, pos=0):
        """Returns the next token at or after pos, or an EOF token."""
        while True:
            mo = self.regex.match(text, pos)
            if mo is None:
                return Token('EOF', None, len(text), len(text), spaced=True)
            kind = mo.lastgroup
            if kind == 'SKIP':
                pos = mo.end()
                continue
            value = mo.group()
            if kind == 'NUMBER':
                value = float(value)
            end = mo.end()
            spaced = end >= len(text) or text[end].isspace()
            return Token(kind, value, mo.start(), end, spaced)
