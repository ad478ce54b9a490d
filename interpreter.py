import logging
import re

from errors import (BasicError, BasicSyntaxError, ControlFlowError,
                    InvalidLineNumber, LineNotFound, ResourceExhausted)
from expression import ExpressionParser, default_lexer
from functions import FunctionRegistry
from program_store import MAX_LINE_NUMBER, ProgramStore

log = logging.getLogger(__name__)

PRINT_PRECISION = 15

_DIGITS = re.compile(r'\s*(\d+)')
_LIST_RANGE = re.compile(r'(\d*)\s*(?:,\s*(\d*))?\Z')


def format_number(value):
    return '%.*g' % (PRINT_PRECISION, value)


class Flow:
    """Control signal a statement hands back to the run loop."""
    CONTINUE = 'CONTINUE'
    JUMP = 'JUMP'
    HALT = 'HALT' # end of program

    def __init__(self, kind, target=None):
        self.kind = kind
        self.target = target

    @classmethod
    def jump(cls, target):
        return cls(cls.JUMP, target)

    def __eq__(self, other):
        return isinstance(other, Flow) and (self.kind, self.target) == (other.kind, other.target)

    def __repr__(self):
        if self.kind == Flow.JUMP:
            return f"Flow.jump({self.target})"
        return f"Flow({self.kind})"

CONTINUE = Flow(Flow.CONTINUE)
HALT = Flow(Flow.HALT)


class ForLoopFrame:
    def __init__(self, var_name, start, end, step, for_line):
        self.var_name = var_name
        self.start = start
        self.end = end
        self.step = step
        self.for_line = for_line # None when FOR was typed at the prompt

    def __repr__(self):
        return f"ForLoopFrame({self.var_name}, {self.start}, {self.end}, {self.step}, line={self.for_line})"


class GosubFrame:
    def __init__(self, return_line):
        self.return_line = return_line # None: RETURN ends the program

    def __repr__(self):
        return f"GosubFrame({self.return_line})"


class LineOutcome:
    """Result of submit_line."""
    IMMEDIATE = 'ImmediateResult'
    DELETED = 'LineDeleted'
    STORED = 'LineStored'
    COMMAND = 'CommandHandled'
    ERROR = 'Error'

    def __init__(self, kind, value=None, error=None):
        self.kind = kind
        self.value = value
        self.error = error

    @property
    def ok(self):
        return self.kind != LineOutcome.ERROR

    @property
    def message(self):
        return str(self.error) if self.error is not None else None

    def __eq__(self, other):
        if not isinstance(other, LineOutcome):
            return NotImplemented
        return (self.kind, self.value, self.message) == (other.kind, other.value, other.message)

    def __repr__(self):
        if self.kind == LineOutcome.ERROR:
            return f"LineOutcome(Error, {self.message!r})"
        return f"LineOutcome({self.kind}, {self.value!r})"


class StatementParser(ExpressionParser):
    """Parses one statement and executes it in the same pass."""

    def __init__(self, text, interp):
        super().__init__(text, interp.variables, interp.functions)
        self.interp = interp

    def parse_statement(self):
        tok = self.peek()

        if tok.type == 'IDENT' and tok.spaced:
            handler = self.keywords.get(tok.value.upper())
            if handler:
                self.pos = tok.end
                return handler(self)

        # Assignment: IDENT '=' expr
        if tok.type == 'IDENT':
            saved = self.pos
            self.pos = tok.end
            if self.accept('ASSIGN'):
                value = self.parse_expr()
                self.interp.set_variable(tok.value, value)
                return value, CONTINUE
            self.pos = saved

        return self.parse_expr(), CONTINUE

    def parse_line_number(self, what):
        m = _DIGITS.match(self.text, self.pos)
        if not m:
            raise BasicSyntaxError(f"{what} requires a line number")
        number = int(m.group(1))
        if number > MAX_LINE_NUMBER:
            raise InvalidLineNumber(f"invalid {what} line number")
        self.pos = m.end()
        return number

    def parse_loop_variable(self, keyword):
        tok = self.peek()
        if tok.type != 'IDENT':
            raise BasicSyntaxError(f"expected variable name after {keyword}")
        self.pos = tok.end
        return tok.value

    def do_print(self):
        emit = self.interp.emit
        if self.at_end():
            emit("\n")
            return 0.0, CONTINUE

        first = True
        while True:
            if not first:
                emit(" ")
            first = False
            emit(format_number(self.parse_expr()))
            if not self.accept('COMMA') or self.at_end():
                break
        emit("\n")
        return 0.0, CONTINUE

    def do_goto(self):
        return 0.0, Flow.jump(self.parse_line_number('GOTO'))

    def do_if(self):
        condition = self.parse_comparison()
        if not self.accept_word('THEN'):
            raise BasicSyntaxError("expected THEN after IF condition")

        if condition == 0.0:
            # Rest of the line is skipped unparsed
            self.pos = len(self.text)
            return 0.0, CONTINUE

        if _DIGITS.match(self.text, self.pos):
            return 0.0, Flow.jump(self.parse_line_number('IF-THEN'))
        return self.parse_statement()

    def do_for(self):
        var_name = self.parse_loop_variable('FOR')
        self.expect('ASSIGN', "expected '=' after FOR variable")
        start = self.parse_expr()
        if not self.accept_word('TO'):
            raise BasicSyntaxError("expected TO after FOR start value")
        end = self.parse_expr()
        step = 1.0
        if self.accept_word('STEP'):
            step = self.parse_expr()

        self.interp.push_frame(self.interp.for_stack,
                               ForLoopFrame(var_name, start, end, step, self.interp.current_line))
        self.interp.set_variable(var_name, start)
        return 0.0, CONTINUE

    def do_next(self):
        var_name = self.parse_loop_variable('NEXT')
        for_stack = self.interp.for_stack
        if not for_stack:
            raise ControlFlowError("NEXT without matching FOR")
        frame = for_stack[-1]
        if frame.var_name != var_name:
            raise ControlFlowError("NEXT variable doesn't match FOR variable")

        value = self.lookup_variable(var_name) + frame.step
        self.interp.set_variable(var_name, value)

        if frame.step > 0:
            again = value <= frame.end
        else:
            again = value >= frame.end

        if not again:
            for_stack.pop()
            return 0.0, CONTINUE

        # Loop back to the line after FOR, in line-number order
        if frame.for_line is not None:
            following = self.interp.program.find_next_after(frame.for_line)
            if following is not None:
                return 0.0, Flow.jump(following[0])
        return 0.0, CONTINUE

    def do_gosub(self):
        target = self.parse_line_number('GOSUB')
        return_line = None
        if self.interp.current_line is not None:
            following = self.interp.program.find_next_after(self.interp.current_line)
            if following is not None:
                return_line = following[0]
        self.interp.push_frame(self.interp.gosub_stack, GosubFrame(return_line))
        return 0.0, Flow.jump(target)

    def do_return(self):
        if not self.interp.gosub_stack:
            raise ControlFlowError("RETURN without matching GOSUB")
        frame = self.interp.gosub_stack.pop()
        if frame.return_line is None:
            return 0.0, HALT
        return 0.0, Flow.jump(frame.return_line)

    def do_end(self):
        return 0.0, HALT

    keywords = {
        'PRINT': do_print,
        'GOTO': do_goto,
        'IF': do_if,
        'FOR': do_for,
        'NEXT': do_next,
        'GOSUB': do_gosub,
        'RETURN': do_return,
        'END': do_end,
    }


class LineBasicInterpreter:
    def __init__(self, output=None):
        self.output = output # callable(str); None discards output
        self.variables = {}
        self.functions = FunctionRegistry()
        self.program = ProgramStore()
        self.for_stack = []
        self.gosub_stack = []
        self.current_line = None
        self.reset()

    def reset(self, output=None):
        """Clears variables, functions, program and both stacks; reinstalls builtins."""
        if output is not None:
            self.output = output
        self.variables.clear()
        self.functions.clear()
        self.functions.register_builtins()
        self.program.clear()
        self.for_stack.clear()
        self.gosub_stack.clear()
        self.current_line = None

    def register_function(self, name, arity, impl):
        self.functions.register(name, arity, impl)

    def emit(self, text):
        if self.output is not None:
            self.output(text)

    def set_variable(self, name, value):
        try:
            self.variables[name] = value
        except MemoryError:
            raise ResourceExhausted(f"out of memory creating variable '{name}'")

    def push_frame(self, stack, frame):
        try:
            stack.append(frame)
        except MemoryError:
            raise ResourceExhausted("out of memory growing control stack")

    def execute_statement(self, text, line_number=None):
        """Runs one statement; returns (value, Flow) or raises BasicError."""
        self.current_line = line_number
        parser = StatementParser(text, self)
        return parser.parse_whole(parser.parse_statement)

    def run(self):
        self.for_stack.clear()
        self.gosub_stack.clear()

        line = self.program.first()
        while line is not None:
            number, text = line
            log.debug("-->%05d %s", number, text)
            try:
                _, flow = self.execute_statement(text, number)
            except BasicError as e:
                log.info("Run stopped in line %d: %s", number, e)
                self.emit(f"Error in line {number}: {e}\n")
                return False
            except KeyboardInterrupt:
                log.info("Run interrupted in line %d", number)
                self.emit(f"Break in line {number}\n")
                return False

            if flow.kind == Flow.HALT:
                log.debug("END in line %d", number)
                return True

            if flow.kind == Flow.JUMP:
                target_text = self.program.find(flow.target)
                if target_text is None:
                    error = LineNotFound(flow.target)
                    log.info("Run stopped in line %d: %s", number, error)
                    self.emit(f"Error: {error}\n")
                    return False
                log.debug("jump %d -> %d", number, flow.target)
                line = flow.target, target_text
                continue

            line = self.program.find_next_after(number)
        return True

    def list_program(self, start=None, end=None):
        for text in self.program.listing(start, end):
            self.emit(text)

    def new_program(self):
        self.program.clear()

    def _parse_list_range(self, args):
        m = _LIST_RANGE.match(args.strip())
        if not m:
            raise BasicSyntaxError(f"invalid LIST range: {args.strip()}")
        first, last = m.group(1), m.group(2)
        start = int(first) if first else None
        if last is None:
            # LIST n lists a single line
            return start, start
        return start, int(last) if last else None

    def _handle_command(self, line):
        tok = default_lexer.scan(line)
        if tok.type != 'IDENT' or not tok.spaced:
            return False
        word = tok.value.upper()
        if word == 'LIST':
            self.list_program(*self._parse_list_range(line[tok.end:]))
        elif word == 'RUN':
            self.run()
        elif word == 'NEW':
            self.new_program()
        else:
            return False
        return True

    def submit_line(self, text):
        line = text.lstrip()
        try:
            if self._handle_command(line):
                return LineOutcome(LineOutcome.COMMAND)

            m = _DIGITS.match(line)
            if m:
                number = int(m.group(1))
                if number > MAX_LINE_NUMBER:
                    raise InvalidLineNumber(f"invalid line number {number}")
                statement = line[m.end():].lstrip()
                if not statement.strip():
                    self.program.delete(number)
                    return LineOutcome(LineOutcome.DELETED, number)
                self.program.insert_or_replace(number, statement)
                return LineOutcome(LineOutcome.STORED, number)

            value, _ = self.execute_statement(line)
            return LineOutcome(LineOutcome.IMMEDIATE, value)
        except BasicError as e:
            return LineOutcome(LineOutcome.ERROR, error=e)


if __name__ == "__main__":
    import sys

    code = """
    10 FOR I = 1 TO 5
    20 PRINT I, I * I
    30 NEXT I
    40 GOSUB 100
    50 END
    100 PRINT max(1, 2, 3)
    110 RETURN
    """
    interpreter = LineBasicInterpreter(output=sys.stdout.write)
    for source_line in code.splitlines():
        if source_line.strip():
            interpreter.submit_line(source_line)
    interpreter.submit_line("RUN")
