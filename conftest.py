import pytest

from interpreter import LineBasicInterpreter


class IO:
    def __init__(self, lines=None):
        self.chunks = []
        self.lines = list(lines or [])

    def write(self, text):
        self.chunks.append(text)

    def input(self, prompt=""):
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    @property
    def text(self):
        return "".join(self.chunks)


@pytest.fixture
def io():
    return IO()


@pytest.fixture
def interp(io):
    return LineBasicInterpreter(output=io.write)


@pytest.fixture
def run_program(interp, io):
    """Stores the given numbered lines, runs them and returns the output."""
    def run(*lines):
        for line in lines:
            outcome = interp.submit_line(line)
            assert outcome.kind == outcome.STORED, outcome
        del io.chunks[:]
        interp.submit_line("RUN")
        return io.text
    return run
