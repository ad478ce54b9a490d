import logging
import re
import sys

from interpreter import LineBasicInterpreter, LineOutcome

log = logging.getLogger(__name__)

_NUMBERED_LINE = re.compile(r'\s*\d')

class ConsoleIOHandler:
    def write(self, text):
        print(text, end="", flush=True)

    def input(self, prompt=""):
        return input(prompt)

class BasicCLI:
    def __init__(self, io_handler):
        self.io_handler = io_handler
        self.interpreter = LineBasicInterpreter(output=io_handler.write)

    def print(self, text):
        self.io_handler.write(text + "\n")

    def input(self, prompt):
        return self.io_handler.input(prompt)

    def save_program(self, filename):
        try:
            with open(filename, 'w') as f:
                f.writelines(self.interpreter.program.listing())
            self.print(f"Saved to {filename}")
        except OSError as e:
            self.print(f"Error saving: {e}")

    def load_program(self, filename):
        try:
            with open(filename, 'r') as f:
                lines = f.read().splitlines()
        except OSError as e:
            self.print(f"Error loading: {e}")
            return False

        self.interpreter.new_program()
        for line in lines:
            if not line.strip():
                continue
            # Only numbered lines belong in a program file; a bare number deletes
            if not _NUMBERED_LINE.match(line):
                log.warning("Skipping line without line number: %s", line)
                continue
            outcome = self.interpreter.submit_line(line)
            if not outcome.ok:
                self.print(f"Error: {outcome.message}")
        self.print(f"Loaded {filename}")
        return True

    def set_trace(self, on):
        logging.getLogger('interpreter').setLevel(logging.DEBUG if on else logging.WARNING)

    def handle(self, user_input):
        """Runs one REPL line. Returns False when the session should end."""
        cmd_upper = user_input.upper()

        if cmd_upper in ('EXIT', 'BYE'):
            return False
        elif cmd_upper.startswith('SAVE '):
            self.save_program(user_input[5:].strip())
        elif cmd_upper.startswith('LOAD '):
            self.load_program(user_input[5:].strip())
        elif cmd_upper == 'TRACE':
            self.set_trace(True)
        elif cmd_upper == 'ENDTRACE':
            self.set_trace(False)
        elif cmd_upper == 'HELP':
            self.print("Commands: LIST [from][,to], RUN, NEW, SAVE <file>, LOAD <file>, TRACE, ENDTRACE, EXIT")
            self.print("Enter code like: 10 PRINT 2 * 3")
        else:
            outcome = self.interpreter.submit_line(user_input)
            if outcome.kind == LineOutcome.ERROR:
                self.print(f"Error: {outcome.message}")
        return True

    def run_repl(self, autorun=False):
        self.print("Line BASIC Interpreter CLI")
        self.print("Type 'HELP' for commands.")

        if autorun:
            self.interpreter.submit_line("RUN")

        while True:
            try:
                user_input = self.input("> ").strip()
            except EOFError:
                break
            except KeyboardInterrupt:
                self.print("")
                continue

            if not user_input:
                continue

            try:
                if not self.handle(user_input):
                    break
            except Exception as e:
                # Host-registered functions may raise anything
                self.print(f"CLI Error: {e}")

def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    cli = BasicCLI(ConsoleIOHandler())

    autorun = False
    if len(sys.argv) > 1:
        autorun = cli.load_program(sys.argv[1])

    cli.run_repl(autorun=autorun)

if __name__ == "__main__":
    main()
