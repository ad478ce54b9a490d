import bisect

from errors import ResourceExhausted

MAX_LINE_NUMBER = 65535


class ProgramStore:
    """Stored program lines keyed by line number, kept in ascending order."""

    def __init__(self):
        self.lines = {} # line_number -> raw text
        self.line_numbers = [] # sorted keys

    def insert_or_replace(self, line_number, text):
        try:
            if line_number not in self.lines:
                bisect.insort(self.line_numbers, line_number)
            self.lines[line_number] = text
        except MemoryError:
            raise ResourceExhausted(f"out of memory storing line {line_number}")

    def delete(self, line_number):
        # Deleting a line that isn't there is a no-op
        if line_number in self.lines:
            del self.lines[line_number]
            idx = bisect.bisect_left(self.line_numbers, line_number)
            del self.line_numbers[idx]

    def find(self, line_number):
        return self.lines.get(line_number)

    def find_next_after(self, line_number):
        """Smallest stored (line_number, text) strictly greater than line_number."""
        idx = bisect.bisect_right(self.line_numbers, line_number)
        if idx < len(self.line_numbers):
            num = self.line_numbers[idx]
            return num, self.lines[num]
        return None

    def first(self):
        if not self.line_numbers:
            return None
        num = self.line_numbers[0]
        return num, self.lines[num]

    def iterate_ascending(self, start=None, end=None):
        lo = 0 if start is None else bisect.bisect_left(self.line_numbers, start)
        hi = len(self.line_numbers) if end is None else bisect.bisect_right(self.line_numbers, end)
        for num in self.line_numbers[lo:hi]:
            yield num, self.lines[num]

    def listing(self, start=None, end=None):
        """LIST text format: one "<number> <text>\\n" per line."""
        return [f"{num} {text}\n" for num, text in self.iterate_ascending(start, end)]

    def clear(self):
        self.lines = {}
        self.line_numbers = []

    def __iter__(self):
        return self.iterate_ascending()

    def __len__(self):
        return len(self.line_numbers)

    def __contains__(self, line_number):
        return line_number in self.lines
