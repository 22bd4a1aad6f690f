"""Infinite tape storage shared by every engine.

Cells at non-negative positions live in one list, cells at negative
positions in another (reversed), so the head may wander left of the
input without any reindexing.

    >>> tape = Tape.from_input("ab")
    >>> tape.read(1), tape.read(5), tape.read(-3)
    ('b', '_', '_')
    >>> tape.write(-2, "x")
    >>> str(tape)
    'x_|ab'
    >>> tape.to_window(0, 5)
    ['x', '_', 'a', 'b', '_']
"""

BLANK = "_"


class Tape:
    def __init__(self, blank=BLANK):
        self.blank = blank
        self.negative = []  # Cells at negative positions (reversed)
        self.nonnegative = []  # Cells at non-negative positions

    @classmethod
    def from_input(cls, input_string, blank=BLANK):
        tape = cls(blank)
        tape.nonnegative = list(input_string)
        return tape

    def read(self, index):
        """Return the symbol at ``index``, or the blank if never written."""
        if index >= 0:
            return self.nonnegative[index] if index < len(self.nonnegative) else self.blank
        neg_index = -index - 1
        return self.negative[neg_index] if neg_index < len(self.negative) else self.blank

    def write(self, index, symbol):
        if index >= 0:
            while index >= len(self.nonnegative):
                self.nonnegative.append(self.blank)
            self.nonnegative[index] = symbol
        else:
            neg_index = -index - 1
            while neg_index >= len(self.negative):
                self.negative.append(self.blank)
            self.negative[neg_index] = symbol

    __getitem__ = read
    __setitem__ = write

    @property
    def min_index(self):
        return -len(self.negative)

    @property
    def max_index(self):
        """Highest materialized index (-1 for an empty right half)."""
        return len(self.nonnegative) - 1

    def to_window(self, center, width):
        """Return ``width`` symbols with ``center`` at offset ``width // 2``.

        Positions outside the materialized range read as blank.
        """
        start = center - width // 2
        return [self.read(index) for index in range(start, start + width)]

    def cells(self):
        """All materialized cells, leftmost first."""
        return list(reversed(self.negative)) + self.nonnegative

    def contents(self):
        """Materialized cells as a string, blanks trimmed from both ends."""
        return "".join(self.snapshot()[1])

    def count_nonblanks(self):
        return sum(1 for cell in self.cells() if cell != self.blank)

    def snapshot(self):
        """Immutable ``(origin, cells)`` pair; ``origin`` is the index of ``cells[0]``.

        Blanks at either end are dropped, so two tapes holding the same
        symbols produce equal snapshots however far they were materialized.
        """
        cells = self.cells()
        first = next((index for index, symbol in enumerate(cells) if symbol != self.blank), None)
        if first is None:
            return 0, ()
        last = max(index for index, symbol in enumerate(cells) if symbol != self.blank)
        return self.min_index + first, tuple(cells[first:last + 1])

    @classmethod
    def from_snapshot(cls, snapshot, blank=BLANK):
        origin, cells = snapshot
        tape = cls(blank)
        for offset, symbol in enumerate(cells):
            tape.write(origin + offset, symbol)
        return tape

    def copy(self):
        tape = Tape(self.blank)
        tape.negative = list(self.negative)
        tape.nonnegative = list(self.nonnegative)
        return tape

    def __len__(self):
        return len(self.negative) + len(self.nonnegative)

    def __str__(self):
        return f"{''.join(reversed(self.negative))}|{''.join(self.nonnegative)}"

    def __repr__(self):
        return f"Tape({str(self)!r}, blank={self.blank!r})"
