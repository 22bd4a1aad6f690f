"""Multi-tape deterministic machines.

The transition function keys on the shared state plus the tuple of symbols
under every head and moves all heads in the same step. Multi-phase
algorithms (copy, then compare) are just disjoint groups of states in the
table; the engine has no notion of phases.
"""

from .machine import DEFAULT_WINDOW_WIDTH, DeterministicMachine
from .program import Program


class MultiTapeMachine(DeterministicMachine):
    """Deterministic machine over ``program.tape_count`` tapes.

    ``inputs`` is one string per tape, or a single string for tape 1 with
    every other tape starting blank.
    """

    def __init__(self, program: Program, inputs=()):
        super().__init__(program, inputs)

    @property
    def tape_count(self) -> int:
        return self.program.tape_count

    def tape_contents(self):
        return [tape.contents() for tape in self.tapes]

    def snapshot(self, width=DEFAULT_WINDOW_WIDTH) -> dict:
        data = super().snapshot(width)
        data["contents"] = self.tape_contents()
        return data
