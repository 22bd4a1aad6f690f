"""Deterministic Turing machine engines.

:class:`DeterministicMachine` steps any number of tapes that share one
state; :class:`Machine` is the single-tape view most callers want.

    >>> from turing_engine.program import Action, Program
    >>> flip = Program(
    ...     {("q0", "0"): Action.single("q0", "1", "R"),
    ...      ("q0", "1"): Action.single("q0", "0", "R"),
    ...      ("q0", "_"): Action.single("accept", "_", "R")},
    ...     accept_states={"accept"},
    ... )
    >>> machine = Machine(flip, "1011")
    >>> result = machine.run(max_steps=100)
    >>> result.status, len(result), machine.tape.contents()
    (<Status.ACCEPTED: 'accepted'>, 5, '0100')
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .program import MachineDefinitionError, Program
from .tape import Tape

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_WIDTH = 15


class Status(str, Enum):
    READY = "ready"
    RUNNING = "running"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    HALTED = "halted"  # entered a halting state that neither accepts nor rejects
    STUCK = "stuck"  # no transition matched; an implicit reject

    @property
    def is_terminal(self) -> bool:
        return self not in (Status.READY, Status.RUNNING)


@dataclass(frozen=True)
class StepResult:
    """What one call to ``step()`` did.

    ``applied`` is False when no transition ran, either because the machine
    was already halted or because it just got stuck. ``writes`` and
    ``moves`` are ``None`` in that case.
    """

    step: int
    previous_state: str
    state: str
    reads: tuple
    writes: Optional[tuple]
    moves: Optional[tuple]
    heads: tuple
    status: Status
    applied: bool

    @property
    def read(self):
        return self.reads[0]

    @property
    def written(self):
        return None if self.writes is None else self.writes[0]

    @property
    def move(self):
        return None if self.moves is None else self.moves[0]

    @property
    def head(self):
        return self.heads[0]

    def describe(self) -> str:
        if not self.applied:
            if self.status is Status.STUCK:
                return f"No transition for ({self.state}, {','.join(self.reads)})"
            return f"Machine has halted ({self.status.value})"
        moves = ",".join(move.value for move in self.moves)
        return (
            f"Step {self.step}: read {','.join(self.reads)}, write {','.join(self.writes)}, "
            f"move {moves}, {self.previous_state} -> {self.state}"
        )


@dataclass
class RunResult:
    """The steps taken by one bounded ``run()``.

    ``cap_reached`` means the step cap stopped a machine that was still
    live, so the outcome is undetermined rather than a rejection.
    """

    steps: List[StepResult] = field(default_factory=list)
    status: Status = Status.READY
    cap_reached: bool = False

    def __iter__(self):
        return iter(self.steps)

    def __len__(self):
        return len(self.steps)

    def __getitem__(self, index):
        return self.steps[index]


class DeterministicMachine:
    """One shared state driving ``program.tape_count`` independently headed tapes."""

    def __init__(self, program, inputs=()):
        if isinstance(program, str):
            program = Program.from_text(program)
        if program.nondeterministic:
            raise MachineDefinitionError(
                f"{program!r} is nondeterministic; use NondeterministicMachine"
            )
        self.program = program
        self.reset(inputs)

    def reset(self, inputs=None):
        """Start over from the initial state; ``None`` reuses the last inputs."""
        if inputs is None:
            inputs = self.inputs
        elif isinstance(inputs, str):
            inputs = (inputs,)
        inputs = tuple(inputs)
        tape_count = self.program.tape_count
        if len(inputs) > tape_count:
            raise ValueError(f"Got {len(inputs)} inputs for {tape_count} tape(s)")
        self.inputs = inputs + ("",) * (tape_count - len(inputs))
        self.tapes = [Tape.from_input(text, self.program.blank) for text in self.inputs]
        self.heads = [0] * tape_count
        self.state = self.program.initial_state
        self.step_count = 0
        self.status = self._classify(self.state, Status.READY)

    def _classify(self, state, live_status):
        if self.program.is_accepting(state):
            return Status.ACCEPTED
        if self.program.is_rejecting(state):
            return Status.REJECTED
        if state in self.program.halt_states:
            return Status.HALTED
        return live_status

    def _reads(self):
        return tuple(tape.read(head) for tape, head in zip(self.tapes, self.heads))

    def _result(self, previous_state, reads, action=None, writes=None):
        return StepResult(
            step=self.step_count,
            previous_state=previous_state,
            state=self.state,
            reads=reads,
            writes=writes,
            moves=None if action is None else action.moves,
            heads=tuple(self.heads),
            status=self.status,
            applied=action is not None,
        )

    def step(self) -> StepResult:
        reads = self._reads()
        if self.status.is_terminal:
            return self._result(self.state, reads)

        action = self.program.action(self.state, reads)
        if action is None:
            self.status = Status.STUCK
            logger.info("Stuck in %s reading %s after %d steps", self.state, reads, self.step_count)
            return self._result(self.state, reads)

        previous_state = self.state
        writes = action.resolve_writes(reads)
        for index, (symbol, move) in enumerate(zip(writes, action.moves)):
            self.tapes[index].write(self.heads[index], symbol)
            self.heads[index] += move.delta
        self.state = action.next_state
        self.step_count += 1
        self.status = self._classify(self.state, Status.RUNNING)

        logger.debug("Step %d: %s %s -> %s %s", self.step_count, previous_state, reads, self.state, writes)
        if self.status.is_terminal:
            logger.info("Halted in %s (%s) after %d steps", self.state, self.status.value, self.step_count)
        return self._result(previous_state, reads, action, writes)

    def run(self, max_steps: int) -> RunResult:
        """Step until the machine halts or ``max_steps`` steps have been taken."""
        if max_steps is None or max_steps < 0:
            raise ValueError("max_steps must be a non-negative integer")
        result = RunResult()
        while len(result.steps) < max_steps and not self.status.is_terminal:
            result.steps.append(self.step())
        result.status = self.status
        result.cap_reached = not self.status.is_terminal
        if result.cap_reached:
            logger.info("Step cap %d reached in state %s", max_steps, self.state)
        return result

    def __iter__(self):
        return self

    def __next__(self) -> StepResult:
        if self.status.is_terminal:
            raise StopIteration
        return self.step()

    def is_halted(self) -> bool:
        return self.status.is_terminal

    def is_accepted(self) -> bool:
        return self.status is Status.ACCEPTED

    def count_nonblanks(self) -> int:
        return sum(tape.count_nonblanks() for tape in self.tapes)

    def windows(self, width=DEFAULT_WINDOW_WIDTH):
        """One display window per tape, each centered on that tape's head."""
        return [tape.to_window(head, width) for tape, head in zip(self.tapes, self.heads)]

    def snapshot(self, width=DEFAULT_WINDOW_WIDTH) -> dict:
        """Plain, JSON-compatible read-back for a renderer."""
        return {
            "state": self.state,
            "step": self.step_count,
            "status": self.status.value,
            "heads": list(self.heads),
            "window_offset": width // 2,
            "windows": self.windows(width),
        }

    def __repr__(self):
        return (
            f"<{type(self).__name__} state={self.state!r} step={self.step_count} "
            f"status={self.status.value}>"
        )


class Machine(DeterministicMachine):
    """Single-tape deterministic Turing machine.

    ``program`` is a :class:`Program` or a standard-format text such as
    ``"1RB1LB_1LA1RZ"``.
    """

    def __init__(self, program, input_string=""):
        if isinstance(program, str):
            program = Program.from_text(program)
        if program.tape_count != 1:
            raise MachineDefinitionError(
                f"{program!r} uses {program.tape_count} tapes; use MultiTapeMachine"
            )
        super().__init__(program, input_string)

    def reset(self, input_string=None):
        super().reset(None if input_string is None else (input_string,))

    @property
    def tape(self) -> Tape:
        return self.tapes[0]

    @property
    def head(self) -> int:
        return self.heads[0]

    @property
    def input_string(self) -> str:
        return self.inputs[0]

    def window(self, width=DEFAULT_WINDOW_WIDTH):
        return self.tape.to_window(self.head, width)

    def snapshot(self, width=DEFAULT_WINDOW_WIDTH) -> dict:
        data = super().snapshot(width)
        data["head"] = self.head
        data["window"] = data["windows"][0]
        return data


def run_machine_steps(program_text, step_limit):
    """Run a standard-format program; return ``(steps_taken, nonblank_count)``."""
    if step_limit <= 0:
        raise ValueError("step_limit must be at least 1")
    machine = Machine(program_text)
    machine.run(step_limit)
    return machine.step_count, machine.count_nonblanks()
