"""Breadth-first simulation of nondeterministic Turing machines.

Each generation expands every live configuration by every matching
transition. Acceptance is existential: the search stops as soon as any
configuration accepts. It rejects once no live configuration is left.

    >>> from turing_engine.library import load_example
    >>> search = NondeterministicMachine(load_example("pattern_101"), "1011")
    >>> [result.status.value for result in search.run(max_generations=10)]
    ['running', 'running', 'accepted']
    >>> search.generation
    3
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .program import MachineDefinitionError, Program
from .tape import Tape

logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    READY = "ready"
    RUNNING = "running"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (SearchStatus.ACCEPTED, SearchStatus.REJECTED)


@dataclass(frozen=True)
class Configuration:
    """One branch of the computation at one generation.

    ``tape`` is a :meth:`Tape.snapshot` pair. Configurations never change;
    applying a transition builds a new one whose ``parent`` is this ``id``.
    """

    state: str
    head: int
    tape: tuple
    path: str
    generation: int
    id: str
    parent: Optional[str] = None

    @property
    def key(self):
        return self.state, self.head, self.tape

    def read(self, blank):
        origin, cells = self.tape
        offset = self.head - origin
        return cells[offset] if 0 <= offset < len(cells) else blank

    def tape_contents(self) -> str:
        return "".join(self.tape[1])


@dataclass(frozen=True)
class GenerationResult:
    generation: int
    status: SearchStatus
    configurations: tuple
    active: tuple
    born: int = 0
    died: int = 0
    merged: int = 0
    applied: bool = True
    cap_reached: bool = False

    @property
    def active_count(self) -> int:
        return len(self.active)

    def pairs(self):
        """``(state, head)`` for every live configuration."""
        return [(config.state, config.head) for config in self.active]


class NondeterministicMachine:
    """Configuration-set simulator for a single-tape program.

    Deterministic programs work too; they just never branch. With
    ``merge_duplicates`` successors that share state, head and tape are
    collapsed into the first one produced.
    """

    def __init__(self, program: Program, input_string=None, merge_duplicates=True):
        if program.tape_count != 1:
            raise MachineDefinitionError(
                f"{program!r} uses {program.tape_count} tapes; only single-tape search is supported"
            )
        self.program = program
        self.merge_duplicates = merge_duplicates
        self.status = SearchStatus.READY
        self.generation = 0
        self.configurations = ()
        self.history = []
        self.cap_reached = False
        self._by_id = {}
        self.input_string = ""
        if input_string is not None:
            self.start(input_string)

    def start(self, input_string=None):
        """Begin a new search; ``None`` reuses the last input."""
        if input_string is None:
            input_string = self.input_string
        tape = Tape.from_input(input_string, self.program.blank)
        initial = Configuration(
            state=self.program.initial_state,
            head=0,
            tape=tape.snapshot(),
            path="start",
            generation=0,
            id="c0-0",
        )
        self.input_string = input_string
        self.generation = 0
        self.configurations = (initial,)
        self.history = [self.configurations]
        self._by_id = {initial.id: initial}
        self.cap_reached = False
        self.status = self._verdict(self.configurations)

    reset = start

    def is_terminal(self, config) -> bool:
        return self.program.is_terminal(config.state)

    @property
    def active_configurations(self):
        return tuple(config for config in self.configurations if not self.is_terminal(config))

    @property
    def accepting_configurations(self):
        return tuple(config for config in self.configurations if self.program.is_accepting(config.state))

    def _verdict(self, configurations):
        if any(self.program.is_accepting(config.state) for config in configurations):
            return SearchStatus.ACCEPTED
        if not any(not self.is_terminal(config) for config in configurations):
            return SearchStatus.REJECTED
        return SearchStatus.RUNNING

    def _result(self, **counts):
        return GenerationResult(
            generation=self.generation,
            status=self.status,
            configurations=self.configurations,
            active=self.active_configurations,
            **counts,
        )

    def _successor(self, config, action, symbol, generation, index):
        tape = Tape.from_snapshot(config.tape, self.program.blank)
        write = symbol if action.write is None else action.write
        tape.write(config.head, write)
        return Configuration(
            state=action.next_state,
            head=config.head + action.move.delta,
            tape=tape.snapshot(),
            path=f"{config.path} -> {action.next_state}",
            generation=generation,
            id=f"c{generation}-{index}",
            parent=config.id,
        )

    def step_generation(self) -> GenerationResult:
        """Advance every live configuration by one transition."""
        if self.status is SearchStatus.READY:
            raise RuntimeError("Call start() with an input before stepping")
        if self.status.is_terminal:
            return self._result(applied=False)

        generation = self.generation + 1
        successors = []
        seen = set()
        born = died = merged = 0
        for config in self.configurations:
            if self.is_terminal(config):
                if self.merge_duplicates and config.key in seen:
                    merged += 1
                    continue
                successors.append(config)
                seen.add(config.key)
                continue
            symbol = config.read(self.program.blank)
            actions = self.program.actions(config.state, symbol)
            if not actions:
                died += 1
                logger.debug("Branch %s died in %s reading %r", config.id, config.state, symbol)
                continue
            for action in actions:
                successor = self._successor(config, action, symbol, generation, len(successors))
                if self.merge_duplicates and successor.key in seen:
                    merged += 1
                    continue
                seen.add(successor.key)
                successors.append(successor)
                self._by_id[successor.id] = successor
                born += 1

        self.generation = generation
        self.configurations = tuple(successors)
        self.history.append(self.configurations)
        self.status = self._verdict(self.configurations)

        logger.debug(
            "Generation %d: %d configurations (%d new, %d died, %d merged)",
            generation, len(successors), born, died, merged,
        )
        if self.status.is_terminal:
            logger.info("Search %s at generation %d", self.status.value, generation)
        return self._result(born=born, died=died, merged=merged)

    def run(self, max_generations: int):
        """Step generations until a verdict or ``max_generations`` more generations."""
        if max_generations is None or max_generations < 0:
            raise ValueError("max_generations must be a non-negative integer")
        results = []
        while len(results) < max_generations and not self.status.is_terminal:
            results.append(self.step_generation())
        self.cap_reached = not self.status.is_terminal
        if self.cap_reached:
            logger.info("Generation cap %d reached with %d live branches",
                        max_generations, len(self.active_configurations))
            if results:
                results[-1] = replace(results[-1], cap_reached=True)
        return results

    def path_to(self, config):
        """Configurations from generation 0 down to ``config``, following parent links."""
        chain = [config]
        while chain[-1].parent is not None:
            chain.append(self._by_id[chain[-1].parent])
        return list(reversed(chain))

    def summary(self) -> dict:
        active = self.active_configurations
        return {
            "generation": self.generation,
            "status": self.status.value,
            "active": len(active),
            "configurations": [[config.state, config.head] for config in active],
        }

    def __repr__(self):
        return (
            f"<NondeterministicMachine generation={self.generation} "
            f"active={len(self.active_configurations)} status={self.status.value}>"
        )
