"""Transition tables and their serialized forms.

A :class:`Program` maps ``(state, read)`` keys to a tuple of
:class:`Action` outcomes. ``read`` is always stored as a tuple with one
symbol per tape, so single-tape and multi-tape programs share one lookup.

    >>> program = Program.from_dict({
    ...     "initial_state": "q0",
    ...     "accept_states": ["accept"],
    ...     "transitions": {"q0": {"0": {"next": "q0", "write": "1", "move": "R"},
    ...                            "_": "accept"}},
    ... })
    >>> program.action("q0", "0")
    Action(next_state='q0', writes=('1',), moves=(<Move.RIGHT: 'R'>,))
    >>> program.action("q0", "_").move
    <Move.STAY: 'S'>
    >>> program.action("q0", "x") is None
    True
"""

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .tape import BLANK

logger = logging.getLogger(__name__)

WILDCARD = "*"


class MachineDefinitionError(ValueError):
    """A transition table or machine description cannot be used."""


class Move(str, Enum):
    LEFT = "L"
    RIGHT = "R"
    STAY = "S"

    @property
    def delta(self) -> int:
        return {"L": -1, "R": 1, "S": 0}[self.value]

    @classmethod
    def parse(cls, value) -> "Move":
        """Accept ``L/R/S``, ``N`` for stay, ``-1/0/1`` or ``None`` (stay)."""
        if isinstance(value, Move):
            return value
        if value is None:
            return cls.STAY
        if isinstance(value, int) and not isinstance(value, bool):
            aliases = {-1: cls.LEFT, 0: cls.STAY, 1: cls.RIGHT}
            if value in aliases:
                return aliases[value]
        elif isinstance(value, str):
            text = value.strip().upper()
            if text == "N":
                return cls.STAY
            for move in cls:
                if move.value == text:
                    return move
        raise MachineDefinitionError(f"Invalid move: {value!r}")


@dataclass(frozen=True)
class Action:
    """One outcome of a transition.

    ``writes`` holds one symbol per tape; ``None`` writes back the symbol
    that was read. ``moves`` holds one :class:`Move` per tape.
    """

    next_state: str
    writes: tuple
    moves: tuple

    @classmethod
    def single(cls, next_state, write=None, move=Move.STAY):
        return cls(next_state, (write,), (Move.parse(move),))

    @property
    def write(self):
        return self.writes[0]

    @property
    def move(self):
        return self.moves[0]

    def resolve_writes(self, reads):
        return tuple(read if write is None else write for read, write in zip(reads, self.writes))


def _as_reads(read, tape_count):
    reads = (read,) if isinstance(read, str) else tuple(read)
    if len(reads) != tape_count:
        raise MachineDefinitionError(
            f"Read {read!r} has {len(reads)} symbol(s), expected {tape_count}"
        )
    return reads


class Program:
    """A transition table plus the state sets that give it meaning."""

    def __init__(
        self,
        transitions=None,
        initial_state: str = "q0",
        accept_states=(),
        reject_states=(),
        halt_states=(),
        blank: str = BLANK,
        tape_count: int = 1,
        nondeterministic: bool = False,
        name: str = "",
        description: str = "",
    ):
        if tape_count < 1:
            raise MachineDefinitionError(f"tape_count must be at least 1, got {tape_count}")
        self.initial_state = initial_state
        self.accept_states = frozenset(accept_states)
        self.reject_states = frozenset(reject_states)
        self.halt_states = frozenset(halt_states)
        self.blank = blank
        self.tape_count = tape_count
        self.nondeterministic = nondeterministic
        self.name = name
        self.description = description
        self._table = {}
        self._has_wildcards = False
        for (state, read), outcome in (transitions or {}).items():
            actions = (outcome,) if isinstance(outcome, Action) else tuple(outcome)
            for action in actions:
                self.add(state, read, action)

    # Building

    def add(self, state, read, action: Action):
        """Add one outcome for ``(state, read)``.

        Deterministic programs refuse a second outcome for the same key.
        """
        reads = _as_reads(read, self.tape_count)
        if len(action.writes) != self.tape_count or len(action.moves) != self.tape_count:
            raise MachineDefinitionError(
                f"Action for ({state!r}, {read!r}) does not cover {self.tape_count} tape(s)"
            )
        key = (state, reads)
        existing = self._table.get(key, ())
        if existing and not self.nondeterministic:
            raise MachineDefinitionError(
                f"Deterministic program already has a transition for ({state!r}, {read!r})"
            )
        if action not in existing:
            self._table[key] = existing + (action,)
        if WILDCARD in reads:
            self._has_wildcards = True

    def remove(self, state, read):
        self._table.pop((state, _as_reads(read, self.tape_count)), None)

    # Lookup

    def actions(self, state, read) -> tuple:
        """All outcomes for ``(state, read)``; wildcard keys are tried after the exact key."""
        reads = (read,) if isinstance(read, str) else tuple(read)
        found = self._table.get((state, reads))
        if found is not None:
            return found
        if self._has_wildcards:
            positions = range(len(reads))
            for wildcard_count in range(1, len(reads) + 1):
                for chosen in itertools.combinations(positions, wildcard_count):
                    pattern = tuple(WILDCARD if i in chosen else symbol for i, symbol in enumerate(reads))
                    found = self._table.get((state, pattern))
                    if found is not None:
                        return found
        return ()

    def action(self, state, read) -> Optional[Action]:
        found = self.actions(state, read)
        if not found:
            return None
        if len(found) > 1:
            raise MachineDefinitionError(
                f"({state!r}, {read!r}) has {len(found)} outcomes; use a nondeterministic engine"
            )
        return found[0]

    def __iter__(self):
        """Yield ``(state, reads, action)`` for every outcome in insertion order."""
        for (state, reads), actions in self._table.items():
            for action in actions:
                yield state, reads, action

    def __len__(self):
        return sum(len(actions) for actions in self._table.values())

    @property
    def is_deterministic(self) -> bool:
        return all(len(actions) == 1 for actions in self._table.values())

    @property
    def states(self) -> frozenset:
        found = {self.initial_state} | self.accept_states | self.reject_states | self.halt_states
        for state, _, action in self:
            found.add(state)
            found.add(action.next_state)
        return frozenset(found)

    # State classification

    def is_accepting(self, state) -> bool:
        return state in self.accept_states

    def is_rejecting(self, state) -> bool:
        return state in self.reject_states

    def is_terminal(self, state) -> bool:
        return state in self.accept_states or state in self.reject_states or state in self.halt_states

    def __repr__(self):
        label = self.name or "Program"
        kind = "nondeterministic" if self.nondeterministic else "deterministic"
        return f"<{label}: {len(self)} transitions, {self.tape_count} tape(s), {kind}>"

    # Serialization

    @classmethod
    def from_dict(cls, data) -> "Program":
        """Build a program from its JSON-compatible description.

        ``transitions`` is either the nested ``{state: {symbol: outcome}}``
        form (single tape only) or a list of rule objects with ``state``,
        ``read``, ``next``, ``write`` and ``move`` keys. An outcome may be a
        bare next-state string, an object, or a list of those for a
        nondeterministic choice.
        """
        tape_count = int(data.get("tapes", 1))
        accept_states = data.get("accept_states", ())
        if "accept_state" in data:
            accept_states = tuple(accept_states) + (data["accept_state"],)
        reject_states = data.get("reject_states", ())
        if "reject_state" in data:
            reject_states = tuple(reject_states) + (data["reject_state"],)
        program = cls(
            initial_state=data.get("initial_state", "q0"),
            accept_states=accept_states,
            reject_states=reject_states,
            halt_states=data.get("halt_states", ()),
            blank=data.get("blank", BLANK),
            tape_count=tape_count,
            nondeterministic=bool(data.get("nondeterministic", False)),
            name=data.get("name", ""),
            description=data.get("description", ""),
        )
        transitions = data.get("transitions", {})
        if isinstance(transitions, dict):
            if tape_count != 1:
                raise MachineDefinitionError("Nested transitions are only supported for one tape")
            for state, by_symbol in transitions.items():
                for symbol, outcome in (by_symbol or {}).items():
                    for action in _parse_outcome(outcome, tape_count):
                        program.add(state, symbol, action)
        elif isinstance(transitions, list):
            for rule in transitions:
                if "state" not in rule or "read" not in rule:
                    raise MachineDefinitionError(f"Rule is missing 'state' or 'read': {rule!r}")
                for action in _parse_outcome(rule, tape_count):
                    program.add(rule["state"], rule["read"], action)
        else:
            raise MachineDefinitionError("'transitions' must be an object or a list")
        logger.debug("Loaded %r", program)
        return program

    def to_dict(self) -> dict:
        """Serialize to the rule-list form accepted by :meth:`from_dict`."""
        rules = []
        for state, reads, action in self:
            if self.tape_count == 1:
                rule = {"state": state, "read": reads[0], "next": action.next_state}
                if action.write is not None:
                    rule["write"] = action.write
                rule["move"] = action.move.value
            else:
                rule = {
                    "state": state,
                    "read": list(reads),
                    "next": action.next_state,
                    "write": list(action.writes),
                    "move": [move.value for move in action.moves],
                }
            rules.append(rule)
        return {
            "name": self.name,
            "description": self.description,
            "tapes": self.tape_count,
            "blank": self.blank,
            "initial_state": self.initial_state,
            "accept_states": sorted(self.accept_states),
            "reject_states": sorted(self.reject_states),
            "halt_states": sorted(self.halt_states),
            "nondeterministic": self.nondeterministic,
            "transitions": rules,
        }

    @classmethod
    def from_text(cls, program_text) -> "Program":
        """Parse a program from text representation in standard format.

        Format (standard): Compact one-line format with states separated by underscores
        Example: "1RB1RE_1LC0LC_1RD1LB_1RA0RD_---0RC"

        States are named ``A``, ``B``, ... in order; the symbols are ``0``
        (also the blank) and ``1``. A next state past the last section, such
        as ``Z`` or ``H``, is a halting state; ``---`` halts in ``Z``.

            >>> program = Program.from_text("1RB1LB_1LA1RZ")
            >>> program.action("B", "1")
            Action(next_state='Z', writes=('1',), moves=(<Move.RIGHT: 'R'>,))
            >>> sorted(program.halt_states)
            ['Z']
        """
        program_text = program_text.strip()
        if not program_text or "\n" in program_text:
            raise MachineDefinitionError("Invalid program format. Expected standard format.")

        sections = program_text.split("_")
        state_names = [chr(ord("A") + index) for index in range(len(sections))]
        halt_states = set()
        transitions = {}

        for state, section in zip(state_names, sections):
            if len(section) % 3 != 0 or len(section) == 0:
                raise MachineDefinitionError(f"Invalid state section: {section!r}")
            # Parse actions in groups of 3 characters, one per read symbol
            for symbol_index, i in enumerate(range(0, len(section), 3)):
                action_str = section[i : i + 3]
                symbol = str(symbol_index)

                if action_str == "---":
                    halt_states.add("Z")
                    transitions[(state, symbol)] = Action.single("Z")
                    continue

                next_symbol = action_str[0]
                if next_symbol not in "01":
                    raise MachineDefinitionError(f"Invalid symbol in action: {action_str}")
                if action_str[1] not in "LR":
                    raise MachineDefinitionError(f"Invalid direction in action: {action_str}")
                next_state = action_str[2]
                if not ("A" <= next_state <= "Z"):
                    raise MachineDefinitionError(f"Invalid next state in action: {action_str}")
                if next_state not in state_names:
                    halt_states.add(next_state)

                transitions[(state, symbol)] = Action.single(next_state, next_symbol, action_str[1])

        return cls(
            transitions,
            initial_state="A",
            halt_states=halt_states,
            blank="0",
            name=program_text,
        )


def _parse_outcome(outcome, tape_count):
    """Turn one serialized outcome into a list of actions."""
    if isinstance(outcome, list):
        return [action for item in outcome for action in _parse_outcome(item, tape_count)]
    if isinstance(outcome, str):
        return [Action(outcome, (None,) * tape_count, (Move.STAY,) * tape_count)]
    if not isinstance(outcome, dict):
        raise MachineDefinitionError(f"Invalid transition outcome: {outcome!r}")

    next_state = outcome.get("next", outcome.get("next_state"))
    if next_state is None:
        raise MachineDefinitionError(f"Transition outcome has no next state: {outcome!r}")

    write = outcome.get("write")
    if write is None or isinstance(write, str):
        writes = (write,) * tape_count
    else:
        writes = tuple(write)

    move = outcome.get("move")
    if isinstance(move, (list, tuple)):
        moves = tuple(Move.parse(item) for item in move)
    else:
        moves = (Move.parse(move),) * tape_count

    if len(writes) != tape_count or len(moves) != tape_count:
        raise MachineDefinitionError(f"Outcome does not cover {tape_count} tape(s): {outcome!r}")
    return [Action(next_state, writes, moves)]
