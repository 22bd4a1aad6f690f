"""Turing Engine - step-by-step Turing machine execution for lessons.

This package provides the execution engines behind interactive lessons on
formal languages: callers build a machine, step it, and render the plain
data it reports back.

Core engines:
    - Tape: Infinite tape data structure
    - Program: Transition table (JSON or standard busy-beaver format)
    - Machine: Deterministic single-tape machine
    - MultiTapeMachine: Deterministic machine over several tapes
    - NondeterministicMachine: Breadth-first configuration-set search

Example machines:
    - example_names, load_example: Bundled JSON machines
    - load_program, save_program: Machines stored in your own JSON files

Interactive notebook support:
    - LiveStepper: IPython display with live updates
    - step_live: Convenience function for quick stepping
"""

from .tape import BLANK, Tape
from .program import WILDCARD, Action, MachineDefinitionError, Move, Program
from .machine import (
    DeterministicMachine,
    Machine,
    RunResult,
    Status,
    StepResult,
    run_machine_steps,
)
from .multi_tape import MultiTapeMachine
from .nondeterministic import (
    Configuration,
    GenerationResult,
    NondeterministicMachine,
    SearchStatus,
)
from .library import example_names, load_example, load_program, save_program
from .config import DEFAULT_CONFIG, load_config

# Import interactive utilities (notebook support)
try:
    from .interactive import (
        LiveStepper,
        step_live,
    )
except ImportError:
    # interactive.py requires IPython (notebook environment)
    LiveStepper = None
    step_live = None

__all__ = [
    "BLANK",
    "Tape",
    "WILDCARD",
    "Action",
    "MachineDefinitionError",
    "Move",
    "Program",
    "DeterministicMachine",
    "Machine",
    "RunResult",
    "Status",
    "StepResult",
    "run_machine_steps",
    "MultiTapeMachine",
    "Configuration",
    "GenerationResult",
    "NondeterministicMachine",
    "SearchStatus",
    "example_names",
    "load_example",
    "load_program",
    "save_program",
    "DEFAULT_CONFIG",
    "load_config",
    # Interactive utilities (if IPython available)
    "LiveStepper",
    "step_live",
]
