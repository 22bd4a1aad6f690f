"""Example machines stored as JSON data files.

The bundled machines live in ``turing_engine/machines/*.json``; any file in
the same format can be loaded with :func:`load_program`.
"""

import json
import logging
from importlib import resources
from pathlib import Path

from .program import MachineDefinitionError, Program
from .tape import BLANK

logger = logging.getLogger(__name__)

_MACHINE_DIRECTORY = "machines"


def _machine_files():
    return {
        Path(entry.name).stem: entry
        for entry in resources.files("turing_engine").joinpath(_MACHINE_DIRECTORY).iterdir()
        if entry.name.endswith(".json")
    }


def example_names():
    """Names of the bundled example machines, sorted."""
    return sorted(_machine_files())


def load_example(name, blank=BLANK) -> Program:
    files = _machine_files()
    if name not in files:
        raise KeyError(f"Unknown example machine {name!r}; choose from {', '.join(sorted(files))}")
    data = json.loads(files[name].read_text(encoding="utf-8"))
    data.setdefault("name", name)
    data.setdefault("blank", blank)
    return Program.from_dict(data)


def load_program(path, blank=BLANK) -> Program:
    """Load a program from a JSON file on disk.

    ``blank`` is used when the file does not declare its own blank symbol.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Machine file not found at: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise MachineDefinitionError(f"{path} is not valid JSON: {error}") from error
    if not isinstance(data, dict):
        raise MachineDefinitionError(f"{path} must contain a JSON object")
    data.setdefault("name", path.stem)
    data.setdefault("blank", blank)
    logger.debug("Loading machine from %s", path)
    return Program.from_dict(data)


def save_program(program: Program, path):
    path = Path(path)
    path.write_text(json.dumps(program.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path


def resolve(name_or_path, blank=BLANK) -> Program:
    """A bundled example by name, otherwise a JSON file path."""
    if name_or_path in _machine_files():
        return load_example(name_or_path, blank)
    return load_program(name_or_path, blank)
