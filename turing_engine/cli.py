# cli.py

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .library import example_names, load_example, resolve
from .machine import Machine, Status
from .multi_tape import MultiTapeMachine
from .nondeterministic import NondeterministicMachine, SearchStatus
from .program import MachineDefinitionError

console = Console()

EXIT_ACCEPT = 0
EXIT_REJECT = 1
EXIT_USAGE = 2


# === Rendering helpers ===
def format_window(window, offset):
    cells = []
    for index, symbol in enumerate(window):
        text = escape(symbol)
        cells.append(f"[bold reverse]{text}[/bold reverse]" if index == offset else text)
    return " ".join(cells)


def status_style(status):
    return {
        "accepted": "green",
        "halted": "green",
        "rejected": "red",
        "stuck": "red",
        "running": "yellow",
        "ready": "cyan",
    }.get(status.value, "white")


def show_machine_list():
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Tapes", justify="center")
    table.add_column("Kind", justify="center")
    table.add_column("Description")
    for name in example_names():
        program = load_example(name)
        kind = "NTM" if program.nondeterministic else "DTM"
        table.add_row(name, str(program.tape_count), kind, program.description)
    console.print(table)


def show_rules(program):
    table = Table(title=program.name or None, show_header=True, header_style="bold magenta")
    table.add_column("State")
    table.add_column("Read", justify="center")
    table.add_column("Next")
    table.add_column("Write", justify="center")
    table.add_column("Move", justify="center")
    for state, reads, action in program:
        writes = ",".join("·" if write is None else write for write in action.writes)
        moves = ",".join(move.value for move in action.moves)
        table.add_row(escape(state), escape(",".join(reads)), escape(action.next_state), escape(writes), moves)
    console.print(table)


# === Commands ===
def handle_list(args, config):
    show_machine_list()
    return EXIT_ACCEPT


def handle_show(args, config):
    show_rules(resolve(args.machine, config["blank"]))
    return EXIT_ACCEPT


def handle_run(args, config):
    program = resolve(args.machine, config["blank"])
    if program.nondeterministic:
        console.print(f"[red]{program.name} is nondeterministic; use the 'search' command.[/red]")
        return EXIT_USAGE

    inputs = args.inputs or [""]
    if program.tape_count == 1:
        if len(inputs) > 1:
            console.print("[red]A single-tape machine takes one input string.[/red]")
            return EXIT_USAGE
        machine = Machine(program, inputs[0])
    else:
        machine = MultiTapeMachine(program, inputs)

    max_steps = args.max_steps if args.max_steps is not None else config["max_steps"]
    result = machine.run(max_steps)

    if args.trace:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Step", justify="right")
        table.add_column("From")
        table.add_column("Read", justify="center")
        table.add_column("Write", justify="center")
        table.add_column("Move", justify="center")
        table.add_column("To")
        table.add_column("Heads", justify="right")
        for step in result:
            if not step.applied:
                continue
            table.add_row(
                str(step.step),
                escape(step.previous_state),
                escape(",".join(step.reads)),
                escape(",".join(step.writes)),
                ",".join(move.value for move in step.moves),
                escape(step.state),
                ",".join(str(head) for head in step.heads),
            )
        console.print(table)

    width = config["window_width"]
    for number, window in enumerate(machine.windows(width), start=1):
        console.print(f"Tape {number}: {format_window(window, width // 2)}")

    color = status_style(machine.status)
    console.print(
        f"State [bold]{escape(machine.state)}[/bold] after {machine.step_count:,} steps: "
        f"[{color}]{machine.status.value.upper()}[/{color}]"
    )
    if result.cap_reached:
        console.print(f"[yellow]Step cap of {max_steps:,} reached; outcome undetermined.[/yellow]")
        return EXIT_REJECT
    return EXIT_ACCEPT if machine.status in (Status.ACCEPTED, Status.HALTED) else EXIT_REJECT


def handle_search(args, config):
    program = resolve(args.machine, config["blank"])
    if program.tape_count != 1:
        console.print("[red]Breadth-first search supports single-tape machines only.[/red]")
        return EXIT_USAGE

    search = NondeterministicMachine(program, args.input, merge_duplicates=config["merge_duplicates"])
    max_generations = args.max_generations if args.max_generations is not None else config["max_generations"]

    console.print(f"Generation 0: {search.summary()['configurations']}")
    for result in search.run(max_generations):
        pairs = ", ".join(f"[{escape(state)}, pos:{head}]" for state, head in result.pairs())
        console.print(
            f"Generation {result.generation}: {result.active_count} active "
            f"(+{result.born} new, {result.died} died) {pairs}"
        )

    if search.status is SearchStatus.ACCEPTED:
        accepting = search.accepting_configurations[0]
        console.print(f"[green]ACCEPTED[/green] at generation {search.generation} via {accepting.path}")
        return EXIT_ACCEPT
    if search.cap_reached:
        console.print(f"[yellow]Generation cap of {max_generations} reached; outcome undetermined.[/yellow]")
    else:
        console.print(f"[red]REJECTED[/red] after {search.generation} generations")
    return EXIT_REJECT


def build_parser():
    parser = argparse.ArgumentParser(prog="turing-engine", description="Step Turing machines from the command line")
    parser.add_argument("--config", help="JSON file overriding the default settings")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List the bundled example machines")

    show = subparsers.add_parser("show", help="Print a machine's transition table")
    show.add_argument("machine", help="Example name or path to a JSON machine file")

    run = subparsers.add_parser("run", help="Run a deterministic machine")
    run.add_argument("machine", help="Example name or path to a JSON machine file")
    run.add_argument("inputs", nargs="*", help="Input string, one per tape")
    run.add_argument("--max-steps", type=int, help="Step cap (defaults to the config value)")
    run.add_argument("--trace", action="store_true", help="Print every step")

    search = subparsers.add_parser("search", help="Breadth-first search of a nondeterministic machine")
    search.add_argument("machine", help="Example name or path to a JSON machine file")
    search.add_argument("input", nargs="?", default="", help="Input string")
    search.add_argument("--max-generations", type=int, help="Generation cap (defaults to the config value)")

    return parser


HANDLERS = {
    "list": handle_list,
    "show": handle_show,
    "run": handle_run,
    "search": handle_search,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        logging.basicConfig(
            level=(args.log_level or config["log_level"]).upper(),
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    except (OSError, ValueError, TypeError) as error:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
        return EXIT_USAGE

    try:
        return HANDLERS[args.command](args, config)
    except (KeyError, FileNotFoundError, MachineDefinitionError, ValueError) as error:
        message = error.args[0] if isinstance(error, KeyError) and error.args else str(error)
        console.print(f"[red]Error: {escape(str(message))}[/red]")
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
