"""Live stepping support for Jupyter notebooks.

The engines never sleep or schedule anything themselves. This module is the
caller-side loop: it steps a machine, redraws the tape in place, waits
``step_delay`` seconds, and stops when the machine halts, the cap is
reached, or the user presses Ctrl+C (KeyboardInterrupt).
"""

from typing import Optional
import time

try:
    from IPython.display import display, HTML, clear_output
except ImportError as e:
    raise ImportError(
        "IPython is required for live stepping. "
        "This module is intended for use in Jupyter notebooks."
    ) from e

from .config import DEFAULT_CONFIG
from .machine import DEFAULT_WINDOW_WIDTH, DeterministicMachine
from .nondeterministic import NondeterministicMachine


def render_window(window, offset) -> str:
    """HTML row of tape cells with the head cell highlighted.

    >>> render_window(["a", "<", "_"], 1)
    '<code>a <b>[&lt;]</b> _</code>'
    """
    cells = []
    for index, symbol in enumerate(window):
        text = symbol.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        cells.append(f"<b>[{text}]</b>" if index == offset else text)
    return f"<code>{' '.join(cells)}</code>"


class LiveStepper:
    """Steps a machine with a fixed delay, redrawing its state in place.

    Example:
        >>> from turing_engine import Machine, load_example
        >>> from turing_engine.interactive import LiveStepper
        >>> machine = Machine(load_example("palindrome"), "abba")
        >>> LiveStepper().run(machine, step_delay=0.1, caption="Palindrome")  # doctest: +SKIP
    """

    def __init__(self, width: int = DEFAULT_WINDOW_WIDTH):
        self.width = width
        self._frames_shown = 0

    def run(
        self,
        machine,  # DeterministicMachine or NondeterministicMachine
        step_delay: Optional[float] = None,
        max_steps: int = 1_000,
        caption: str = "",
        show_stats: bool = True,
    ) -> int:
        """Step until halted, ``max_steps`` steps, or Ctrl+C; return the steps taken."""
        if step_delay is None:
            step_delay = DEFAULT_CONFIG["step_delay"]
        if max_steps < 0:
            raise ValueError("max_steps must be a non-negative integer")
        steps_taken = 0
        self._update_display(machine, caption, show_stats)
        try:
            while steps_taken < max_steps and not self._is_finished(machine):
                self._advance(machine)
                steps_taken += 1
                self._update_display(machine, caption, show_stats)
                if step_delay:
                    time.sleep(step_delay)
        except KeyboardInterrupt:
            if show_stats:
                print(f"\n⏹ Stopped by user after {steps_taken:,} steps")
            return steps_taken

        if show_stats and not self._is_finished(machine):
            print(f"\n✓ Reached max_steps={max_steps:,}; outcome undetermined")
        return steps_taken

    @staticmethod
    def _is_finished(machine) -> bool:
        return machine.status.is_terminal

    @staticmethod
    def _advance(machine):
        if isinstance(machine, NondeterministicMachine):
            return machine.step_generation()
        return machine.step()

    def render(self, machine, caption: str = "", show_stats: bool = True) -> str:
        parts = []
        if show_stats:
            if isinstance(machine, NondeterministicMachine):
                stats = (
                    f"Generation {machine.generation:,} | "
                    f"Active: {len(machine.active_configurations):,} | {machine.status.value.upper()}"
                )
            else:
                stats = f"Step {machine.step_count:,} | State: {machine.state} | {machine.status.value.upper()}"
            parts.append(f"<div>{stats}{' | ' + caption if caption else ''}</div>")

        offset = self.width // 2
        if isinstance(machine, DeterministicMachine):
            for window in machine.windows(self.width):
                parts.append(f"<div>{render_window(window, offset)}</div>")
        else:
            for config in machine.active_configurations:
                parts.append(f"<div>[{config.state}, pos:{config.head}] {config.path}</div>")
        return "\n".join(parts)

    def _update_display(self, machine, caption: str, show_stats: bool) -> None:
        """Replace the previous frame with the machine's current state."""
        clear_output(wait=True)
        display(HTML(self.render(machine, caption, show_stats)))
        self._frames_shown += 1


def step_live(
    machine,
    step_delay: Optional[float] = None,
    max_steps: int = 1_000,
    caption: str = "",
    show_stats: bool = True,
    width: Optional[int] = None,
    config: Optional[dict] = None,
) -> int:
    """Convenience wrapper around :class:`LiveStepper`.

    Unset ``step_delay`` and ``width`` come from ``config`` (see
    :func:`turing_engine.config.load_config`), else from the defaults.
    """
    config = config or DEFAULT_CONFIG
    if step_delay is None:
        step_delay = config["step_delay"]
    stepper = LiveStepper(width or config["window_width"])
    return stepper.run(machine, step_delay, max_steps, caption, show_stats)
