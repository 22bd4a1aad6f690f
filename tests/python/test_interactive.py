"""Test the notebook live stepper."""

import pytest

pytest.importorskip("IPython")

from turing_engine import DEFAULT_CONFIG, Machine, NondeterministicMachine, Status, load_example  # noqa: E402
from turing_engine import interactive  # noqa: E402
from turing_engine.interactive import LiveStepper, render_window, step_live  # noqa: E402


@pytest.fixture
def shown(monkeypatch):
    frames = []
    monkeypatch.setattr(interactive, "clear_output", lambda wait=False: None)
    monkeypatch.setattr(interactive, "display", lambda html: frames.append(html.data))
    return frames


def test_runs_until_halted(shown):
    machine = Machine(load_example("bit_flip"), "10")
    steps = LiveStepper(width=5).run(machine, step_delay=0, caption="Bit flip")

    assert steps == 3
    assert machine.status is Status.ACCEPTED
    # One initial frame plus one per step
    assert len(shown) == 4
    assert "Bit flip" in shown[-1]
    assert "ACCEPTED" in shown[-1]


def test_stops_at_max_steps(shown, capsys):
    machine = Machine(load_example("bit_flip"), "1111")
    steps = step_live(machine, step_delay=0, max_steps=2)
    assert steps == 2
    assert machine.status is Status.RUNNING
    assert "undetermined" in capsys.readouterr().out


def test_keyboard_interrupt_stops_cleanly(shown, monkeypatch, capsys):
    machine = Machine(load_example("bit_flip"), "1111")

    def interrupt(_):
        raise KeyboardInterrupt

    monkeypatch.setattr(interactive.time, "sleep", interrupt)
    steps = LiveStepper().run(machine, step_delay=0.5)
    assert steps == 1
    assert "Stopped by user" in capsys.readouterr().out


def test_nondeterministic_frames_list_branches(shown):
    search = NondeterministicMachine(load_example("pattern_101"), "1011")
    steps = LiveStepper().run(search, step_delay=0)
    assert steps == 3
    assert "q0, pos:" in shown[1]
    assert "Generation 3" in shown[-1]


def test_render_window_highlights_head():
    assert render_window(["0", "1"], 0) == "<code><b>[0]</b> 1</code>"


def test_step_delay_comes_from_config(shown, monkeypatch):
    delays = []
    monkeypatch.setattr(interactive.time, "sleep", delays.append)

    step_live(Machine(load_example("bit_flip"), "1"), show_stats=False)
    assert delays == [DEFAULT_CONFIG["step_delay"]] * 2

    delays.clear()
    config = dict(DEFAULT_CONFIG, step_delay=0.05, window_width=3)
    step_live(Machine(load_example("bit_flip"), "1"), show_stats=False, config=config)
    assert delays == [0.05, 0.05]
    assert shown[-1].count("<code>") == 1
    assert "<code>_ <b>[_]</b> _</code>" in shown[-1]
