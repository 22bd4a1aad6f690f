"""Tests for the infinite tape."""

import pytest

from turing_engine import Tape


@pytest.mark.parametrize("index", [-100, -1, 0, 1, 7, 1_000])
def test_unwritten_cells_read_blank(index):
    assert Tape().read(index) == "_"
    assert Tape.from_input("abc", blank="#").read(index + 3 if index >= 0 else index) == "#"


def test_write_grows_both_directions():
    tape = Tape.from_input("01")
    tape.write(5, "1")
    tape.write(-3, "x")

    assert tape.read(5) == "1"
    assert tape.read(4) == "_"
    assert tape.read(-3) == "x"
    assert tape.read(-2) == "_"
    assert tape.min_index == -3
    assert tape.max_index == 5
    assert len(tape) == 9
    assert str(tape) == "x__|01___1"


def test_item_access_aliases():
    tape = Tape()
    tape[-1] = "a"
    assert tape[-1] == "a"
    assert tape[0] == "_"


def test_window_is_centered_and_padded():
    tape = Tape.from_input("abc")
    assert tape.to_window(0, 5) == ["_", "_", "a", "b", "c"]
    assert tape.to_window(2, 3) == ["b", "c", "_"]
    assert tape.to_window(10, 4) == ["_", "_", "_", "_"]
    # Windows never materialize cells
    assert len(tape) == 3


def test_contents_trims_blanks():
    tape = Tape.from_input("_ab_")
    tape.write(-2, "_")
    assert tape.contents() == "ab"
    assert tape.count_nonblanks() == 2


def test_snapshot_ignores_materialized_blanks():
    short = Tape.from_input("ab")
    long = Tape.from_input("ab")
    long.write(8, "_")
    long.write(-4, "_")
    assert short.snapshot() == long.snapshot() == (0, ("a", "b"))
    assert Tape().snapshot() == (0, ())


def test_snapshot_round_trip_keeps_positions():
    tape = Tape()
    tape.write(-2, "x")
    tape.write(1, "y")
    origin, cells = tape.snapshot()
    assert origin == -2
    restored = Tape.from_snapshot((origin, cells))
    assert restored.read(-2) == "x"
    assert restored.read(1) == "y"
    assert restored.read(0) == "_"


def test_copy_is_independent():
    tape = Tape.from_input("ab")
    clone = tape.copy()
    clone.write(0, "z")
    assert tape.read(0) == "a"
    assert clone.read(0) == "z"


def test_snapshot_after_long_left_walk():
    tape = Tape()
    tape.write(-50_000, "_")
    tape.write(3, "x")
    tape.write(5, "y")
    assert tape.snapshot() == (3, ("x", "_", "y"))
