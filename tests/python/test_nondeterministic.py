"""Tests for the breadth-first nondeterministic engine."""

import pytest

from turing_engine import (
    Action,
    Configuration,
    MachineDefinitionError,
    Move,
    NondeterministicMachine,
    Program,
    SearchStatus,
    load_example,
)


@pytest.fixture
def pattern():
    return load_example("pattern_101")


def test_pattern_found_at_generation_three(pattern):
    search = NondeterministicMachine(pattern, "1011")
    results = search.run(max_generations=20)

    assert search.status is SearchStatus.ACCEPTED
    assert search.generation == 3
    assert len(results) == 3
    assert not search.cap_reached
    accepting = search.accepting_configurations
    assert len(accepting) == 1
    assert accepting[0].head == 3
    assert accepting[0].path == "start -> q1 -> q2 -> accept"


def test_generations_branch_on_every_matching_transition(pattern):
    search = NondeterministicMachine(pattern, "1011")
    first = search.step_generation()
    assert first.generation == 1
    assert first.pairs() == [("q0", 1), ("q1", 1)]
    assert first.born == 2

    second = search.step_generation()
    assert second.pairs() == [("q0", 2), ("q2", 2)]


def test_no_pattern_rejects_once_all_branches_end(pattern):
    search = NondeterministicMachine(pattern, "000")
    search.run(max_generations=20)

    assert search.status is SearchStatus.REJECTED
    assert search.generation <= len("000") + 1
    assert search.active_configurations == ()


def test_dead_branches_are_dropped():
    program = Program(
        {
            ("q0", "a"): [Action.single("q1", move="R"), Action.single("q2", move="R")],
            ("q1", "b"): Action.single("yes"),
        },
        accept_states={"yes"},
        nondeterministic=True,
    )
    search = NondeterministicMachine(program, "ac")
    first = search.step_generation()
    assert first.active_count == 2

    second = search.step_generation()
    assert second.died == 2
    assert second.configurations == ()
    assert search.status is SearchStatus.REJECTED


def test_terminal_configurations_carry_forward(pattern):
    search = NondeterministicMachine(pattern, "1100")
    search.run(max_generations=2)
    # q1 reads the second 1 and moves to reject at generation 2
    rejected = [config for config in search.configurations if config.state == "reject"]
    assert len(rejected) == 1

    search.step_generation()
    assert rejected[0] in search.configurations


def test_acceptance_never_reverts(pattern):
    search = NondeterministicMachine(pattern, "101")
    search.run(max_generations=10)
    assert search.status is SearchStatus.ACCEPTED
    generation = search.generation

    for _ in range(3):
        result = search.step_generation()
        assert result.status is SearchStatus.ACCEPTED
        assert not result.applied
    assert search.generation == generation


def test_generation_cap_is_undetermined():
    program = Program(
        {("loop", "*"): [Action.single("loop", move="R"), Action.single("loop", move="L")]},
        nondeterministic=True,
        initial_state="loop",
    )
    search = NondeterministicMachine(program, "x")
    results = search.run(max_generations=5)

    assert search.status is SearchStatus.RUNNING
    assert search.cap_reached
    assert results[-1].cap_reached
    assert not results[0].cap_reached


def test_duplicate_configurations_merge():
    program = Program(
        {("q0", "*"): [Action.single("q0", move="R"), Action.single("q0", move="R")]},
        nondeterministic=True,
    )
    # Identical outcomes collapse when the table is built
    assert len(program.actions("q0", "a")) == 1

    converge = Program(
        {
            ("q0", "a"): [Action.single("q1", "b", "R"), Action.single("q2", "b", "R")],
            ("q1", "_"): Action.single("q3", "_", "L"),
            ("q2", "_"): Action.single("q3", "_", "L"),
        },
        nondeterministic=True,
    )
    merged = NondeterministicMachine(converge, "a")
    merged.run(max_generations=2)
    assert len(merged.configurations) == 1

    kept = NondeterministicMachine(converge, "a", merge_duplicates=False)
    kept.run(max_generations=2)
    assert len(kept.configurations) == 2


def test_configurations_are_immutable_and_track_the_tape():
    program = Program(
        {("q0", "0"): [Action.single("q0", "1", "R"), Action.single("q0", "0", "R")]},
        nondeterministic=True,
    )
    search = NondeterministicMachine(program, "00")
    initial = search.configurations[0]
    search.run(max_generations=2)

    assert initial.tape == (0, ("0", "0"))
    assert sorted(config.tape_contents() for config in search.configurations) == ["00", "01", "10", "11"]
    with pytest.raises(AttributeError):
        initial.state = "q9"


def test_path_to_follows_parents(pattern):
    search = NondeterministicMachine(pattern, "101")
    search.run(max_generations=10)
    chain = search.path_to(search.accepting_configurations[0])
    assert [config.state for config in chain] == ["q0", "q1", "q2", "accept"]
    assert [config.generation for config in chain] == [0, 1, 2, 3]
    assert isinstance(chain[0], Configuration)
    assert len(search.history) == 4


def test_summary_reports_active_pairs(pattern):
    search = NondeterministicMachine(pattern, "11")
    search.step_generation()
    assert search.summary() == {
        "generation": 1,
        "status": "running",
        "active": 2,
        "configurations": [["q0", 1], ["q1", 1]],
    }


def test_step_before_start_is_an_error(pattern):
    search = NondeterministicMachine(pattern)
    assert search.status is SearchStatus.READY
    with pytest.raises(RuntimeError):
        search.step_generation()


def test_start_resets_the_search(pattern):
    search = NondeterministicMachine(pattern, "101")
    search.run(max_generations=10)
    search.start("000")
    assert search.generation == 0
    assert search.status is SearchStatus.RUNNING
    assert len(search.history) == 1


def test_deterministic_programs_run_without_branching():
    search = NondeterministicMachine(load_example("bit_flip"), "10")
    results = search.run(max_generations=10)
    assert all(result.active_count <= 1 for result in results)
    assert search.status is SearchStatus.ACCEPTED
    assert search.accepting_configurations[0].tape_contents() == "01"


def test_multi_tape_programs_are_refused():
    with pytest.raises(MachineDefinitionError):
        NondeterministicMachine(load_example("ww_two_tape"), "0101")


def test_run_requires_a_cap(pattern):
    search = NondeterministicMachine(pattern, "1")
    with pytest.raises(ValueError):
        search.run(-1)


def test_moves_are_enum_values():
    assert Move.parse("L").delta == -1


def test_carried_configuration_merges_with_an_identical_successor():
    program = Program(
        {
            ("q0", "a"): [Action.single("q1"), Action.single("reject")],
            ("q1", "a"): Action.single("reject"),
        },
        reject_states=("reject",),
        nondeterministic=True,
    )
    search = NondeterministicMachine(program, "a")
    search.step_generation()
    assert [config.state for config in search.configurations] == ["q1", "reject"]

    result = search.step_generation()
    assert [config.state for config in search.configurations] == ["reject"]
    assert result.merged == 1
    assert search.status is SearchStatus.REJECTED

    kept = NondeterministicMachine(program, "a", merge_duplicates=False)
    kept.run(max_generations=2)
    assert len(kept.configurations) == 2


def test_start_without_input_reuses_the_last_one(pattern):
    search = NondeterministicMachine(pattern, "1011")
    search.run(max_generations=10)
    search.start()
    assert search.input_string == "1011"
    assert search.generation == 0
    search.run(max_generations=10)
    assert search.status is SearchStatus.ACCEPTED

    fresh = NondeterministicMachine(pattern)
    fresh.reset()
    assert fresh.input_string == ""
    assert fresh.status is SearchStatus.RUNNING
