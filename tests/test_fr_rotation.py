"""Tests for first-responder rotation planning."""

from dataclasses import replace

import pytest

from capplanner.capacity.calculator import can_be_first_responder
from capplanner.cli import create_sample_schedule
from capplanner.domain.models import Person, Schedule, Week
from capplanner.editing.operations import update_week
from capplanner.planning.fr_rotation import (
    CPSATRotationSolver,
    FirstResponderPlanner,
    HeuristicRotationSolver,
    RotationConfig,
    RotationResult,
    SolverType,
    build_problem,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sample() -> Schedule:
    """Sample plan without any first responders."""
    return create_sample_schedule()


@pytest.fixture
def open_team() -> Schedule:
    """Three fully available people over six weeks, no projects."""
    return Schedule(
        people=tuple(Person(id=i, name=f"Person {i}") for i in (1, 2, 3)),
        weeks=tuple(Week(id=f"W{n}", name=f"Week {n}") for n in range(1, 7)),
    )


def assert_eligible(schedule: Schedule) -> None:
    for week_id, person_id in schedule.fr_schedule.items():
        assert can_be_first_responder(schedule, person_id, week_id)


# ============================================================================
# Problem building
# ============================================================================


class TestBuildProblem:
    """Tests for collecting the rotation problem."""

    def test_candidates_are_eligible_people(self, sample):
        """Alice is out in W5 and Charlie has 2 days in W4."""
        problem = build_problem(sample)
        assert problem.candidates["W5"] == [2, 3]
        assert problem.candidates["W4"] == [1, 2]
        assert problem.candidates["W1"] == [1, 2, 3]

    def test_load_is_requested_project_days(self, sample):
        """Load counts requested days as if nobody were on duty."""
        sample = replace(sample, fr_schedule={"W1": 2})
        problem = build_problem(sample, keep_existing=False)
        assert problem.load[(1, "W1")] == 3
        assert problem.load[(2, "W1")] == 4
        assert problem.load[(3, "W1")] == 0

    def test_keep_existing(self, sample):
        """Held weeks are fixed and not open."""
        problem = build_problem(replace(sample, fr_schedule={"W2": 2}))
        assert problem.fixed == {"W2": 2}
        assert "W2" not in problem.open_weeks

    def test_stale_entries_are_not_fixed(self, sample):
        """Entries for unknown weeks or people do not count."""
        problem = build_problem(replace(sample, fr_schedule={"W9": 1, "W1": 99}))
        assert problem.fixed == {}
        assert "W1" in problem.open_weeks


# ============================================================================
# Solvers
# ============================================================================


class TestHeuristicSolver:
    """Tests for the greedy solver."""

    def test_sample_rotation(self, sample):
        """Least duties first, then least load, then display order."""
        chosen = HeuristicRotationSolver().solve(build_problem(sample))
        assert chosen == {"W1": 3, "W2": 1, "W3": 2, "W4": 1, "W5": 2, "W6": 3}

    def test_avoid_consecutive(self):
        """People adjacent to their own duty week are considered last."""
        schedule = Schedule(
            people=(Person(id=1, name="A"), Person(id=2, name="B")),
            weeks=tuple(Week(id=f"W{n}", name=f"Week {n}") for n in range(1, 6)),
            fr_schedule={"W1": 1, "W4": 2, "W5": 2},
        )
        plain = HeuristicRotationSolver().solve(build_problem(schedule))
        assert plain == {"W2": 1, "W3": 1}

        config = RotationConfig(avoid_consecutive=True)
        chosen = HeuristicRotationSolver(config).solve(build_problem(schedule))
        assert chosen == {"W2": 2, "W3": 1}


class TestCPSATSolver:
    """Tests for the CP-SAT solver."""

    def test_solves_sample(self, sample):
        """Every week gets an eligible holder and duties are balanced."""
        problem = build_problem(sample)
        status, chosen, _ = CPSATRotationSolver().solve(problem)
        assert status == "OPTIMAL"
        assert set(chosen) == set(sample.week_ids)
        assert all(chosen[w] in problem.candidates[w] for w in chosen)
        counts = [list(chosen.values()).count(p) for p in (1, 2, 3)]
        assert max(counts) == 2

    def test_prefers_light_load(self, sample):
        """Charlie, with no project work, covers project weeks where possible."""
        _, chosen, _ = CPSATRotationSolver().solve(build_problem(sample))
        project_weeks = [chosen[w] for w in ("W1", "W2", "W3")]
        assert project_weeks.count(3) == 2
        assert 2 not in project_weeks

    def test_avoid_consecutive(self, open_team):
        """No person holds two adjacent weeks when it can be avoided."""
        config = RotationConfig(solver_type=SolverType.CPSAT, avoid_consecutive=True)
        _, chosen, _ = CPSATRotationSolver(config).solve(build_problem(open_team))
        for first, second in zip(open_team.week_ids, open_team.week_ids[1:]):
            assert chosen[first] != chosen[second]


# ============================================================================
# Planner
# ============================================================================


class TestFirstResponderPlanner:
    """Tests for FirstResponderPlanner."""

    @pytest.mark.parametrize("solver_type", list(SolverType))
    def test_fills_every_week(self, sample, solver_type):
        """All solvers fill every week with an eligible person."""
        config = RotationConfig(solver_type=solver_type)
        result = FirstResponderPlanner(config).plan(sample)
        assert result.is_feasible
        assert set(result.schedule.fr_schedule) == set(sample.week_ids)
        assert result.unassigned_weeks == []
        assert sum(result.duty_counts.values()) == 6
        assert_eligible(result.schedule)

    def test_input_not_modified(self, sample):
        """Planning returns a new schedule."""
        FirstResponderPlanner().plan(sample)
        assert sample.fr_schedule == {}

    def test_keeps_existing_holders(self, sample):
        """Existing entries stay and are not reported as new."""
        sample = replace(sample, fr_schedule={"W1": 2})
        result = FirstResponderPlanner().plan(sample)
        assert result.schedule.fr_schedule["W1"] == 2
        assert "W1" not in result.assignments
        assert result.duty_counts[2] >= 1

    def test_replace_existing(self, sample):
        """Without keep_existing every week is planned again."""
        sample = replace(sample, fr_schedule={"W1": 2})
        config = RotationConfig(solver_type=SolverType.HEURISTIC, keep_existing=False)
        result = FirstResponderPlanner(config).plan(sample)
        assert set(result.assignments) == set(sample.week_ids)
        assert result.schedule.fr_schedule["W1"] == 3

    @pytest.mark.parametrize("solver_type", [SolverType.CPSAT, SolverType.HEURISTIC])
    def test_avoid_consecutive_is_a_preference(self, solver_type):
        """A sole eligible person still covers adjacent weeks."""
        schedule = Schedule(
            people=(Person(id=1, name="A"),),
            weeks=(Week(id="W1", name="Week 1"), Week(id="W2", name="Week 2")),
        )
        config = RotationConfig(solver_type=solver_type, avoid_consecutive=True)
        result = FirstResponderPlanner(config).plan(schedule)
        assert result.schedule.fr_schedule == {"W1": 1, "W2": 1}
        assert result.unassigned_weeks == []

    def test_week_without_eligible_person(self, sample):
        """A week nobody can cover stays unassigned."""
        sample = update_week(sample, "W2", working_days=2)
        for solver_type in SolverType:
            result = FirstResponderPlanner(RotationConfig(solver_type=solver_type)).plan(sample)
            assert result.unassigned_weeks == ["W2"]
            assert "W2" not in result.schedule.fr_schedule

    def test_drops_stale_entries(self, sample):
        """Entries for weeks no longer in the plan are not carried over."""
        sample = replace(sample, fr_schedule={"W9": 1})
        result = FirstResponderPlanner().plan(sample)
        assert "W9" not in result.schedule.fr_schedule

    def test_solver_used(self, sample):
        """The result names the solver that produced it."""
        cpsat = FirstResponderPlanner(RotationConfig(solver_type=SolverType.CPSAT))
        heuristic = FirstResponderPlanner(RotationConfig(solver_type=SolverType.HEURISTIC))
        assert cpsat.plan(sample).solver_used == "cpsat"
        assert heuristic.plan(sample).solver_used == "heuristic"
        assert heuristic.plan(sample).status == "HEURISTIC"

    def test_result_feasibility(self, sample):
        """Only solved statuses count as feasible."""
        assert RotationResult(schedule=sample, status="OPTIMAL").is_feasible
        assert not RotationResult(schedule=sample, status="INFEASIBLE").is_feasible
