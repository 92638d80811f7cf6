"""First-responder rotation planning.

Suggests who should hold first-responder duty in each week. Every chosen
person must pass the availability check used when assigning duty by hand
(availability >= first-responder capacity days). Among eligible people
the planner spreads duty evenly and prefers whoever has the least project
work requested that week, since duty blocks all of their project time.

Two solvers are available: a greedy heuristic and an OR-Tools CP-SAT
model that optimizes the whole period at once.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ortools.sat.python import cp_model

from capplanner.capacity.calculator import can_be_first_responder, requested_days
from capplanner.domain.models import Schedule

logger = logging.getLogger(__name__)

# Loads are in (possibly half) days; CP-SAT needs integer coefficients.
LOAD_SCALE = 10


class SolverType(Enum):
    """Which solver the planner runs."""

    HEURISTIC = "heuristic"  # Greedy, week by week
    CPSAT = "cpsat"  # Optimal over the whole period
    HYBRID = "hybrid"  # CP-SAT, heuristic if CP-SAT finds nothing


@dataclass
class RotationConfig:
    """Configuration for first-responder rotation planning.

    Attributes:
        solver_type: Solver to use.
        time_limit_seconds: CP-SAT time limit.
        num_workers: CP-SAT parallel workers (0 = auto).
        keep_existing: Keep weeks that already have a first responder and
            only fill the open ones.
        avoid_consecutive: Penalize giving one person back-to-back weeks.
            Weeks are still filled when only an adjacent holder is eligible.
        balance_weight: Objective weight of the highest duty count.
        load_weight: Objective weight of project days displaced by duty.
        consecutive_penalty: Objective penalty per back-to-back pair.
    """

    solver_type: SolverType = SolverType.HYBRID
    time_limit_seconds: float = 10.0
    num_workers: int = 0
    keep_existing: bool = True
    avoid_consecutive: bool = False
    balance_weight: int = 100
    load_weight: int = 1
    consecutive_penalty: int = 1000


@dataclass
class RotationProblem:
    """Inputs shared by both solvers.

    Attributes:
        week_ids: All week ids in order.
        open_weeks: Week ids to fill, in order.
        fixed: First-responder entries that are kept as they are.
        candidates: Eligible person ids per open week.
        load: Requested project days per (person_id, week_id).
        person_order: Person ids in display order, used for tie-breaking.
    """

    week_ids: list[str]
    open_weeks: list[str]
    fixed: dict[str, int]
    candidates: dict[str, list[int]]
    load: dict[tuple[int, str], float]
    person_order: list[int]

    def neighbours(self, week_id: str) -> list[str]:
        idx = self.week_ids.index(week_id)
        return [
            self.week_ids[i] for i in (idx - 1, idx + 1) if 0 <= i < len(self.week_ids)
        ]

    def fixed_counts(self) -> dict[int, int]:
        counts = {p: 0 for p in self.person_order}
        for person_id in self.fixed.values():
            counts[person_id] = counts.get(person_id, 0) + 1
        return counts


@dataclass
class RotationResult:
    """Result of planning a rotation.

    Attributes:
        schedule: Schedule with the new first-responder map.
        status: Solver status (OPTIMAL, FEASIBLE, HEURISTIC, ...).
        assignments: Newly chosen holder per filled week.
        unassigned_weeks: Open weeks where nobody was eligible.
        duty_counts: Total weeks of duty per person, kept entries included.
        solver_used: Name of the solver that produced the result.
        solve_time_seconds: Wall time spent solving.
    """

    schedule: Schedule
    status: str
    assignments: dict[str, int] = field(default_factory=dict)
    unassigned_weeks: list[str] = field(default_factory=list)
    duty_counts: dict[int, int] = field(default_factory=dict)
    solver_used: str = ""
    solve_time_seconds: float = 0.0

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE", "HEURISTIC")


def build_problem(schedule: Schedule, keep_existing: bool = True) -> RotationProblem:
    """Collect open weeks, eligible people and project loads."""
    week_ids = schedule.week_ids
    people = schedule.person_ids
    fixed = {}
    if keep_existing:
        # Holders no longer in the team do not count as assigned.
        fixed = {
            w: p for w, p in schedule.fr_schedule.items() if w in week_ids and p in people
        }
    open_weeks = [w for w in week_ids if w not in fixed]

    # Load is measured without any duty so that every candidate is compared
    # on what they would give up.
    unassigned = replace(schedule, fr_schedule={})
    candidates = {}
    load = {}
    for week_id in open_weeks:
        candidates[week_id] = [
            p for p in people if can_be_first_responder(schedule, p, week_id)
        ]
        for person_id in candidates[week_id]:
            load[(person_id, week_id)] = requested_days(unassigned, person_id, week_id)

    return RotationProblem(
        week_ids=week_ids,
        open_weeks=open_weeks,
        fixed=fixed,
        candidates=candidates,
        load=load,
        person_order=people,
    )


class HeuristicRotationSolver:
    """Greedy solver: fills open weeks in order.

    Each week goes to the eligible person with the fewest duties so far,
    then the lightest project load, then display order. With
    ``avoid_consecutive`` people adjacent to an existing duty week are
    considered last.
    """

    def __init__(self, config: Optional[RotationConfig] = None):
        self.config = config or RotationConfig()

    def solve(self, problem: RotationProblem) -> dict[str, int]:
        counts = problem.fixed_counts()
        holders = dict(problem.fixed)
        chosen: dict[str, int] = {}

        for week_id in problem.open_weeks:
            candidates = problem.candidates.get(week_id, [])
            if not candidates:
                continue

            def score(person_id: int) -> tuple:
                adjacent = (
                    self.config.avoid_consecutive
                    and any(holders.get(n) == person_id for n in problem.neighbours(week_id))
                )
                return (
                    adjacent,
                    counts.get(person_id, 0),
                    problem.load.get((person_id, week_id), 0),
                    problem.person_order.index(person_id),
                )

            best = min(candidates, key=score)
            chosen[week_id] = best
            holders[week_id] = best
            counts[best] = counts.get(best, 0) + 1

        return chosen


class CPSATRotationSolver:
    """Constraint programming solver using OR-Tools CP-SAT.

    Minimizes the highest duty count first, then displaced project days,
    while adding a penalty for back-to-back duty when requested.
    """

    def __init__(self, config: Optional[RotationConfig] = None):
        self.config = config or RotationConfig()

    def solve(self, problem: RotationProblem) -> tuple[str, dict[str, int], float]:
        """Solve the rotation problem.

        Returns:
            Tuple of (status, chosen holder per week, wall time in seconds).
        """
        model = cp_model.CpModel()

        # x[(p, w)] = 1 if person p is first responder in open week w
        x: dict[tuple[int, str], cp_model.IntVar] = {}
        for week_id in problem.open_weeks:
            for person_id in problem.candidates.get(week_id, []):
                x[(person_id, week_id)] = model.NewBoolVar(f"fr_{person_id}_{week_id}")

        # Exactly one holder for every week that has candidates
        for week_id in problem.open_weeks:
            week_vars = [x[(p, week_id)] for p in problem.candidates.get(week_id, [])]
            if week_vars:
                model.AddExactlyOne(week_vars)

        fixed_counts = problem.fixed_counts()
        max_duties = model.NewIntVar(0, len(problem.week_ids), "max_duties")
        for person_id in problem.person_order:
            person_vars = [v for (p, _), v in x.items() if p == person_id]
            model.Add(max_duties >= fixed_counts.get(person_id, 0) + sum(person_vars))

        objective_terms = [max_duties * self.config.balance_weight]

        for (person_id, week_id), var in x.items():
            load = int(round(problem.load.get((person_id, week_id), 0) * LOAD_SCALE))
            if load:
                objective_terms.append(var * load * self.config.load_weight)

        if self.config.avoid_consecutive:
            objective_terms.extend(self._consecutive_terms(model, x, problem))

        model.Minimize(sum(objective_terms))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        if self.config.num_workers > 0:
            solver.parameters.num_workers = self.config.num_workers

        status = solver.Solve(model)
        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        status_str = status_map.get(status, "UNKNOWN")
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return status_str, {}, solver.WallTime()

        chosen = {
            week_id: person_id
            for (person_id, week_id), var in x.items()
            if solver.Value(var) == 1
        }
        return status_str, chosen, solver.WallTime()

    def _consecutive_terms(
        self,
        model: cp_model.CpModel,
        x: dict[tuple[int, str], cp_model.IntVar],
        problem: RotationProblem,
    ) -> list:
        terms = []
        for idx in range(len(problem.week_ids) - 1):
            first, second = problem.week_ids[idx], problem.week_ids[idx + 1]
            for person_id in problem.person_order:
                a = x.get((person_id, first), 1 if problem.fixed.get(first) == person_id else 0)
                b = x.get((person_id, second), 1 if problem.fixed.get(second) == person_id else 0)
                if isinstance(a, int) and isinstance(b, int):
                    continue  # both fixed or impossible
                both = model.NewBoolVar(f"consec_{person_id}_{first}")
                model.Add(both >= a + b - 1)
                terms.append(both * self.config.consecutive_penalty)
        return terms


class FirstResponderPlanner:
    """Plans first-responder duty for a schedule.

    Example:
        >>> planner = FirstResponderPlanner(RotationConfig(solver_type=SolverType.CPSAT))
        >>> result = planner.plan(schedule)
        >>> result.schedule.fr_schedule
        {'W1': 2, 'W2': 3, ...}
    """

    def __init__(self, config: Optional[RotationConfig] = None):
        self.config = config or RotationConfig()
        self.heuristic = HeuristicRotationSolver(self.config)
        self.cpsat = CPSATRotationSolver(self.config)

    def plan(self, schedule: Schedule) -> RotationResult:
        """Fill first-responder weeks of a schedule.

        Args:
            schedule: Schedule to plan. Not modified.

        Returns:
            RotationResult with the updated schedule. If CP-SAT is used
            without fallback and fails, the schedule is returned unchanged.
        """
        problem = build_problem(schedule, keep_existing=self.config.keep_existing)
        solver_type = self.config.solver_type

        if solver_type == SolverType.HEURISTIC:
            started = time.perf_counter()
            chosen = self.heuristic.solve(problem)
            return self._result(
                schedule, problem, chosen, "HEURISTIC", "heuristic",
                time.perf_counter() - started,
            )

        status, chosen, wall_time = self.cpsat.solve(problem)
        if status in ("OPTIMAL", "FEASIBLE"):
            return self._result(schedule, problem, chosen, status, "cpsat", wall_time)

        if solver_type == SolverType.HYBRID:
            logger.info("CP-SAT returned %s, falling back to heuristic", status)
            chosen = self.heuristic.solve(problem)
            return self._result(schedule, problem, chosen, "HEURISTIC", "heuristic", wall_time)

        return RotationResult(
            schedule=schedule,
            status=status,
            unassigned_weeks=list(problem.open_weeks),
            duty_counts=problem.fixed_counts(),
            solver_used="cpsat",
            solve_time_seconds=wall_time,
        )

    def _result(
        self,
        schedule: Schedule,
        problem: RotationProblem,
        chosen: dict[str, int],
        status: str,
        solver_used: str,
        solve_time: float,
    ) -> RotationResult:
        fr_schedule = {**problem.fixed, **chosen}
        counts = problem.fixed_counts()
        for person_id in chosen.values():
            counts[person_id] = counts.get(person_id, 0) + 1
        unassigned = [w for w in problem.open_weeks if w not in chosen]

        logger.info(
            "First-responder rotation (%s): %d week(s) filled, %d without an eligible person",
            solver_used,
            len(chosen),
            len(unassigned),
        )
        return RotationResult(
            schedule=replace(schedule, fr_schedule=fr_schedule),
            status=status,
            assignments=chosen,
            unassigned_weeks=unassigned,
            duty_counts=counts,
            solver_used=solver_used,
            solve_time_seconds=solve_time,
        )
