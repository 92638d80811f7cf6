"""Aggregate statistics over people, weeks and projects.

Rolls the per-person, per-week figures from the calculator up into range
totals, per-week averages, utilization and project planned-vs-actual
capacity. Division by zero never happens: empty inputs yield 0.
"""

from dataclasses import dataclass, field
from typing import Optional

from capplanner.capacity.calculator import (
    active_assignments,
    allocated,
    assignment_covers,
    availability,
    capacity,
    is_first_responder,
    week_slice,
)
from capplanner.domain.models import Project, Schedule


@dataclass(frozen=True)
class RangeStats:
    """Team totals over an inclusive range of weeks.

    Attributes:
        total_availability: Sum of availability over weeks x people.
        total_capacity: Sum of capacity over weeks x people.
        total_allocated: Sum of allocated days over weeks x people.
        avg_availability_per_week: total_availability / number of weeks.
        avg_capacity_per_week: total_capacity / number of weeks.
        utilization_percent: Allocated as a percentage of capacity.
        week_count: Number of weeks in the range.
    """

    total_availability: float = 0
    total_capacity: float = 0
    total_allocated: float = 0
    avg_availability_per_week: float = 0
    avg_capacity_per_week: float = 0
    utilization_percent: float = 0
    week_count: int = 0


@dataclass(frozen=True)
class ProjectCapacity:
    """Planned vs. actual capacity of a project over its own week range.

    Attributes:
        project_id: Project the figures belong to.
        planned: Requested days (days per week of covering assignments).
        actual: Deliverable days, each assignment capped by the person's
            capacity that week.
        weeks: Week ids of the project range.
    """

    project_id: int
    planned: float = 0
    actual: float = 0
    weeks: tuple[str, ...] = ()

    @property
    def utilization_percent(self) -> float:
        if self.planned <= 0:
            return 0
        return self.actual / self.planned * 100

    @property
    def shortfall(self) -> float:
        return self.planned - self.actual


@dataclass(frozen=True)
class PersonWeek:
    """One row of a person's weekly breakdown.

    Attributes:
        week_id: Week of the row.
        availability: Working days minus holidays.
        capacity: Availability less first-responder duty.
        allocated: Project days actually committed (capped).
        requested: Uncapped sum of active assignments' days per week.
        is_first_responder: Whether the person holds FR duty this week.
        project_names: Names of projects with an active assignment.
    """

    week_id: str
    availability: float
    capacity: float
    allocated: float
    requested: float
    is_first_responder: bool
    project_names: tuple[str, ...] = ()

    @property
    def deliverable(self) -> float:
        """Days available for project work: none in a first-responder week."""
        return 0 if self.is_first_responder else self.capacity

    @property
    def remaining(self) -> float:
        """Project days left after requested work; negative when over-allocated."""
        return self.deliverable - self.requested

    @property
    def is_over_allocated(self) -> bool:
        return self.requested > self.deliverable


@dataclass(frozen=True)
class PersonSummary:
    """A person's totals over the whole planning period."""

    person_id: int
    total_availability: float = 0
    total_capacity: float = 0
    total_allocated: float = 0
    total_requested: float = 0
    fr_weeks: tuple[str, ...] = field(default_factory=tuple)
    over_allocated_weeks: tuple[str, ...] = field(default_factory=tuple)

    @property
    def utilization_percent(self) -> float:
        if self.total_capacity <= 0:
            return 0
        return self.total_allocated / self.total_capacity * 100

    @property
    def is_over_allocated(self) -> bool:
        return bool(self.over_allocated_weeks)


def team_average_availability(schedule: Schedule, week_id: str) -> float:
    """Mean availability of all people in a week (0 with no people)."""
    if not schedule.people:
        return 0
    total = sum(availability(schedule, p.id, week_id) for p in schedule.people)
    return total / len(schedule.people)


def person_average_availability(schedule: Schedule, person_id: int) -> float:
    """Mean availability of one person across all weeks (0 with no weeks)."""
    if not schedule.weeks:
        return 0
    total = sum(availability(schedule, person_id, w.id) for w in schedule.weeks)
    return total / len(schedule.weeks)


def range_stats(
    schedule: Schedule,
    start_week_id: Optional[str] = None,
    end_week_id: Optional[str] = None,
) -> RangeStats:
    """Compute team totals over an inclusive week range.

    Args:
        schedule: The planning document.
        start_week_id: First week of the range. Defaults to the first week.
        end_week_id: Last week of the range. Defaults to the last week.

    Returns:
        RangeStats; all zeros for an empty, unresolved or inverted range.
    """
    if not schedule.weeks:
        return RangeStats()
    if start_week_id is None:
        start_week_id = schedule.weeks[0].id
    if end_week_id is None:
        end_week_id = schedule.weeks[-1].id

    weeks = week_slice(schedule.weeks, start_week_id, end_week_id)
    if not weeks:
        return RangeStats()

    total_availability = 0
    total_capacity = 0
    total_allocated = 0
    for week in weeks:
        for person in schedule.people:
            total_availability += availability(schedule, person.id, week.id)
            total_capacity += capacity(schedule, person.id, week.id)
            total_allocated += allocated(schedule, person.id, week.id)

    utilization = (
        total_allocated / total_capacity * 100 if total_capacity > 0 else 0
    )
    return RangeStats(
        total_availability=total_availability,
        total_capacity=total_capacity,
        total_allocated=total_allocated,
        avg_availability_per_week=total_availability / len(weeks),
        avg_capacity_per_week=total_capacity / len(weeks),
        utilization_percent=utilization,
        week_count=len(weeks),
    )


def project_capacity(schedule: Schedule, project: Project) -> ProjectCapacity:
    """Compute planned and actual capacity over the project's own range.

    Only weeks inside the project range are counted, and within them each
    assignment contributes only for weeks covered by its own range.
    """
    weeks = week_slice(schedule.weeks, project.start_week, project.end_week)
    planned = 0
    actual = 0
    for week in weeks:
        for assignment in project.assignments:
            if not assignment_covers(schedule.weeks, assignment, week.id):
                continue
            planned += assignment.days_per_week
            actual += min(
                assignment.days_per_week,
                capacity(schedule, assignment.person_id, week.id),
            )
    return ProjectCapacity(
        project_id=project.id,
        planned=planned,
        actual=actual,
        weeks=tuple(w.id for w in weeks),
    )


def all_project_capacity(schedule: Schedule) -> list[ProjectCapacity]:
    return [project_capacity(schedule, p) for p in schedule.projects]


def person_week_breakdown(schedule: Schedule, person_id: int) -> list[PersonWeek]:
    """Get a person's availability, capacity and allocation for every week."""
    rows = []
    for week in schedule.weeks:
        projects = active_assignments(schedule, person_id, week.id)
        rows.append(
            PersonWeek(
                week_id=week.id,
                availability=availability(schedule, person_id, week.id),
                capacity=capacity(schedule, person_id, week.id),
                allocated=allocated(schedule, person_id, week.id),
                requested=sum(a.days_per_week for _, a in projects),
                is_first_responder=is_first_responder(schedule, person_id, week.id),
                project_names=tuple(p.name for p, _ in projects),
            )
        )
    return rows


def person_summary(schedule: Schedule, person_id: int) -> PersonSummary:
    """Total a person's figures over the whole planning period."""
    rows = person_week_breakdown(schedule, person_id)
    return PersonSummary(
        person_id=person_id,
        total_availability=sum(r.availability for r in rows),
        total_capacity=sum(r.capacity for r in rows),
        total_allocated=sum(r.allocated for r in rows),
        total_requested=sum(r.requested for r in rows),
        fr_weeks=tuple(r.week_id for r in rows if r.is_first_responder),
        over_allocated_weeks=tuple(r.week_id for r in rows if r.is_over_allocated),
    )


def over_allocations(schedule: Schedule) -> list[tuple[int, str, float]]:
    """List (person_id, week_id, excess days) for requested work that cannot be done.

    Allocation itself is capped, so over-allocation shows up as requested
    days the person cannot deliver: overlapping assignments beyond their
    capacity, or any project work in a first-responder week.
    """
    found = []
    for person in schedule.people:
        for row in person_week_breakdown(schedule, person.id):
            if row.is_over_allocated:
                found.append((person.id, row.week_id, -row.remaining))
    return found
