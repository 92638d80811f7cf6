"""Domain models for the capacity planner.

This module contains the core data structures of a planning document:
people, weeks, the planning period, projects with their per-person
assignments, and the Schedule aggregate that ties them together.

All models are frozen. Operations that change a schedule build a new
value with ``dataclasses.replace`` instead of editing in place.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

# (person_id, week_id) -> holiday days
HolidayKey = tuple[int, str]


@dataclass(frozen=True)
class PlannerDefaults:
    """Defaults applied when new records are created.

    Attributes:
        working_days: Working days given to newly appended weeks.
        fr_capacity_days: Days consumed by first-responder duty when a
            document does not specify it.
        days_per_week: Days per week for a newly added assignment.
        project_span_weeks: Number of weeks a new project covers.
        week_id_prefix: Prefix of synthesized week ids ("W3").
        week_name_prefix: Prefix of synthesized week names ("Week 3").
    """

    working_days: int = 5
    fr_capacity_days: float = 3
    days_per_week: float = 2
    project_span_weeks: int = 3
    week_id_prefix: str = "W"
    week_name_prefix: str = "Week "


@dataclass(frozen=True)
class Person:
    """A team member who can be allocated to projects."""

    id: int
    name: str


@dataclass(frozen=True)
class Week:
    """One week of the planning period.

    Attributes:
        id: Stable token used by every reference ("W3").
        name: Display name only.
        working_days: Working days in the week before holidays.
    """

    id: str
    name: str
    working_days: int = 5


@dataclass(frozen=True)
class PlanningPeriod:
    """Calendar anchor of the plan.

    ``number_of_weeks`` mirrors ``len(Schedule.weeks)``; the resizer is the
    only operation that changes both.
    """

    start_date: date
    number_of_weeks: int = 0


@dataclass(frozen=True)
class Assignment:
    """A person's commitment to a project.

    The assignment carries its own week range, which may be narrower or
    wider than the parent project's range.

    Attributes:
        person_id: Assigned person.
        days_per_week: Requested days per week.
        start_week: First active week id (inclusive).
        end_week: Last active week id (inclusive).
    """

    person_id: int
    days_per_week: float
    start_week: str
    end_week: str


@dataclass(frozen=True)
class Project:
    """A project with its overall week range and assignments."""

    id: int
    name: str
    start_week: str
    end_week: str
    notes: Optional[str] = None
    assignments: tuple[Assignment, ...] = ()

    def get_assignment(self, person_id: int) -> Optional[Assignment]:
        """Get the assignment of a person, if any."""
        return next(
            (a for a in self.assignments if a.person_id == person_id), None
        )


@dataclass(frozen=True)
class Schedule:
    """The planning document and the sole input of every calculation.

    Attributes:
        people: Team members, in display order.
        weeks: Ordered weeks; order defines the chronological index.
        planning_period: Start date and week count.
        holidays: Holiday days keyed by (person_id, week_id). Absent means 0.
        fr_schedule: First-responder holder per week id. Absent means
            unassigned.
        fr_capacity_days: Days consumed by first-responder duty.
        projects: Projects with their assignments.
        name: Optional document name.
    """

    people: tuple[Person, ...] = ()
    weeks: tuple[Week, ...] = ()
    planning_period: PlanningPeriod = field(
        default_factory=lambda: PlanningPeriod(start_date=date.today())
    )
    holidays: dict[HolidayKey, float] = field(default_factory=dict)
    fr_schedule: dict[str, int] = field(default_factory=dict)
    fr_capacity_days: float = 3
    projects: tuple[Project, ...] = ()
    name: str = ""

    # The holiday and FR maps are dicts, so a schedule is compared by value
    # but never hashed.
    __hash__ = None

    def get_person(self, person_id: int) -> Optional[Person]:
        return next((p for p in self.people if p.id == person_id), None)

    def get_week(self, week_id: str) -> Optional[Week]:
        return next((w for w in self.weeks if w.id == week_id), None)

    def get_project(self, project_id: int) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def holiday_days(self, person_id: int, week_id: str) -> float:
        """Get holiday days for a person in a week (0 when not recorded)."""
        return self.holidays.get((person_id, week_id), 0)

    def first_responder_for(self, week_id: str) -> Optional[int]:
        """Get the first-responder person id for a week, if assigned."""
        return self.fr_schedule.get(week_id)

    @property
    def week_ids(self) -> list[str]:
        return [w.id for w in self.weeks]

    @property
    def person_ids(self) -> list[int]:
        return [p.id for p in self.people]


def week_start_date(period: PlanningPeriod, week_index: int) -> date:
    """Get the first calendar day of the week at ``week_index``."""
    return period.start_date + timedelta(days=7 * week_index)


def week_date_range(period: PlanningPeriod, week_index: int) -> tuple[date, date]:
    """Get the (first, last) calendar days of the week at ``week_index``."""
    start = week_start_date(period, week_index)
    return start, start + timedelta(days=6)


def format_week_range(period: PlanningPeriod, week_index: int) -> str:
    """Format a week's dates for display, e.g. ``"Nov 24 - Nov 30"``."""
    start, end = week_date_range(period, week_index)
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}"
