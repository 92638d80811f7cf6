"""Named editing operations on a Schedule.

Each operation returns a new Schedule and leaves its input untouched.
Cascades are explicit: deleting a person prunes their holiday and
first-responder entries, adding a person provisions zero holiday entries.
Assignments are never cascade-pruned; stale references simply stop
contributing to the calculations.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from capplanner.capacity.calculator import availability, can_be_first_responder
from capplanner.domain.models import (
    Assignment,
    Person,
    PlannerDefaults,
    Project,
    Schedule,
    Week,
)

logger = logging.getLogger(__name__)


class IneligibleFirstResponderError(ValueError):
    """Raised when a person lacks the availability for first-responder duty."""

    def __init__(self, person_id: int, week_id: str, availability: float, required: float):
        super().__init__(
            f"Person {person_id} has {availability:g} day(s) available in {week_id}; "
            f"first-responder duty needs {required:g}"
        )
        self.person_id = person_id
        self.week_id = week_id


def _require_week(schedule: Schedule, week_id: str) -> Week:
    week = schedule.get_week(week_id)
    if week is None:
        raise ValueError(f"Unknown week: {week_id}")
    return week


def _require_person(schedule: Schedule, person_id: int) -> Person:
    person = schedule.get_person(person_id)
    if person is None:
        raise ValueError(f"Unknown person: {person_id}")
    return person


def _require_project(schedule: Schedule, project_id: int) -> Project:
    project = schedule.get_project(project_id)
    if project is None:
        raise ValueError(f"Unknown project: {project_id}")
    return project


def _replace_project(schedule: Schedule, project: Project) -> Schedule:
    return replace(
        schedule,
        projects=tuple(project if p.id == project.id else p for p in schedule.projects),
    )


def next_person_id(schedule: Schedule) -> int:
    return max([0, *schedule.person_ids]) + 1


def next_project_id(schedule: Schedule) -> int:
    return max([0, *(p.id for p in schedule.projects)]) + 1


# People


def add_person(schedule: Schedule, name: Optional[str] = None) -> Schedule:
    """Add a person and provision a zero holiday entry for every week.

    The new id is one more than the highest existing id.
    """
    person_id = next_person_id(schedule)
    person = Person(id=person_id, name=name or f"Person {person_id}")

    holidays = dict(schedule.holidays)
    for week in schedule.weeks:
        holidays[(person_id, week.id)] = 0

    logger.debug("Added person %d (%s)", person_id, person.name)
    return replace(schedule, people=schedule.people + (person,), holidays=holidays)


def update_person(schedule: Schedule, person_id: int, name: str) -> Schedule:
    _require_person(schedule, person_id)
    return replace(
        schedule,
        people=tuple(
            replace(p, name=name) if p.id == person_id else p for p in schedule.people
        ),
    )


def delete_person(schedule: Schedule, person_id: int) -> Schedule:
    """Remove a person with their holiday entries and first-responder weeks.

    Project assignments that reference the person are kept.
    """
    holidays = {k: v for k, v in schedule.holidays.items() if k[0] != person_id}
    fr_schedule = {w: p for w, p in schedule.fr_schedule.items() if p != person_id}
    logger.debug("Deleted person %d", person_id)
    return replace(
        schedule,
        people=tuple(p for p in schedule.people if p.id != person_id),
        holidays=holidays,
        fr_schedule=fr_schedule,
    )


# Weeks and planning period


def update_week(
    schedule: Schedule,
    week_id: str,
    name: Optional[str] = None,
    working_days: Optional[int] = None,
) -> Schedule:
    """Rename a week or change its working days."""
    week = _require_week(schedule, week_id)
    if working_days is not None and working_days < 0:
        raise ValueError("working days must be >= 0")
    updated = replace(
        week,
        name=week.name if name is None else name,
        working_days=week.working_days if working_days is None else working_days,
    )
    return replace(
        schedule,
        weeks=tuple(updated if w.id == week_id else w for w in schedule.weeks),
    )


def set_start_date(schedule: Schedule, start_date: date) -> Schedule:
    return replace(
        schedule,
        planning_period=replace(schedule.planning_period, start_date=start_date),
    )


def set_fr_capacity_days(schedule: Schedule, days: float) -> Schedule:
    if days < 0:
        raise ValueError("first-responder capacity days must be >= 0")
    return replace(schedule, fr_capacity_days=days)


# Holidays and first responders


def set_holiday(schedule: Schedule, person_id: int, week_id: str, days: float) -> Schedule:
    """Record holiday days for a person in a week (half days allowed)."""
    if days < 0:
        raise ValueError("holiday days must be >= 0")
    holidays = dict(schedule.holidays)
    holidays[(person_id, week_id)] = days
    return replace(schedule, holidays=holidays)


def set_first_responder(
    schedule: Schedule,
    week_id: str,
    person_id: Optional[int],
    force: bool = False,
) -> Schedule:
    """Assign or clear first-responder duty for a week.

    Args:
        schedule: The schedule to edit.
        week_id: Week to assign.
        person_id: New holder, or None to leave the week unassigned.
        force: Skip the availability check.

    Raises:
        IneligibleFirstResponderError: If the person's availability is below
            the first-responder capacity days and ``force`` is not set.
    """
    fr_schedule = dict(schedule.fr_schedule)
    if person_id is None:
        fr_schedule.pop(week_id, None)
        return replace(schedule, fr_schedule=fr_schedule)

    if not force and not can_be_first_responder(schedule, person_id, week_id):
        raise IneligibleFirstResponderError(
            person_id,
            week_id,
            availability(schedule, person_id, week_id),
            schedule.fr_capacity_days,
        )
    fr_schedule[week_id] = person_id
    return replace(schedule, fr_schedule=fr_schedule)


# Projects and assignments


def add_project(
    schedule: Schedule,
    name: Optional[str] = None,
    start_week: Optional[str] = None,
    end_week: Optional[str] = None,
    notes: Optional[str] = None,
    defaults: Optional[PlannerDefaults] = None,
) -> Schedule:
    """Add a project.

    Without explicit bounds the project starts on the first week and
    covers ``defaults.project_span_weeks`` weeks (fewer if the period is
    shorter).
    """
    defaults = defaults or PlannerDefaults()
    if not schedule.weeks and (start_week is None or end_week is None):
        raise ValueError("cannot default project weeks on a schedule without weeks")

    if start_week is None:
        start_week = schedule.weeks[0].id
    if end_week is None:
        span = max(1, defaults.project_span_weeks)
        end_week = schedule.weeks[min(span, len(schedule.weeks)) - 1].id

    project = Project(
        id=next_project_id(schedule),
        name=name or f"Project {len(schedule.projects) + 1}",
        start_week=start_week,
        end_week=end_week,
        notes=notes,
    )
    logger.debug("Added project %d (%s)", project.id, project.name)
    return replace(schedule, projects=schedule.projects + (project,))


def update_project(
    schedule: Schedule,
    project_id: int,
    name: Optional[str] = None,
    start_week: Optional[str] = None,
    end_week: Optional[str] = None,
    notes: Optional[str] = None,
) -> Schedule:
    """Patch a project's fields; None leaves a field unchanged.

    Changing the project range does not move its assignments' ranges.
    """
    project = _require_project(schedule, project_id)
    updated = replace(
        project,
        name=project.name if name is None else name,
        start_week=project.start_week if start_week is None else start_week,
        end_week=project.end_week if end_week is None else end_week,
        notes=project.notes if notes is None else notes,
    )
    return _replace_project(schedule, updated)


def delete_project(schedule: Schedule, project_id: int) -> Schedule:
    return replace(
        schedule,
        projects=tuple(p for p in schedule.projects if p.id != project_id),
    )


def add_assignment(
    schedule: Schedule,
    project_id: int,
    person_id: int,
    days_per_week: Optional[float] = None,
    start_week: Optional[str] = None,
    end_week: Optional[str] = None,
    defaults: Optional[PlannerDefaults] = None,
) -> Schedule:
    """Assign a person to a project.

    The assignment range defaults to the project's range. A person already
    assigned to the project is left as is.
    """
    defaults = defaults or PlannerDefaults()
    project = _require_project(schedule, project_id)
    _require_person(schedule, person_id)
    if project.get_assignment(person_id) is not None:
        return schedule

    days = defaults.days_per_week if days_per_week is None else days_per_week
    if days < 0:
        raise ValueError("days per week must be >= 0")

    assignment = Assignment(
        person_id=person_id,
        days_per_week=days,
        start_week=start_week or project.start_week,
        end_week=end_week or project.end_week,
    )
    return _replace_project(
        schedule, replace(project, assignments=project.assignments + (assignment,))
    )


def update_assignment(
    schedule: Schedule,
    project_id: int,
    person_id: int,
    days_per_week: Optional[float] = None,
    start_week: Optional[str] = None,
    end_week: Optional[str] = None,
) -> Schedule:
    project = _require_project(schedule, project_id)
    current = project.get_assignment(person_id)
    if current is None:
        raise ValueError(f"Person {person_id} is not assigned to project {project_id}")
    if days_per_week is not None and days_per_week < 0:
        raise ValueError("days per week must be >= 0")

    updated = replace(
        current,
        days_per_week=current.days_per_week if days_per_week is None else days_per_week,
        start_week=current.start_week if start_week is None else start_week,
        end_week=current.end_week if end_week is None else end_week,
    )
    assignments = tuple(
        updated if a.person_id == person_id else a for a in project.assignments
    )
    return _replace_project(schedule, replace(project, assignments=assignments))


def remove_assignment(schedule: Schedule, project_id: int, person_id: int) -> Schedule:
    project = _require_project(schedule, project_id)
    assignments = tuple(a for a in project.assignments if a.person_id != person_id)
    return _replace_project(schedule, replace(project, assignments=assignments))
