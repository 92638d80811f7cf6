"""Per-person, per-week capacity calculations.

Every function here is a pure function of a Schedule plus query
parameters. Unknown week or person references never raise; they resolve
to zero so that stale references (a deleted week, a removed person) simply
stop contributing.
"""

from typing import Optional, Sequence

from capplanner.domain.models import Assignment, Project, Schedule, Week


def index_of(weeks: Sequence[Week], week_id: str) -> Optional[int]:
    """Get the ordinal position of a week, or None if it is not in the list."""
    for idx, week in enumerate(weeks):
        if week.id == week_id:
            return idx
    return None


def week_slice(
    weeks: Sequence[Week],
    start_week_id: str,
    end_week_id: str,
) -> list[Week]:
    """Get the inclusive run of weeks between two week ids.

    Returns an empty list when either bound cannot be resolved or the
    range is inverted.
    """
    start_idx = index_of(weeks, start_week_id)
    end_idx = index_of(weeks, end_week_id)
    if start_idx is None or end_idx is None or start_idx > end_idx:
        return []
    return list(weeks[start_idx : end_idx + 1])


def assignment_covers(
    weeks: Sequence[Week],
    assignment: Assignment,
    week_id: str,
) -> bool:
    """Check whether a week falls inside an assignment's own range.

    All three week ids must resolve; a dangling start, end or target week
    means the assignment is not active.
    """
    week_idx = index_of(weeks, week_id)
    start_idx = index_of(weeks, assignment.start_week)
    end_idx = index_of(weeks, assignment.end_week)
    if week_idx is None or start_idx is None or end_idx is None:
        return False
    return start_idx <= week_idx <= end_idx


def availability(schedule: Schedule, person_id: int, week_id: str) -> float:
    """Working days minus holiday days, floored at zero."""
    week = schedule.get_week(week_id)
    if week is None:
        return 0
    return max(0, week.working_days - schedule.holiday_days(person_id, week_id))


def is_first_responder(schedule: Schedule, person_id: int, week_id: str) -> bool:
    return schedule.fr_schedule.get(week_id) == person_id


def can_be_first_responder(schedule: Schedule, person_id: int, week_id: str) -> bool:
    """Advisory check used before assigning first-responder duty.

    Capacity calculations do not enforce this; an ineligible holder simply
    ends up with zero capacity.
    """
    return availability(schedule, person_id, week_id) >= schedule.fr_capacity_days


def capacity(schedule: Schedule, person_id: int, week_id: str) -> float:
    """Availability less first-responder duty, floored at zero."""
    deduction = (
        schedule.fr_capacity_days
        if is_first_responder(schedule, person_id, week_id)
        else 0
    )
    return max(0, availability(schedule, person_id, week_id) - deduction)


def active_assignments(
    schedule: Schedule,
    person_id: int,
    week_id: str,
) -> list[tuple[Project, Assignment]]:
    """Get (project, assignment) pairs of a person active in a week.

    This ignores first-responder duty; it lists what was requested.
    """
    active = []
    for project in schedule.projects:
        assignment = project.get_assignment(person_id)
        if assignment is None:
            continue
        if assignment_covers(schedule.weeks, assignment, week_id):
            active.append((project, assignment))
    return active


def requested_days(schedule: Schedule, person_id: int, week_id: str) -> float:
    """Sum of days per week over a person's active assignments, uncapped."""
    return sum(
        assignment.days_per_week
        for _, assignment in active_assignments(schedule, person_id, week_id)
    )


def allocated(schedule: Schedule, person_id: int, week_id: str) -> float:
    """Days committed to project work in a week.

    A first responder does no project work that week. Otherwise the
    requested days of all active assignments are summed and capped at the
    person's availability.
    """
    if is_first_responder(schedule, person_id, week_id):
        return 0
    total = requested_days(schedule, person_id, week_id)
    return min(total, availability(schedule, person_id, week_id))
