"""Week-range resizing.

Changing the number of planning weeks is the one operation that has to
migrate dependent data: holiday and first-responder entries are keyed by
week id and must follow the week list. Weeks are only ever appended to or
removed from the tail.
"""

import logging
from dataclasses import replace
from typing import Optional

from capplanner.domain.models import (
    Assignment,
    PlannerDefaults,
    Project,
    Schedule,
    Week,
)

logger = logging.getLogger(__name__)


def resize(
    schedule: Schedule,
    new_number_of_weeks: int,
    defaults: Optional[PlannerDefaults] = None,
    clamp_ranges: bool = False,
) -> Schedule:
    """Grow or shrink the week list of a schedule.

    Growing appends weeks with synthesized ids and provisions a zero
    holiday entry for every person in each new week. Shrinking drops tail
    weeks together with their holiday and first-responder entries.

    Project and assignment ranges are left alone by default, so references
    to dropped weeks dangle and contribute nothing. With ``clamp_ranges``
    they are clamped to the retained weeks instead (see
    :func:`clamp_dangling_ranges`).

    Args:
        schedule: Schedule to resize. Not modified.
        new_number_of_weeks: Target week count.
        defaults: Defaults for newly appended weeks.
        clamp_ranges: Clamp project/assignment ranges after shrinking.

    Returns:
        A new Schedule, or the input itself when the count is unchanged.

    Raises:
        ValueError: If ``new_number_of_weeks`` is negative.
    """
    if new_number_of_weeks < 0:
        raise ValueError("number of weeks must be >= 0")

    defaults = defaults or PlannerDefaults()
    old_number = len(schedule.weeks)

    if new_number_of_weeks > old_number:
        return _grow(schedule, new_number_of_weeks, defaults)
    if new_number_of_weeks < old_number:
        shrunk = _shrink(schedule, new_number_of_weeks)
        if clamp_ranges:
            dropped = set(schedule.week_ids[new_number_of_weeks:])
            shrunk = clamp_dangling_ranges(shrunk, dropped)
        return shrunk
    return schedule


def _grow(schedule: Schedule, new_number: int, defaults: PlannerDefaults) -> Schedule:
    used_ids = set(schedule.week_ids)
    new_weeks = []
    n = len(schedule.weeks)
    while len(schedule.weeks) + len(new_weeks) < new_number:
        n += 1
        week_id = f"{defaults.week_id_prefix}{n}"
        if week_id in used_ids:
            continue
        used_ids.add(week_id)
        new_weeks.append(
            Week(
                id=week_id,
                name=f"{defaults.week_name_prefix}{n}",
                working_days=defaults.working_days,
            )
        )

    holidays = dict(schedule.holidays)
    for person in schedule.people:
        for week in new_weeks:
            holidays[(person.id, week.id)] = 0

    logger.debug(
        "Grew schedule from %d to %d weeks (added %s)",
        len(schedule.weeks),
        new_number,
        ", ".join(w.id for w in new_weeks),
    )
    return replace(
        schedule,
        weeks=schedule.weeks + tuple(new_weeks),
        planning_period=replace(schedule.planning_period, number_of_weeks=new_number),
        holidays=holidays,
    )


def _shrink(schedule: Schedule, new_number: int) -> Schedule:
    kept = schedule.weeks[:new_number]
    dropped = {w.id for w in schedule.weeks[new_number:]}

    holidays = {
        key: days for key, days in schedule.holidays.items() if key[1] not in dropped
    }
    fr_schedule = {
        week_id: person_id
        for week_id, person_id in schedule.fr_schedule.items()
        if week_id not in dropped
    }

    logger.debug(
        "Shrank schedule from %d to %d weeks (dropped %s)",
        len(schedule.weeks),
        new_number,
        ", ".join(sorted(dropped)),
    )
    return replace(
        schedule,
        weeks=kept,
        planning_period=replace(schedule.planning_period, number_of_weeks=new_number),
        holidays=holidays,
        fr_schedule=fr_schedule,
    )


def clamp_dangling_ranges(schedule: Schedule, dropped_week_ids: set[str]) -> Schedule:
    """Clamp project and assignment ranges that reference dropped weeks.

    An end week that was dropped becomes the last remaining week. An
    assignment or project whose start week was dropped lies entirely past
    the new end and is removed.
    """
    last_week_id = schedule.weeks[-1].id if schedule.weeks else None

    projects = []
    for project in schedule.projects:
        if project.start_week in dropped_week_ids or last_week_id is None:
            logger.debug("Removing project %s outside the planning range", project.id)
            continue
        projects.append(_clamp_project(project, dropped_week_ids, last_week_id))
    return replace(schedule, projects=tuple(projects))


def _clamp_project(project: Project, dropped: set[str], last_week_id: str) -> Project:
    assignments: list[Assignment] = []
    for assignment in project.assignments:
        if assignment.start_week in dropped:
            continue
        if assignment.end_week in dropped:
            assignment = replace(assignment, end_week=last_week_id)
        assignments.append(assignment)

    end_week = last_week_id if project.end_week in dropped else project.end_week
    return replace(project, end_week=end_week, assignments=tuple(assignments))
