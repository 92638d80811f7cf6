"""JSON serialization for Schedule documents.

Documents on the wire use camelCase field names (``planningPeriod``,
``weekConfig``, ``frSchedule``...). Storage rows use snake_case
(``planning_period``, ``week_config``, ``fr_schedule``...). Both shapes are
accepted on input; in memory the Schedule always uses the domain model.

Holiday keys are ``"<personId>-<weekId>"`` strings on the wire and
``(person_id, week_id)`` tuples in memory.
"""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Union

from capplanner.domain.models import (
    Assignment,
    HolidayKey,
    Person,
    PlannerDefaults,
    PlanningPeriod,
    Project,
    Schedule,
    Week,
)

logger = logging.getLogger(__name__)


class ScheduleFormatError(ValueError):
    """Raised when a schedule document is structurally invalid."""


def _pick(obj: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Get the first of several alternative keys set in ``obj``.

    None and empty strings count as unset.
    """
    for key in keys:
        if obj.get(key) not in (None, ""):
            return obj[key]
    return default


def _require(obj: dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ScheduleFormatError(f"Missing required key '{key}' in {ctx}")
    return obj[key]


def _as_list(obj: Any, ctx: str) -> list[Any]:
    if not isinstance(obj, list):
        raise ScheduleFormatError(
            f"Expected a JSON array in {ctx}, got {type(obj).__name__}"
        )
    return obj


def _as_dict(obj: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ScheduleFormatError(
            f"Expected a JSON object in {ctx}, got {type(obj).__name__}"
        )
    return obj


def _as_number(value: Any, ctx: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ScheduleFormatError(f"Expected a number in {ctx}, got {value!r}") from None
    return int(number) if number.is_integer() else number


def _as_int(value: Any, ctx: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ScheduleFormatError(f"Expected an integer in {ctx}, got {value!r}") from None


def _non_negative(number: Any, ctx: str) -> Any:
    if number < 0:
        raise ScheduleFormatError(f"Expected a non-negative value in {ctx}, got {number!r}")
    return number


def holiday_key_to_str(key: HolidayKey) -> str:
    person_id, week_id = key
    return f"{person_id}-{week_id}"


def holiday_key_from_str(raw: str) -> HolidayKey:
    """Parse ``"<personId>-<weekId>"``.

    Person ids are integers, so the split happens on the first ``-`` and
    week ids may themselves contain dashes.
    """
    person_part, sep, week_id = raw.partition("-")
    if not sep or not week_id:
        raise ScheduleFormatError(f"Invalid holiday key: {raw!r}")
    return _as_int(person_part, f"holidays[{raw!r}]"), week_id


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        # ISO timestamps ("2025-11-24T00:00:00.000Z") keep only the date part.
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ScheduleFormatError(f"Invalid startDate: {value!r}") from None


def _assignment_from_dict(raw: Any, project: dict[str, Any], ctx: str) -> Assignment:
    raw = _as_dict(raw, ctx)
    return Assignment(
        person_id=_as_int(_pick(raw, "personId", "person_id"), f"{ctx}.personId"),
        days_per_week=_non_negative(
            _as_number(
                _pick(raw, "daysPerWeek", "days_per_week", default=0), f"{ctx}.daysPerWeek"
            ),
            f"{ctx}.daysPerWeek",
        ),
        start_week=str(
            _pick(raw, "startWeek", "start_week", default=_pick(project, "startWeek", "start_week"))
        ),
        end_week=str(
            _pick(raw, "endWeek", "end_week", default=_pick(project, "endWeek", "end_week"))
        ),
    )


def _project_from_dict(raw: Any, ctx: str) -> Project:
    raw = _as_dict(raw, ctx)
    start_week = _pick(raw, "startWeek", "start_week")
    end_week = _pick(raw, "endWeek", "end_week")
    if start_week is None or end_week is None:
        raise ScheduleFormatError(f"Missing startWeek/endWeek in {ctx}")
    assignments_raw = _as_list(raw.get("assignments", []), f"{ctx}.assignments")
    return Project(
        id=_as_int(_require(raw, "id", ctx), f"{ctx}.id"),
        name=str(raw.get("name", "")),
        start_week=str(start_week),
        end_week=str(end_week),
        notes=raw.get("notes") or None,
        assignments=tuple(
            _assignment_from_dict(a, raw, f"{ctx}.assignments[{i}]")
            for i, a in enumerate(assignments_raw)
        ),
    )


def schedule_from_dict(data: Any, defaults: PlannerDefaults = PlannerDefaults()) -> Schedule:
    """Build a Schedule from a camelCase or snake_case document.

    Args:
        data: Parsed JSON document.
        defaults: Defaults for fields the document omits.

    Returns:
        The decoded Schedule.

    Raises:
        ScheduleFormatError: If the document is structurally invalid or
            holds a negative day or week count.
    """
    data = _as_dict(data, "root")

    weeks_raw = _as_list(_pick(data, "weekConfig", "weeks", "week_config", default=[]), "weekConfig")
    weeks = tuple(
        Week(
            id=str(_require(_as_dict(w, f"weekConfig[{i}]"), "id", f"weekConfig[{i}]")),
            name=str(w.get("name", "")),
            working_days=_non_negative(
                _as_int(
                    _pick(w, "workingDays", "working_days", default=defaults.working_days),
                    f"weekConfig[{i}].workingDays",
                ),
                f"weekConfig[{i}].workingDays",
            ),
        )
        for i, w in enumerate(weeks_raw)
    )

    people_raw = _as_list(data.get("people", []), "people")
    people = tuple(
        Person(
            id=_as_int(_require(_as_dict(p, f"people[{i}]"), "id", f"people[{i}]"), f"people[{i}].id"),
            name=str(p.get("name", "")),
        )
        for i, p in enumerate(people_raw)
    )

    period_raw = _as_dict(_pick(data, "planningPeriod", "planning_period", default={}), "planningPeriod")
    start_raw = _pick(period_raw, "startDate", "start_date")
    planning_period = PlanningPeriod(
        start_date=_parse_date(start_raw) if start_raw is not None else date.today(),
        number_of_weeks=_non_negative(
            _as_int(
                _pick(period_raw, "numberOfWeeks", "number_of_weeks", default=len(weeks)),
                "planningPeriod.numberOfWeeks",
            ),
            "planningPeriod.numberOfWeeks",
        ),
    )

    holidays_raw = _as_dict(data.get("holidays", {}), "holidays")
    holidays = {
        holiday_key_from_str(key): _non_negative(
            _as_number(days, f"holidays[{key!r}]"), f"holidays[{key!r}]"
        )
        for key, days in holidays_raw.items()
    }

    fr_raw = _as_dict(_pick(data, "frSchedule", "fr_schedule", default={}), "frSchedule")
    fr_schedule = {}
    for week_id, person_id in fr_raw.items():
        # 0 and null both mean "unassigned"
        if person_id in (None, 0, "", "0"):
            continue
        fr_schedule[str(week_id)] = _as_int(person_id, f"frSchedule[{week_id!r}]")

    projects_raw = _as_list(data.get("projects", []), "projects")
    projects = tuple(
        _project_from_dict(p, f"projects[{i}]") for i, p in enumerate(projects_raw)
    )

    return Schedule(
        people=people,
        weeks=weeks,
        planning_period=planning_period,
        holidays=holidays,
        fr_schedule=fr_schedule,
        fr_capacity_days=_non_negative(
            _as_number(
                _pick(data, "frCapacityDays", "fr_capacity_days", default=defaults.fr_capacity_days),
                "frCapacityDays",
            ),
            "frCapacityDays",
        ),
        projects=projects,
        name=str(data.get("name", "") or ""),
    )


def _project_to_dict(project: Project) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": project.id,
        "name": project.name,
        "startWeek": project.start_week,
        "endWeek": project.end_week,
        "assignments": [
            {
                "personId": a.person_id,
                "daysPerWeek": a.days_per_week,
                "startWeek": a.start_week,
                "endWeek": a.end_week,
            }
            for a in project.assignments
        ],
    }
    if project.notes:
        result["notes"] = project.notes
    return result


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    """Convert a Schedule to the camelCase document shape."""
    return {
        "name": schedule.name,
        "planningPeriod": {
            "startDate": schedule.planning_period.start_date.isoformat(),
            "numberOfWeeks": schedule.planning_period.number_of_weeks,
        },
        "weekConfig": [
            {"id": w.id, "name": w.name, "workingDays": w.working_days}
            for w in schedule.weeks
        ],
        "people": [{"id": p.id, "name": p.name} for p in schedule.people],
        "holidays": {
            holiday_key_to_str(key): days for key, days in schedule.holidays.items()
        },
        "frSchedule": dict(schedule.fr_schedule),
        "frCapacityDays": schedule.fr_capacity_days,
        "projects": [_project_to_dict(p) for p in schedule.projects],
    }


def schedule_to_storage_row(schedule: Schedule) -> dict[str, Any]:
    """Convert a Schedule to the snake_case shape used by storage rows."""
    doc = schedule_to_dict(schedule)
    return {
        "name": doc["name"],
        "planning_period": doc["planningPeriod"],
        "week_config": doc["weekConfig"],
        "people": doc["people"],
        "holidays": doc["holidays"],
        "fr_schedule": doc["frSchedule"],
        "fr_capacity_days": doc["frCapacityDays"],
        "projects": doc["projects"],
    }


def dumps_schedule(schedule: Schedule, indent: int = 2) -> str:
    return json.dumps(schedule_to_dict(schedule), ensure_ascii=False, indent=indent)


def loads_schedule(text: str) -> Schedule:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ScheduleFormatError(f"Invalid JSON: {e}") from e
    return schedule_from_dict(raw)


def load_schedule(path: Union[str, Path]) -> Schedule:
    """Load a Schedule from a JSON file."""
    schedule = loads_schedule(Path(path).read_text(encoding="utf-8"))
    logger.debug(
        "Loaded schedule from %s: %d people, %d weeks, %d projects",
        path,
        len(schedule.people),
        len(schedule.weeks),
        len(schedule.projects),
    )
    return schedule


def save_schedule(schedule: Schedule, path: Union[str, Path]) -> None:
    """Save a Schedule as JSON, creating parent directories if needed."""
    doc = schedule_to_dict(schedule)
    doc["exportedAt"] = datetime.now(timezone.utc).isoformat()
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved schedule to %s", p)
