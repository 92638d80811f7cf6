"""Capacity engine: pure calculations over a Schedule, plus resizing."""

from capplanner.capacity.aggregation import (
    PersonSummary,
    PersonWeek,
    ProjectCapacity,
    RangeStats,
    all_project_capacity,
    over_allocations,
    person_average_availability,
    person_summary,
    person_week_breakdown,
    project_capacity,
    range_stats,
    team_average_availability,
)
from capplanner.capacity.calculator import (
    active_assignments,
    allocated,
    assignment_covers,
    availability,
    can_be_first_responder,
    capacity,
    index_of,
    is_first_responder,
    requested_days,
    week_slice,
)
from capplanner.capacity.resizer import clamp_dangling_ranges, resize

__all__ = [
    # Per-person, per-week
    "active_assignments",
    "allocated",
    "assignment_covers",
    "availability",
    "can_be_first_responder",
    "capacity",
    "index_of",
    "is_first_responder",
    "requested_days",
    "week_slice",
    # Aggregation
    "PersonSummary",
    "PersonWeek",
    "ProjectCapacity",
    "RangeStats",
    "all_project_capacity",
    "over_allocations",
    "person_average_availability",
    "person_summary",
    "person_week_breakdown",
    "project_capacity",
    "range_stats",
    "team_average_availability",
    # Resizing
    "clamp_dangling_ranges",
    "resize",
]
