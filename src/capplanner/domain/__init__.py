"""Domain models for capacity planning."""

from capplanner.domain.models import (
    Assignment,
    HolidayKey,
    Person,
    PlannerDefaults,
    PlanningPeriod,
    Project,
    Schedule,
    Week,
    format_week_range,
    week_date_range,
    week_start_date,
)

__all__ = [
    # Models
    "Assignment",
    "HolidayKey",
    "Person",
    "PlanningPeriod",
    "Project",
    "Schedule",
    "Week",
    # Configuration
    "PlannerDefaults",
    # Calendar helpers
    "format_week_range",
    "week_date_range",
    "week_start_date",
]
