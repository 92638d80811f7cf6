"""Validation of schedule documents.

The capacity engine tolerates inconsistent data and never raises on it.
This module reports those inconsistencies so that callers can surface
them: errors for documents that break structural rules, warnings for
states the engine handles gracefully but a planner probably wants to fix
(dangling week references, ineligible first responders, over-allocation).
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from capplanner.capacity.aggregation import over_allocations
from capplanner.capacity.calculator import availability, index_of
from capplanner.domain.models import Project, Schedule


class ValidationErrorType(Enum):
    """Types of validation errors."""

    WEEK_COUNT_MISMATCH = "week_count_mismatch"
    DUPLICATE_PERSON_ID = "duplicate_person_id"
    DUPLICATE_WEEK_ID = "duplicate_week_id"
    NEGATIVE_WORKING_DAYS = "negative_working_days"
    NEGATIVE_HOLIDAY_DAYS = "negative_holiday_days"
    NEGATIVE_FR_CAPACITY = "negative_fr_capacity"
    NEGATIVE_DAYS_PER_WEEK = "negative_days_per_week"
    UNKNOWN_FIRST_RESPONDER = "unknown_first_responder"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    person_id: Optional[int] = None
    week_id: Optional[str] = None
    project_id: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.project_id is not None:
            parts.append(f"Project {self.project_id}:")
        if self.person_id is not None:
            parts.append(f"Person {self.person_id}:")
        parts.append(self.message)
        if self.week_id is not None:
            parts.append(f"(week {self.week_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of_type(self, error_type: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.error_type == error_type]


class ScheduleValidator:
    """Validates a schedule document.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, check_over_allocation: bool = True):
        self.check_over_allocation = check_over_allocation

    def validate(self, schedule: Schedule) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The schedule to validate.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult(is_valid=True)

        self._validate_structure(schedule, result)
        self._validate_holidays(schedule, result)
        self._validate_first_responders(schedule, result)
        for project in schedule.projects:
            self._validate_project(schedule, project, result)

        if self.check_over_allocation:
            for person_id, week_id, excess in over_allocations(schedule):
                result.add_warning(
                    f"Person {person_id} is over-allocated by {excess:g} day(s) in {week_id}"
                )

        return result

    def _validate_structure(self, schedule: Schedule, result: ValidationResult) -> None:
        """Check week count, id uniqueness and non-negative settings."""
        if schedule.planning_period.number_of_weeks != len(schedule.weeks):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WEEK_COUNT_MISMATCH,
                    message=(
                        f"Planning period has {schedule.planning_period.number_of_weeks} "
                        f"weeks but {len(schedule.weeks)} are configured"
                    ),
                )
            )

        for person_id, count in Counter(schedule.person_ids).items():
            if count > 1:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_PERSON_ID,
                        message=f"Person id used {count} times",
                        person_id=person_id,
                    )
                )

        for week_id, count in Counter(schedule.week_ids).items():
            if count > 1:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_WEEK_ID,
                        message=f"Week id used {count} times",
                        week_id=week_id,
                    )
                )

        for week in schedule.weeks:
            if week.working_days < 0:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NEGATIVE_WORKING_DAYS,
                        message=f"Working days {week.working_days} is negative",
                        week_id=week.id,
                    )
                )

        if schedule.fr_capacity_days < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NEGATIVE_FR_CAPACITY,
                    message=f"First-responder capacity {schedule.fr_capacity_days} is negative",
                )
            )

    def _validate_holidays(self, schedule: Schedule, result: ValidationResult) -> None:
        week_ids = set(schedule.week_ids)
        for (person_id, week_id), days in schedule.holidays.items():
            if days < 0:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NEGATIVE_HOLIDAY_DAYS,
                        message=f"Holiday days {days} is negative",
                        person_id=person_id,
                        week_id=week_id,
                    )
                )
            if week_id not in week_ids:
                result.add_warning(
                    f"Holiday entry for person {person_id} references unknown week {week_id}"
                )

    def _validate_first_responders(self, schedule: Schedule, result: ValidationResult) -> None:
        people = set(schedule.person_ids)
        week_ids = set(schedule.week_ids)
        for week_id, person_id in schedule.fr_schedule.items():
            if person_id not in people:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_FIRST_RESPONDER,
                        message="First responder is not a member of the team",
                        person_id=person_id,
                        week_id=week_id,
                    )
                )
                continue
            if week_id not in week_ids:
                result.add_warning(f"First-responder entry references unknown week {week_id}")
                continue
            avail = availability(schedule, person_id, week_id)
            if avail < schedule.fr_capacity_days:
                result.add_warning(
                    f"Person {person_id} is first responder in {week_id} with only "
                    f"{avail:g} day(s) available (needs {schedule.fr_capacity_days:g})"
                )

    def _validate_project(
        self,
        schedule: Schedule,
        project: Project,
        result: ValidationResult,
    ) -> None:
        """Check a project's range and its assignments."""
        self._check_range(
            schedule,
            project.start_week,
            project.end_week,
            f"Project {project.id} ({project.name})",
            result,
        )

        people = set(schedule.person_ids)
        for person_id, count in Counter(a.person_id for a in project.assignments).items():
            if count > 1:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_ASSIGNMENT,
                        message=f"Person assigned {count} times",
                        person_id=person_id,
                        project_id=project.id,
                    )
                )

        for assignment in project.assignments:
            if assignment.days_per_week < 0:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NEGATIVE_DAYS_PER_WEEK,
                        message=f"Days per week {assignment.days_per_week} is negative",
                        person_id=assignment.person_id,
                        project_id=project.id,
                    )
                )
            if assignment.person_id not in people:
                result.add_warning(
                    f"Project {project.id} has an assignment for unknown person "
                    f"{assignment.person_id}"
                )
            self._check_range(
                schedule,
                assignment.start_week,
                assignment.end_week,
                f"Assignment of person {assignment.person_id} on project {project.id}",
                result,
            )

    def _check_range(
        self,
        schedule: Schedule,
        start_week: str,
        end_week: str,
        label: str,
        result: ValidationResult,
    ) -> None:
        start_idx = index_of(schedule.weeks, start_week)
        end_idx = index_of(schedule.weeks, end_week)
        if start_idx is None:
            result.add_warning(f"{label} starts in unknown week {start_week}")
        if end_idx is None:
            result.add_warning(f"{label} ends in unknown week {end_week}")
        if start_idx is not None and end_idx is not None and start_idx > end_idx:
            result.add_warning(f"{label} ends ({end_week}) before it starts ({start_week})")
