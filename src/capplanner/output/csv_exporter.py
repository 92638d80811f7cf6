"""CSV export of capacity figures.

Produces two tables: one row per person per week, and one row per project
with planned vs. actual capacity. Numbers are written with one decimal.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Union

from capplanner.capacity.aggregation import person_week_breakdown, project_capacity
from capplanner.domain.models import Schedule, format_week_range

logger = logging.getLogger(__name__)

PERSON_WEEK_HEADER = [
    "Person",
    "Week",
    "Dates",
    "Working Days",
    "Holiday Days",
    "Availability",
    "First Responder",
    "Capacity",
    "Allocated",
    "Remaining",
    "Projects",
]

PROJECT_HEADER = ["Project", "Start", "End", "Planned", "Actual", "Utilization %"]


def _fmt(value: float) -> str:
    return f"{value:.1f}"


class CSVExporter:
    """Exports a schedule's capacity figures as CSV.

    Example:
        >>> exporter = CSVExporter()
        >>> exporter.generate(schedule, "capacity.csv")
    """

    def generate(self, schedule: Schedule, output_path: Union[str, Path]) -> str:
        """Write both tables to a file, separated by a blank line.

        Returns:
            The generated CSV content.
        """
        content = self.generate_to_string(schedule)
        Path(output_path).write_text(content, encoding="utf-8", newline="")
        logger.info("Wrote CSV export to %s", output_path)
        return content

    def generate_to_string(self, schedule: Schedule) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerows(self.person_week_rows(schedule))
        writer.writerow([])
        writer.writerows(self.project_rows(schedule))
        return buffer.getvalue()

    def person_week_rows(self, schedule: Schedule) -> list[list[str]]:
        rows = [PERSON_WEEK_HEADER]
        week_index = {w.id: i for i, w in enumerate(schedule.weeks)}
        for person in schedule.people:
            for row in person_week_breakdown(schedule, person.id):
                week = schedule.weeks[week_index[row.week_id]]
                rows.append([
                    person.name,
                    week.name,
                    format_week_range(schedule.planning_period, week_index[row.week_id]),
                    str(week.working_days),
                    _fmt(schedule.holiday_days(person.id, week.id)),
                    _fmt(row.availability),
                    "yes" if row.is_first_responder else "",
                    _fmt(row.capacity),
                    _fmt(row.allocated),
                    _fmt(row.remaining),
                    "; ".join(row.project_names),
                ])
        return rows

    def project_rows(self, schedule: Schedule) -> list[list[str]]:
        rows = [PROJECT_HEADER]
        for project in schedule.projects:
            stats = project_capacity(schedule, project)
            rows.append([
                project.name,
                project.start_week,
                project.end_week,
                _fmt(stats.planned),
                _fmt(stats.actual),
                _fmt(stats.utilization_percent),
            ])
        return rows
