"""Plain-text capacity report.

A terminal-friendly summary of a schedule:
- Planning period and range statistics
- Per-person totals with over-allocation flags
- Project planned vs. actual capacity
- First-responder roster
"""

from pathlib import Path
from typing import Optional, Union

from capplanner.capacity.aggregation import (
    person_summary,
    project_capacity,
    range_stats,
    team_average_availability,
)
from capplanner.domain.models import Schedule, format_week_range


class TextReportGenerator:
    """Generates a plain-text capacity report."""

    def generate(
        self,
        schedule: Schedule,
        output_path: Union[str, Path],
        start_week: Optional[str] = None,
        end_week: Optional[str] = None,
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(schedule, start_week, end_week)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(
        self,
        schedule: Schedule,
        start_week: Optional[str] = None,
        end_week: Optional[str] = None,
    ) -> str:
        lines = []
        lines.extend(self._header(schedule))
        lines.extend(self._range_section(schedule, start_week, end_week))
        lines.extend(self._people_section(schedule))
        lines.extend(self._project_section(schedule))
        lines.extend(self._fr_section(schedule))
        return "\n".join(lines) + "\n"

    def _header(self, schedule: Schedule) -> list[str]:
        period = schedule.planning_period
        title = schedule.name or "Capacity Plan"
        return [
            "=" * 72,
            f"{title.upper()} - {period.start_date.strftime('%d %B %Y')} "
            f"({period.number_of_weeks} weeks)",
            "=" * 72,
            f"People: {len(schedule.people)}   Projects: {len(schedule.projects)}   "
            f"FR capacity: {schedule.fr_capacity_days:g} day(s)",
            "",
        ]

    def _range_section(
        self,
        schedule: Schedule,
        start_week: Optional[str],
        end_week: Optional[str],
    ) -> list[str]:
        stats = range_stats(schedule, start_week, end_week)
        first = start_week or (schedule.weeks[0].id if schedule.weeks else "-")
        last = end_week or (schedule.weeks[-1].id if schedule.weeks else "-")
        lines = [
            "-" * 72,
            f"RANGE {first} - {last} ({stats.week_count} weeks)",
            "-" * 72,
            f"  Total availability:   {stats.total_availability:8.1f} d",
            f"  Total capacity:       {stats.total_capacity:8.1f} d",
            f"  Total allocated:      {stats.total_allocated:8.1f} d",
            f"  Avg availability/wk:  {stats.avg_availability_per_week:8.1f} d",
            f"  Avg capacity/wk:      {stats.avg_capacity_per_week:8.1f} d",
            f"  Utilization:          {stats.utilization_percent:8.0f} %",
            "",
            f"  {'Week':<10} {'Dates':<18} {'Days':>5} {'Team avg':>9}",
        ]
        for idx, week in enumerate(schedule.weeks):
            lines.append(
                f"  {week.name[:10]:<10} "
                f"{format_week_range(schedule.planning_period, idx):<18} "
                f"{week.working_days:>5} "
                f"{team_average_availability(schedule, week.id):>9.1f}"
            )
        lines.append("")
        return lines

    def _people_section(self, schedule: Schedule) -> list[str]:
        lines = [
            "-" * 72,
            "PEOPLE",
            "-" * 72,
            f"  {'Name':<20} {'Avail':>7} {'Cap':>7} {'Alloc':>7} {'Util':>6}  Flags",
        ]
        for person in schedule.people:
            summary = person_summary(schedule, person.id)
            flags = []
            if summary.fr_weeks:
                flags.append(f"FR {','.join(summary.fr_weeks)}")
            if summary.is_over_allocated:
                flags.append(f"OVER {','.join(summary.over_allocated_weeks)}")
            lines.append(
                f"  {person.name[:20]:<20} "
                f"{summary.total_availability:>7.1f} "
                f"{summary.total_capacity:>7.1f} "
                f"{summary.total_allocated:>7.1f} "
                f"{summary.utilization_percent:>5.0f}%  "
                f"{'; '.join(flags)}"
            )
        lines.append("")
        return lines

    def _project_section(self, schedule: Schedule) -> list[str]:
        lines = ["-" * 72, "PROJECTS", "-" * 72]
        if not schedule.projects:
            lines.extend(["  (none)", ""])
            return lines
        for project in schedule.projects:
            stats = project_capacity(schedule, project)
            ratio = f" ({stats.utilization_percent:.0f}%)" if stats.planned > 0 else ""
            lines.append(
                f"  {project.name} [{project.start_week} - {project.end_week}]: "
                f"{stats.actual:.0f} / {stats.planned:.0f} days{ratio}"
            )
            for assignment in project.assignments:
                person = schedule.get_person(assignment.person_id)
                name = person.name if person else f"#{assignment.person_id}"
                lines.append(
                    f"      {name}: {assignment.days_per_week:g}d/week "
                    f"{assignment.start_week} - {assignment.end_week}"
                )
            if project.notes:
                lines.append(f"      Notes: {project.notes}")
        lines.append("")
        return lines

    def _fr_section(self, schedule: Schedule) -> list[str]:
        lines = ["-" * 72, "FIRST RESPONDERS", "-" * 72]
        for week in schedule.weeks:
            person_id = schedule.first_responder_for(week.id)
            person = schedule.get_person(person_id) if person_id is not None else None
            if person_id is None:
                holder = "(unassigned)"
            else:
                holder = person.name if person else f"#{person_id}"
            lines.append(f"  {week.name[:10]:<10} {holder}")
        return lines
