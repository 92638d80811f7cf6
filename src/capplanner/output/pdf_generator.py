"""PDF generation for capacity plans.

This module creates printable PDF reports showing:
- A person x week grid of allocated vs. capacity days
- First-responder weeks and over-allocation highlighted
- A summary page with range statistics and project capacity
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from capplanner.capacity.aggregation import (
    person_week_breakdown,
    project_capacity,
    range_stats,
)
from capplanner.domain.models import Schedule, format_week_range

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "free": (0.85, 0.95, 0.85),  # Light green
    "busy": (0.95, 0.95, 0.80),  # Light yellow
    "over": (0.98, 0.75, 0.75),  # Light red
    "fr": (0.75, 0.82, 0.98),  # Light blue
    "empty": (0.95, 0.95, 0.95),  # Light gray
    "planned": (0.6, 0.6, 0.6),  # Gray
    "actual": (0.4, 0.6, 0.8),  # Blue
}


class PDFGenerator:
    """Generates printable PDF capacity reports.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(schedule, "capacity.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        weeks_per_page: int = 8,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.weeks_per_page = weeks_per_page

    def generate(
        self,
        schedule: Schedule,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the PDF report and save it to a file.

        Args:
            schedule: The schedule to render.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw(c, schedule, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: Schedule,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the PDF report and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw(c, schedule, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, schedule: Schedule, include_summary: bool) -> None:
        self._draw_grid_pages(c, schedule)
        if include_summary:
            self._draw_summary_page(c, schedule)

    def _draw_grid_pages(self, c, schedule: Schedule) -> None:
        """Draw person x week grid pages, paging over both people and weeks."""
        row_height = 24
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height) - 1)

        name_width = 130
        grid_left = self.margin + name_width
        grid_width = self.page_width - self.margin - grid_left

        weeks = list(enumerate(schedule.weeks))
        breakdowns = {p.id: person_week_breakdown(schedule, p.id) for p in schedule.people}
        people = list(schedule.people)

        week_chunks = [
            weeks[i : i + self.weeks_per_page]
            for i in range(0, len(weeks), self.weeks_per_page)
        ] or [[]]
        people_chunks = [
            people[i : i + rows_per_page] for i in range(0, len(people), rows_per_page)
        ] or [[]]
        total_pages = len(week_chunks) * len(people_chunks)

        page_num = 0
        for week_chunk in week_chunks:
            col_width = grid_width / max(1, len(week_chunk))
            for people_chunk in people_chunks:
                page_num += 1
                self._draw_header(c, schedule)

                # Week headers
                y = self.page_height - self.margin - header_height
                c.setFont("Helvetica-Bold", 8)
                for col, (idx, week) in enumerate(week_chunk):
                    x = grid_left + col * col_width
                    c.drawCentredString(x + col_width / 2, y + 8, week.name)
                    c.setFont("Helvetica", 6)
                    c.drawCentredString(
                        x + col_width / 2, y, format_week_range(schedule.planning_period, idx)
                    )
                    c.setFont("Helvetica-Bold", 8)

                # Person rows
                for person in people_chunk:
                    y -= row_height
                    c.setFillColorRGB(0, 0, 0)
                    c.setFont("Helvetica", 9)
                    c.drawString(self.margin, y + row_height / 2 - 6, person.name[:22])
                    rows = breakdowns[person.id]
                    for col, (idx, _week) in enumerate(week_chunk):
                        self._draw_cell(
                            c,
                            rows[idx],
                            grid_left + col * col_width,
                            y,
                            col_width - 2,
                            row_height - 4,
                        )

                self._draw_legend(c, self.margin, self.margin + 10)

                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 9)
                c.drawCentredString(
                    self.page_width / 2,
                    self.margin - 10,
                    f"Page {page_num} of {total_pages}",
                )
                c.showPage()

    def _draw_header(self, c, schedule: Schedule) -> None:
        """Draw page header with plan name and period."""
        period = schedule.planning_period
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"{schedule.name or 'Capacity Plan'} - {period.start_date.strftime('%B %d, %Y')}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"{period.number_of_weeks} weeks, {len(schedule.people)} people, "
            f"{len(schedule.projects)} projects",
        )

    def _draw_cell(self, c, row, x: float, y: float, width: float, height: float) -> None:
        """Draw one person-week cell as allocated/capacity."""
        if row.is_over_allocated:
            color = COLORS["over"]
        elif row.is_first_responder:
            color = COLORS["fr"]
        elif row.capacity <= 0:
            color = COLORS["empty"]
        elif row.allocated >= row.capacity:
            color = COLORS["busy"]
        else:
            color = COLORS["free"]

        c.setFillColorRGB(*color)
        c.rect(x, y, width, height, fill=1, stroke=0)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 8)
        label = f"{row.allocated:.1f}/{row.capacity:.1f}"
        if row.is_first_responder:
            label += " FR"
        c.drawCentredString(x + width / 2, y + height / 2 - 3, label)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            ("free", "Spare capacity"),
            ("busy", "Fully allocated"),
            ("over", "Over-allocated"),
            ("fr", "First responder"),
            ("empty", "Unavailable"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45

        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 90

    def _draw_summary_page(self, c, schedule: Schedule) -> None:
        """Draw summary page with range statistics and project capacity."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Summary - {schedule.name or 'Capacity Plan'}",
        )

        y = self.page_height - self.margin - 60

        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 20

        stats = range_stats(schedule)
        c.setFont("Helvetica", 10)
        for line in [
            f"Total Availability: {stats.total_availability:.1f} days",
            f"Total Capacity: {stats.total_capacity:.1f} days",
            f"Total Allocated: {stats.total_allocated:.1f} days",
            f"Average Capacity per Week: {stats.avg_capacity_per_week:.1f} days",
            f"Utilization: {stats.utilization_percent:.0f}%",
        ]:
            c.drawString(self.margin + 20, y, line)
            y -= 15

        y -= 20
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Projects (actual vs. planned days)")
        y -= 20

        capacities = [(p, project_capacity(schedule, p)) for p in schedule.projects]
        max_planned = max((s.planned for _, s in capacities), default=0) or 1
        bar_left = self.margin + 180
        bar_width = 300

        c.setFont("Helvetica", 9)
        for project, project_stats in capacities:
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 20, y, project.name[:28])

            planned_w = project_stats.planned / max_planned * bar_width
            actual_w = project_stats.actual / max_planned * bar_width
            c.setFillColorRGB(*COLORS["planned"])
            c.rect(bar_left, y - 2, planned_w, 10, fill=1, stroke=0)
            c.setFillColorRGB(*COLORS["actual"])
            c.rect(bar_left, y - 2, actual_w, 10, fill=1, stroke=0)

            c.setFillColorRGB(0, 0, 0)
            c.drawString(
                bar_left + bar_width + 10,
                y,
                f"{project_stats.actual:.0f} / {project_stats.planned:.0f} "
                f"({project_stats.utilization_percent:.0f}%)",
            )
            y -= 18

        c.showPage()
