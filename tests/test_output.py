"""Tests for CSV, text and PDF output."""

import csv
from dataclasses import replace

import pytest

from capplanner.cli import create_sample_schedule
from capplanner.domain.models import Schedule
from capplanner.output.csv_exporter import PERSON_WEEK_HEADER, PROJECT_HEADER, CSVExporter
from capplanner.output.pdf_generator import PDFGenerator
from capplanner.output.text_report import TextReportGenerator


@pytest.fixture
def sample() -> Schedule:
    """Sample plan with Bob on duty in W2."""
    return replace(create_sample_schedule(), fr_schedule={"W2": 2})


class TestCSVExporter:
    """Tests for CSVExporter."""

    def test_person_week_rows(self, sample):
        """One row per person per week after the header."""
        rows = CSVExporter().person_week_rows(sample)
        assert rows[0] == PERSON_WEEK_HEADER
        assert len(rows) == 1 + 3 * 6
        assert rows[1] == [
            "Alice", "Week 1", "Nov 24 - Nov 30", "5", "0.0", "5.0", "",
            "5.0", "3.0", "2.0", "API Migration",
        ]

    def test_first_responder_row(self, sample):
        """Bob's duty week shows the flag and all requested days as missing."""
        rows = CSVExporter().person_week_rows(sample)
        bob_w2 = next(r for r in rows if r[0] == "Bob" and r[1] == "Week 2")
        assert bob_w2[6] == "yes"
        assert bob_w2[7] == "2.0"
        assert bob_w2[8] == "0.0"
        assert bob_w2[9] == "-4.0"

    def test_project_rows(self, sample):
        """Projects list planned, actual and utilization."""
        rows = CSVExporter().project_rows(sample)
        assert rows == [
            PROJECT_HEADER,
            ["API Migration", "W1", "W3", "21.0", "19.0", "90.5"],
        ]

    def test_both_tables_in_output(self, sample, tmp_path):
        """The file holds both tables separated by an empty row."""
        path = tmp_path / "capacity.csv"
        CSVExporter().generate(sample, path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == PERSON_WEEK_HEADER
        assert rows[19] == []
        assert rows[20] == PROJECT_HEADER


class TestTextReportGenerator:
    """Tests for TextReportGenerator."""

    def test_sections(self, sample):
        """The report has a header and all sections."""
        text = TextReportGenerator().generate_to_string(sample)
        assert "SAMPLE PLAN - 24 November 2025 (6 weeks)" in text
        for section in ("RANGE W1 - W6", "PEOPLE", "PROJECTS", "FIRST RESPONDERS"):
            assert section in text

    def test_flags_and_projects(self, sample):
        """FR and over-allocation flags and project figures are shown."""
        text = TextReportGenerator().generate_to_string(sample)
        assert "FR W2; OVER W2" in text
        assert "API Migration [W1 - W3]: 19 / 21 days (90%)" in text
        assert "(unassigned)" in text

    def test_range(self, sample):
        """A sub-range is reported with its week count."""
        text = TextReportGenerator().generate_to_string(sample, "W2", "W3")
        assert "RANGE W2 - W3 (2 weeks)" in text

    def test_write_file(self, sample, tmp_path):
        """The report is written as UTF-8 text."""
        path = tmp_path / "report.txt"
        content = TextReportGenerator().generate(sample, path)
        assert path.read_text(encoding="utf-8") == content


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    def test_buffer(self, sample):
        """A PDF document is produced in memory."""
        buffer = PDFGenerator().generate_to_buffer(sample)
        assert buffer.read(5) == b"%PDF-"

    def test_file(self, sample, tmp_path):
        """A PDF file is written."""
        path = tmp_path / "capacity.pdf"
        PDFGenerator().generate(sample, path)
        assert path.read_bytes().startswith(b"%PDF-")

    def test_many_weeks_and_people(self, sample):
        """Large plans page over weeks and people."""
        many = replace(
            sample,
            people=sample.people * 10,
            weeks=sample.weeks * 3,
        )
        buffer = PDFGenerator(weeks_per_page=4).generate_to_buffer(many, include_summary=False)
        assert buffer.getvalue().startswith(b"%PDF-")

    def test_empty_schedule(self):
        """An empty plan still renders."""
        buffer = PDFGenerator().generate_to_buffer(Schedule())
        assert buffer.getvalue().startswith(b"%PDF-")
