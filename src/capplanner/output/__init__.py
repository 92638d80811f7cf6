"""Output generation for schedules (CSV, text, PDF)."""

from capplanner.output.csv_exporter import CSVExporter
from capplanner.output.pdf_generator import PDFGenerator
from capplanner.output.text_report import TextReportGenerator

__all__ = [
    "CSVExporter",
    "PDFGenerator",
    "TextReportGenerator",
]
