"""Report rendering and export."""

from .export import ReportExporter
from .formatter import format_report

__all__ = ["ReportExporter", "format_report"]
