"""Report generation and storage."""

from research_council.reports.generator import ReportGenerator
from research_council.reports.models import (
    DetailLevel,
    ModelUsage,
    OutlineSection,
    Report,
    ReportFormat,
    ReportSection,
)
from research_council.reports.store import ReportStore

__all__ = [
    "DetailLevel",
    "ModelUsage",
    "OutlineSection",
    "Report",
    "ReportFormat",
    "ReportGenerator",
    "ReportSection",
    "ReportStore",
]
