"""Report models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class ReportFormat(str, Enum):
    EXECUTIVE = "executive"
    STANDARD = "standard"
    COMPREHENSIVE = "comprehensive"


class DetailLevel(str, Enum):
    BRIEF = "brief"
    BALANCED = "balanced"
    IN_DEPTH = "in-depth"

    @classmethod
    def for_format(cls, report_format: ReportFormat) -> "DetailLevel":
        """Default detail level implied by a report format."""
        if report_format is ReportFormat.EXECUTIVE:
            return cls.BRIEF
        if report_format is ReportFormat.COMPREHENSIVE:
            return cls.IN_DEPTH
        return cls.BALANCED


class OutlineSection(BaseModel):
    key: str
    title: str


class ReportSection(BaseModel):
    title: str
    markdown: str


class ModelUsage(BaseModel):
    """Which provider/model produced part of a report."""

    provider: str
    model: str
    purpose: str


class Report(BaseModel):
    """A generated report with its outline and rendered sections."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_id: str
    topic: str = ""
    title: str
    format: ReportFormat = ReportFormat.STANDARD
    detail_level: DetailLevel = DetailLevel.BALANCED
    style: str = "concise"
    structure: list[OutlineSection] = Field(default_factory=list)
    sections: dict[str, ReportSection] = Field(default_factory=dict)
    source_memory_ids: list[str] = Field(default_factory=list)
    version_number: int = 1
    models_used: list[ModelUsage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_markdown(self) -> str:
        """Render the whole report as one Markdown document."""
        parts = [f"# {self.title}"]
        for outline in self.structure:
            section = self.sections.get(outline.key)
            if section is not None:
                parts.append(f"## {section.title}\n\n{section.markdown.strip()}")
        return "\n\n".join(parts) + "\n"
