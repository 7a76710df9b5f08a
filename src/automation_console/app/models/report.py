"""Insights report models."""

from pydantic import BaseModel, Field


class ReportSection(BaseModel):
    title: str
    preview: str = Field(..., description="First two sentences of the section")
    content: str
    icon: str


class Report(BaseModel):
    month: str = Field(default="", description="Report title with the 'report' suffix removed")
    sections: list[ReportSection] = Field(default_factory=list)
