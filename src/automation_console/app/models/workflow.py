"""Workflow models.

The workflow engine is the source of truth for every workflow and run. The
console only knows a small registry of the automations it manages
(``WorkflowMeta``) and decorates the engine's answers with derived stats.
"""

from enum import Enum

from pydantic import BaseModel, Field

from automation_console.app.models.base import CamelModel


class ExecutionStatus(str, Enum):
    """Status of a single run as reported by the engine."""
    SUCCESS = "success"
    ERROR = "error"
    WAITING = "waiting"
    RUNNING = "running"


class WorkflowMeta(BaseModel):
    """Registry entry for one managed automation."""
    id: str = Field(..., description="Workflow ID in the engine")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="What this automation does")
    icon: str = Field(default="workflow", description="Icon tag for the dashboard")


class Execution(CamelModel):
    """One run of a workflow. Immutable once it reaches a terminal status."""
    id: str
    status: str = Field(..., description="success | error | waiting | running (engine may report others)")
    started_at: str | None = None
    stopped_at: str | None = Field(default=None, description="None while the run is still going")


class WorkflowStats(CamelModel):
    """Stats derived from the recent executions."""
    total: int = 0
    success: int = 0
    error: int = 0
    success_rate: int = 0
    last_run: str | None = None
    monthly_runs: int = 0
    monthly_success: int = 0


class WorkflowInfo(CamelModel):
    """A managed workflow with its live state from the engine."""
    id: str
    name: str
    description: str
    icon: str
    active: bool
    updated_at: str | None = None
    executions: list[Execution] = Field(default_factory=list)
    stats: WorkflowStats = Field(default_factory=WorkflowStats)


class WorkflowSummary(CamelModel):
    """Compact view of a workflow handed to the chat agent."""
    id: str
    name: str
    description: str
    active: bool
    total_runs: int
    success_rate: int
    errors: int
    last_run: str | None


class SafeCopyResult(CamelModel):
    """Outcome of replacing a workflow with an edited copy."""
    original_id: str
    new_id: str
    change_summary: str


class TimelineBranch(CamelModel):
    """One outgoing path of a branch point."""
    label: str
    steps: list["TimelineStep"] = Field(default_factory=list)


class TimelineStep(CamelModel):
    """A workflow step described in plain language."""
    id: str
    name: str
    description: str
    is_branch_point: bool = False
    branches: list[TimelineBranch] | None = None


TimelineBranch.model_rebuild()
