"""
Data models for the multi-agent proposal examination.

Reviewer roles, per-agent task state, analysis runs, synthesized reports and
dialogue transcript entries. All models are Pydantic so they serialize cleanly
into MCP tool responses and logs.
"""
import base64
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewerRole(str, Enum):
    """The four fixed reviewer roles; declaration order is the report order"""
    ORIGINALITY = "ORIGINALITY"
    LITERATURE = "LITERATURE"
    METHODOLOGY = "METHODOLOGY"
    FEASIBILITY = "FEASIBILITY"


class AgentStatus(str, Enum):
    """Lifecycle of one agent task: IDLE -> RUNNING -> COMPLETED | FAILED"""
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (AgentStatus.COMPLETED, AgentStatus.FAILED)


class TranscriptRole(str, Enum):
    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


class RoleConfig(BaseModel):
    """Immutable per-role configuration record"""
    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="Label used in status lists and the synthesis input")
    system_prompt: str = Field(..., description="System instruction for the reviewer")
    use_search: bool = Field(False, description="Enable Google Search grounding for this reviewer")


class AgentTask(BaseModel):
    """One role-scoped analysis request and its tracked status"""
    role: ReviewerRole
    name: str
    status: AgentStatus = AgentStatus.IDLE
    output: str = ""
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None


class AnalysisRun(BaseModel):
    """The set of four agent tasks sharing one uploaded document"""
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    document_name: Optional[str] = None
    tasks: Dict[ReviewerRole, AgentTask] = Field(default_factory=dict)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def ordered_tasks(self) -> List[AgentTask]:
        """Tasks in the fixed role order"""
        return [self.tasks[role] for role in ReviewerRole if role in self.tasks]

    @property
    def is_running(self) -> bool:
        return any(task.status == AgentStatus.RUNNING for task in self.tasks.values())

    @property
    def is_complete(self) -> bool:
        """True once every role has reached a terminal state"""
        return len(self.tasks) == len(ReviewerRole) and all(
            task.is_terminal for task in self.tasks.values()
        )

    @property
    def failed_roles(self) -> List[ReviewerRole]:
        return [task.role for task in self.ordered_tasks() if task.status == AgentStatus.FAILED]

    @property
    def pending_roles(self) -> List[ReviewerRole]:
        return [task.role for task in self.ordered_tasks() if not task.is_terminal]


class ExaminationReport(BaseModel):
    """Consolidated critique produced from all agent outputs"""
    text: str
    succeeded: bool = True
    run_id: Optional[str] = None
    source_document: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class TranscriptEntry(BaseModel):
    """One rendered line of the dialogue transcript"""
    entry_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: TranscriptRole
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class ProposalDocument(BaseModel):
    """A validated proposal ready for transmission as inline data"""
    filename: str
    mime_type: str
    data_base64: str
    size_bytes: int

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data_base64)
