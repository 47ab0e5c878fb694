"""
Data models for the Dissertation Proposal Examiner.
"""

from .review_models import (
    ReviewerRole, AgentStatus, TranscriptRole,
    RoleConfig, AgentTask, AnalysisRun,
    ExaminationReport, TranscriptEntry, ProposalDocument
)

__all__ = [
    'ReviewerRole', 'AgentStatus', 'TranscriptRole',
    'RoleConfig', 'AgentTask', 'AnalysisRun',
    'ExaminationReport', 'TranscriptEntry', 'ProposalDocument'
]
