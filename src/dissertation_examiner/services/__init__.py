"""
Orchestration services: agent fan-out, synthesis, dialogue and I/O.
"""

from .agent_runner import AgentRunner
from .dialogue_session import DialogueSession
from .document_loader import DocumentLoader
from .examination_workflow import ExaminationWorkflow
from .report_exporter import ReportExporter, export_filename
from .report_synthesizer import ReportSynthesizer

__all__ = [
    'AgentRunner', 'DialogueSession', 'DocumentLoader',
    'ExaminationWorkflow', 'ReportExporter', 'export_filename',
    'ReportSynthesizer'
]
