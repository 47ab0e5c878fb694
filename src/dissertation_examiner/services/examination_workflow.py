"""
Examination workflow: the state behind one examiner surface.

Holds the loaded proposal, the agent runner, the latest report and the single
dialogue session, and wires them together: analysis run -> synthesis ->
report hand-off to the chat.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from ..clients.gemini_client import GeminiClient
from ..config import ExaminerConfig, config as default_config
from ..exceptions import AnalysisInProgressError, DocumentRequiredError, ReportNotAvailableError
from ..models.review_models import AnalysisRun, ExaminationReport, ProposalDocument, TranscriptEntry
from .agent_runner import AgentRunner, TaskListener
from .dialogue_session import DialogueSession
from .document_loader import DocumentLoader
from .report_exporter import ReportExporter
from .report_synthesizer import ReportSynthesizer

logger = logging.getLogger(__name__)


class ExaminationWorkflow:
    """Coordinates critique and chat for one surface lifetime"""

    def __init__(self,
                 gemini_client: GeminiClient = None,
                 examiner_config: ExaminerConfig = None,
                 document_loader: DocumentLoader = None,
                 agent_runner: AgentRunner = None,
                 synthesizer: ReportSynthesizer = None,
                 dialogue_session: DialogueSession = None,
                 exporter: ReportExporter = None):
        self.config = examiner_config or default_config
        self.gemini_client = gemini_client or GeminiClient(self.config)
        self.document_loader = document_loader or DocumentLoader(self.config)
        self.agent_runner = agent_runner or AgentRunner(self.gemini_client, self.config)
        self.synthesizer = synthesizer or ReportSynthesizer(self.gemini_client, self.config)
        self.exporter = exporter or ReportExporter(self.config)

        self.document: Optional[ProposalDocument] = None
        self.report: Optional[ExaminationReport] = None
        self.is_synthesizing = False
        self._priming_task: Optional[asyncio.Task] = None
        self._analysis_task: Optional[asyncio.Task] = None

        # The chat surface opens together with the workflow
        self.dialogue_session = dialogue_session or DialogueSession(self.gemini_client, self.config)
        if not self.dialogue_session.is_open:
            self.dialogue_session.open_session()

    # Document handling

    async def load_document_from_path(self, path: Union[str, Path],
                                      mime_type: Optional[str] = None) -> ProposalDocument:
        """Validate and load a proposal; on rejection the current state is untouched"""
        document = await self.document_loader.load_from_path(path, mime_type)
        self._set_document(document)
        return document

    def load_document_from_base64(self, filename: str, content_base64: str,
                                  mime_type: Optional[str] = None) -> ProposalDocument:
        document = self.document_loader.load_from_base64(filename, content_base64, mime_type)
        self._set_document(document)
        return document

    def _set_document(self, document: ProposalDocument) -> None:
        if self.is_busy:
            raise AnalysisInProgressError("Cannot replace the document while an analysis is running")
        self.document = document

    def clear_document(self) -> None:
        """Remove the proposal together with its report and agent results"""
        if self.is_busy:
            raise AnalysisInProgressError("Cannot remove the document while an analysis is running")
        self.document = None
        self.report = None
        self.agent_runner.reset()

    # Analysis

    @property
    def is_busy(self) -> bool:
        analysis_pending = self._analysis_task is not None and not self._analysis_task.done()
        return analysis_pending or self.agent_runner.is_running or self.is_synthesizing

    @property
    def can_start_analysis(self) -> bool:
        return self.document is not None and not self.is_busy

    def agent_status(self) -> AnalysisRun:
        return self.agent_runner.snapshot()

    def start_analysis(self, on_update: Optional[TaskListener] = None) -> "asyncio.Task[ExaminationReport]":
        """
        Start the four agents and schedule synthesis once they have settled.

        Preconditions are checked and every agent is RUNNING before this
        returns. The returned task resolves to the report.
        """
        if self.document is None:
            raise DocumentRequiredError("No document loaded")
        if self.is_busy:
            raise AnalysisInProgressError("An analysis is already in progress")

        # A new run invalidates the previous report
        self.report = None
        self.agent_runner.start_run(self.document, on_update)
        self._analysis_task = asyncio.create_task(self._complete_analysis(), name="examination-analysis")
        return self._analysis_task

    async def run_analysis(self, on_update: Optional[TaskListener] = None) -> ExaminationReport:
        """
        Run the four agents, synthesize their results and hand a successful
        report to the dialogue session.
        """
        return await self.start_analysis(on_update)

    async def wait_for_analysis(self) -> Optional[ExaminationReport]:
        if self._analysis_task is None:
            return self.report
        return await self._analysis_task

    async def _complete_analysis(self) -> ExaminationReport:
        run = await self.agent_runner.wait_for_completion()

        self.is_synthesizing = True
        try:
            report = await self.synthesizer.synthesize(run)
        finally:
            self.is_synthesizing = False

        self.report = report
        if report.succeeded:
            self._hand_off_report(report)
        return report

    def _hand_off_report(self, report: ExaminationReport) -> None:
        if self.dialogue_session.is_primed:
            logger.info("Dialogue session already holds a report - new report not injected")
            return
        self._priming_task = asyncio.create_task(
            self.dialogue_session.prime_with_context(report.text),
            name="prime-dialogue-session",
        )

    async def wait_for_priming(self) -> None:
        """Block until a scheduled report injection has finished"""
        if self._priming_task is not None and not self._priming_task.done():
            await self._priming_task

    # Chat

    async def chat(self, message: str) -> TranscriptEntry:
        """Send a chat message after any pending report injection"""
        await self.wait_for_priming()
        return await self.dialogue_session.send(message)

    # Export

    async def export_report(self, export_dir: Optional[Union[str, Path]] = None) -> Path:
        if self.report is None:
            raise ReportNotAvailableError("No report has been generated yet")
        source = self.document.filename if self.document else self.report.source_document
        return await self.exporter.export(self.report.text, source, export_dir)
