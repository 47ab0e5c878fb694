"""
Lead examiner synthesis service.

Combines the four terminal agent outputs, in the fixed role order, into one
prompt and asks the analysis model for the consolidated examination report.
Remote failures never escape this service: they become a fixed failure
report instead.
"""
import logging
import time
from typing import Dict, Any

from ..clients.gemini_client import GeminiClient
from ..config import ExaminerConfig, config as default_config
from ..constants import messages
from ..constants.prompts import AGENT_REPORT_BLOCK, SYNTHESIS_TEMPLATE
from ..exceptions import IncompleteRunError
from ..models.review_models import AnalysisRun, ExaminationReport

logger = logging.getLogger(__name__)


class ReportSynthesizer:
    """Creates the final examination report from a completed analysis run"""

    def __init__(self,
                 gemini_client: GeminiClient,
                 examiner_config: ExaminerConfig = None):
        self.gemini_client = gemini_client
        self.config = examiner_config or default_config

        # Synthesis metrics
        self.metrics: Dict[str, Any] = {
            'total_syntheses': 0,
            'successful_syntheses': 0,
            'failed_syntheses': 0,
            'total_synthesis_time': 0.0,
        }

    @staticmethod
    def build_combined_input(run: AnalysisRun) -> str:
        """Label each agent output with its display name, in role order"""
        return "\n".join(
            AGENT_REPORT_BLOCK.format(display_name=task.name, output=task.output)
            for task in run.ordered_tasks()
        )

    def build_prompt(self, run: AnalysisRun) -> str:
        return SYNTHESIS_TEMPLATE.format(combined_input=self.build_combined_input(run))

    async def synthesize(self, run: AnalysisRun) -> ExaminationReport:
        """
        Generate the consolidated report.

        Args:
            run: Analysis run in which every agent reached COMPLETED or FAILED

        Returns:
            ExaminationReport; on remote failure its text is the fixed failure
            message and ``succeeded`` is False

        Raises:
            IncompleteRunError: if any agent has not settled yet
        """
        if not run.is_complete:
            pending = run.pending_roles
            raise IncompleteRunError(
                f"Cannot synthesize run {run.run_id}: {len(pending)} agent(s) not finished",
                pending_roles=pending,
            )

        start_time = time.time()
        self.metrics['total_syntheses'] += 1
        failed_agents = len(run.failed_roles)
        if failed_agents:
            logger.warning(f"Synthesizing run {run.run_id} with {failed_agents} failed agent(s)")

        try:
            text = await self.gemini_client.generate_content(
                [self.build_prompt(run)],
                model_name=self.config.analysis_model,
                temperature=self.config.synthesis_temperature,
            )
            report = ExaminationReport(
                text=text or messages.SYNTHESIS_EMPTY_OUTPUT,
                succeeded=bool(text),
                run_id=run.run_id,
                source_document=run.document_name,
            )
        except Exception as e:
            logger.error(f"Error synthesizing report for run {run.run_id}: {e}")
            report = ExaminationReport(
                text=messages.SYNTHESIS_FAILED_OUTPUT,
                succeeded=False,
                run_id=run.run_id,
                source_document=run.document_name,
            )

        execution_time = time.time() - start_time
        self.metrics['total_synthesis_time'] += execution_time
        if report.succeeded:
            self.metrics['successful_syntheses'] += 1
            logger.info(f"Synthesis completed successfully in {execution_time:.2f}s")
        else:
            self.metrics['failed_syntheses'] += 1
            logger.info(f"Synthesis produced a fallback report after {execution_time:.2f}s")
        return report
