"""
Agent runner: fans one proposal out to the four reviewer agents in parallel.

Each agent is an independent asyncio task. A task's completion only ever
replaces its own entry in the run, and every failure is converted into an
in-band FAILED state, so one agent can neither block nor cancel another.
The run is joined with a settle-all gather.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, Mapping, Optional

from ..clients.gemini_client import GeminiClient, inline_document_part
from ..config import ExaminerConfig, config as default_config
from ..constants import messages
from ..constants.prompts import AGENT_TASK_INSTRUCTION, ROLE_CONFIGS
from ..exceptions import AnalysisInProgressError, DocumentRequiredError
from ..models.review_models import (
    AgentStatus, AgentTask, AnalysisRun, ProposalDocument, ReviewerRole, RoleConfig
)

logger = logging.getLogger(__name__)

TaskListener = Callable[[AgentTask], None]


class AgentRunner:
    """Runs the reviewer agents for one analysis run at a time"""

    def __init__(self,
                 gemini_client: GeminiClient,
                 examiner_config: ExaminerConfig = None,
                 role_configs: Mapping[ReviewerRole, RoleConfig] = ROLE_CONFIGS):
        self.gemini_client = gemini_client
        self.config = examiner_config or default_config
        self.role_configs = role_configs
        self._run = self._idle_run()
        self._pending: Dict[ReviewerRole, asyncio.Task] = {}

    def _idle_run(self, document_name: Optional[str] = None) -> AnalysisRun:
        return AnalysisRun(
            document_name=document_name,
            tasks={
                role: AgentTask(role=role, name=self.role_configs[role].display_name)
                for role in ReviewerRole
            },
        )

    @property
    def is_running(self) -> bool:
        return self._run.is_running

    def snapshot(self) -> AnalysisRun:
        """Copy of the current run; safe to hand to observers mid-run"""
        return self._run.model_copy(deep=True)

    def reset(self) -> None:
        """Return every agent to IDLE, e.g. after the document is removed"""
        if self.is_running:
            raise AnalysisInProgressError("Cannot reset while agents are running")
        self._run = self._idle_run()
        self._pending = {}

    def start_run(self, document: Optional[ProposalDocument],
                  on_update: Optional[TaskListener] = None) -> AnalysisRun:
        """
        Start a new analysis run.

        All four tasks are switched to RUNNING before any request is scheduled,
        then one asyncio task per role is created. Must be called from inside a
        running event loop.

        Args:
            document: Validated proposal to analyse
            on_update: Optional callback invoked with each task after it changes state

        Returns:
            Snapshot of the run with every task RUNNING
        """
        if document is None:
            raise DocumentRequiredError("No document loaded")
        if self.is_running:
            raise AnalysisInProgressError("An analysis run is already in progress")

        now = datetime.now(timezone.utc)
        run = AnalysisRun(
            document_name=document.filename,
            started_at=now,
            tasks={
                role: AgentTask(
                    role=role,
                    name=self.role_configs[role].display_name,
                    status=AgentStatus.RUNNING,
                    started_at=now,
                )
                for role in ReviewerRole
            },
        )
        self._run = run

        logger.info(f"Starting analysis run {run.run_id} for {document.filename} with {len(run.tasks)} agents")

        if on_update:
            for task in run.ordered_tasks():
                self._notify(on_update, task)

        self._pending = {
            role: asyncio.create_task(
                self._run_agent(run, role, document, on_update),
                name=f"agent-{role.value.lower()}"
            )
            for role in ReviewerRole
        }
        return self.snapshot()

    async def _run_agent(self, run: AnalysisRun, role: ReviewerRole,
                         document: ProposalDocument,
                         on_update: Optional[TaskListener]) -> AgentTask:
        role_config = self.role_configs[role]
        start_time = time.time()

        try:
            text = await self.gemini_client.generate_content(
                [
                    inline_document_part(document.data_base64, document.mime_type),
                    AGENT_TASK_INSTRUCTION.format(display_name=role_config.display_name),
                ],
                model_name=self.config.analysis_model,
                system_instruction=role_config.system_prompt,
                temperature=self.config.agent_temperature,
                use_search=role_config.use_search,
            )
            update = {
                "status": AgentStatus.COMPLETED,
                "output": text or messages.AGENT_EMPTY_OUTPUT,
                "error": None,
            }
            logger.info(f"Agent {role_config.display_name} completed in {time.time() - start_time:.2f}s")

        except Exception as e:
            logger.error(f"Error in agent {role_config.display_name}: {e}")
            update = {
                "status": AgentStatus.FAILED,
                "output": messages.AGENT_FAILED_OUTPUT,
                "error": messages.AGENT_FAILED_ERROR,
            }

        update["finished_at"] = datetime.now(timezone.utc)
        finished = run.tasks[role].model_copy(update=update)
        # Replace only this role's entry
        run.tasks[role] = finished

        if on_update:
            self._notify(on_update, finished)
        return finished

    @staticmethod
    def _notify(listener: TaskListener, task: AgentTask) -> None:
        try:
            listener(task.model_copy())
        except Exception as e:
            logger.error(f"Task listener failed for {task.role.value}: {e}")

    async def iter_completed(self) -> AsyncIterator[AgentTask]:
        """Yield agent tasks of the current run in completion order"""
        for future in asyncio.as_completed(list(self._pending.values())):
            yield await future

    async def wait_for_completion(self) -> AnalysisRun:
        """
        Settle-all join over the current run.

        Waits for every agent regardless of individual outcome and returns the
        terminal run.
        """
        if not self._pending:
            return self.snapshot()

        run = self._run
        roles = list(self._pending.keys())
        results = await asyncio.gather(*self._pending.values(), return_exceptions=True)

        for role, result in zip(roles, results):
            if isinstance(result, BaseException):
                # Only reachable if the agent task itself was cancelled
                logger.error(f"Unhandled exception in agent {role.value}: {result!r}")
                run.tasks[role] = run.tasks[role].model_copy(update={
                    "status": AgentStatus.FAILED,
                    "output": messages.AGENT_FAILED_OUTPUT,
                    "error": messages.AGENT_FAILED_ERROR,
                    "finished_at": datetime.now(timezone.utc),
                })

        run.completed_at = datetime.now(timezone.utc)
        failed = len(run.failed_roles)
        logger.info(f"Analysis run {run.run_id} complete: {len(roles) - failed} completed, {failed} failed")
        return self.snapshot()

    async def run(self, document: Optional[ProposalDocument],
                  on_update: Optional[TaskListener] = None) -> AnalysisRun:
        """Start a run and wait until every agent has settled"""
        self.start_run(document, on_update)
        return await self.wait_for_completion()
