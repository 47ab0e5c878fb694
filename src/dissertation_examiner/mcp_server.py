"""
Dissertation Examiner MCP Server
Critique and academic chat tools over stdio
"""
import logging
from typing import Any, Dict, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import config
from .constants import messages
from .exceptions import (
    AnalysisInProgressError, DocumentRequiredError, DocumentValidationError,
    EmptyMessageError, ExaminerError, ReportNotAvailableError, SessionBusyError
)
from .models.review_models import AgentStatus, AnalysisRun, TranscriptEntry
from .services.examination_workflow import ExaminationWorkflow

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    AgentStatus.IDLE: "○",
    AgentStatus.RUNNING: "⏳",
    AgentStatus.COMPLETED: "✅",
    AgentStatus.FAILED: "❌",
}


class ExaminerMcpServer:
    """MCP server exposing one examination workflow per server process"""

    def __init__(self, workflow: ExaminationWorkflow = None):
        self.server = Server("dissertation-examiner")
        self.workflow = workflow or ExaminationWorkflow(examiner_config=config)
        self.setup_handlers()

        logger.info("Dissertation Examiner MCP Server initialized")

    def setup_handlers(self):
        """Setup MCP protocol handlers"""

        @self.server.list_tools()
        async def handle_list_tools() -> List[Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            result = await self.call_tool(name, arguments or {})
            return [TextContent(type="text", text=result)]

    def list_tools(self) -> List[Tool]:
        return [
            Tool(
                name="load_proposal",
                description="Load a dissertation proposal (PDF only) from a file path or a base64 payload.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the proposal PDF"
                        },
                        "content_base64": {
                            "type": "string",
                            "description": "Base64-encoded PDF bytes (alternative to file_path)"
                        },
                        "filename": {
                            "type": "string",
                            "description": "File name for a base64 payload"
                        },
                        "mime_type": {
                            "type": "string",
                            "description": "Declared media type, defaults to a guess from the file name"
                        }
                    }
                }
            ),
            Tool(
                name="clear_proposal",
                description="Remove the loaded proposal, its agent results and its report.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="run_critique",
                description="Run the four reviewer agents (originality, literature, methodology, feasibility) in parallel and synthesize the examination report.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "wait": {
                            "type": "boolean",
                            "default": False,
                            "description": "Wait for the final report instead of returning once the agents have started"
                        }
                    }
                }
            ),
            Tool(
                name="agent_status",
                description="Show the status of each reviewer agent and of the final report.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="get_report",
                description="Return the final examination report, or a single agent's critique.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "agent": {
                            "type": "string",
                            "enum": ["ORIGINALITY", "LITERATURE", "METHODOLOGY", "FEASIBILITY"],
                            "description": "Return this agent's output instead of the final report"
                        }
                    }
                }
            ),
            Tool(
                name="export_report",
                description="Save the final report as a Markdown file named after the proposal.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "export_dir": {
                            "type": "string",
                            "description": "Target directory, defaults to the configured export directory"
                        }
                    }
                }
            ),
            Tool(
                name="chat",
                description="Ask the accounting professor / doctoral examiner a follow-up question. Uses the examination report as context once it is available.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "message": {
                            "type": "string",
                            "description": "Question for the examiner"
                        }
                    },
                    "required": ["message"]
                }
            ),
            Tool(
                name="chat_transcript",
                description="Show the chat transcript.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Only show the last N entries"
                        }
                    }
                }
            ),
        ]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        try:
            return await self._route_tool_call(name, arguments)
        except ExaminerError as e:
            logger.warning(f"Tool {name} rejected: {e}")
            return self._notice_for(e)
        except Exception as e:
            logger.error(f"Tool execution failed for {name}: {e}")
            return f"Tool execution failed: {str(e)}"

    async def _route_tool_call(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Route tool calls to their handlers"""
        handlers = {
            "load_proposal": self._handle_load_proposal,
            "clear_proposal": self._handle_clear_proposal,
            "run_critique": self._handle_run_critique,
            "agent_status": self._handle_agent_status,
            "get_report": self._handle_get_report,
            "export_report": self._handle_export_report,
            "chat": self._handle_chat,
            "chat_transcript": self._handle_chat_transcript,
        }
        handler = handlers.get(tool_name)
        if handler is None:
            return f"Unknown tool: {tool_name}"
        return await handler(arguments)

    @staticmethod
    def _notice_for(error: ExaminerError) -> str:
        """Short user-facing notice for an expected failure"""
        if isinstance(error, DocumentValidationError):
            return f"⚠️ {error.user_message}"
        if isinstance(error, AnalysisInProgressError):
            return f"⏳ {messages.ANALYSIS_IN_PROGRESS}"
        if isinstance(error, DocumentRequiredError):
            return f"⚠️ {messages.DOCUMENT_REQUIRED}"
        if isinstance(error, SessionBusyError):
            return f"⏳ {messages.CHAT_BUSY}"
        if isinstance(error, EmptyMessageError):
            return f"⚠️ {messages.CHAT_EMPTY_MESSAGE}"
        if isinstance(error, ReportNotAvailableError):
            return f"⚠️ {messages.REPORT_NOT_AVAILABLE}"
        return f"❌ {error}"

    async def _handle_load_proposal(self, arguments: Dict[str, Any]) -> str:
        file_path = arguments.get("file_path")
        content = arguments.get("content_base64")
        mime_type = arguments.get("mime_type")

        if file_path:
            document = await self.workflow.load_document_from_path(file_path, mime_type)
        elif content:
            filename = arguments.get("filename") or "proposal.pdf"
            document = self.workflow.load_document_from_base64(filename, content, mime_type)
        else:
            return "⚠️ Provide either file_path or content_base64"

        return f"📄 Proposal loaded: **{document.filename}** ({document.size_bytes:,} bytes)"

    async def _handle_clear_proposal(self, arguments: Dict[str, Any]) -> str:
        self.workflow.clear_document()
        return "🗑️ Proposal removed"

    async def _handle_run_critique(self, arguments: Dict[str, Any]) -> str:
        if arguments.get("wait", False):
            report = await self.workflow.run_analysis()
            return self._format_status(self.workflow.agent_status()) + "\n\n" + report.text

        self.workflow.start_analysis()
        return self._format_status(self.workflow.agent_status())

    async def _handle_agent_status(self, arguments: Dict[str, Any]) -> str:
        return self._format_status(self.workflow.agent_status())

    async def _handle_get_report(self, arguments: Dict[str, Any]) -> str:
        agent = arguments.get("agent")
        if agent:
            run = self.workflow.agent_status()
            task = next((t for t in run.ordered_tasks() if t.role.value == agent.upper()), None)
            if task is None:
                return f"Unknown agent: {agent}"
            if not task.output:
                return f"{task.name}: {messages.STATUS_LABELS[task.status.value]}"
            return f"## {task.name}\n\n{task.output}"

        if self.workflow.is_synthesizing:
            return f"⏳ {messages.SYNTHESIZING}"
        if self.workflow.report is None:
            return messages.DOCUMENT_REQUIRED
        return self.workflow.report.text

    async def _handle_export_report(self, arguments: Dict[str, Any]) -> str:
        path = await self.workflow.export_report(arguments.get("export_dir"))
        return f"💾 Report saved to `{path}`"

    async def _handle_chat(self, arguments: Dict[str, Any]) -> str:
        entry = await self.workflow.chat(arguments.get("message", ""))
        return entry.content

    async def _handle_chat_transcript(self, arguments: Dict[str, Any]) -> str:
        entries = self.workflow.dialogue_session.transcript
        limit = arguments.get("limit")
        if limit is not None and int(limit) > 0:
            entries = entries[-int(limit):]
        return "\n\n".join(self._format_entry(entry) for entry in entries)

    @staticmethod
    def _format_entry(entry: TranscriptEntry) -> str:
        return f"**{entry.role.value}**: {entry.content}"

    def _format_status(self, run: AnalysisRun) -> str:
        lines = ["# Status Agen"]
        if run.document_name:
            lines.append(f"**Dokumen**: {run.document_name}")
        for task in run.ordered_tasks():
            label = messages.STATUS_LABELS[task.status.value]
            lines.append(f"- {STATUS_ICONS[task.status]} {task.name}: {label}")

        if self.workflow.is_synthesizing:
            lines.append(f"\n⏳ {messages.SYNTHESIZING}")
        elif self.workflow.report is not None:
            lines.append(f"\n📋 {messages.REPORT_AVAILABLE}")
        if self.workflow.dialogue_session.is_primed:
            lines.append(f"💬 {messages.CHAT_CONTEXT_ACTIVE}")
        return "\n".join(lines)

    async def run(self):
        """Run the MCP server over stdio"""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )
