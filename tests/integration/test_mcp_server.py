"""
Integration tests for the MCP tool surface
Calls go through ExaminerMcpServer.call_tool with a stub Gemini client
"""
import base64
from unittest.mock import AsyncMock, patch

import pytest

from conftest import StubGeminiClient
from dissertation_examiner.constants import messages
from dissertation_examiner.mcp_server import ExaminerMcpServer
from dissertation_examiner.services.examination_workflow import ExaminationWorkflow


@pytest.fixture
def server(examiner_config):
    workflow = ExaminationWorkflow(gemini_client=StubGeminiClient(), examiner_config=examiner_config)
    return ExaminerMcpServer(workflow=workflow)


class TestExaminerMcpServer:

    def test_tool_list(self, server):
        names = [tool.name for tool in server.list_tools()]

        assert names == [
            "load_proposal", "clear_proposal", "run_critique", "agent_status",
            "get_report", "export_report", "chat", "chat_transcript",
        ]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        assert await server.call_tool("delete_everything", {}) == "Unknown tool: delete_everything"

    @pytest.mark.asyncio
    async def test_non_pdf_upload_notice(self, server):
        payload = base64.b64encode(b"plain text").decode("ascii")

        result = await server.call_tool("load_proposal", {"content_base64": payload, "filename": "notes.txt"})

        assert result == f"⚠️ {messages.DOCUMENT_NOT_PDF}"
        assert server.workflow.document is None

    @pytest.mark.asyncio
    async def test_load_requires_a_source(self, server):
        result = await server.call_tool("load_proposal", {})
        assert "file_path" in result

    @pytest.mark.asyncio
    async def test_run_without_document(self, server):
        result = await server.call_tool("run_critique", {})
        assert result == f"⚠️ {messages.DOCUMENT_REQUIRED}"

    @pytest.mark.asyncio
    async def test_status_before_any_run(self, server):
        result = await server.call_tool("agent_status", {})

        assert result.count(messages.STATUS_LABELS["IDLE"]) == 4
        assert "Agen 1: Evaluasi Originalitas & Kontribusi" in result

    @pytest.mark.asyncio
    async def test_critique_flow(self, server, pdf_file, tmp_path):
        """Test load, blocking critique, report, chat, transcript and export"""
        loaded = await server.call_tool("load_proposal", {"file_path": str(pdf_file)})
        assert "proposal.pdf" in loaded

        result = await server.call_tool("run_critique", {"wait": True})
        assert result.count(messages.STATUS_LABELS["COMPLETED"]) == 4
        assert "# LAPORAN: Pemeriksaan Proposal Disertasi" in result
        assert messages.REPORT_AVAILABLE in result

        report = await server.call_tool("get_report", {})
        assert report == "# LAPORAN: Pemeriksaan Proposal Disertasi"

        agent_output = await server.call_tool("get_report", {"agent": "literature"})
        assert "Kritik dari LITERATURE" in agent_output

        reply = await server.call_tool("chat", {"message": "Apa kelemahan utama?"})
        assert reply == "Jawaban untuk: Apa kelemahan utama?"

        status = await server.call_tool("agent_status", {})
        assert messages.CHAT_CONTEXT_ACTIVE in status

        transcript = await server.call_tool("chat_transcript", {"limit": 2})
        assert "**user**: Apa kelemahan utama?" in transcript
        assert messages.CHAT_WELCOME not in transcript

        saved = await server.call_tool("export_report", {"export_dir": str(tmp_path / "out")})
        assert (tmp_path / "out" / "Laporan_Kritik_proposal.pdf.md").exists()
        assert "Laporan_Kritik_proposal.pdf.md" in saved

    @pytest.mark.asyncio
    async def test_non_blocking_critique(self, server, proposal_document):
        server.workflow.document = proposal_document

        result = await server.call_tool("run_critique", {})
        assert result.count(messages.STATUS_LABELS["RUNNING"]) == 4

        busy = await server.call_tool("run_critique", {})
        assert busy == f"⏳ {messages.ANALYSIS_IN_PROGRESS}"

        await server.workflow.wait_for_analysis()
        await server.workflow.wait_for_priming()
        assert server.workflow.report is not None

    @pytest.mark.asyncio
    async def test_report_notices_before_analysis(self, server):
        assert await server.call_tool("get_report", {}) == messages.DOCUMENT_REQUIRED
        assert await server.call_tool("export_report", {}) == f"⚠️ {messages.REPORT_NOT_AVAILABLE}"

    @pytest.mark.asyncio
    async def test_empty_chat_message(self, server):
        result = await server.call_tool("chat", {"message": "  "})
        assert result == f"⚠️ {messages.CHAT_EMPTY_MESSAGE}"

    @pytest.mark.asyncio
    async def test_clear_proposal(self, server, proposal_document):
        server.workflow.document = proposal_document

        result = await server.call_tool("clear_proposal", {})

        assert "removed" in result
        assert server.workflow.document is None

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_notice(self, server):
        """Test that an unexpected exception is reported instead of raised"""
        with patch.object(server.workflow, "chat", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await server.call_tool("chat", {"message": "Halo"})

        assert result == "Tool execution failed: boom"

    @pytest.mark.asyncio
    async def test_transcript_limit_is_clamped(self, server):
        """Test that a non-positive limit shows the whole transcript"""
        await server.call_tool("chat", {"message": "Halo"})

        last_one = await server.call_tool("chat_transcript", {"limit": 1})
        negative = await server.call_tool("chat_transcript", {"limit": -1})

        assert last_one == "**model**: Jawaban untuk: Halo"
        assert len(negative.split("\n\n")) == 3
        assert messages.CHAT_WELCOME in negative
