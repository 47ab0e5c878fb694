"""
Unit tests for the GeminiClient wrapper
The google.generativeai module is patched except where tool serialization is
checked; no request leaves the process
"""
import time
from unittest.mock import Mock, patch

import google.generativeai as genai
import pytest

from dissertation_examiner.clients.gemini_client import (
    GeminiClient, GoogleSearchTool, inline_document_part
)
from dissertation_examiner.config import ExaminerConfig
from dissertation_examiner.exceptions import GeminiApiError, GeminiTimeoutError


class TextlessResponse:
    """A candidate whose ``.text`` accessor raises like the SDK does"""
    candidates = [object()]

    @property
    def text(self):
        raise ValueError("The response.text quick accessor only works when...")


def make_response(text):
    return Mock(candidates=[object()], text=text)


class _AnySearchTool:
    """Compares equal to any GoogleSearchTool instance"""

    def __eq__(self, other):
        return isinstance(other, GoogleSearchTool)


ANY_SEARCH_TOOL = _AnySearchTool()


class TestGeminiClient:

    def setup_method(self):
        self.genai_patcher = patch("dissertation_examiner.clients.gemini_client.genai")
        self.mock_genai = self.genai_patcher.start()
        self.model = Mock()
        self.model.generate_content = Mock(return_value=make_response("Hasil analisis"))
        self.mock_genai.GenerativeModel.return_value = self.model
        self.config = ExaminerConfig(_env_file=None, google_api_key="test-key")

    def teardown_method(self):
        self.genai_patcher.stop()

    def test_configures_api_key(self):
        GeminiClient(self.config)

        self.mock_genai.configure.assert_called_once_with(api_key="test-key")

    def test_missing_key_is_not_fatal(self, caplog):
        config = ExaminerConfig(_env_file=None, google_api_key="")

        client = GeminiClient(config)

        assert client.config.google_api_key is None
        assert "API key is not defined" in caplog.text

    @pytest.mark.asyncio
    async def test_generate_content_with_search(self):
        """Test model construction, generation config and the search tool"""
        client = GeminiClient(self.config)

        text = await client.generate_content(
            ["prompt"], model_name="gemini-2.5-pro",
            system_instruction="Anda adalah reviewer", temperature=0.2, use_search=True,
        )

        assert text == "Hasil analisis"
        self.mock_genai.GenerativeModel.assert_called_once_with(
            "gemini-2.5-pro",
            system_instruction="Anda adalah reviewer",
            tools=[ANY_SEARCH_TOOL],
        )
        self.mock_genai.GenerationConfig.assert_called_once_with(temperature=0.2)
        args, kwargs = self.model.generate_content.call_args
        assert args == (["prompt"],)
        assert kwargs["generation_config"] is self.mock_genai.GenerationConfig.return_value

    @pytest.mark.asyncio
    async def test_generate_content_without_search(self):
        client = GeminiClient(self.config)

        await client.generate_content(["prompt"])

        _, kwargs = self.mock_genai.GenerativeModel.call_args
        assert kwargs["tools"] is None
        assert self.mock_genai.GenerativeModel.call_args[0][0] == self.config.analysis_model

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_api_error(self):
        self.model.generate_content.side_effect = RuntimeError("429 Resource exhausted")
        client = GeminiClient(self.config)

        with pytest.raises(GeminiApiError) as exc_info:
            await client.generate_content(["prompt"], model_name="gemini-2.5-pro")

        assert "429" in str(exc_info.value)
        assert exc_info.value.model == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_request_timeout(self):
        """Test that a configured timeout bounds a slow request"""
        self.model.generate_content.side_effect = lambda *a, **k: time.sleep(0.5)
        config = ExaminerConfig(_env_file=None, google_api_key="test-key", gemini_request_timeout=0.05)
        client = GeminiClient(config)

        with pytest.raises(GeminiTimeoutError) as exc_info:
            await client.generate_content(["prompt"])

        assert "timed out" in str(exc_info.value)
        # The worker thread is still running and is exposed for the caller to wait on
        pending = exc_info.value.pending
        assert not pending.done()
        await pending

    def test_extract_text_variants(self):
        assert GeminiClient.extract_text(make_response("isi")) == "isi"
        assert GeminiClient.extract_text(make_response(None)) == ""
        assert GeminiClient.extract_text(TextlessResponse()) == ""

    def test_extract_text_without_candidates(self):
        blocked = Mock(candidates=[], prompt_feedback=Mock(block_reason="SAFETY"))

        with pytest.raises(GeminiApiError) as exc_info:
            GeminiClient.extract_text(blocked, "gemini-2.5-flash")
        assert "SAFETY" in str(exc_info.value)

        with pytest.raises(GeminiApiError):
            GeminiClient.extract_text(None)

    @pytest.mark.asyncio
    async def test_chat_session(self):
        """Test that chats use the chat model with search and return reply text"""
        chat = Mock()
        chat.send_message = Mock(return_value=make_response("Jawaban profesor"))
        self.model.start_chat.return_value = chat
        client = GeminiClient(self.config)

        session = client.start_chat(system_instruction="Persona")
        reply = await client.send_chat_message(session, "Halo")

        assert session is chat
        self.mock_genai.GenerativeModel.assert_called_once_with(
            "gemini-2.5-flash", system_instruction="Persona", tools=[ANY_SEARCH_TOOL],
        )
        chat.send_message.assert_called_once_with("Halo")
        assert reply == "Jawaban profesor"


def test_inline_document_part():
    part = inline_document_part("JVBERi0xLjQ=", "application/pdf")

    assert part == {"mime_type": "application/pdf", "data": b"%PDF-1.4"}


class TestSearchToolSerialization:
    """Runs against the real SDK types to check what reaches the API"""

    def test_gemini_2_search_tool(self):
        """Test that the default config sends google_search, not the 1.5-only retrieval tool"""
        config = ExaminerConfig(_env_file=None, google_api_key="test-key")
        model = GeminiClient(config)._build_model(config.analysis_model, "Reviewer", use_search=True)

        tools = model._tools.to_proto()

        assert len(tools) == 1
        assert "google_search" in tools[0]
        assert "google_search_retrieval" not in tools[0]

    def test_legacy_retrieval_tool(self):
        config = ExaminerConfig(_env_file=None, google_api_key="test-key",
                                search_tool="google_search_retrieval")
        model = GeminiClient(config)._build_model("gemini-1.5-pro", "Reviewer", use_search=True)

        tools = model._tools.to_proto()

        assert "google_search_retrieval" in tools[0]
        assert "google_search" not in tools[0]

    def test_no_tools_without_search(self):
        config = ExaminerConfig(_env_file=None, google_api_key="test-key")
        model = GeminiClient(config)._build_model(config.chat_model, "Persona")

        assert model._tools is None

    def test_search_tool_proto(self):
        proto = GoogleSearchTool().to_proto()

        assert isinstance(proto, genai.protos.Tool)
        assert "google_search" in proto
