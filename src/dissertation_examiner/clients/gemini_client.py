"""
Gemini AI client for one-shot generation and stateful chat sessions
"""
import asyncio
import base64
import logging
from typing import Any, List, Optional, Union

import google.generativeai as genai

from ..config import ExaminerConfig, config as default_config
from ..exceptions import GeminiApiError, GeminiTimeoutError

logger = logging.getLogger(__name__)

# A content part is either plain text or inline binary data
ContentPart = Union[str, dict]

LEGACY_SEARCH_TOOL = "google_search_retrieval"


def inline_document_part(data_base64: str, mime_type: str) -> dict:
    """Build an inline-data content part from a base64 payload"""
    return {"mime_type": mime_type, "data": base64.b64decode(data_base64)}


class GoogleSearchTool(genai.types.Tool):
    """
    Google Search grounding for Gemini 2.x models.

    The SDK's Tool wrapper only serializes ``google_search_retrieval``, which
    Gemini 2.x rejects, and drops the ``google_search`` field of a raw
    ``protos.Tool``. This wrapper emits that field directly.
    """

    def to_proto(self):
        return genai.protos.Tool(google_search=genai.protos.Tool.GoogleSearch())


class GeminiClient:
    """Thin async wrapper around google.generativeai with one attempt per call"""

    def __init__(self, examiner_config: ExaminerConfig = None):
        self.config = examiner_config or default_config
        self.request_timeout = self.config.gemini_request_timeout

        # A missing key is surfaced in the log, not raised: requests fail later
        # through the regular remote-failure paths
        if not self.config.has_api_key:
            logger.error("API key is not defined - Gemini requests will fail")
        genai.configure(api_key=self.config.google_api_key)

        logger.info(f"Gemini client initialized (timeout: {self.request_timeout or 'none'})")

    def _search_tools(self):
        if self.config.search_tool == LEGACY_SEARCH_TOOL:
            # Gemini 1.5 grounding, understood by the SDK as a plain string
            return LEGACY_SEARCH_TOOL
        return [GoogleSearchTool()]

    def _build_model(self, model_name: str, system_instruction: Optional[str] = None,
                     use_search: bool = False) -> "genai.GenerativeModel":
        tools = self._search_tools() if use_search else None
        return genai.GenerativeModel(
            model_name,
            system_instruction=system_instruction,
            tools=tools,
        )

    async def _call(self, func, *args, model_name: str = None, **kwargs):
        """Run a blocking SDK call off the event loop, honouring the optional timeout"""
        future = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
        try:
            if self.request_timeout:
                # Shielded: a thread cannot be cancelled, so the future must outlive the timeout
                return await asyncio.wait_for(asyncio.shield(future), timeout=self.request_timeout)
            return await future
        except asyncio.TimeoutError as e:
            future.add_done_callback(lambda f: self._log_abandoned(f, model_name))
            raise GeminiTimeoutError(f"Request to {model_name} timed out after {self.request_timeout}s",
                                     model=model_name, pending=future) from e
        except GeminiApiError:
            raise
        except Exception as e:
            raise GeminiApiError(f"Gemini API error ({model_name}): {e}", model=model_name) from e

    @staticmethod
    def _log_abandoned(future: "asyncio.Future", model_name: Optional[str]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        outcome = f"failed: {error}" if error else "returned"
        logger.warning(f"Timed-out request to {model_name} {outcome} after being abandoned")

    @staticmethod
    def extract_text(response: Any, model_name: str = None) -> str:
        """
        Extract generated text from a response.

        Returns an empty string when a candidate carries no text. Raises
        GeminiApiError when the response has no candidates at all (blocked or
        malformed).
        """
        if response is None:
            raise GeminiApiError("Empty response object", model=model_name)

        candidates = getattr(response, "candidates", None)
        if not candidates:
            block_reason = getattr(getattr(response, "prompt_feedback", None), "block_reason", None)
            raise GeminiApiError(f"Response has no candidates (block reason: {block_reason})",
                                 model=model_name)
        try:
            return response.text or ""
        except ValueError:
            # Candidate without text parts, e.g. a finish reason other than STOP
            logger.warning(f"Response from {model_name} contained no text parts")
            return ""

    async def generate_content(self,
                               parts: List[ContentPart],
                               model_name: str = None,
                               system_instruction: Optional[str] = None,
                               temperature: Optional[float] = None,
                               use_search: bool = False) -> str:
        """
        One-shot, stateless generation.

        Args:
            parts: Ordered content parts (text and/or inline data dicts)
            model_name: Gemini model id, defaults to the analysis model
            system_instruction: Optional system instruction
            temperature: Sampling temperature
            use_search: Attach the Google Search grounding tool

        Returns:
            Generated text, possibly empty
        """
        model_name = model_name or self.config.analysis_model
        model = self._build_model(model_name, system_instruction, use_search)
        generation_config = genai.GenerationConfig(temperature=temperature) if temperature is not None else None

        logger.debug(f"generate_content: model={model_name}, parts={len(parts)}, search={use_search}")
        response = await self._call(model.generate_content, parts,
                                    generation_config=generation_config,
                                    model_name=model_name)
        return self.extract_text(response, model_name)

    def start_chat(self,
                   model_name: str = None,
                   system_instruction: Optional[str] = None,
                   use_search: bool = True) -> "genai.ChatSession":
        """Create a stateful chat; history is held by the returned session"""
        model_name = model_name or self.config.chat_model
        model = self._build_model(model_name, system_instruction, use_search)
        logger.info(f"Started chat session on {model_name} (search: {use_search})")
        return model.start_chat()

    async def send_chat_message(self, chat: "genai.ChatSession", message: str) -> str:
        """Send one message on an existing chat and return the reply text"""
        model_name = getattr(getattr(chat, "model", None), "model_name", None)
        response = await self._call(chat.send_message, message, model_name=model_name)
        return self.extract_text(response, model_name)
