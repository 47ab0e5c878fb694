"""
Conversational session bridge for follow-up questions about a report.

The remote chat keeps the conversation history; locally we only track the
rendered transcript and whether the examination report has been injected.
Sends are single-flight: a user message arriving while another one is still
waiting for its reply is rejected, never dispatched concurrently.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from ..clients.gemini_client import GeminiClient
from ..config import ExaminerConfig, config as default_config
from ..constants import messages
from ..constants.prompts import EXAMINER_SYSTEM_INSTRUCTION, PRIMING_TEMPLATE
from ..exceptions import (
    EmptyMessageError, GeminiTimeoutError, SessionAlreadyOpenError, SessionBusyError,
    SessionNotOpenError
)
from ..models.review_models import TranscriptEntry, TranscriptRole

logger = logging.getLogger(__name__)


class DialogueSession:
    """
    One persistent academic chat, owned by a single surface for its lifetime.

    The session is primed at most once. Reports produced by later analysis
    runs do not replace the context already injected.
    """

    def __init__(self, gemini_client: GeminiClient, examiner_config: ExaminerConfig = None):
        self.gemini_client = gemini_client
        self.config = examiner_config or default_config
        self._chat: Optional[Any] = None
        self._primed = False
        self._lock = asyncio.Lock()
        self._abandoned: Optional[asyncio.Future] = None
        self._transcript: List[TranscriptEntry] = [
            TranscriptEntry(role=TranscriptRole.MODEL, content=messages.CHAT_WELCOME)
        ]

    @property
    def is_open(self) -> bool:
        return self._chat is not None

    @property
    def is_primed(self) -> bool:
        return self._primed

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @property
    def transcript(self) -> List[TranscriptEntry]:
        return list(self._transcript)

    def open_session(self) -> None:
        """Create the remote chat with the examiner persona and search enabled"""
        if self._chat is not None:
            raise SessionAlreadyOpenError("Dialogue session is already open")
        self._chat = self.gemini_client.start_chat(
            model_name=self.config.chat_model,
            system_instruction=EXAMINER_SYSTEM_INSTRUCTION,
            use_search=True,
        )

    def _require_open(self) -> None:
        if self._chat is None:
            raise SessionNotOpenError("Dialogue session has not been opened")

    def _append(self, role: TranscriptRole, content: str) -> TranscriptEntry:
        entry = TranscriptEntry(role=role, content=content)
        self._transcript.append(entry)
        return entry

    @asynccontextmanager
    async def _exclusive_turn(self):
        """Hold the session for one remote exchange"""
        await self._lock.acquire()
        try:
            yield
        finally:
            abandoned, self._abandoned = self._abandoned, None
            if abandoned is not None and not abandoned.done():
                # A timed-out request is still running on this chat; stay busy until it settles
                abandoned.add_done_callback(lambda _: self._lock.release())
            else:
                self._lock.release()

    async def _exchange(self, message: str) -> str:
        """Send on the remote chat; the caller holds the turn"""
        try:
            return await self.gemini_client.send_chat_message(self._chat, message)
        except GeminiTimeoutError as e:
            self._abandoned = e.pending
            raise

    async def prime_with_context(self, report_text: str) -> bool:
        """
        Inject the examination report into the remote history.

        Waits for an in-flight send to finish rather than rejecting.

        Returns:
            True if this call primed the session, False if it was already
            primed or the priming message failed
        """
        self._require_open()
        if self._primed:
            logger.info("Dialogue session already primed - ignoring new report context")
            return False

        async with self._exclusive_turn():
            # Another caller may have primed while we waited for the lock
            if self._primed:
                logger.info("Dialogue session primed concurrently - skipping")
                return False
            try:
                await self._exchange(PRIMING_TEMPLATE.format(report_text=report_text))
            except Exception as e:
                logger.error(f"Failed to inject report context: {e}")
                return False

            self._primed = True
            self._append(TranscriptRole.SYSTEM, messages.CHAT_CONTEXT_LOADED)
            logger.info(f"Report context loaded into dialogue session ({len(report_text):,} chars)")
            return True

    async def send(self, user_text: str) -> TranscriptEntry:
        """
        Send one user message and record the reply.

        After a timeout the session stays busy until the abandoned request
        returns, so two requests never run on the remote chat at once.

        Returns:
            The model (or apology) transcript entry appended for this send

        Raises:
            SessionNotOpenError, EmptyMessageError, SessionBusyError
        """
        self._require_open()
        if not user_text or not user_text.strip():
            raise EmptyMessageError("Message is empty")
        if self._lock.locked():
            raise SessionBusyError("A message is already awaiting a reply")

        async with self._exclusive_turn():
            self._append(TranscriptRole.USER, user_text)
            try:
                reply = await self._exchange(user_text)
            except Exception as e:
                logger.error(f"Chat send failed: {e}")
                return self._append(TranscriptRole.MODEL, messages.CHAT_SEND_FAILED)

            return self._append(TranscriptRole.MODEL, reply or messages.CHAT_EMPTY_RESPONSE)
