"""
Shared fixtures - adds src/ to sys.path and provides a stub Gemini client
"""
import asyncio
import base64
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

src_root = str(Path(__file__).resolve().parent.parent / "src")
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from dissertation_examiner.config import ExaminerConfig  # noqa: E402
from dissertation_examiner.constants.prompts import ROLE_CONFIGS  # noqa: E402
from dissertation_examiner.models.review_models import ProposalDocument, ReviewerRole  # noqa: E402

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def role_for_instruction(system_instruction: Optional[str]) -> Optional[ReviewerRole]:
    """Map a system instruction back to the reviewer role that owns it"""
    for role, role_config in ROLE_CONFIGS.items():
        if role_config.system_prompt == system_instruction:
            return role
    return None


class StubGeminiClient:
    """
    In-memory stand-in for GeminiClient.

    ``agent_handlers`` maps a role to a callable returning text or raising.
    ``synthesis_handler`` handles the synthesis prompt, ``chat_handler`` chat
    messages. Every call is recorded.
    """

    def __init__(self,
                 agent_handlers: Dict[ReviewerRole, Callable[[], str]] = None,
                 synthesis_handler: Callable[[str], str] = None,
                 chat_handler: Callable[[str], str] = None):
        self.agent_handlers = agent_handlers or {
            role: (lambda role=role: f"Kritik dari {role.value}") for role in ReviewerRole
        }
        self.synthesis_handler = synthesis_handler or (lambda prompt: "# LAPORAN: Pemeriksaan Proposal Disertasi")
        self.chat_handler = chat_handler or (lambda message: f"Jawaban untuk: {message}")
        self.agent_calls: List[dict] = []
        self.synthesis_prompts: List[str] = []
        self.chat_messages: List[str] = []
        self.chats_started: List[dict] = []

    async def generate_content(self, parts, model_name=None, system_instruction=None,
                               temperature=None, use_search=False):
        await asyncio.sleep(0)
        role = role_for_instruction(system_instruction)
        if role is None:
            self.synthesis_prompts.append(parts[0])
            return self.synthesis_handler(parts[0])
        self.agent_calls.append({
            "role": role, "parts": parts, "model_name": model_name,
            "temperature": temperature, "use_search": use_search,
        })
        return self.agent_handlers[role]()

    def start_chat(self, model_name=None, system_instruction=None, use_search=True):
        chat = object()
        self.chats_started.append({
            "chat": chat, "model_name": model_name,
            "system_instruction": system_instruction, "use_search": use_search,
        })
        return chat

    async def send_chat_message(self, chat, message):
        await asyncio.sleep(0)
        self.chat_messages.append(message)
        return self.chat_handler(message)


def failing(message: str = "network down"):
    def handler(*args):
        raise RuntimeError(message)
    return handler


@pytest.fixture
def examiner_config(tmp_path):
    return ExaminerConfig(
        _env_file=None,
        google_api_key="test-key",
        export_dir=str(tmp_path / "exports"),
        logs_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def proposal_document():
    return ProposalDocument(
        filename="proposal.pdf",
        mime_type="application/pdf",
        data_base64=base64.b64encode(PDF_BYTES).decode("ascii"),
        size_bytes=len(PDF_BYTES),
    )


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "proposal.pdf"
    path.write_bytes(PDF_BYTES)
    return path


@pytest.fixture
def stub_client():
    return StubGeminiClient()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep a developer's real credentials out of the tests"""
    for name in ("GOOGLE_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
