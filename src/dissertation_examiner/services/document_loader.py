"""
Document ingestion: validate an uploaded proposal and encode it for transmission.

Only PDF is accepted. A file is rejected when neither its declared nor its
guessed media type is PDF, when its bytes do not carry the PDF signature, when
it is empty, or when it exceeds the inline-data size limit.
"""
import base64
import binascii
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import aiofiles

from ..config import ExaminerConfig, config as default_config
from ..constants import messages
from ..exceptions import DocumentValidationError
from ..models.review_models import ProposalDocument

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"


class DocumentLoader:
    """Reads proposals from disk or from base64 payloads and validates them"""

    def __init__(self, examiner_config: ExaminerConfig = None):
        self.config = examiner_config or default_config
        self.accepted_mime_types = list(self.config.accepted_mime_types)
        self.max_size_bytes = self.config.max_document_size_bytes

    def _resolve_mime_type(self, filename: str, declared: Optional[str]) -> Optional[str]:
        if declared:
            return declared.split(";")[0].strip().lower()
        guessed, _ = mimetypes.guess_type(filename)
        return guessed

    def _check_size(self, filename: str, size: int) -> None:
        if size > self.max_size_bytes:
            raise DocumentValidationError(
                f"Document {filename} is {size} bytes, limit is {self.max_size_bytes}",
                user_message=messages.DOCUMENT_TOO_LARGE.format(limit_mb=self.config.max_document_size_mb),
                filename=filename,
            )

    def validate(self, filename: str, data: bytes, mime_type: Optional[str] = None) -> ProposalDocument:
        """
        Validate raw bytes and wrap them as a ProposalDocument.

        Raises:
            DocumentValidationError: with a user-facing message
        """
        resolved = self._resolve_mime_type(filename, mime_type)
        if resolved not in self.accepted_mime_types:
            logger.warning(f"Rejected {filename}: media type {resolved!r} not accepted")
            raise DocumentValidationError(
                f"Unsupported media type {resolved!r} for {filename}",
                user_message=messages.DOCUMENT_NOT_PDF,
                filename=filename,
            )

        if not data:
            raise DocumentValidationError(
                f"Document {filename} is empty",
                user_message=messages.DOCUMENT_EMPTY,
                filename=filename,
            )

        self._check_size(filename, len(data))

        if not data.startswith(PDF_SIGNATURE):
            logger.warning(f"Rejected {filename}: missing PDF signature")
            raise DocumentValidationError(
                f"Document {filename} does not look like a PDF",
                user_message=messages.DOCUMENT_NOT_PDF,
                filename=filename,
            )

        document = ProposalDocument(
            filename=filename,
            mime_type=resolved,
            data_base64=base64.b64encode(data).decode("ascii"),
            size_bytes=len(data),
        )
        logger.info(f"Loaded proposal {filename} ({len(data):,} bytes)")
        return document

    async def load_from_path(self, path: Union[str, Path], mime_type: Optional[str] = None) -> ProposalDocument:
        """Read a proposal from disk"""
        path = Path(path)
        if not path.is_file():
            raise DocumentValidationError(
                f"File not found: {path}",
                user_message=messages.DOCUMENT_UNREADABLE,
                filename=path.name,
            )
        try:
            # Oversized files are refused before any byte is read
            self._check_size(path.name, path.stat().st_size)
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise DocumentValidationError(
                f"Cannot read {path}: {e}",
                user_message=messages.DOCUMENT_UNREADABLE,
                filename=path.name,
            ) from e
        return self.validate(path.name, data, mime_type)

    def load_from_base64(self, filename: str, content_base64: str,
                         mime_type: Optional[str] = None) -> ProposalDocument:
        """Accept an already-encoded payload; a data URL prefix is stripped"""
        if content_base64.startswith("data:") and "," in content_base64:
            header, content_base64 = content_base64.split(",", 1)
            if mime_type is None:
                mime_type = header[len("data:"):].split(";")[0] or None
        try:
            data = base64.b64decode("".join(content_base64.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DocumentValidationError(
                f"Invalid base64 payload for {filename}: {e}",
                user_message=messages.DOCUMENT_UNREADABLE,
                filename=filename,
            ) from e
        return self.validate(filename, data, mime_type)
