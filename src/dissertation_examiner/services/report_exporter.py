"""
Export of the final examination report as a Markdown file.
"""
import logging
import re
from pathlib import Path
from typing import Optional, Union

import aiofiles

from ..config import ExaminerConfig, config as default_config
from ..constants import messages

logger = logging.getLogger(__name__)

# Characters that are unsafe in file names on common platforms
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def export_filename(source_filename: Optional[str]) -> str:
    """Laporan_Kritik_<source name>.md, or Laporan_Kritik_Proposal.md without a source"""
    name = Path(source_filename).name if source_filename else ""
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip() or messages.EXPORT_DEFAULT_NAME
    return messages.EXPORT_FILENAME_TEMPLATE.format(name=name)


class ReportExporter:
    """Writes reports to the configured export directory"""

    content_type = messages.EXPORT_CONTENT_TYPE

    def __init__(self, examiner_config: ExaminerConfig = None):
        self.config = examiner_config or default_config
        self.export_dir = Path(self.config.export_dir)

    async def export(self, report_text: str, source_filename: Optional[str] = None,
                     export_dir: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the report and return the file path.

        Args:
            report_text: Markdown report (may be a failure notice)
            source_filename: Name of the analysed document
            export_dir: Override for the configured export directory
        """
        target_dir = Path(export_dir) if export_dir else self.export_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / export_filename(source_filename)

        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(report_text)

        logger.info(f"Exported report to {path} ({len(report_text):,} chars, {self.content_type})")
        return path
