"""Sharing through the desktop's default handlers."""

import atexit
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtCore import QRect, QUrl, QUrlQuery
from PySide6.QtGui import QDesktopServices

from .errors import ShareError

logger = logging.getLogger(__name__)


class ShareService(ABC):
    """Hands a document to the platform's sharing mechanism."""

    @abstractmethod
    def share_pdf(
        self,
        data: bytes,
        bounds: QRect,
        filename: str,
        body: Optional[str] = None,
        subject: Optional[str] = None,
        emails: Optional[Sequence[str]] = None
    ) -> bool:
        """Share PDF bytes.

        Args:
            data: PDF file bytes
            bounds: Global rectangle of the share button, for platforms that
                anchor a popover to it
            filename: File name including the extension
            body: Extra text to send along
            subject: Subject line for mail targets
            emails: Recipients for mail targets

        Returns:
            True if the platform accepted the document

        Raises:
            ShareError: If the document could not be handed over
        """


class TempFileManager:
    """Manages temporary PDF files with automatic cleanup."""

    def __init__(self):
        """Initialize temp file manager with unique directory."""
        self.temp_dir: Optional[Path] = None
        self._initialized = False

    def _ensure_initialized(self):
        """Lazy initialization of temp directory."""
        if not self._initialized:
            self.temp_dir = Path(tempfile.mkdtemp(prefix="pdf_preview_"))
            atexit.register(self.cleanup)
            self._initialized = True

    def create_temp_pdf(self, data: bytes, original_name: str) -> Path:
        """Create temp file with original filename in managed directory."""
        self._ensure_initialized()

        safe_name = Path(original_name).name
        if not safe_name:
            safe_name = "document.pdf"

        temp_path = self.temp_dir / safe_name

        counter = 1
        while temp_path.exists():
            stem = Path(safe_name).stem
            suffix = Path(safe_name).suffix or ".pdf"
            temp_path = self.temp_dir / f"{stem}_{counter}{suffix}"
            counter += 1

        try:
            temp_path.write_bytes(data)
            return temp_path
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise ShareError(f"Failed to write temp PDF file: {e}") from e

    def cleanup(self):
        """Remove all temp files and directory."""
        if not self._initialized or not self.temp_dir:
            return

        shutil.rmtree(self.temp_dir, ignore_errors=True)
        self._initialized = False
        self.temp_dir = None


# Global temp file manager instance
_temp_file_manager: Optional[TempFileManager] = None


def get_temp_file_manager() -> TempFileManager:
    """Get or create global temp file manager instance."""
    global _temp_file_manager
    if _temp_file_manager is None:
        _temp_file_manager = TempFileManager()
    return _temp_file_manager


def build_mailto_url(
    emails: Optional[Sequence[str]],
    subject: Optional[str],
    body: Optional[str]
) -> QUrl:
    """Build a mailto: URL with recipients, subject and body."""
    url = QUrl()
    url.setScheme("mailto")
    url.setPath(",".join(emails or []))
    query = QUrlQuery()
    if subject:
        query.addQueryItem("subject", subject)
    if body:
        query.addQueryItem("body", body)
    if not query.isEmpty():
        url.setQuery(query)
    return url


class QtShareService(ShareService):
    """Share service backed by QDesktopServices.

    The PDF is written to a managed temporary directory. When mail
    metadata is given, the mail client is opened with it and the file is
    revealed so it can be attached; otherwise the file is opened with the
    desktop's default application.
    """

    def __init__(self, temp_files: Optional[TempFileManager] = None):
        self.temp_files = temp_files or get_temp_file_manager()

    def share_pdf(
        self,
        data: bytes,
        bounds: QRect,
        filename: str,
        body: Optional[str] = None,
        subject: Optional[str] = None,
        emails: Optional[Sequence[str]] = None
    ) -> bool:
        temp_path = self.temp_files.create_temp_pdf(data, filename)
        logger.debug("Sharing %s from anchor %s", temp_path, bounds)

        urls: List[QUrl] = []
        if emails or subject or body:
            urls.append(build_mailto_url(emails, subject, body))
            urls.append(QUrl.fromLocalFile(str(temp_path.parent)))
        else:
            urls.append(QUrl.fromLocalFile(str(temp_path)))

        for url in urls:
            if not QDesktopServices.openUrl(url):
                logger.warning("Desktop refused to open %s", url.toString())
                return False

        logger.info("Shared %s", temp_path.name)
        return True
