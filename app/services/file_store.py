# File: app/services/file_store.py
import logging
import os
import uuid
from typing import BinaryIO, Optional
from app.core.config import settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf"}
PDF_MAGIC = b"%PDF"

class LocalFileStore:
    """Validated PDFs on local disk, addressed by a path relative to the upload root"""

    def __init__(self, base_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self.base_dir = base_dir or settings.UPLOAD_DIR
        self.max_bytes = max_bytes or settings.max_pdf_size_bytes

    def _validate(self, stream: BinaryIO, filename: str) -> bytes:
        file_ext = os.path.splitext(filename or "")[1].lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise ValidationError("PDF only", fields={"file": "only .pdf files are accepted"})

        # Check file size
        stream.seek(0, 2)
        size = stream.tell()
        stream.seek(0)
        if size == 0:
            raise ValidationError("PDF file required", fields={"file": "file is empty"})
        if size > self.max_bytes:
            raise ValidationError(
                f"File too large. Maximum {self.max_bytes // (1024 * 1024)}MB allowed",
                fields={"file": "too large"},
            )

        content = stream.read()
        if not content.startswith(PDF_MAGIC):
            raise ValidationError("PDF only", fields={"file": "content is not a PDF"})
        return content

    def save(self, stream: BinaryIO, filename: str, subdir: str, stored_name: Optional[str] = None) -> str:
        """Write the PDF under ``subdir`` and return its reference"""
        content = self._validate(stream, filename)
        reference = self.reference_for(subdir, stored_name or f"{uuid.uuid4()}.pdf")

        target = self.path_for(reference)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as buffer:
            buffer.write(content)

        logger.info(f"📄 Stored {len(content)} bytes at {reference}")
        return reference

    def reference_for(self, subdir: str, name: str) -> str:
        return "/".join([subdir.strip("/"), name])

    def move(self, source: str, destination: str) -> str:
        """Rename a stored file, replacing whatever ``destination`` held"""
        os.replace(self.path_for(source), self.path_for(destination))
        logger.info(f"📦 Moved {source} to {destination}")
        return destination

    def path_for(self, reference: str) -> str:
        full = os.path.abspath(os.path.join(self.base_dir, reference))
        root = os.path.abspath(self.base_dir)
        if os.path.commonpath([full, root]) != root:
            raise ValidationError("Invalid file reference")
        return full

    def delete(self, reference: Optional[str]) -> None:
        if not reference:
            return
        path = self.path_for(reference)
        if os.path.exists(path):
            os.remove(path)
            logger.info(f"🗑️ Removed {reference}")

def event_subdir(event_id: int, *parts: str) -> str:
    return "/".join(["events", str(event_id), *parts])
