"""Input checks applied before any discharge summary leaves the process."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import PurePath

from pedibrief.core.config import IntakeConfig
from pedibrief.exceptions import InputValidationError

# mimetypes lacks webp on some older platforms
_SUFFIX_TYPES = {".webp": "image/webp"}


@dataclass(frozen=True)
class DocumentUpload:
    """A validated discharge summary file."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size_kb(self) -> float:
        return len(self.data) / 1024


def validate_text(text: str, config: IntakeConfig | None = None) -> str:
    """Return the stripped summary text or raise if it is too short to process."""
    config = config or IntakeConfig()
    stripped = (text or "").strip()
    if len(stripped) < config.min_text_chars:
        raise InputValidationError(
            f"Discharge summary must be at least {config.min_text_chars} characters "
            f"(got {len(stripped)}). Paste the complete summary."
        )
    return stripped


def validate_document(
    data: bytes,
    filename: str,
    content_type: str | None = None,
    config: IntakeConfig | None = None,
) -> DocumentUpload:
    """Accept PDFs and images (PNG, JPG, JPEG, WEBP) up to the configured size."""
    config = config or IntakeConfig()
    suffix = PurePath(filename or "").suffix.lower()
    declared = (content_type or "").split(";")[0].strip().lower()

    type_ok = declared in config.allowed_content_types
    ext_ok = suffix in config.allowed_extensions
    if not type_ok and not ext_ok:
        raise InputValidationError("Please select a PDF or image file (PNG, JPG, JPEG, or WEBP)")

    if not data:
        raise InputValidationError("Uploaded file is empty")
    if len(data) > config.max_file_bytes:
        limit_mb = config.max_file_bytes / (1024 * 1024)
        raise InputValidationError(f"File size must be less than {limit_mb:g}MB")

    if not type_ok:
        declared = mimetypes.guess_type(f"upload{suffix}")[0] or _SUFFIX_TYPES.get(
            suffix, "application/octet-stream"
        )
    if declared == "image/jpg":
        declared = "image/jpeg"
    return DocumentUpload(filename=filename, content_type=declared, data=data)
