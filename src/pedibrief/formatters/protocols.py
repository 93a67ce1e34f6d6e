"""Output formatter protocol: the contract all formatters implement."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pedibrief.models import PediatricSummary


@runtime_checkable
class IOutputFormatter(Protocol):
    """Protocol for summary export formatters (PDF, JSON)."""

    def format(self, summary: PediatricSummary, **kwargs: Any) -> bytes:
        """Render the summary into output bytes."""
        ...

    def format_to_file(self, summary: PediatricSummary, path: Path, **kwargs: Any) -> Path:
        """Render and write to a file. Returns the output path."""
        ...

    @property
    def content_type(self) -> str:
        """MIME type for the output format (e.g. 'application/pdf')."""
        ...


__all__ = ["IOutputFormatter"]
