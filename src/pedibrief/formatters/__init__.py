"""Output formatters for exporting a ``PediatricSummary``.

Usage::

    from pedibrief.formatters import PDFFormatter, JSONFormatter

    pdf_bytes = PDFFormatter().format(summary, quiz_score=80)
    json_bytes = JSONFormatter().format(summary)
"""

from __future__ import annotations

from typing import Any

from pedibrief.formatters.email_formatter import EmailFormatter, EmailMessageContent
from pedibrief.formatters.json_formatter import JSONFormatter
from pedibrief.formatters.protocols import IOutputFormatter

__all__ = [
    "EmailFormatter",
    "EmailMessageContent",
    "IOutputFormatter",
    "JSONFormatter",
    "PDFFormatter",
]


def __getattr__(name: str) -> Any:
    """Lazy-load PDFFormatter so reportlab is only imported when needed."""
    if name == "PDFFormatter":
        from pedibrief.formatters.pdf_formatter import PDFFormatter

        return PDFFormatter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
