"""JSON output formatter: companion to the PDF export for API and CLI use."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pedibrief.models import PediatricSummary


class JSONFormatter:
    """Renders ``PediatricSummary`` as indented camelCase JSON bytes.

    Pass ``quiz_score`` to embed the score alongside the summary.
    """

    def format(self, summary: PediatricSummary, **kwargs: Any) -> bytes:
        payload: dict[str, Any] = summary.model_dump(mode="json", by_alias=True)
        if kwargs.get("quiz_score") is not None:
            payload = {"quizScore": kwargs["quiz_score"], "summary": payload}
        return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")

    def format_to_file(self, summary: PediatricSummary, path: Path, **kwargs: Any) -> Path:
        """Write JSON to *path* and return it."""
        path.write_bytes(self.format(summary, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/json"
