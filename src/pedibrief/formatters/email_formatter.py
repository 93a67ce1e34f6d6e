"""HTML email rendering for doctor notifications.

Every interpolated string is HTML-escaped: summary text and option labels
come from a language model and must not be able to inject markup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape

from pedibrief.core.config import EmailConfig
from pedibrief.models import DoctorReport, PediatricSummary, ReconciliationRecord

_CORRECT_COLOR = "#16A34A"
_INCORRECT_COLOR = "#DC2626"
_BRAND_COLOR = "#2D7F78"


@dataclass(frozen=True)
class EmailMessageContent:
    """Rendered subject and HTML body."""

    subject: str
    html: str


def _list(items: list[str]) -> str:
    if not items:
        return "<p><em>None listed.</em></p>"
    return "<ul>" + "".join(f"<li>{escape(i)}</li>" for i in items) + "</ul>"


class EmailFormatter:
    """Renders a ``DoctorReport`` into a subject line and HTML body."""

    def __init__(self, config: EmailConfig | None = None) -> None:
        self._config = config or EmailConfig()

    def format(self, report: DoctorReport, *, sent_at: datetime | None = None) -> EmailMessageContent:
        subject = self._config.subject_template.format(
            patient_id=report.patient_id,
            score=report.quiz_score,
        )
        sent_at = sent_at or datetime.now(timezone.utc)
        body = "\n".join(
            [
                "<html><body style=\"font-family: Arial, sans-serif; color: #323232;\">",
                f"<h2 style=\"color: {_BRAND_COLOR};\">PediBrief Quiz Results</h2>",
                f"<p><strong>Patient ID:</strong> {escape(report.patient_id)}</p>",
                f"<p><strong>Quiz Score:</strong> {report.quiz_score}/100</p>",
                f"<p><strong>Submitted:</strong> {sent_at:%Y-%m-%d %H:%M} UTC</p>",
                self._render_records(report.quiz_data),
                self._render_summary(report.summary),
                "<hr/>",
                "<p style=\"font-size: 12px; color: #969696;\">This message contains a "
                "de-identified patient ID only. No protected health information was shared "
                "and nothing from this session was stored.</p>",
                "</body></html>",
            ]
        )
        return EmailMessageContent(subject=subject, html=body)

    def _render_records(self, records: list[ReconciliationRecord]) -> str:
        parts = ["<h3>Quiz Answers</h3>"]
        if not records:
            parts.append("<p><em>No questions were answered.</em></p>")
            return "\n".join(parts)

        for number, record in enumerate(records, start=1):
            color = _CORRECT_COLOR if record.is_correct else _INCORRECT_COLOR
            verdict = "Correct" if record.is_correct else "Incorrect"
            parts.append("<div style=\"margin-bottom: 16px;\">")
            parts.append(
                f"<p><strong>{number}. {escape(record.question)}</strong> "
                f"<span style=\"color: {color};\">({verdict})</span></p>"
            )
            if record.options:
                parts.append(self._render_options(record))
            if record.answer_text:
                parts.append(f"<p><em>Answer:</em> {escape(record.answer_text)}</p>")
            if record.explanation:
                parts.append(f"<p><em>Explanation:</em> {escape(record.explanation)}</p>")
            parts.append("</div>")
        return "\n".join(parts)

    @staticmethod
    def _render_options(record: ReconciliationRecord) -> str:
        correct = set(record.correct_options)
        selected = set(record.patient_selected)
        rows = []
        for index, option in enumerate(record.options):
            marks = []
            if index in selected:
                marks.append("selected")
            if index in correct:
                marks.append("correct")
            suffix = f" <em>[{', '.join(marks)}]</em>" if marks else ""
            rows.append(f"<li>{escape(option)}{suffix}</li>")
        return "<ul>" + "".join(rows) + "</ul>"

    @staticmethod
    def _render_summary(summary: PediatricSummary) -> str:
        meds = [
            f"{m.name} - {m.dose}, {m.timing}" + (f" ({m.notes})" if m.notes else "")
            for m in summary.medications
        ]
        return "\n".join(
            [
                "<h3>Summary Provided to the Family</h3>",
                f"<p>{escape(summary.simple_explanation)}</p>",
                "<h4>Red Flags</h4>",
                _list(summary.red_flags),
                "<h4>What To Do</h4>",
                _list(summary.what_to_do),
                "<h4>What To Avoid</h4>",
                _list(summary.what_not_to_do),
                "<h4>Medications</h4>",
                _list(meds),
                "<h4>Follow-Up</h4>",
                _list(summary.follow_up),
                "<h4>Expected Course</h4>",
                f"<p>{escape(summary.expected_course)}</p>",
            ]
        )
