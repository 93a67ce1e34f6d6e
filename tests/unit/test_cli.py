"""Tests for the typer CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from pedibrief.cli.main import app, clean_auth_code
from pedibrief.core.identifiers import deidentified_id_pattern
from pedibrief.models import PediatricSummary
from pedibrief.notify.transports import GMAIL_SEND_SCOPE

runner = CliRunner()


@pytest.fixture
def summary_file(tmp_path: Path, sample_summary: PediatricSummary) -> Path:
    path = tmp_path / "summary.json"
    path.write_text(sample_summary.model_dump_json(by_alias=True), encoding="utf-8")
    return path


class TestNewId:
    def test_prints_requested_count(self):
        result = runner.invoke(app, ["new-id", "--count", "3"])
        assert result.exit_code == 0
        ids = result.stdout.split()
        assert len(ids) == 3
        assert all(deidentified_id_pattern().match(i) for i in ids)

    def test_custom_prefix(self):
        result = runner.invoke(app, ["new-id", "--prefix", "TEST"])
        assert result.exit_code == 0
        assert result.stdout.strip().startswith("TEST-")


class TestScore:
    def test_scores_answers(self, tmp_path: Path, summary_file: Path):
        answers = tmp_path / "answers.json"
        answers.write_text(
            json.dumps(
                [
                    {"questionId": "q1", "selectedOptionIndexes": [1]},
                    {"questionId": "q2", "selectedOptionIndexes": [0, 2]},
                ]
            ),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["score", str(summary_file), str(answers)])
        assert result.exit_code == 0
        assert "100/100" in result.stdout
        assert "2 of 3 answered" in result.stdout

    def test_zero_policy(self, tmp_path: Path, summary_file: Path):
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps([{"questionId": "q1", "selectedOptionIndexes": [1]}]), encoding="utf-8")
        result = runner.invoke(app, ["score", str(summary_file), str(answers), "--unanswered", "zero"])
        assert result.exit_code == 0
        assert "33/100" in result.stdout

    def test_rejects_bad_policy(self, tmp_path: Path, summary_file: Path):
        answers = tmp_path / "answers.json"
        answers.write_text("[]", encoding="utf-8")
        result = runner.invoke(app, ["score", str(summary_file), str(answers), "--unanswered", "maybe"])
        assert result.exit_code != 0


class TestExportPdf:
    def test_writes_pdf(self, tmp_path: Path, summary_file: Path):
        pytest.importorskip("reportlab")
        target = tmp_path / "out.pdf"
        result = runner.invoke(app, ["export-pdf", str(summary_file), "--output", str(target), "--score", "80"])
        assert result.exit_code == 0
        assert target.read_bytes().startswith(b"%PDF")


class TestCleanAuthCode:
    def test_bare_code(self):
        assert clean_auth_code("  4/0AeanR-abc  ") == "4/0AeanR-abc"

    def test_full_redirect_url(self):
        url = "http://localhost:3000/oauth2callback?code=4%2F0AeanR-abc&scope=https://mail.google.com"
        assert clean_auth_code(url) == "4/0AeanR-abc"


class TestGmailToken:
    def test_prints_refresh_token(self):
        with patch("google_auth_oauthlib.flow.Flow") as mock_flow:
            flow = mock_flow.from_client_config.return_value
            flow.authorization_url.return_value = ("https://accounts.google.com/o/oauth2/auth?x=1", "state")
            flow.credentials.refresh_token = "1//refresh-abc"
            result = runner.invoke(
                app,
                ["gmail-token", "--client-id", "cid", "--client-secret", "secret"],
                input="http://localhost:3000/oauth2callback?code=4%2F0Aabc\n",
            )

        assert result.exit_code == 0
        assert "GMAIL_REFRESH_TOKEN=1//refresh-abc" in result.stdout
        assert mock_flow.from_client_config.call_args.kwargs["scopes"] == [GMAIL_SEND_SCOPE]
        flow.fetch_token.assert_called_once_with(code="4/0Aabc")

    def test_requires_client_credentials(self, monkeypatch):
        for name in (
            "GMAIL_CLIENT_ID",
            "GMAIL_CLIENT_SECRET",
            "PEDIBRIEF_EMAIL_GMAIL_CLIENT_ID",
            "PEDIBRIEF_EMAIL_GMAIL_CLIENT_SECRET",
        ):
            monkeypatch.delenv(name, raising=False)
        result = runner.invoke(app, ["gmail-token"])
        assert result.exit_code == 1
