"""CLI for pedibrief: summarize / export-pdf / score / new-id / gmail-token / serve."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import typer
from rich.console import Console
from rich.table import Table

from pedibrief.core.config import AppSettings, EmailConfig, LLMConfig
from pedibrief.core.identifiers import generate_deidentified_id
from pedibrief.exceptions import PediBriefError
from pedibrief.models import PediatricSummary, QuizAnswer
from pedibrief.notify.transports import GMAIL_SEND_SCOPE
from pedibrief.providers.client import LLMClient
from pedibrief.quiz.reconciliation import score_quiz
from pedibrief.services.summarizer import SummarizationService

app = typer.Typer(name="pedibrief", help="Parent-friendly pediatric discharge summaries")
console = Console()

_TEXT_SUFFIXES = {".txt", ".md", ""}


def _build_settings(api_key: Optional[str], model: Optional[str]) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    settings = AppSettings()
    overrides: dict = {}
    if api_key:
        overrides["api_key"] = api_key
    if model:
        overrides["model"] = model
    if overrides:
        settings.llm = LLMConfig(**{**settings.llm.model_dump(), **overrides})
    return settings


def _load_summary(path: Path) -> PediatricSummary:
    raw = json.loads(path.read_text(encoding="utf-8"))
    # Files written by `summarize --output` with a score wrap the summary
    if isinstance(raw, dict) and "summary" in raw and "simpleExplanation" not in raw:
        raw = raw["summary"]
    return PediatricSummary.model_validate(raw)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def clean_auth_code(raw: str) -> str:
    """Accept either the bare code or the whole redirect URL pasted from the browser."""
    value = raw.strip()
    if "code=" in value:
        value = value.split("code=", 1)[1]
    return unquote(value.split("&", 1)[0])


@app.command()
def summarize(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Discharge summary (.txt, .pdf or image)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write summary JSON here"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="LLM API key"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model name"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Simplify a discharge summary into a parent-friendly summary with a quiz."""
    _configure_logging(verbose)
    settings = _build_settings(api_key, model)
    service = SummarizationService(LLMClient(settings.llm), intake=settings.intake, quiz=settings.quiz)

    async def _run() -> PediatricSummary:
        if input_file.suffix.lower() in _TEXT_SUFFIXES:
            return await service.summarize_text(input_file.read_text(encoding="utf-8"))
        return await service.summarize_document(input_file.read_bytes(), input_file.name)

    console.print(f"[bold]Summarizing {input_file}[/bold]")
    try:
        summary = asyncio.run(_run())
    except PediBriefError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[bold]What happened:[/bold] {summary.simple_explanation}\n")
    table = Table(title="Care Summary")
    table.add_column("Section", style="cyan")
    table.add_column("Items", justify="right")
    table.add_row("Red flags", str(len(summary.red_flags)))
    table.add_row("What to do", str(len(summary.what_to_do)))
    table.add_row("What to avoid", str(len(summary.what_not_to_do)))
    table.add_row("Medications", str(len(summary.medications)))
    table.add_row("Follow-up tasks", str(len(summary.follow_up)))
    table.add_row("Quiz questions", str(len(summary.quiz_questions)))
    console.print(table)

    if output:
        output.write_text(summary.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"[green]Summary saved to {output}[/green]")


@app.command("export-pdf")
def export_pdf(
    summary_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Summary JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="PDF path"),
    quiz_score: Optional[int] = typer.Option(None, "--score", min=0, max=100, help="Quiz score to show"),
) -> None:
    """Render a summary JSON file as a PDF."""
    from pedibrief.formatters.pdf_formatter import PDFFormatter

    settings = AppSettings()
    formatter = PDFFormatter(settings.pdf, passing_score=settings.quiz.passing_score)
    target = output or Path(formatter.filename)
    formatter.format_to_file(_load_summary(summary_file), target, quiz_score=quiz_score)
    console.print(f"[green]PDF saved to {target}[/green]")


@app.command()
def score(
    summary_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Summary JSON file"),
    answers_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of answers"),
    unanswered: Optional[str] = typer.Option(None, "--unanswered", help="exclude or zero"),
) -> None:
    """Score a set of quiz answers against a summary's answer key."""
    if unanswered not in (None, "exclude", "zero"):
        raise typer.BadParameter("--unanswered must be 'exclude' or 'zero'")

    summary = _load_summary(summary_file)
    raw_answers = json.loads(answers_file.read_text(encoding="utf-8"))
    if not isinstance(raw_answers, list):
        raise typer.BadParameter(f"Expected JSON array in {answers_file}")
    answers = [QuizAnswer.model_validate(a) for a in raw_answers]

    policy = unanswered or AppSettings().quiz.unanswered_policy
    outcome = score_quiz(summary, answers, unanswered=policy)

    table = Table(title="Quiz Results")
    table.add_column("Question", style="cyan", max_width=60)
    table.add_column("Selected")
    table.add_column("Correct")
    table.add_column("Result")
    for record in outcome.records:
        table.add_row(
            record.question,
            record.answer_text or ", ".join(str(i) for i in record.patient_selected),
            ", ".join(str(i) for i in record.correct_options),
            "[green]correct[/green]" if record.is_correct else "[red]incorrect[/red]",
        )
    console.print(table)
    console.print(
        f"\n[bold]Score:[/bold] {outcome.score}/100 "
        f"({outcome.answered} of {outcome.total_questions} answered)"
    )


@app.command("new-id")
def new_id(
    prefix: Optional[str] = typer.Option(None, "--prefix", help="ID prefix (default from config)"),
    count: int = typer.Option(1, "--count", "-n", min=1, help="How many IDs to print"),
) -> None:
    """Print de-identified patient IDs."""
    prefix = prefix or EmailConfig().id_prefix
    for _ in range(count):
        typer.echo(generate_deidentified_id(prefix))


@app.command("gmail-token")
def gmail_token(
    client_id: Optional[str] = typer.Option(None, "--client-id", help="OAuth client id (default GMAIL_CLIENT_ID)"),
    client_secret: Optional[str] = typer.Option(
        None, "--client-secret", help="OAuth client secret (default GMAIL_CLIENT_SECRET)"
    ),
    redirect_uri: Optional[str] = typer.Option(None, "--redirect-uri", help="Registered redirect URI"),
) -> None:
    """Mint a Gmail refresh token through the OAuth consent screen."""
    from google_auth_oauthlib.flow import Flow

    email = EmailConfig()
    client_id = client_id or email.gmail_client_id
    client_secret = client_secret or email.gmail_client_secret
    redirect_uri = redirect_uri or email.gmail_redirect_uri
    if not client_id or not client_secret:
        console.print("[red]GMAIL_CLIENT_ID and GMAIL_CLIENT_SECRET must be set[/red]")
        raise typer.Exit(code=1)

    flow = Flow.from_client_config(
        {
            "installed": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": email.gmail_token_uri,
                "redirect_uris": [redirect_uri],
            }
        },
        scopes=[GMAIL_SEND_SCOPE],
        redirect_uri=redirect_uri,
    )
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    console.print("[bold]Step 1:[/bold] open this URL and sign in with the sending Gmail account:\n")
    console.print(auth_url, soft_wrap=True)
    console.print(
        "\n[bold]Step 2:[/bold] after you allow access the browser is sent to the redirect URI. "
        "The page may fail to load; copy the address bar (or just the code= value)."
    )
    code = clean_auth_code(typer.prompt("Paste the code or redirect URL"))

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        console.print(f"[red]Token exchange failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    refresh_token = flow.credentials.refresh_token
    if not refresh_token:
        console.print(
            "[red]No refresh token returned. Revoke the app's access in your Google account and retry.[/red]"
        )
        raise typer.Exit(code=1)

    console.print("\n[green]Add this line to your .env:[/green]\n")
    typer.echo(f"GMAIL_REFRESH_TOKEN={refresh_token}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    api = AppSettings().api
    uvicorn.run(
        "pedibrief.api.app:app",
        host=host or api.host,
        port=port or api.port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
