"""preview command: render a submission exactly as it would be published."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax

from reviewgate_core.formatter import data_file_path, format_review
from reviewgate_core.models import ReviewSubmission

console = Console()


@click.command("preview")
@click.option(
    "--details",
    "details_file",
    required=True,
    type=click.File("r"),
    help="JSON file holding a submission's details object.",
)
@click.option("--raw", is_flag=True, help="Print the Markdown body as plain text.")
@click.pass_context
def preview_cmd(ctx, details_file, raw: bool):
    """Show the title, body and data file entry for a submission."""
    try:
        details = json.load(details_file)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--details")
    if isinstance(details, dict) and isinstance(details.get("details"), dict):
        details = details["details"]
    if not isinstance(details, dict):
        raise click.BadParameter("expected a JSON object", param_hint="--details")

    config = ctx.obj["config"]
    submission = ReviewSubmission.from_payload(details)
    formatted = format_review(submission, config.attribution)
    body = formatted.issue_body if config.mode == "issue" else formatted.body

    console.print(f"[bold]{formatted.title}[/bold]")
    if raw:
        console.print(body, markup=False, highlight=False)
    else:
        console.print(Panel(Markdown(body), title=config.mode))
    if config.mode != "issue":
        console.print(f"\n[cyan]{data_file_path(submission.course, config.data_dir)}[/cyan]")
        console.print(Syntax(formatted.entry, "yaml"))
