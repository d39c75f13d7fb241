"""check command: print the resolved configuration."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewgate_cli.auth import with_gh_token

console = Console()


def _mask(secret: str | None) -> str:
    if not secret:
        return "[red]not set[/red]"
    return "****" + secret[-4:] if len(secret) > 8 else "****"


@click.command("check")
@click.option("--gh-auth", is_flag=True, help="Use the gh CLI session token when GITHUB_TOKEN is unset.")
@click.pass_context
def check_cmd(ctx, gh_auth: bool):
    """Show the effective configuration and exit non-zero if it is incomplete."""
    config = ctx.obj["config"]
    if gh_auth:
        config = with_gh_token(config)

    table = Table(show_header=False)
    table.add_row("Repository", config.repo_full_name if config.owner and config.repo else "[red]not set[/red]")
    table.add_row("Mode", config.mode)
    table.add_row("Base branch", config.base_branch)
    table.add_row("Allowed origin", config.origin)
    table.add_row("Data directory", config.data_dir)
    table.add_row("Labels", ", ".join(config.labels) or "none")
    table.add_row("Reviewers", ", ".join(config.reviewers) or "none")
    table.add_row("Team reviewers", ", ".join(config.team_reviewers) or "none")
    table.add_row("GitHub token", _mask(config.github_token))
    table.add_row("reCAPTCHA secret", _mask(config.recaptcha_secret))
    console.print(table)

    missing = config.missing()
    if missing:
        console.print(f"[red]Missing: {', '.join(missing)}[/red]")
        ctx.exit(1)
    console.print("[green]Configuration complete.[/green]")
