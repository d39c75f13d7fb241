"""serve command: run the submission endpoint under uvicorn."""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from reviewgate_cli.auth import with_gh_token


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8787, show_default=True, type=int)
@click.option(
    "--log-level",
    default="info",
    show_default=True,
    type=click.Choice(["debug", "info", "warning", "error"]),
)
@click.option("--gh-auth", is_flag=True, help="Use the gh CLI session token when GITHUB_TOKEN is unset.")
@click.pass_context
def serve_cmd(ctx, host: str, port: int, log_level: str, gh_auth: bool):
    """Serve the review submission endpoint.

    \b
    Required environment variables:
      GITHUB_TOKEN          GitHub token with contents and pull request scope (or --gh-auth)
      RECAPTCHA_SECRET_KEY  reCAPTCHA server-side secret
    """
    import uvicorn

    from reviewgate_server.app import create_app

    config = ctx.obj["config"]
    if gh_auth:
        config = with_gh_token(config)
    missing = config.missing()
    if missing:
        raise click.UsageError("Missing configuration: " + ", ".join(missing))

    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    uvicorn.run(create_app(config), host=host, port=port, log_level=log_level, log_config=None)
