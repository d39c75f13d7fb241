"""CLI entry point for reviewgate.

Commands:
  serve    : run the submission endpoint
  preview  : render a review locally without touching GitHub
  check    : show the resolved configuration and what is missing
"""

from __future__ import annotations

import importlib.metadata

import click

from reviewgate_cli.commands.check import check_cmd
from reviewgate_cli.commands.preview import preview_cmd
from reviewgate_cli.commands.serve import serve_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewgate"),
    prog_name="reviewgate",
)
@click.option(
    "--config",
    "config_path",
    default=".reviewgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWGATE_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str):
    """Forward course review submissions to GitHub."""
    from reviewgate_core.config import load_config

    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


main.add_command(serve_cmd)
main.add_command(preview_cmd)
main.add_command(check_cmd)
