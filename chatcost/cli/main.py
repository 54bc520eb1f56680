"""Main CLI entry point for ChatCost."""

import logging
import sys

import click
from pydantic import ValidationError

from chatcost import __version__
from chatcost.config.settings import Settings


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to YAML configuration file"
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (default: WARNING)"
)
@click.pass_context
def cli(ctx, config, log_level):
    """ChatCost - chat with OpenAI, Gemini, Claude or a custom endpoint.

    Tracks input/output tokens and estimated cost for every exchange.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)

    try:
        if config:
            ctx.obj["settings"] = Settings.load_from_file(config)
        else:
            ctx.obj["settings"] = Settings()
    except ValidationError as e:
        click.echo(f"Error: invalid configuration\n{e}", err=True)
        sys.exit(1)


# Import and register commands
from chatcost.cli.chat import chat, ask
from chatcost.cli.prompts_cmd import prompts
from chatcost.cli.usage import models, history, stats

cli.add_command(chat)
cli.add_command(ask)
cli.add_command(prompts)
cli.add_command(models)
cli.add_command(history)
cli.add_command(stats)


if __name__ == "__main__":
    cli()
