"""Prompt library commands for ChatCost CLI."""

import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chatcost.core.errors import NotFoundError, ValidationError
from chatcost.core.estimator import TokenEstimator
from chatcost.core.templates import INPUT_PLACEHOLDER, TemplateEngine
from chatcost.storage.prompts import PromptRepository
from chatcost.utils.helpers import format_tokens, truncate_text

console = Console()


def _engine(ctx) -> TemplateEngine:
    settings = ctx.obj.get("settings")
    return TemplateEngine(
        store=PromptRepository(settings=settings),
        token_estimator=TokenEstimator(estimation_mode=settings.token_estimation_mode),
    )


@click.group()
def prompts():
    """Manage stored prompts and templates.

    Templates contain {{input}}, replaced by your message when used.
    """


@prompts.command("list")
@click.pass_context
def list_prompts(ctx):
    """List stored prompts."""
    engine = _engine(ctx)

    table = Table(title="Prompts", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Template", justify="center")
    table.add_column("Tokens", justify="right", style="yellow")
    table.add_column("Content")

    for prompt in engine.list(include_system=True):
        table.add_row(
            prompt.id[:8],
            prompt.name,
            "yes" if prompt.is_template else "",
            format_tokens(prompt.tokens),
            truncate_text(prompt.content.replace("\n", " "), 60),
        )

    console.print(table)


@prompts.command("add")
@click.argument("name")
@click.argument("content")
@click.option(
    "--template", "-t",
    is_flag=True,
    help=f"Mark as template ({INPUT_PLACEHOLDER} is replaced by user input)"
)
@click.pass_context
def add_prompt(ctx, name, content, template):
    """Create a prompt."""
    try:
        prompt = _engine(ctx).create(name, content, is_template=template)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    console.print(f"[green]Created prompt {prompt.name!r} ({prompt.id[:8]}, {prompt.tokens} tokens)[/green]")


@prompts.command("edit")
@click.argument("prompt_id")
@click.option("--name", help="New name")
@click.option("--content", help="New content")
@click.option("--template/--plain", default=None, help="Toggle template flag")
@click.pass_context
def edit_prompt(ctx, prompt_id, name, content, template):
    """Edit a prompt (use 'system' for the System Prompt)."""
    engine = _engine(ctx)
    fields = {}
    if name is not None:
        fields["name"] = name
    if content is not None:
        fields["content"] = content
    if template is not None:
        fields["is_template"] = template
    if not fields:
        click.echo("Error: nothing to change", err=True)
        sys.exit(1)

    try:
        prompt = engine.update(engine.resolve(prompt_id).id, **fields)
    except (NotFoundError, ValidationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    console.print(f"[green]Updated prompt {prompt.name!r} ({prompt.tokens} tokens)[/green]")


@prompts.command("remove")
@click.argument("prompt_id")
@click.pass_context
def remove_prompt(ctx, prompt_id):
    """Delete a prompt. The System Prompt cannot be deleted."""
    engine = _engine(ctx)
    try:
        engine.delete(engine.resolve(prompt_id).id)
    except (NotFoundError, ValidationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    console.print("[yellow]Prompt deleted.[/yellow]")


@prompts.command("show")
@click.argument("prompt_id")
@click.option("--input", "user_input", default="", help="Preview with this input")
@click.pass_context
def show_prompt(ctx, prompt_id, user_input):
    """Show a prompt, rendered against --input when it is a template."""
    engine = _engine(ctx)
    try:
        prompt = engine.resolve(prompt_id)
    except NotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    console.print(
        Panel(
            engine.render(prompt, user_input),
            title=f"{prompt.name} ({prompt.tokens} tokens)",
            border_style="green",
            padding=(1, 2),
        )
    )
