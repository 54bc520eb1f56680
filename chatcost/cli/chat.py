"""Chat and ask commands for ChatCost CLI."""

import asyncio
import shlex
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chatcost.core.calculator import CostCalculator
from chatcost.core.conversation import Conversation, ConversationEntry
from chatcost.core.errors import ChatCostError, NotFoundError
from chatcost.core.estimator import TokenEstimator
from chatcost.core.executor import ProviderExecutor
from chatcost.core.pricing import PricingTable
from chatcost.core.provider import ProviderIdentity
from chatcost.core.session import SessionConfig
from chatcost.core.templates import TemplateEngine
from chatcost.storage.prompts import PromptRepository
from chatcost.storage.tracker import ExchangeTracker
from chatcost.utils.helpers import (
    format_cost,
    format_tokens,
    read_prompt_from_file,
    save_transcript,
)

console = Console()

PROVIDER_CHOICE = click.Choice([p.value for p in ProviderIdentity], case_sensitive=False)

CHAT_HELP = """\
Commands:
  /provider NAME   switch provider (openai, google, anthropic, custom)
  /model NAME      set the model for the current provider
  /key KEY         set the API key for the current provider
  /url URL         set the base URL for the current provider
  /use NAME [TEXT] send a stored prompt (quote multi-word names or use the id);
                   templates need TEXT to fill {{input}}
  /usage           show tokens and cost so far
  /save [FILE]     save the transcript as a text file
  /clear           clear the conversation
  /quit            exit"""


def session_options(func):
    """Provider/model/credential overrides shared by chat and ask."""
    func = click.option("--base-url", help="API base URL override")(func)
    func = click.option("--api-key", help="API key (else from settings/env)")(func)
    func = click.option("--model", "-m", help="Model identifier")(func)
    func = click.option("--provider", "-p", type=PROVIDER_CHOICE, help="Provider to use")(func)
    return func


def build_conversation(settings, provider=None, model=None, api_key=None, base_url=None):
    """Wire a Conversation from settings plus command line overrides."""
    session = SessionConfig.from_settings(settings)
    if provider:
        session.switch_provider(provider)
    if model:
        session.set_model(model)
    if api_key:
        session.set_credential(api_key)
    if base_url:
        session.set_base_url(base_url)

    estimator = TokenEstimator(estimation_mode=settings.token_estimation_mode)
    templates = TemplateEngine(
        store=PromptRepository(settings=settings),
        token_estimator=estimator,
    )
    return Conversation(
        session=session,
        templates=templates,
        executor=ProviderExecutor(
            timeout=settings.request_timeout,
            token_estimator=estimator,
            temperature=settings.temperature,
        ),
        calculator=CostCalculator(PricingTable(settings.pricing_file_path)),
        token_estimator=estimator,
        tracker=ExchangeTracker(settings=settings),
    )


def usage_table(conversation: Conversation) -> Table:
    usage = conversation.usage
    cost = conversation.cost
    pricing = conversation.active_pricing

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Metric", style="cyan", width=16)
    table.add_column("Tokens", justify="right", style="yellow")
    table.add_column("Cost", justify="right", style="green")

    table.add_row("Input", format_tokens(usage.input_tokens), format_cost(cost.input_cost))
    table.add_row("Output", format_tokens(usage.output_tokens), format_cost(cost.output_cost))
    table.add_row(
        "Total",
        f"[bold]{format_tokens(usage.total_tokens)}[/bold]",
        f"[bold]{format_cost(cost.total_cost)}[/bold]",
    )
    table.add_row("Pricing", pricing.model, "[dim]next exchange[/dim]")
    return table


def print_reply(entry: ConversationEntry) -> None:
    style = "red" if entry.is_error else "green"
    title = "Error" if entry.is_error else f"Assistant ({entry.tokens} tokens)"
    console.print(Panel(entry.content, title=title, border_style=style, padding=(1, 2)))


async def _close(conversation: Conversation) -> None:
    await conversation.executor.close()
    conversation.tracker.close()


def _handle_command(conversation: Conversation, line: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    name, _, arg = line[1:].partition(" ")
    arg = arg.strip()
    session = conversation.session

    if name in ("quit", "exit", "q"):
        return False
    if name == "help":
        console.print(CHAT_HELP)
    elif name == "provider" and arg:
        try:
            session.switch_provider(arg.lower())
        except ValueError:
            console.print(f"[red]Unknown provider: {arg}[/red]")
            return True
        console.print(f"[cyan]{session!r}[/cyan]")
    elif name == "model" and arg:
        session.set_model(arg)
        console.print(f"[cyan]Model: {session.model} (pricing: {conversation.active_pricing.model})[/cyan]")
    elif name == "key" and arg:
        session.set_credential(arg)
        console.print("[cyan]API key set.[/cyan]")
    elif name == "url" and arg:
        session.set_base_url(arg)
        console.print(f"[cyan]Base URL: {session.base_url}[/cyan]")
    elif name == "usage":
        console.print(Panel(usage_table(conversation), title="Usage", border_style="blue"))
    elif name == "save":
        path = save_transcript(conversation.entries, arg or "conversation")
        console.print(f"[green]Conversation saved as {path}[/green]")
    elif name == "clear":
        conversation.clear()
        console.print("[yellow]Conversation cleared.[/yellow]")
    else:
        console.print(f"[yellow]Unknown command: /{name}. Try /help.[/yellow]")
    return True


async def _use_prompt(conversation: Conversation, args: str) -> Optional[ConversationEntry]:
    """Send a stored prompt from `/use NAME [TEXT]`. Returns None on a usage error."""
    try:
        parts = shlex.split(args)
    except ValueError as e:
        console.print(f"[red]Cannot parse /use arguments: {e}[/red]")
        return None
    if not parts:
        console.print("[yellow]Usage: /use NAME [TEXT][/yellow]")
        return None

    try:
        prompt = conversation.templates.resolve(parts[0])
    except NotFoundError:
        console.print(f"[red]No prompt named {parts[0]!r}.[/red]")
        return None

    user_input = " ".join(parts[1:])
    if prompt.is_template and not user_input:
        console.print(f"[yellow]{prompt.name!r} is a template; usage: /use NAME TEXT[/yellow]")
        return None
    return await conversation.send_prompt(prompt, user_input)


async def _chat_loop(conversation: Conversation) -> None:
    while True:
        try:
            line = console.input("[bold cyan]you>[/bold cyan] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        line = line.strip()
        if not line:
            continue
        if line == "/use" or line.startswith("/use "):
            entry = await _use_prompt(conversation, line[4:])
            if entry is not None:
                print_reply(entry)
            continue
        if line.startswith("/"):
            if not _handle_command(conversation, line):
                break
            continue

        with console.status("Waiting for reply..."):
            entry = await conversation.send(line)
        print_reply(entry)


@click.command()
@session_options
@click.pass_context
def chat(ctx, provider, model, api_key, base_url):
    """Start an interactive chat session.

    Type /help inside the session for commands.
    """
    settings = ctx.obj.get("settings")
    conversation = build_conversation(settings, provider, model, api_key, base_url)
    session = conversation.session

    console.print(
        Panel(
            f"Provider: [green]{session.provider.value}[/green]  Model: [green]{session.model}[/green]\n"
            f"Base URL: [dim]{session.base_url or '-'}[/dim]\n"
            + ("" if session.is_configured else "[yellow]No API key set - use /key or --api-key.[/yellow]\n")
            + "Type /help for commands.",
            title="ChatCost",
            border_style="blue",
        )
    )

    async def run():
        try:
            await _chat_loop(conversation)
        finally:
            await _close(conversation)

    asyncio.run(run())
    console.print(Panel(usage_table(conversation), title="Session Usage", border_style="blue"))


@click.command()
@click.argument("text", required=False)
@click.option(
    "--file", "-f",
    type=click.Path(exists=True),
    help="Read message text from file"
)
@click.option(
    "--prompt", "prompt_name",
    help="Name of a stored prompt to send (TEXT fills its {{input}} placeholder)"
)
@click.option(
    "--save",
    help="Save the exchange transcript to this file"
)
@session_options
@click.pass_context
def ask(ctx, text, file, prompt_name, save, provider, model, api_key, base_url):
    """Send a single message and show the reply with its cost."""
    settings = ctx.obj.get("settings")

    if file:
        try:
            text = read_prompt_from_file(file)
        except FileNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    conversation = build_conversation(settings, provider, model, api_key, base_url)

    prompt = None
    if prompt_name:
        try:
            prompt = conversation.templates.resolve(prompt_name)
        except NotFoundError:
            click.echo(f"Error: no prompt named {prompt_name!r}", err=True)
            sys.exit(1)
        if prompt.is_template and not text:
            click.echo(f"Error: {prompt.name!r} is a template; provide TEXT or --file", err=True)
            sys.exit(1)
    elif not text:
        click.echo("Error: Either provide TEXT, --file or --prompt", err=True)
        click.echo("Try 'chatcost ask --help' for more information.")
        sys.exit(1)

    async def run():
        try:
            if prompt is not None:
                return await conversation.send_prompt(prompt, text or "")
            return await conversation.send(text)
        finally:
            await _close(conversation)

    try:
        entry = asyncio.run(run())
    except ChatCostError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    print_reply(entry)
    console.print(Panel(usage_table(conversation), title="Usage", border_style="blue"))

    if save:
        path = save_transcript(conversation.entries, save)
        console.print(f"[green]Conversation saved as {path}[/green]")

    if entry.is_error:
        sys.exit(1)
