"""Models, history, and stats commands for ChatCost CLI."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chatcost.core.pricing import PricingTable
from chatcost.storage.tracker import ExchangeTracker
from chatcost.utils.helpers import format_cost, format_price_per_1k, format_tokens

console = Console()


@click.command()
@click.pass_context
def models(ctx):
    """List models with pricing. Unknown models are billed at the default entry."""
    settings = ctx.obj.get("settings")
    table_data = PricingTable(settings.pricing_file_path)

    table = Table(title="Supported Models", show_header=True, header_style="bold cyan")
    table.add_column("Model", style="green", width=30)
    table.add_column("Input ($/1K tokens)", justify="right", style="yellow")
    table.add_column("Output ($/1K tokens)", justify="right", style="yellow")

    for model_name in table_data.list_supported_models():
        entry = table_data.lookup(model_name)
        label = model_name
        if model_name == table_data.default_model:
            label += " [dim](default)[/dim]"
        table.add_row(label, format_price_per_1k(entry.input_price), format_price_per_1k(entry.output_price))

    console.print("\n")
    console.print(table)
    console.print("\n")


@click.command()
@click.option(
    "--limit", "-n",
    type=int,
    default=10,
    help="Number of exchanges to show (default: 10)"
)
@click.option(
    "--model", "-m",
    help="Filter by model name"
)
@click.pass_context
def history(ctx, limit, model):
    """Show recent exchanges.

    Examples:

        \b
        # Show last 10 exchanges
        chatcost history

        \b
        # Show last 20 exchanges for gpt-4o
        chatcost history --limit 20 --model gpt-4o
    """
    settings = ctx.obj.get("settings")
    tracker = ExchangeTracker(settings=settings)
    exchanges = tracker.get_recent_exchanges(limit=limit, model=model)
    tracker.close()

    if not exchanges:
        console.print("[yellow]No exchanges found.[/yellow]")
        return

    table = Table(
        title=f"Recent Exchanges (showing {len(exchanges)})", show_header=True, header_style="bold cyan"
    )
    table.add_column("Timestamp", style="dim")
    table.add_column("Provider")
    table.add_column("Model", style="green")
    table.add_column("Input", justify="right", style="yellow")
    table.add_column("Output", justify="right", style="yellow")
    table.add_column("Cost", justify="right", style="green")
    table.add_column("Status")

    for exchange in exchanges:
        status = "[green]ok[/green]" if exchange.success else "[red]error[/red]"
        table.add_row(
            exchange.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            exchange.provider,
            exchange.model,
            format_tokens(exchange.input_tokens),
            format_tokens(exchange.output_tokens),
            format_cost(exchange.total_cost),
            status,
        )

    console.print("\n")
    console.print(table)
    console.print("\n")


@click.command()
@click.option(
    "--model", "-m",
    help="Filter by model name"
)
@click.pass_context
def stats(ctx, model):
    """Show aggregate token usage and cost."""
    settings = ctx.obj.get("settings")
    tracker = ExchangeTracker(settings=settings)
    usage = tracker.get_usage_stats(model=model)
    tracker.close()

    if usage["exchange_count"] == 0:
        console.print("[yellow]No exchange data available for statistics.[/yellow]")
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="bold")

    table.add_row("Model", f"[green]{model or 'All Models'}[/green]")
    table.add_row("Exchanges", str(usage["exchange_count"]))
    if usage["failed_count"]:
        table.add_row("Failed", f"[red]{usage['failed_count']}[/red]")
    table.add_row("Input Tokens", format_tokens(usage["input_tokens"]))
    table.add_row("Output Tokens", format_tokens(usage["output_tokens"]))
    table.add_row("Total Cost", f"[yellow]{format_cost(usage['total_cost'])}[/yellow]")
    table.add_row("Avg Cost", format_cost(usage["avg_cost"]))

    console.print("\n")
    console.print(Panel(table, title="Statistics", border_style="blue"))
    console.print("\n")
