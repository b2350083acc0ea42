"""browserless-tools CLI.

Inspect the agent tool surface and run one-off browsing sessions against
Browserless from the terminal.
"""

import asyncio
import json

import click
from rich.console import Console
from rich.table import Table

from browserless_tools import __version__
from browserless_tools.browser.errors import BrowserlessConnectionError
from browserless_tools.core.config import get_settings
from browserless_tools.core.logging import setup_logging
from browserless_tools.tools import BrowserlessToolkit, get_tool_definitions

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="browserless-tools")
def cli():
    """browserless-tools - remote browsing primitives for agents."""
    pass


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw tool definitions as JSON")
def tools(as_json: bool):
    """List the tools exposed to agents.

    Example:

        browserless-tools tools --json
    """
    definitions = get_tool_definitions()
    if as_json:
        click.echo(json.dumps(definitions, indent=2))
        return

    table = Table(title="Agent Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments", style="magenta")
    table.add_column("Description")

    for definition in definitions:
        schema = definition["input_schema"]
        required = set(schema.get("required", []))
        args = ", ".join(
            f"{name}{'' if name in required else '?'}" for name in schema.get("properties", {})
        )
        table.add_row(definition["name"], args or "-", definition["description"])

    console.print(table)


@cli.command()
@click.argument("url")
@click.option("--anchors", default=0, help="Number of links to list")
@click.option("--selectors", default=0, help="Number of actionable selectors to list")
@click.option("--text", "show_text", is_flag=True, help="Print the page's visible text")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def browse(url: str, anchors: int, selectors: int, show_text: bool, verbose: bool):
    """Open URL in a remote browser and report what is on the page.

    Example:

        browserless-tools browse https://example.com --anchors 20 --text
    """
    setup_logging("DEBUG" if verbose else None)

    try:
        results = asyncio.run(_browse(url, anchors, selectors, show_text))
    except BrowserlessConnectionError as e:
        console.print(f"\n[red]Could not start a Browserless session: {e}[/red]")
        raise click.Abort()

    navigation = results["navigate"]
    if "error" in navigation:
        console.print(f"[red]{navigation['summary']}[/red]")
        raise click.Abort()

    console.print(f"\n[bold green]{navigation['summary']}[/bold green]")
    console.print(f"Observe: {navigation.get('url', '-')}")

    if "listSelectors" in results:
        display_catalog(results["listSelectors"], "selectors", ["selector", "label", "tag"])
    if "listAnchors" in results:
        display_catalog(results["listAnchors"], "anchors", ["href", "text", "external"])
    if "getText" in results:
        console.print("\n[bold]Visible text[/bold]")
        console.print(results["getText"].get("details", {}).get("text", ""))


async def _browse(url: str, anchors: int, selectors: int, show_text: bool) -> dict:
    toolkit = BrowserlessToolkit.from_settings(get_settings())
    results: dict[str, dict] = {}
    try:
        results["navigate"] = await toolkit.invoke("navigate", {"url": url})
        if "error" in results["navigate"]:
            return results
        if selectors:
            results["listSelectors"] = await toolkit.invoke("listSelectors", {"max": selectors})
        if anchors:
            results["listAnchors"] = await toolkit.invoke("listAnchors", {"max": anchors})
        if show_text:
            results["getText"] = await toolkit.invoke("getText", {})
    finally:
        await toolkit.invoke("sessionEnd", {})
    return results


def display_catalog(envelope: dict, key: str, columns: list[str]):
    """Render a catalog envelope as a table."""
    if "error" in envelope:
        console.print(f"[red]{envelope['summary']}[/red]")
        return

    table = Table(title=envelope["summary"])
    for column in columns:
        table.add_column(column.title())

    for item in envelope.get("details", {}).get(key, []):
        table.add_row(*(str(item.get(column, "")) for column in columns))

    console.print(table)


if __name__ == "__main__":
    cli()
