from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .cache import SecretCache
from .errors import ClipboardError, ConfigurationError, EnumerationError
from .events import EventQueue, ResolutionFinished
from .inventory import collect_inventory
from .keyvault import connect
from .logging import setup_logging
from .models import SecretRecord, ViewType
from .providers import PyperclipSink
from .settings import Settings, load_settings
from .tui.app import run_browser
from .tui.components import render_dataset, render_error, render_result_panel
from .tui.filtering import filter_rows
from .tui.viewmodel import ViewModel

app = typer.Typer(
    add_completion=False,
    help="discretion: browse Azure Key Vault secrets from the terminal",
    rich_markup_mode="rich",
)
console = Console()

# Field names for `list --json`, in row value order, plus the row key.
JSON_FIELDS = {
    ViewType.VAULTS: (("name", "region", "resource_group", "subscription"), "url"),
    ViewType.SECRETS: (("vault", "name"), "identifier"),
}


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _settings(*, log_to_console: bool) -> Settings:
    settings = load_settings()
    setup_logging(settings, console=log_to_console)
    return settings


def _connect(settings: Settings):
    """Build the Azure adapters or exit with a friendly error."""
    try:
        return connect(settings)
    except ConfigurationError as e:
        render_error(console, "Cannot reach Azure", str(e), "Run `az login` and try again")
        raise typer.Exit(code=1)


def _rows_as_dicts(view: ViewType, dataset) -> list[dict]:
    names, key_name = JSON_FIELDS[view]
    out = []
    for row in dataset:
        item = dict(zip(names, row.values))
        item[key_name] = row.key
        out.append(item)
    return out


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN CALLBACK
# ═══════════════════════════════════════════════════════════════════════════════

@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Print the version and exit"),
):
    """
    [bold]discretion[/bold]: browse Azure Key Vault secrets and copy values to the clipboard.

    [dim]Run without arguments to open the interactive browser.[/dim]

    [bold]Keys:[/bold]
      ↑/↓ or k/j   move          enter   copy secret value
      /            search        esc     cancel search / clear filter
      x            vaults⇄secrets  r     refresh
      q            quit
    """
    if version:
        console.print(f"discretion {__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        browse()
        raise typer.Exit(code=0)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command("browse", help="[bold cyan]B[/bold cyan]rowse vaults and secrets interactively")
def browse():
    """Open the interactive table browser."""
    settings = _settings(log_to_console=False)
    provider, resolver = _connect(settings)
    run_browser(settings, provider, resolver)


@app.command("list", help="[bold cyan]L[/bold cyan]ist vaults or secrets")
@app.command("ls", hidden=True)  # Alias
def list_rows(
    secrets: bool = typer.Option(False, "--secrets", "-s", help="List secrets instead of vaults"),
    query: str = typer.Option("", "--filter", "-f", help="Fuzzy filter applied to the rows"),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Enumerate once and print the vault or secret table."""
    settings = _settings(log_to_console=True)
    provider, _ = _connect(settings)

    inventory = collect_inventory(provider, include_disabled=settings.DISCRETION_SHOW_DISABLED)
    model = ViewModel(settings.DISCRETION_COLUMN_WIDTH)
    model.load(inventory)

    view = ViewType.SECRETS if secrets else ViewType.VAULTS
    dataset = filter_rows(query, model.dataset(view))

    if json_out:
        print(json.dumps(_rows_as_dicts(view, dataset), ensure_ascii=False, indent=2))
        return

    render_dataset(console, dataset, title=f"{view}" + (f": [cyan]{escape(query)}[/cyan]" if query.strip() else ""))
    if inventory.skipped:
        console.print(f"[yellow]Skipped (listing failed):[/yellow] {', '.join(inventory.skipped)}")


@app.command("copy", help="[bold cyan]C[/bold cyan]opy one secret value to the clipboard")
def copy(
    vault: str = typer.Argument(..., help="Vault name"),
    name: str = typer.Argument(..., help="Secret name"),
):
    """Resolve a single secret without opening the browser."""
    settings = _settings(log_to_console=True)
    provider, resolver = _connect(settings)

    target = next((v for v in provider.list_containers() if v.name.lower() == vault.lower()), None)
    if target is None:
        render_error(console, "Vault not found", f"No vault named {vault!r} is visible to this login")
        raise typer.Exit(code=1)

    try:
        listing = provider.list_secrets(target)
    except EnumerationError as e:
        render_error(console, "Cannot list secrets", str(e), "Check your access policy on the vault")
        raise typer.Exit(code=1)

    records = [SecretRecord.from_listing(target, s) for s in listing if s.name == name]
    if not records:
        render_error(console, "Secret not found", f"{name!r} is not listed in {target.name!r}")
        raise typer.Exit(code=1)

    events = EventQueue()
    cache = SecretCache(resolver, events=events, max_workers=1)
    try:
        cache.replace(records)
        value, _ = cache.resolve(records[0].identifier)
    finally:
        cache.shutdown()

    finished = [e for e in events.drain() if isinstance(e, ResolutionFinished)]
    if finished and finished[-1].error:
        render_error(console, "Copy failed", finished[-1].error)
        raise typer.Exit(code=1)

    try:
        PyperclipSink().write(value)
    except ClipboardError as e:
        render_error(console, "Clipboard unavailable", str(e), "Install xclip, xsel or wl-clipboard")
        raise typer.Exit(code=1)

    render_result_panel(console, f"Copied {target.name}/{name}")


def main() -> None:
    app()
