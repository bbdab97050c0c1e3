# src/cli/runner.py

"""Headless CLI commands, all built on the async PriceTracker."""

import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.filters.price_normalizer import format_major, format_percent
from src.filters.url_normalizer import InvalidProductUrlError
from src.models.history_entry import HistoryEntry
from src.models.tracked_item import TrackedItem
from src.services.price_tracker import PriceTracker
from src.services.scheduler import PriceCheckScheduler
from src.storage.csv_exporter import CsvExporter
from src.storage.kv_store import KeyValueStore, SqliteStore
from src.storage.tracked_store import AlreadyTrackedError

logger = logging.getLogger("price_watch.cli")

# Stderr console for status messages so stdout stays clean for tables
_err = Console(stderr=True)


def _open_store(kv: KeyValueStore | None) -> KeyValueStore:
    """Use the injected store, or open the SQLite store on disk."""
    return kv if kv is not None else SqliteStore()


def _money(cents: int) -> str:
    return f"{Settings.CURRENCY_SYMBOL}{format_major(cents)}"


def _change_text(change: float) -> str:
    """Render a change badge: drops green, rises red, flat dim."""
    text = format_percent(change)
    if text == "0":
        return "[dim]0%[/dim]"
    if change < 0:
        return f"[green]{text}%[/green]"
    return f"[red]+{text}%[/red]"


def _print_items(
    items: list[TrackedItem], history: list[HistoryEntry],
) -> None:
    """Render a Rich table of tracked products to stdout."""
    table = Table(
        title="Tracked Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=50)
    table.add_column("Price", justify="right")
    table.add_column("Last change", justify="center")
    table.add_column("Checked", style="dim")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, item in enumerate(items, 1):
        if item.is_pending or item.current_price == 0:
            name = f"⏳ {item.name}"
            price = "⏳ Loading..."
        else:
            name = item.name
            price = _money(item.current_price)

        last_change = next(
            (h for h in history if h.name == item.name), None,
        )
        checked = (
            item.last_checked.astimezone().strftime("%Y-%m-%d %H:%M")
            if item.last_checked
            else "Not checked yet"
        )
        table.add_row(
            str(idx),
            name[:50],
            price,
            _change_text(last_change.change_percent) if last_change else "—",
            checked,
            item.url,
        )

    Console().print(table)


def _print_history(history: list[HistoryEntry]) -> None:
    """Render the newest price changes as a Rich table."""
    table = Table(
        title="Recent Price Changes",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Date", style="dim")
    table.add_column("Product", max_width=50)
    table.add_column("Old", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Change", justify="right")

    for h in history:
        table.add_row(
            h.date.astimezone().strftime("%b %d"),
            h.name[:50],
            _money(h.old_price),
            _money(h.new_price),
            _change_text(h.change_percent),
        )

    Console().print(table)


async def run_add(url: str, kv: KeyValueStore | None = None) -> int:
    """Track a product and run one check pass to resolve its details."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        try:
            item = await tracker.add_product(url)
        except InvalidProductUrlError as exc:
            _err.print(f"[red]{exc}[/red]")
            return 1
        except AlreadyTrackedError:
            _err.print(
                "[yellow]This product is already being tracked.[/yellow]"
            )
            return 1

        _err.print(
            f"[bold]Product added![/bold] [dim]Updating details for "
            f"{item.url}...[/dim]"
        )
        await tracker.wait_idle()
        resolved = await tracker.items.find_by_url(item.url)
        if resolved is None or resolved.is_pending:
            _err.print(
                "[yellow]Could not read product details yet; "
                "the next check will retry.[/yellow]"
            )
        else:
            _err.print(
                f"[green]✓ {resolved.name} at "
                f"{_money(resolved.current_price)}[/green]"
            )
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_remove(key: str, kv: KeyValueStore | None = None) -> int:
    """Stop tracking a product by 1-based index (as listed) or URL."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        target: int | str = int(key) - 1 if key.isdigit() else key
        removed = await tracker.remove_product(target)
        if removed is None:
            _err.print(f"[red]No tracked product matches {key!r}[/red]")
            return 1
        _err.print(f"[green]✓ Removed {removed.name}[/green]")
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_list(kv: KeyValueStore | None = None) -> int:
    """Print every tracked product."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        items = await tracker.items.list()
        if not items:
            _err.print("[yellow]No products tracked yet.[/yellow]")
            return 0
        _print_items(items, await tracker.history.recent())
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_check(kv: KeyValueStore | None = None) -> int:
    """Run one check pass over all products and wait for it to finish."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        before = len(await tracker.history.all())
        tasks = await tracker.check_all()
        if not tasks:
            _err.print("[yellow]No products tracked yet.[/yellow]")
            return 0
        _err.print(f"[bold]Checking {len(tasks)} products...[/bold]")
        reports = await asyncio.gather(*tasks)

        timed_out = sum(1 for r in reports if r.timed_out)
        updated = sum(1 for r in reports if r.updated)
        changes = len(await tracker.history.all()) - before
        _err.print(
            f"[green]✓ {updated}/{len(reports)} updated, "
            f"{max(changes, 0)} price changes[/green]"
            + (f" [yellow]({timed_out} timed out)[/yellow]" if timed_out else "")
        )
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_history(kv: KeyValueStore | None = None) -> int:
    """Print the most recent price changes, newest first."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        history = await tracker.history.recent(Settings.HISTORY_VIEW_LIMIT)
        if not history:
            _err.print(
                "[dim]✓ No price changes detected yet. Prices are checked "
                f"every {Settings.CHECK_INTERVAL_HOURS:g} hours.[/dim]"
            )
            return 0
        _print_history(history)
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_export(
    output_dir: str | None = None,
    kv: KeyValueStore | None = None,
) -> int:
    """Export the full history to CSV."""
    store = _open_store(kv)
    tracker = PriceTracker(store)
    try:
        history = await tracker.history.all()
        if not history:
            _err.print("[yellow]No data to export.[/yellow]")
            return 1
        exporter = CsvExporter(Path(output_dir) if output_dir else None)
        path = exporter.export_history(history)
        _err.print(f"[green]✓ Exported {len(history)} entries → {path}[/green]")
        return 0
    finally:
        await tracker.aclose()
        if kv is None:
            store.close()


async def run_watch(kv: KeyValueStore | None = None) -> int:
    """Run the periodic watcher until cancelled."""
    store = _open_store(kv)
    store.on_change(
        lambda keys: logger.debug("Store changed: %s", sorted(keys))
    )
    tracker = PriceTracker(store)
    scheduler = PriceCheckScheduler(tracker)
    scheduler.start()
    _err.print(
        f"[bold]Watching prices every "
        f"{scheduler.interval_hours:g}h.[/bold] [dim]Ctrl-C to stop.[/dim]"
    )
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await tracker.aclose()
        if kv is None:
            store.close()
    return 0
