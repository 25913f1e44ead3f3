from __future__ import annotations

import argparse
import mimetypes
import time
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from eventsky.core.logging import configure_console_log
from eventsky.core.rsvp_core.index_client import IndexClient
from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.rsvp_errors import RsvpError
from eventsky.core.rsvp_core.rsvp_models import BannerState, Event, EventDraft, ImageFile
from eventsky.core.rsvp_core.rsvp_service import filter_events, list_events
from eventsky.core.rsvp_core.storage_client import StorageClient
from eventsky.core.rsvp_core.submission import EventSubmissionWorkflow

console = Console()

BANNER_STYLE = {
    BannerState.PENDING: "white",
    BannerState.SUCCESS: "green",
    BannerState.FAILURE: "magenta",
}


class ConsoleNavigator:
    """Holds the redirect until the menu loop is ready to honour it."""

    def __init__(self) -> None:
        self.pending: Optional[Tuple[str, int]] = None

    def schedule_redirect(self, path: str, delay_sec: int) -> None:
        self.pending = (path, delay_sec)


def _prompt(s: str) -> str:
    return input(s)


def _print_events(events: List[Event], title: str) -> None:
    table = Table(title=title)
    table.add_column("When")
    table.add_column("Name")
    table.add_column("Id", overflow="fold")
    for e in events:
        table.add_row(e.starts_at().strftime("%a, %b %d %Y %I:%M %p"), e.name, e.id)
    console.print(table)
    console.print(f"[dim]{len(events)} event(s)[/dim]")


def _read_image(path_text: str) -> Optional[ImageFile]:
    if not path_text:
        return None
    p = Path(path_text).expanduser()
    if not p.is_file():
        console.print(f"[red]No such file:[/red] {p}")
        return None
    ctype = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return ImageFile(filename=p.name, content=p.read_bytes(), content_type=ctype)


def _draft_inputs() -> EventDraft:
    return EventDraft(
        name=_prompt("  Event name: ").strip(),
        date=_prompt("  Date (YYYY-MM-DD): ").strip(),
        time=_prompt("  Time (HH:MM): ").strip(),
        cost=_prompt("  Event cost (USD, e.g. 15): ").strip(),
        max_capacity=_prompt("  Max capacity (e.g. 100): ").strip(),
        refund=_prompt("  Refundable deposit (MATIC, e.g. 0.001): ").strip(),
        link=_prompt("  Event link: ").strip(),
        description=_prompt("  Event description: ").strip(),
        image=_read_image(_prompt("  Image file path: ").strip()),
    )


def _create_event(cfg: RsvpConfig, storage: StorageClient, index: IndexClient) -> None:
    navigator = ConsoleNavigator()
    workflow = EventSubmissionWorkflow(cfg, storage, navigator=navigator)
    draft = _draft_inputs()

    status = console.status("Uploading event data…")
    status.start()
    try:
        outcome = workflow.submit(
            draft,
            on_pending=lambda tx: status.update(f"Please wait (tx {tx})"),
        )
    finally:
        status.stop()

    console.print(f"[{BANNER_STYLE[outcome.state]}]{outcome.message}[/]")
    if outcome.result:
        console.print(f"  event id: {outcome.result.event_id}\n  cid: {outcome.result.cid}")
    if navigator.pending:
        _, delay = navigator.pending
        with console.status(f"Back to events in {delay}s…"):
            time.sleep(delay)
        _print_events(list_events(index, cfg.listing_mode), "Upcoming events")


def run_menu(cfg: Optional[RsvpConfig] = None) -> None:
    cfg = cfg or RsvpConfig.from_env()
    configure_console_log(cfg.debug)
    index = IndexClient(cfg.subgraph_url, timeout=cfg.http_timeout_sec)
    storage = StorageClient(cfg.storage_token, cfg.storage_url, timeout=cfg.http_timeout_sec)
    console.print("\n[bold]EventSky[/bold] - virtual events on the blockchain\n")
    try:
        while True:
            console.print(
                "\n[cyan]1[/cyan] Events"
                "  |  [cyan]2[/cyan] Search"
                "  |  [cyan]3[/cyan] Create event"
                "  |  [cyan]0[/cyan] Exit"
            )
            choice = _prompt("→ ").strip()
            try:
                if choice == "1":
                    _print_events(list_events(index, cfg.listing_mode), "Upcoming events")
                elif choice == "2":
                    text = _prompt("  Search: ").strip()
                    events = filter_events(list_events(index, cfg.listing_mode), text)
                    _print_events(events, f"Events matching {text!r}")
                elif choice == "3":
                    _create_event(cfg, storage, index)
                elif choice in {"0", "q", "exit"}:
                    break
                else:
                    console.print("[yellow]Unknown option[/yellow]")
            except RsvpError as e:
                console.print(f"[red]Error![/red] {e}")
    finally:
        index.close()
        storage.close()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="EventSky console")
    parser.add_argument("--search", help="print events matching this text and exit")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    args = parser.parse_args(argv)

    load_dotenv()
    cfg = RsvpConfig.from_env()
    configure_console_log(args.debug or cfg.debug)
    if args.search is not None:
        index = IndexClient(cfg.subgraph_url, timeout=cfg.http_timeout_sec)
        try:
            _print_events(filter_events(list_events(index, cfg.listing_mode), args.search),
                          f"Events matching {args.search!r}")
        finally:
            index.close()
        return
    run_menu(cfg)


if __name__ == "__main__":
    main()
