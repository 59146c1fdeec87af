"""Ticket sessions: read a card once, keep watching a reader, explore."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ticketexp.app.ticket import dump
from ticketexp.app.ticket.assembler import assemble_ticket
from ticketexp.app.ticket.cardinfo import TicketSnapshot
from ticketexp.app.ticket.display import format_settings, format_ticket
from ticketexp.core.base import Agent
from ticketexp.core.desfire import (
    DESFireTerminal,
    GetFileSettingsMessage,
    GetVersionMessage,
    ListApplicationsMessage,
    ListFilesMessage,
    ScanConfig,
    ScanData,
    ScanMessage,
    SelectApplicationMessage,
    status_text,
)
from ticketexp.core.smartcard import TransportError

lg = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Unit operations (each takes a terminal, returns data)
# ---------------------------------------------------------------------------


def scan_card(terminal: DESFireTerminal, config: ScanConfig) -> ScanData:
    """Run one read session on the connected card."""
    scan = terminal.send(ScanMessage(config=config)).scan
    lg.debug(
        "scan %s after %d commands", scan.state.value, terminal.agent.commands_sent
    )
    return scan


def read_ticket(
    terminal: DESFireTerminal,
    config: ScanConfig,
    now: datetime | None = None,
    save_path: str | Path | None = None,
) -> TicketSnapshot:
    """Scan the connected card and decode it."""
    scan = scan_card(terminal, config)
    if save_path is not None:
        dump.save(scan, save_path)
    return assemble_ticket(scan, now)


def explore(terminal: DESFireTerminal) -> list[str]:
    """List version, applications, files and their settings.

    For card variants the decoder does not know yet. Returns the
    report lines.
    """
    lines: list[str] = []
    version = terminal.send(GetVersionMessage())
    if version.info is not None:
        info = version.info
        lines.append(f"{info.card_family}, {info.vendor}, {info.capacity}")
        if info.production_date:
            lines.append(f"produced {info.production_date}")
    else:
        lines.append(f"GetVersion: {status_text(version.sw)}")

    apps = terminal.send(ListApplicationsMessage())
    if not apps.aids:
        lines.append(f"no applications listed ({status_text(apps.sw)})")
    for aid in apps.aids:
        lines.append(f"--- Application {aid[::-1].hex()} ---")
        selected = terminal.send(SelectApplicationMessage(aid=aid))
        if not selected.selected:
            lines.append(f"  select: {status_text(selected.sw)}")
            continue
        files = terminal.send(ListFilesMessage())
        if not files.file_ids:
            lines.append(f"  files: {status_text(files.sw)}")
        for file_id in files.file_ids:
            result = terminal.send(GetFileSettingsMessage(file_id=file_id))
            lines.append(format_settings(file_id, result.settings))
    return lines


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def session(
    card,
    config: ScanConfig | None = None,
    uid: str | bytes | None = None,
    save_path: str | Path | None = None,
) -> TicketSnapshot | None:
    """Connect, read one ticket, disconnect. None when the scan failed."""
    config = config or ScanConfig()
    terminal = DESFireTerminal(Agent(card, uid=uid))
    try:
        terminal.connect()
        ticket = read_ticket(terminal, config, save_path=save_path)
        lg.info("\n%s", format_ticket(ticket))
        return ticket
    except (RuntimeError, TransportError) as exc:
        terminal.on_error(exc)
        return None
    finally:
        terminal.disconnect()


def watch(
    card,
    config: ScanConfig | None = None,
    on_ticket: Callable[[TicketSnapshot], None] | None = None,
    max_scans: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Read every card presented to the reader until interrupted.

    A card is read once per presentation: the same UID is skipped
    until the card has left the field. Returns the number of scans.
    """
    config = config or ScanConfig()
    terminal = DESFireTerminal(Agent(card))
    last_uid: bytes | None = None
    scans = 0
    while max_scans is None or scans < max_scans:
        try:
            terminal.connect()
        except RuntimeError:
            last_uid = None
            sleep(config.poll_interval)
            continue
        try:
            uid = terminal.agent.get_uid()
            if uid is not None and uid == last_uid:
                sleep(config.poll_interval)
                continue
            scans += 1
            ticket = read_ticket(terminal, config)
            if ticket.aborted:
                lg.error("could not read ticket: %s", ticket.error)
            else:
                last_uid = uid
            if on_ticket is not None:
                on_ticket(ticket)
            else:
                lg.info("\n%s", format_ticket(ticket))
        except TransportError as exc:
            terminal.on_error(exc)
        finally:
            terminal.disconnect()
        sleep(config.settle_delay)
    return scans


def decode_session(path: str | Path, now: datetime | None = None) -> TicketSnapshot:
    """Decode a saved scan dump."""
    ticket = assemble_ticket(dump.load(path), now)
    lg.info("\n%s", format_ticket(ticket))
    return ticket


def info_session(card) -> list[str]:
    """Connect and print the card's application and file layout."""
    terminal = DESFireTerminal(Agent(card))
    try:
        terminal.connect()
        lines = explore(terminal)
        lg.info("\n%s", "\n".join(lines))
        return lines
    except (RuntimeError, TransportError) as exc:
        terminal.on_error(exc)
        return []
    finally:
        terminal.disconnect()
