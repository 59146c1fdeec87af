"""Human-readable ticket formatting."""

from __future__ import annotations

import re
from datetime import datetime

from ticketexp.app.ticket.cardinfo import (
    TRIPS_ENCRYPTED,
    TRIPS_UNLIMITED,
    ProductRecord,
    TicketSnapshot,
)
from ticketexp.core.desfire import FileSettings

MISSING = "--"
LOCKED = "🔒"


def _groups(text: str, size: int) -> str:
    return " ".join(re.findall(f".{{1,{size}}}", text.upper()))


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return MISSING
    return value.strftime("%d/%m/%Y %H:%M:%S")


def format_remaining_time(seconds: int) -> str:
    """MM:SS, HH:MM:SS or Nd HH:MM:SS; 00:00 once nothing is left."""
    if seconds <= 0:
        return "00:00"
    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    mins, secs = divmod(rest, 60)
    if days > 0:
        return f"{days}d {hours:02d}:{mins:02d}:{secs:02d}"
    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def format_card_uid(uid: str | bytes | None) -> str:
    if not uid:
        return MISSING
    if isinstance(uid, bytes):
        uid = uid.hex()
    return _groups(uid, 2)


def format_card_id(card_id: str) -> str:
    return _groups(card_id, 4) if card_id else MISSING


def format_cash(amount: float | None) -> str:
    if amount is None:
        return MISSING
    return f"{amount:.1f} €"


def format_trips(trips: int | str | None) -> str:
    if trips == TRIPS_ENCRYPTED:
        return LOCKED
    if trips == TRIPS_UNLIMITED:
        return "Unlimited"
    if trips is None:
        return MISSING
    return str(trips)


def format_product(product: ProductRecord) -> str:
    name = " ".join(filter(None, (product.name, product.fare_type)))
    line = f"  {name:<28s}{product.status.value:<9s}"
    if product.valid_until is not None:
        line += f"until {format_timestamp(product.valid_until)}"
    return line


def format_settings(file_id: int, settings: FileSettings | None) -> str:
    if settings is None:
        return f"  {file_id:02X}  {MISSING}"
    return f"  {file_id:02X}  {settings.describe()}"


def format_ticket(ticket: TicketSnapshot) -> str:
    """Format a snapshot the way the ticket screen lays it out."""
    fields = [
        ("Card UID", format_card_uid(ticket.uid)),
        ("Card ID", format_card_id(ticket.card_id)),
        ("Card type", ticket.card_type),
        ("Card kind", ticket.card_kind),
        ("Manufacturer", ticket.manufacturer),
        ("Capacity", ticket.capacity),
        ("Production", ticket.production_date or MISSING),
        ("Application", ticket.application_id or MISSING),
        ("Category", ticket.user_category),
        ("Trips", format_trips(ticket.trips_remaining)),
        ("Cash", format_cash(ticket.cash_balance)),
        ("Status", "ACTIVE" if ticket.is_active else "INACTIVE"),
        ("Remaining", format_remaining_time(ticket.remaining_time_seconds)),
        ("Loaded", format_timestamp(ticket.load_date)),
        ("Expires", format_timestamp(ticket.expiry_date)),
        ("Last validation", format_timestamp(ticket.last_validation)),
    ]
    w = max(len(label) for label, _ in fields)
    sections = ["\n".join(f"  {label:<{w}}  {value}" for label, value in fields)]

    if ticket.trips_remaining == TRIPS_ENCRYPTED:
        sections.append(f"--- Products ---\n  {LOCKED} encrypted")
    else:
        products = ticket.active_products + ticket.expired_products + ticket.unused_products
        if products:
            lines = "\n".join(format_product(p) for p in products)
            sections.append(f"--- Products ({len(products)}) ---\n{lines}")
    if ticket.aborted:
        sections.append(f"--- Scan incomplete ---\n  {ticket.error}")
    return "\n\n".join(sections)
