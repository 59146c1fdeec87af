"""One decoder per known ticket file.

A decoder takes the raw content of its file, or None when the file was
not read, and returns its contribution. Missing or short input gives
None ("no contribution"); decoders never raise on card data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ticketexp.app.ticket.cardinfo import ProductSlot
from ticketexp.app.ticket.codec import (
    parse_packed_date,
    read_uint32_le,
    to_hex,
)
from ticketexp.app.ticket.tables import (
    CARD_ID_PREFIX,
    CASH_DIVISOR,
    CODE_ANONYMOUS,
    CODE_PERSONALISED,
    EVENT_STRIDE,
    FILE_BACKUPS,
    IDENTITY_CATEGORY,
    IDENTITY_MIN_LENGTH,
    IDENTITY_SERIAL,
    KIND_ANONYMOUS,
    KIND_PERSONALISED,
    MAX_SLOTS,
    PERSONALIZATION_CATEGORY,
    PERSONALIZATION_CODE,
    PERSONALIZATION_MIN_LENGTH,
    SLOT_SIZE,
    USER_CATEGORIES,
    category_name,
)

lg = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    card_id: str
    category_code: int
    category: str


@dataclass(frozen=True)
class Personalization:
    code: str
    card_kind: str
    category: str | None = None


def _too_short(name: str, data: bytes, needed: int) -> bool:
    if len(data) < needed:
        lg.debug("%s: %d bytes, need %d", name, len(data), needed)
        return True
    return False


def decode_identity(data: bytes | None) -> Identity | None:
    """Card number and user category from the identity file."""
    if data is None or _too_short("identity", data, IDENTITY_MIN_LENGTH):
        return None
    card_id = CARD_ID_PREFIX + data[IDENTITY_SERIAL].hex().upper()
    code = data[IDENTITY_CATEGORY]
    return Identity(card_id=card_id, category_code=code, category=category_name(code))


def decode_personalization(data: bytes | None) -> Personalization | None:
    """Card kind, and for personalised cards an optional category override."""
    if data is None or _too_short("personalization", data, PERSONALIZATION_MIN_LENGTH):
        return None
    code = data[PERSONALIZATION_CODE].decode("ascii", errors="replace")
    if code == CODE_ANONYMOUS:
        return Personalization(code=code, card_kind=KIND_ANONYMOUS)

    category = None
    if code == CODE_PERSONALISED:
        override = data[PERSONALIZATION_CATEGORY]
        if override and override in USER_CATEGORIES:
            category = USER_CATEGORIES[override]
    else:
        lg.debug("personalization: unknown code %r, assuming personalised", code)
    return Personalization(code=code, card_kind=KIND_PERSONALISED, category=category)


def decode_counter(data: bytes | None) -> int | None:
    """Raw little-endian counter of a value file (trip counter)."""
    if data is None or _too_short("counter", data, 4):
        return None
    return read_uint32_le(data)


def decode_cash(data: bytes | None) -> float | None:
    """Stored value in euros (the card keeps cents)."""
    cents = decode_counter(data)
    if cents is None:
        return None
    return cents / CASH_DIVISOR


def decode_event_log(data: bytes | None) -> datetime | None:
    """Most recent validation: the latest packed date found at any 4-byte stride."""
    if data is None:
        return None
    latest = None
    for offset in range(0, len(data) - EVENT_STRIDE + 1, EVENT_STRIDE):
        stamp = parse_packed_date(data, offset)
        if stamp is not None and (latest is None or stamp > latest):
            latest = stamp
    return latest


def decode_product_slots(data: bytes | None) -> list[ProductSlot]:
    """Non-empty product slots, in slot order. A trailing partial slot is ignored."""
    if data is None:
        return []
    slots = []
    for index in range(MAX_SLOTS):
        slot = ProductSlot.from_bytes(index, data[index * SLOT_SIZE : (index + 1) * SLOT_SIZE])
        if slot is None:
            break
        if slot.empty:
            lg.debug("slot %d empty", index)
            continue
        slots.append(slot)
    return slots


def decode_backups(files: dict[int, bytes]) -> dict[int, list[ProductSlot]]:
    """Product slots of each backup file that was read, keyed by file id."""
    return {
        file_id: decode_product_slots(files[file_id])
        for file_id in FILE_BACKUPS
        if file_id in files
    }


def describe_raw(data: bytes | None) -> str | None:
    """Hex dump of a file the decoder has no layout for."""
    if not data:
        return None
    return to_hex(data, " ")
