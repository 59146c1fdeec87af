"""Ticket data model: raw product slots, classified products, snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ticketexp.app.ticket.codec import is_all_zeros, read_uint16_le
from ticketexp.app.ticket.tables import (
    SLOT_CODE,
    SLOT_DATE,
    SLOT_EMPTY,
    SLOT_SIZE,
    SLOT_STATUS,
    SLOT_TRIPS,
    SLOT_TYPE,
    SLOT_VALIDITY,
    UNKNOWN,
)

TRIPS_UNLIMITED = "unlimited"
TRIPS_ENCRYPTED = "encrypted"

SOURCE_PRODUCTS = "products"


# ---------------------------------------------------------------------------
# Product slots
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductSlot:
    """One 32-byte product record as stored on the card."""

    index: int
    raw: bytes

    @classmethod
    def from_bytes(cls, index: int, raw: bytes) -> ProductSlot | None:
        if len(raw) < SLOT_SIZE:
            return None
        return cls(index=index, raw=bytes(raw[:SLOT_SIZE]))

    @property
    def empty(self) -> bool:
        return self.raw[SLOT_STATUS] == SLOT_EMPTY or is_all_zeros(self.raw)

    @property
    def status(self) -> int:
        return self.raw[SLOT_STATUS]

    @property
    def product_type(self) -> int:
        return self.raw[SLOT_TYPE]

    @property
    def product_code(self) -> int:
        return read_uint16_le(self.raw, SLOT_CODE)

    @property
    def date_field(self) -> bytes:
        return self.raw[SLOT_DATE : SLOT_DATE + 4]

    @property
    def validity_days(self) -> int:
        return self.raw[SLOT_VALIDITY]

    @property
    def trips(self) -> int:
        return self.raw[SLOT_TRIPS]


class ProductStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    UNUSED = "unused"


@dataclass(frozen=True)
class ProductRecord:
    """A classified product. ``source`` tells a backup copy from the live file."""

    name: str
    fare_type: str
    status: ProductStatus
    product_code: int
    valid_until: datetime | None = None
    load_date: datetime | None = None
    trips: int | None = None
    is_reduced_fare: bool = False
    is_airport_ticket: bool = False
    period: bool = False
    slot: int = 0
    source: str = SOURCE_PRODUCTS


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TicketSnapshot:
    """Everything one scan tells about a ticket.

    Built once per scan by assemble_ticket() and never changed; the
    next scan produces a new snapshot.
    """

    uid: bytes | None = None
    card_id: str = ""
    card_type: str = UNKNOWN
    card_kind: str = UNKNOWN
    manufacturer: str = UNKNOWN
    capacity: str = UNKNOWN
    production_date: str = ""
    application_id: str = ""
    user_category: str = UNKNOWN

    trips_remaining: int | str | None = None
    active_products: tuple[ProductRecord, ...] = ()
    expired_products: tuple[ProductRecord, ...] = ()
    unused_products: tuple[ProductRecord, ...] = ()
    backup_products: tuple[ProductRecord, ...] = ()
    cash_balance: float | None = None

    is_active: bool = False
    remaining_time_seconds: int = 0
    expiry_date: datetime | None = None
    load_date: datetime | None = None
    last_validation: datetime | None = None

    is_encrypted: bool = False
    aborted: bool = False
    error: str | None = None
    log: tuple[str, ...] = field(default_factory=tuple)

    @property
    def uid_hex(self) -> str:
        return self.uid.hex().upper() if self.uid else ""

    @property
    def active_product(self) -> ProductRecord | None:
        return self.active_products[0] if self.active_products else None

    @property
    def expired_product(self) -> ProductRecord | None:
        return self.expired_products[0] if self.expired_products else None
