"""Product classification.

Turns decoded product slots into active, expired or unused products.
Period passes (type 0x31) expire at 23:59:59 on the last day of their
validity window, counted from the start date stored in the slot.
Count-based products (type 0x32) carry no date of their own: a trip
stays valid for 90 minutes after the last validation in the event log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ticketexp.app.ticket.cardinfo import (
    SOURCE_PRODUCTS,
    ProductRecord,
    ProductSlot,
    ProductStatus,
)
from ticketexp.app.ticket.codec import parse_packed_date
from ticketexp.app.ticket.tables import (
    DEFAULT_VALIDITY_DAYS,
    PRODUCT_CODES,
    TRIP_WINDOW_SECONDS,
    TYPE_COUNT,
    TYPE_PERIOD,
    ProductKind,
)

lg = logging.getLogger(__name__)


def product_kind(code: int, product_type: int, trips: int) -> ProductKind:
    """Name and fare type for a product code, falling back on the type byte."""
    known = PRODUCT_CODES.get(code)
    if known is not None:
        if product_type == TYPE_COUNT and trips > 0:
            return ProductKind(f"{trips} {known.name}", known.fare_type)
        return known
    if product_type == TYPE_PERIOD:
        return ProductKind("MONTHLY")
    if product_type == TYPE_COUNT:
        return ProductKind(f"{trips} trips")
    return ProductKind("Unknown")


def validity_days(slot: ProductSlot) -> int:
    """Days a period pass lasts; an unset byte means the usual 30."""
    return slot.validity_days or DEFAULT_VALIDITY_DAYS


def period_expiry(start: datetime, days: int) -> datetime:
    end = start + timedelta(days=days)
    return end.replace(hour=23, minute=59, second=59, microsecond=0)


def classify_slot(
    slot: ProductSlot,
    last_validation: datetime | None,
    now: datetime,
    source: str = SOURCE_PRODUCTS,
) -> ProductRecord:
    """Classify one non-empty slot.

    Active when an expiry could be computed and lies in the future,
    expired when it lies in the past, unused when there is none (a
    count-based product never validated, or a period pass whose start
    date does not decode).
    """
    kind = product_kind(slot.product_code, slot.product_type, slot.trips)
    period = slot.product_type == TYPE_PERIOD

    load_date = expiry = None
    if period:
        load_date = parse_packed_date(slot.date_field)
        if load_date is not None:
            expiry = period_expiry(load_date, validity_days(slot))
        else:
            lg.debug("slot %d: start date does not decode", slot.index)
    elif slot.product_type == TYPE_COUNT and last_validation is not None:
        expiry = last_validation + timedelta(seconds=TRIP_WINDOW_SECONDS)

    if expiry is None:
        status = ProductStatus.UNUSED
    elif now < expiry:
        status = ProductStatus.ACTIVE
    else:
        status = ProductStatus.EXPIRED

    return ProductRecord(
        name=kind.name,
        fare_type=kind.fare_type,
        status=status,
        product_code=slot.product_code,
        valid_until=expiry,
        load_date=load_date,
        trips=None if period else slot.trips,
        is_reduced_fare=kind.reduced_fare,
        is_airport_ticket=kind.airport,
        period=period,
        slot=slot.index,
        source=source,
    )


@dataclass
class Classification:
    """Products grouped by status. ``primary`` is the record of slot 0."""

    active: list[ProductRecord] = field(default_factory=list)
    expired: list[ProductRecord] = field(default_factory=list)
    unused: list[ProductRecord] = field(default_factory=list)
    primary: ProductRecord | None = None

    def add(self, record: ProductRecord) -> None:
        if record.status is ProductStatus.ACTIVE:
            self.active.append(record)
        elif record.status is ProductStatus.EXPIRED:
            self.expired.append(record)
        else:
            self.unused.append(record)

    @property
    def all(self) -> list[ProductRecord]:
        return self.active + self.expired + self.unused


def classify_products(
    slots: list[ProductSlot],
    last_validation: datetime | None,
    now: datetime,
    source: str = SOURCE_PRODUCTS,
) -> Classification:
    result = Classification()
    for slot in slots:
        if slot.empty:
            continue
        record = classify_slot(slot, last_validation, now, source)
        lg.debug(
            "slot %d: %s %04X -> %s", slot.index, record.name,
            record.product_code, record.status.value,
        )
        result.add(record)
        if slot.index == 0:
            result.primary = record
    return result
