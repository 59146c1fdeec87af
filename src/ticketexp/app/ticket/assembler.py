"""Ticket assembly: raw scan data in, one immutable TicketSnapshot out.

Each step adds a line to the diagnostic log carried by the snapshot, so
an unknown card variant can be troubleshot from the log alone. Partial
input is fine: a file that was not read leaves its fields at their
defaults.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ticketexp.app.ticket.cardinfo import (
    TRIPS_ENCRYPTED,
    TRIPS_UNLIMITED,
    ProductRecord,
    TicketSnapshot,
)
from ticketexp.app.ticket.codec import to_hex
from ticketexp.app.ticket.decoders import (
    decode_backups,
    decode_cash,
    decode_counter,
    decode_event_log,
    decode_identity,
    decode_personalization,
    decode_product_slots,
    describe_raw,
)
from ticketexp.app.ticket.products import classify_products
from ticketexp.app.ticket.tables import (
    FILE_ADDITIONAL,
    FILE_CASH,
    FILE_EVENT_LOG,
    FILE_IDENTITY,
    FILE_MASTER,
    FILE_NAMES,
    FILE_PERSONALIZATION,
    FILE_PRODUCTS,
    FILE_TRIP_COUNTER,
)
from ticketexp.core.desfire import ScanData, parse_version

lg = logging.getLogger(__name__)


class _Log:
    """Ordered diagnostic log, mirrored to the module logger at DEBUG."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, message: str) -> None:
        self.lines.append(message)
        lg.debug(message)


def assemble_ticket(scan: ScanData, now: datetime | None = None) -> TicketSnapshot:
    """Decode a finished (or aborted) scan into a TicketSnapshot."""
    now = now or datetime.now()
    log = _Log()
    fields: dict = {
        "uid": scan.uid,
        "aborted": scan.aborted,
        "error": scan.error,
        "is_encrypted": scan.encrypted,
    }

    log(f"UID: {scan.uid.hex().upper() if scan.uid else 'unknown'}")
    if scan.aborted:
        log(f"scan aborted: {scan.error}")

    if scan.aid is None:
        log("no application selected, unknown card")
        return TicketSnapshot(log=tuple(log.lines), **fields)

    version = parse_version(scan.version)
    if version is not None:
        log(f"version: {to_hex(scan.version)}")
        fields.update(
            card_type=version.card_family,
            manufacturer=version.vendor,
            capacity=version.capacity,
            production_date=version.production_date,
        )
    else:
        log(f"version: unavailable ({len(scan.version)} bytes)")

    fields["application_id"] = scan.application_id
    log(f"application: {scan.application_id}, files: "
        + " ".join(f"{fid:02X}" for fid in sorted(scan.files)))
    if scan.encrypted_files:
        log("encrypted files: "
            + " ".join(f"{fid:02X}" for fid in sorted(scan.encrypted_files)))

    identity = decode_identity(scan.files.get(FILE_IDENTITY))
    if identity is not None:
        fields["card_id"] = identity.card_id
        fields["user_category"] = identity.category
        log(f"identity: card {identity.card_id}, "
            f"category {identity.category_code:02X} ({identity.category})")
    else:
        log("identity: no data")

    personalization = decode_personalization(scan.files.get(FILE_PERSONALIZATION))
    if personalization is not None:
        fields["card_kind"] = personalization.card_kind
        if personalization.category is not None:
            fields["user_category"] = personalization.category
        log(f"personalization: {personalization.code!r} -> {personalization.card_kind}")
    else:
        log("personalization: no data")

    cash = decode_cash(scan.files.get(FILE_CASH))
    fields["cash_balance"] = cash
    log(f"cash: {cash:.2f}" if cash is not None else "cash: no data")

    trips = decode_counter(scan.files.get(FILE_TRIP_COUNTER))
    log(f"trip counter: {trips}" if trips is not None else "trip counter: no data")

    last_validation = decode_event_log(scan.files.get(FILE_EVENT_LOG))
    fields["last_validation"] = last_validation
    log(f"last validation: {last_validation.isoformat() if last_validation else 'none'}")

    if scan.is_encrypted(FILE_PRODUCTS):
        log("products: encrypted")
        fields["trips_remaining"] = TRIPS_ENCRYPTED
        fields["is_encrypted"] = True
    else:
        fields["trips_remaining"] = trips
        fields.update(_products(scan, last_validation, now, log))

    backups: list[ProductRecord] = []
    for file_id, slots in decode_backups(scan.files).items():
        source = FILE_NAMES[file_id]
        grouped = classify_products(slots, last_validation, now, source=source)
        backups.extend(grouped.all)
        log(f"{source}: {len(slots)} slot(s)")
    fields["backup_products"] = tuple(backups)

    for file_id in (FILE_ADDITIONAL, FILE_MASTER):
        dump = describe_raw(scan.files.get(file_id))
        if dump is not None:
            log(f"{FILE_NAMES[file_id]}: {dump}")

    return TicketSnapshot(log=tuple(log.lines), **fields)


def _products(
    scan: ScanData,
    last_validation: datetime | None,
    now: datetime,
    log: _Log,
) -> dict:
    slots = decode_product_slots(scan.files.get(FILE_PRODUCTS))
    grouped = classify_products(slots, last_validation, now)
    for record in grouped.all:
        label = " ".join(filter(None, (record.name, record.fare_type)))
        log(f"slot {record.slot}: {record.product_code:04X} {label} -> {record.status.value}")

    fields: dict = {
        "active_products": tuple(grouped.active),
        "expired_products": tuple(grouped.expired),
        "unused_products": tuple(grouped.unused),
    }
    primary = grouped.primary
    if primary is None:
        return fields

    if primary.period:
        fields["trips_remaining"] = TRIPS_UNLIMITED
    if primary.valid_until is not None:
        fields["expiry_date"] = primary.valid_until
        fields["load_date"] = primary.load_date
        if now < primary.valid_until:
            fields["is_active"] = True
            fields["remaining_time_seconds"] = int(
                (primary.valid_until - now).total_seconds()
            )
    return fields
