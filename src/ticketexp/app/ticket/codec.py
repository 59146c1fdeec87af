"""Byte-level primitives shared by the ticket file decoders.

Every reader fails soft: a buffer too short for the requested field
yields 0 (or None for dates) instead of raising. Card files are often
shorter than expected when access was refused.
"""

from __future__ import annotations

from datetime import datetime, timedelta

# Raw day field reads consistently 20 low against printed ground truth.
# Empirical and unverified: the field boundaries may really be shifted.
DAY_CORRECTION = 20

BASE_YEAR = 2010


def read_uint16_le(data: bytes, offset: int = 0) -> int:
    if offset < 0 or len(data) < offset + 2:
        return 0
    return int.from_bytes(data[offset : offset + 2], "little")


def read_uint32_le(data: bytes, offset: int = 0) -> int:
    if offset < 0 or len(data) < offset + 4:
        return 0
    return int.from_bytes(data[offset : offset + 4], "little")


def is_all_zeros(data: bytes) -> bool:
    return all(b == 0x00 for b in data)


def is_all_ff(data: bytes) -> bool:
    return all(b == 0xFF for b in data)


def to_hex(data: bytes, sep: str | None = None) -> str:
    if not data:
        return ""
    return (data.hex(sep) if sep else data.hex()).upper()


def parse_packed_date(data: bytes, offset: int = 0) -> datetime | None:
    """Decode the 32-bit packed date at *offset*.

    Bit layout, most significant first::

        year-2010 (6) | month (4) | day (5) | hour (5) | minute (6) | second (6)

    The day gets DAY_CORRECTION added and may roll into the next month.
    Returns None for an unset year or an out-of-range field.
    """
    if offset < 0 or len(data) < offset + 4:
        return None
    raw = int.from_bytes(data[offset : offset + 4], "big")
    year_offset = (raw >> 26) & 0x3F
    month = (raw >> 22) & 0x0F
    day = (raw >> 17) & 0x1F
    hour = (raw >> 12) & 0x1F
    minute = (raw >> 6) & 0x3F
    second = raw & 0x3F

    if year_offset == 0:
        return None
    if not 1 <= month <= 12 or hour > 23 or minute > 59 or second > 59:
        return None

    day += DAY_CORRECTION
    start = datetime(BASE_YEAR + year_offset, month, 1, hour, minute, second)
    return start + timedelta(days=day - 1)
