"""GetVersion data model.

The version buffer is the concatenation of up to three frames: hardware
(7 bytes), software (7 bytes) and production data (14 bytes: UID, batch,
week, year).
"""

from __future__ import annotations

from dataclasses import dataclass

VENDOR_NXP = 0x04

_VENDORS = {VENDOR_NXP: "NXP Semiconductors"}

_FAMILIES = {
    0x01: "DESFire EV1",
    0x02: "DESFire EV2",
    0x03: "DESFire EV3",
}


@dataclass(frozen=True)
class VersionInfo:
    card_family: str
    vendor: str
    storage_bytes: int
    production_week: int | None = None
    production_year: int | None = None

    @property
    def capacity(self) -> str:
        if self.storage_bytes >= 1024:
            return f"{self.storage_bytes // 1024} KB"
        return f"{self.storage_bytes} bytes"

    @property
    def production_date(self) -> str:
        if self.production_week is None or self.production_year is None:
            return ""
        return f"Week {self.production_week}, {self.production_year}"


def parse_version(data: bytes) -> VersionInfo | None:
    """Build VersionInfo from a 7 to 28 byte GetVersion buffer."""
    if len(data) < 7:
        return None
    hw_vendor, hw_type, hw_subtype, hw_major, hw_minor, hw_storage = data[:6]

    family = "DESFire"
    if hw_type == 0x01:
        family = _FAMILIES.get(hw_subtype, f"DESFire ({hw_major}.{hw_minor})")

    week = year = None
    if len(data) >= 28:
        prod_week, prod_year = data[26], data[27]
        if 0 < prod_week <= 53 and prod_year > 0:
            week = prod_week
            year = 2000 + prod_year if prod_year < 50 else 1900 + prod_year

    return VersionInfo(
        card_family=family,
        vendor=_VENDORS.get(hw_vendor, "Unknown"),
        storage_bytes=1 << (hw_storage >> 1),
        production_week=week,
        production_year=year,
    )
