"""DESFire file types and GetFileSettings parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class FileKind(IntEnum):
    """File type byte from GetFileSettings, resolved once per file."""

    STANDARD = 0x00
    BACKUP = 0x01
    VALUE = 0x02
    LINEAR_RECORD = 0x03
    CYCLIC_RECORD = 0x04

    @property
    def is_record(self) -> bool:
        return self in (FileKind.LINEAR_RECORD, FileKind.CYCLIC_RECORD)

    @property
    def is_data(self) -> bool:
        return self in (FileKind.STANDARD, FileKind.BACKUP)


_COMM_MODES = {0x00: "plain", 0x01: "maced", 0x03: "encrypted"}


def _access_key(nibble: int) -> str:
    if nibble == 0x0E:
        return "free"
    if nibble == 0x0F:
        return "denied"
    return f"key {nibble}"


def _uint24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 3], "little")


@dataclass(frozen=True)
class FileSettings:
    """Parsed GetFileSettings response.

    ``size`` is the file size for data files and the record size for
    record files.
    """

    file_type: int
    comm_mode: int
    access_rights: int
    size: int = 0
    max_records: int = 0
    current_records: int = 0
    lower_limit: int = 0
    upper_limit: int = 0
    value: int = 0

    @property
    def kind(self) -> FileKind | None:
        try:
            return FileKind(self.file_type)
        except ValueError:
            return None

    @property
    def read_access(self) -> int:
        return (self.access_rights >> 12) & 0x0F

    @property
    def free_read(self) -> bool:
        """Readable without authentication (read or read/write key is free)."""
        rw_access = (self.access_rights >> 4) & 0x0F
        return 0x0E in (self.read_access, rw_access)

    def describe(self) -> str:
        kind = self.kind
        name = kind.name if kind is not None else f"type {self.file_type:02X}"
        comm = _COMM_MODES.get(self.comm_mode, f"{self.comm_mode:02X}")
        parts = [name, comm, f"read={_access_key(self.read_access)}"]
        if kind is not None and kind.is_data:
            parts.append(f"size={self.size}")
        elif kind is FileKind.VALUE:
            parts.append(f"limits=[{self.lower_limit}, {self.upper_limit}]")
        elif kind is not None and kind.is_record:
            parts.append(
                f"records={self.current_records}/{self.max_records} x {self.size}"
            )
        return " ".join(parts)


def parse_file_settings(data: bytes) -> FileSettings | None:
    """Parse GetFileSettings data. Returns None when too short to classify."""
    if len(data) < 4:
        return None
    file_type = data[0]
    common = dict(
        file_type=file_type,
        comm_mode=data[1],
        access_rights=data[2] | (data[3] << 8),
    )
    if file_type in (FileKind.STANDARD, FileKind.BACKUP) and len(data) >= 7:
        return FileSettings(**common, size=_uint24(data, 4))
    if file_type == FileKind.VALUE and len(data) >= 16:
        return FileSettings(
            **common,
            lower_limit=int.from_bytes(data[4:8], "little", signed=True),
            upper_limit=int.from_bytes(data[8:12], "little", signed=True),
            value=int.from_bytes(data[12:16], "little", signed=True),
        )
    if file_type in (FileKind.LINEAR_RECORD, FileKind.CYCLIC_RECORD) and len(data) >= 13:
        return FileSettings(
            **common,
            size=_uint24(data, 4),
            max_records=_uint24(data, 7),
            current_records=_uint24(data, 10),
        )
    return FileSettings(**common)
