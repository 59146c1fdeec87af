"""DESFire status trailers and per-command outcomes.

Every wrapped command answers with ``91 xx``. Only three trailers carry
meaning for reading a card: ``91 00`` (done), ``91 AF`` (more frames
follow) and ``91 AE`` / ``91 CA`` (authentication required). Everything
else is a soft failure of that one command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ticketexp.core.smartcard import Response

SW_OK = 0x9100
SW_MORE = 0x91AF
SW_AUTH_ERROR = 0x91AE
SW_ABORTED = 0x91CA

AUTH_REQUIRED = frozenset({SW_AUTH_ERROR, SW_ABORTED})

STATUS_NAMES: dict[int, str] = {
    0x9000: "Success",
    0x9100: "Success",
    0x91AF: "Additional frame expected",
    0x910C: "No changes",
    0x910E: "Out of EEPROM",
    0x911C: "Illegal command code",
    0x911E: "Integrity error",
    0x9140: "No such key",
    0x917E: "Length error",
    0x919D: "Permission denied",
    0x919E: "Parameter error",
    0x91A0: "Application not found",
    0x91A1: "Application integrity error",
    0x91AE: "Authentication error",
    0x91BE: "Boundary error",
    0x91C1: "Card integrity error",
    0x91CA: "Command aborted",
    0x91CD: "Card disabled",
    0x91CE: "Count error",
    0x91DE: "Duplicate error",
    0x91EE: "EEPROM error",
    0x91F0: "File not found",
    0x91F1: "File integrity error",
    0x6A82: "File not found",
    0x6D00: "Instruction not supported",
    0x6E00: "Class not supported",
}


class Status(Enum):
    OK = "ok"
    MORE = "more"
    AUTH = "auth"
    FAILED = "failed"


def classify_status(resp: Response) -> Status:
    """Map a response trailer onto the outcome the session acts on."""
    if resp.sw == SW_OK:
        return Status.OK
    if resp.sw == SW_MORE:
        return Status.MORE
    if resp.sw in AUTH_REQUIRED:
        return Status.AUTH
    return Status.FAILED


def status_text(sw: int) -> str:
    return STATUS_NAMES.get(sw, f"Unknown ({sw:04X})")


@dataclass(frozen=True)
class Reply:
    """Outcome of one command, continuation frames included.

    ``status`` is MORE only when the frame cap was reached before the
    card finished; ``data`` then holds what arrived so far.
    """

    data: bytes
    status: Status
    sw: int
    frames: int = 1

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def has_data(self) -> bool:
        return self.status in (Status.OK, Status.MORE)

    @property
    def auth_required(self) -> bool:
        return self.status is Status.AUTH
