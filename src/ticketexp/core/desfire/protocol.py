"""DESFire native commands wrapped in ISO 7816 APDUs.

Each method that maps to a single APDU uses the ``send_`` prefix and
returns the raw Response. The operations below them drive ``91 AF``
continuation and return a Reply.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum

from ticketexp.core.desfire.status import Reply, Status, classify_status, status_text
from ticketexp.core.smartcard import APDU, Response
from ticketexp.core.smartcard.logging import PROTOCOL
from ticketexp.core.smartcard.observer import colored_sw

lg = logging.getLogger(__name__)

CLA_DESFIRE = 0x90


class Command(IntEnum):
    """DESFire native command codes used for reading."""

    GET_VERSION = 0x60
    GET_APPLICATION_IDS = 0x6A
    SELECT_APPLICATION = 0x5A
    GET_FILE_IDS = 0x6F
    GET_FILE_SETTINGS = 0xF5
    READ_DATA = 0xBD
    GET_VALUE = 0x6C
    READ_RECORDS = 0xBB
    ADDITIONAL_FRAME = 0xAF


def wrap(ins: int, data: bytes = b"") -> APDU:
    """Wrap a native command: 90 INS 00 00 [Lc data] 00."""
    return APDU(cla=CLA_DESFIRE, ins=ins, p1=0x00, p2=0x00, data=data, le=0x00)


def _offset_length(file_id: int, offset: int, length: int) -> bytes:
    return (
        bytes([file_id])
        + offset.to_bytes(3, "little")
        + length.to_bytes(3, "little")
    )


class DESFire:
    """DESFire protocol operations (read side only, no authentication)."""

    def __init__(self, transmit: Callable[[APDU], Response]) -> None:
        self._transmit = transmit

    def _send(self, label: str, apdu: APDU) -> Response:
        resp = self._transmit(apdu)
        lg.log(PROTOCOL, "%s %s", label, colored_sw(resp.sw1, resp.sw2))
        return resp

    # -- commands --

    def send_get_version(self) -> Response:
        """GetVersion (90 60), first frame: hardware info."""
        return self._send("GET VERSION", wrap(Command.GET_VERSION))

    def send_additional_frame(self) -> Response:
        """Continuation (90 AF) with no payload."""
        return self._send("ADDITIONAL FRAME", wrap(Command.ADDITIONAL_FRAME))

    def send_get_application_ids(self) -> Response:
        """GetApplicationIDs (90 6A)."""
        return self._send("GET APPLICATION IDS", wrap(Command.GET_APPLICATION_IDS))

    def send_select_application(self, aid: bytes) -> Response:
        """SelectApplication (90 5A), AID as sent on the wire (LSB first)."""
        if len(aid) != 3:
            raise ValueError(f"AID must be 3 bytes, got {len(aid)}")
        apdu = wrap(Command.SELECT_APPLICATION, aid)
        return self._send(f"SELECT APPLICATION {aid.hex().upper()}", apdu)

    def send_get_file_ids(self) -> Response:
        """GetFileIDs (90 6F)."""
        return self._send("GET FILE IDS", wrap(Command.GET_FILE_IDS))

    def send_get_file_settings(self, file_id: int) -> Response:
        """GetFileSettings (90 F5)."""
        apdu = wrap(Command.GET_FILE_SETTINGS, bytes([file_id]))
        return self._send(f"GET FILE SETTINGS {file_id:02X}", apdu)

    def send_read_data(self, file_id: int, offset: int = 0, length: int = 0) -> Response:
        """ReadData (90 BD). Length 0 reads the whole file."""
        apdu = wrap(Command.READ_DATA, _offset_length(file_id, offset, length))
        return self._send(f"READ DATA {file_id:02X}", apdu)

    def send_get_value(self, file_id: int) -> Response:
        """GetValue (90 6C)."""
        apdu = wrap(Command.GET_VALUE, bytes([file_id]))
        return self._send(f"GET VALUE {file_id:02X}", apdu)

    def send_read_records(self, file_id: int, offset: int = 0, count: int = 0) -> Response:
        """ReadRecords (90 BB). Count 0 reads every record."""
        apdu = wrap(Command.READ_RECORDS, _offset_length(file_id, offset, count))
        return self._send(f"READ RECORDS {file_id:02X}", apdu)

    # -- operations --

    def collect(self, first: Response, max_frames: int) -> Reply:
        """Accumulate data across 91 AF continuations, at most max_frames frames."""
        buf = bytearray(first.data)
        resp = first
        frames = 1
        while classify_status(resp) is Status.MORE and frames < max_frames:
            resp = self.send_additional_frame()
            frames += 1
            if classify_status(resp) in (Status.OK, Status.MORE):
                buf.extend(resp.data)
        status = classify_status(resp)
        if status is Status.MORE:
            lg.warning("frame limit %d reached, card has more data", max_frames)
        elif status is not Status.OK:
            lg.debug("%04X %s", resp.sw, status_text(resp.sw))
        return Reply(data=bytes(buf), status=status, sw=resp.sw, frames=frames)

    def get_version(self, max_frames: int = 3) -> Reply:
        """GetVersion across hardware, software and production frames."""
        return self.collect(self.send_get_version(), max_frames)

    def get_application_ids(self, max_frames: int = 8) -> Reply:
        """GetApplicationIDs; split the data with split_aids()."""
        return self.collect(self.send_get_application_ids(), max_frames)

    def get_file_ids(self) -> Reply:
        return self.collect(self.send_get_file_ids(), 1)

    def get_file_settings(self, file_id: int) -> Reply:
        return self.collect(self.send_get_file_settings(file_id), 1)

    def read_data(self, file_id: int, max_frames: int) -> Reply:
        return self.collect(self.send_read_data(file_id), max_frames)

    def read_records(self, file_id: int, max_frames: int) -> Reply:
        return self.collect(self.send_read_records(file_id), max_frames)

    def get_value(self, file_id: int) -> Reply:
        return self.collect(self.send_get_value(file_id), 1)


def split_aids(data: bytes) -> list[bytes]:
    """Split GetApplicationIDs data into 3-byte AIDs, ignoring a ragged tail."""
    return [data[i : i + 3] for i in range(0, len(data) - len(data) % 3, 3)]
