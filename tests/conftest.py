"""
Pytest configuration and shared fixtures.

The scripted card answers commands from a table keyed by the command
hex, so sessions and terminals run without a reader.
"""

from datetime import datetime, timedelta

import pytest

from ticketexp.core.desfire import FileKind, ScanData, SessionState
from ticketexp.core.smartcard import Response, TransportError

AID = bytes.fromhex("1050A0")
UID = bytes.fromhex("04A1B2C3D4E5F6")

VERSION_FRAMES = (
    bytes.fromhex("04010101001805"),
    bytes.fromhex("04010101041805"),
    bytes.fromhex("04A1B2C3D4E5F6BA9876543220" + "17"),
)

NOW = datetime(2025, 1, 20, 19, 0, 0)
LAST_VALIDATION = datetime(2025, 1, 20, 18, 45, 10)


def encode_packed_date(dt):
    """Inverse of parse_packed_date for dates from 2011 on."""
    first = dt.replace(day=1)
    if dt.day < 20:
        first = (first - timedelta(days=1)).replace(day=1)
    raw_day = (dt.date() - first.date()).days + 1 - 20
    value = (
        (first.year - 2010) << 26
        | first.month << 22
        | raw_day << 17
        | dt.hour << 12
        | dt.minute << 6
        | dt.second
    )
    return value.to_bytes(4, "big")


def make_slot(status=0x01, product_type=0x32, code=0x0140, date=None, validity=0, trips=0):
    slot = bytearray(32)
    slot[0] = status
    slot[1] = product_type
    slot[4:6] = code.to_bytes(2, "little")
    if date is not None:
        slot[6:10] = encode_packed_date(date)
    slot[14] = validity
    slot[16] = trips
    return bytes(slot)


class ScriptedCard:
    """Transport double.

    ``script`` maps command hex to a response hex, a list of response
    hex strings (consumed in order, the last one repeats) or an
    exception instance to raise.
    """

    DEFAULT = "911C"

    def __init__(self, script=None, uid=UID, readers=("Reader 0",)):
        self.script = {k.upper(): v for k, v in (script or {}).items()}
        self.uid = uid
        self.readers = list(readers)
        self.sent = []
        self.connected = False

    def list_readers(self):
        return self.readers

    def connect(self, reader):
        self.connected = True

    def disconnect(self):
        self.connected = False

    def get_uid(self):
        return self.uid

    def transmit(self, apdu):
        command = apdu.to_bytes().hex().upper()
        self.sent.append(command)
        answer = self.script.get(command, self.DEFAULT)
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, Exception):
            raise answer
        return Response.from_bytes(bytes.fromhex(answer))


def _settings(kind, size):
    access = "EEEE"
    if kind is FileKind.VALUE:
        return "0200" + access + "00000000" + "FFFFFF7F" + "00000000" + "00"
    if kind.is_record:
        return f"0{kind:d}00" + access + size.to_bytes(3, "little").hex() + "0A0000" + "050000"
    return f"0{kind:d}00" + access + size.to_bytes(3, "little").hex()


def desfire_script(files, kinds, encrypted=(), aid=AID, version=VERSION_FRAMES):
    """Build the command table of a DESFire card holding *files*."""
    script = {
        "9060000000": [version[0].hex() + "91AF"],
        "90AF000000": [version[1].hex() + "91AF", version[2].hex() + "9100"],
        "906A000000": aid.hex() + "9100",
        f"905A000003{aid.hex()}00": "9100",
        "906F000000": bytes(sorted(set(files) | set(encrypted))).hex() + "9100",
    }
    for fid in encrypted:
        script[f"90F5000001{fid:02X}00"] = "91AE"
    for fid, data in files.items():
        kind = kinds.get(fid, FileKind.STANDARD)
        script[f"90F5000001{fid:02X}00"] = _settings(kind, len(data)) + "9100"
        if kind is FileKind.VALUE:
            script[f"906C000001{fid:02X}00"] = data.hex() + "9100"
        elif kind.is_record:
            script[f"90BB000007{fid:02X}00000000000000"] = data.hex() + "9100"
        else:
            script[f"90BD000007{fid:02X}00000000000000"] = data.hex() + "9100"
    return script


@pytest.fixture
def packed_date():
    return encode_packed_date


@pytest.fixture
def slot():
    return make_slot


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def ticket_files():
    """Files of a student card: 7 trips, the last one validated 15 minutes ago."""
    identity = bytearray(32)
    identity[9] = 0x10
    identity[13:17] = bytes.fromhex("12345678")
    personalization = bytearray(16)
    personalization[4:7] = b"PKP"
    event_log = (
        encode_packed_date(datetime(2025, 1, 15, 8, 30, 0))
        + encode_packed_date(LAST_VALIDATION)
        + encode_packed_date(datetime(2024, 12, 30, 12, 0, 0))
        + bytes(4)
    )
    products = (
        make_slot(product_type=0x32, code=0x0140, trips=7)
        + make_slot(product_type=0x31, code=0x0258, date=datetime(2024, 11, 1, 9, 0, 0), validity=30)
        + bytes(32)
        + bytes([0xFF]) + bytes(31)
    )
    return {
        0x02: bytes(identity),
        0x04: bytes(personalization),
        0x05: (250).to_bytes(4, "little"),
        0x06: event_log,
        0x0C: (7).to_bytes(4, "little"),
        0x10: products,
    }


@pytest.fixture
def ticket_kinds():
    return {
        0x05: FileKind.VALUE,
        0x0C: FileKind.VALUE,
        0x06: FileKind.CYCLIC_RECORD,
        0x10: FileKind.BACKUP,
    }


@pytest.fixture
def ticket_card(ticket_files, ticket_kinds):
    return ScriptedCard(desfire_script(ticket_files, ticket_kinds))


@pytest.fixture
def scan_data(ticket_files):
    """What a complete scan of the student card yields."""
    return ScanData(
        uid=UID,
        version=b"".join(VERSION_FRAMES),
        aids=[AID],
        aid=AID,
        files=dict(ticket_files),
        state=SessionState.DONE,
    )


@pytest.fixture
def scripted_card():
    return ScriptedCard


@pytest.fixture
def card_script():
    return desfire_script


@pytest.fixture
def transport_error():
    return TransportError("card removed")
