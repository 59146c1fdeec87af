from __future__ import annotations

import logging
import re
from typing import Protocol

from ticketexp.core.smartcard import APDU, Response, TransportError

lg = logging.getLogger(__name__)

_NON_HEX = re.compile(r"[^0-9A-Fa-f]")


class Transport(Protocol):
    """The command/response channel to the card.

    The PC/SC Card implements it; tests and other NFC stacks can too.
    """

    def list_readers(self) -> list: ...
    def connect(self, reader) -> None: ...
    def disconnect(self) -> None: ...
    def get_uid(self) -> bytes | None: ...
    def transmit(self, apdu: APDU) -> Response: ...


def normalize_uid(uid: str | bytes | bytearray | list[int] | None) -> bytes | None:
    """Accept a tag UID as hex text (any separators) or raw bytes."""
    if uid is None:
        return None
    if isinstance(uid, str):
        digits = _NON_HEX.sub("", uid)
        if len(digits) % 2:
            digits = "0" + digits
        return bytes.fromhex(digits)
    return bytes(uid)


class Agent:
    """Agent that manages card connectivity and APDU transmission.

    Protocol-specific operations live in standalone protocol classes
    (DESFire) that receive agent.transmit as a callable. Terminals
    construct the protocol objects they need.
    """

    def __init__(self, card: Transport, uid: str | bytes | None = None) -> None:
        self._card = card
        self._uid = normalize_uid(uid)
        self._commands = 0

    @property
    def commands_sent(self) -> int:
        return self._commands

    def connect(self) -> None:
        """Discover a reader with a card present and connect."""
        available = self._card.list_readers()
        if not available:
            raise RuntimeError("no readers found")
        for reader in available:
            try:
                self._card.connect(reader)
                lg.info("connected to %s", reader)
                return
            except Exception:
                lg.debug("no card on %s", reader)
        raise RuntimeError("no card found on any reader")

    def disconnect(self) -> None:
        """Disconnect from the card."""
        self._card.disconnect()

    def get_uid(self) -> bytes | None:
        """Return the tag UID given by the NFC stack, else ask the reader."""
        if self._uid is not None:
            return self._uid
        try:
            return self._card.get_uid()
        except TransportError as exc:
            lg.warning("UID not available: %s", exc)
            return None

    def transmit(self, apdu: APDU) -> Response:
        """Send one APDU and wait for its response."""
        self._commands += 1
        return self._card.transmit(apdu)
