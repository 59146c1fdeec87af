from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from smartcard.CardConnection import CardConnection
from smartcard.Exceptions import CardConnectionException
from smartcard.System import readers

from ticketexp.core.smartcard.observer import LoggingCardObserver
from ticketexp.core.smartcard.types import APDU, Response, TransportError

if TYPE_CHECKING:
    from smartcard.reader.Reader import Reader

lg = logging.getLogger(__name__)


class Card:
    """Wrapper around pyscard for contactless card communication.

    This is the desktop transport: a PC/SC reader standing in for the
    platform NFC stack. One command is in flight at a time.
    """

    def __init__(self) -> None:
        self._connection: CardConnection | None = None
        self._observer = LoggingCardObserver()

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @staticmethod
    def list_readers() -> list[Reader]:
        return readers()

    def connect(self, reader: Reader) -> None:
        connection = reader.createConnection()
        connection.addObserver(self._observer)
        connection.connect()
        self._connection = connection

    def disconnect(self) -> None:
        if self._connection is not None:
            try:
                self._connection.disconnect()
            except CardConnectionException as exc:
                lg.debug("disconnect: %s", exc)
            self._connection.deleteObserver(self._observer)
            self._connection = None

    def get_uid(self) -> bytes | None:
        """Get the UID of a contactless card via PC/SC pseudo-APDU FF CA 00 00."""
        if self._connection is None:
            raise TransportError("not connected to a card")
        try:
            data, sw1, sw2 = self._connection.transmit([0xFF, 0xCA, 0x00, 0x00, 0x00])
        except CardConnectionException as exc:
            raise TransportError(str(exc)) from exc
        if sw1 == 0x90 and sw2 == 0x00:
            return bytes(data)
        return None

    def transmit_raw(self, command: bytes) -> bytes:
        """Send raw command bytes, return data followed by SW1 SW2."""
        if self._connection is None:
            raise TransportError("not connected to a card")
        try:
            data, sw1, sw2 = self._connection.transmit(list(command))
        except CardConnectionException as exc:
            raise TransportError(str(exc)) from exc
        return bytes(data) + bytes([sw1, sw2])

    def transmit(self, apdu: APDU) -> Response:
        return Response.from_bytes(self.transmit_raw(apdu.to_bytes()))
