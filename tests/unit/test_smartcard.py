"""
Unit tests for the PC/SC transport adapter and wire types.
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from smartcard.Exceptions import CardConnectionException

from ticketexp.core.smartcard import APDU, PROTOCOL, TRACE, Response, TransportError
from ticketexp.core.smartcard.card import Card
from ticketexp.core.smartcard.observer import LoggingCardObserver, color_sw


@pytest.fixture
def connected_card():
    card = Card()
    connection = MagicMock()
    reader = MagicMock()
    reader.createConnection.return_value = connection
    card.connect(reader)
    return card, connection


class TestWireTypes:
    def test_apdu_with_data(self):
        apdu = APDU(0x90, 0x5A, 0x00, 0x00, data=bytes.fromhex("1050A0"), le=0)
        assert apdu.to_bytes() == bytes.fromhex("905A0000031050A000")

    def test_apdu_without_le(self):
        assert APDU(0xFF, 0xCA, 0x00, 0x00).to_bytes() == bytes.fromhex("FFCA0000")

    def test_response_split(self):
        resp = Response.from_bytes(bytes.fromhex("AABB91AF"))
        assert resp.data == bytes.fromhex("AABB")
        assert resp.sw == 0x91AF
        assert not resp.success
        assert Response.from_bytes(bytes.fromhex("9100")).success


class TestCard:
    def test_transmit(self, connected_card):
        card, connection = connected_card
        connection.transmit.return_value = ([0x01, 0x02], 0x91, 0x00)
        resp = card.transmit(APDU(0x90, 0x60, 0x00, 0x00, le=0))
        connection.transmit.assert_called_once_with([0x90, 0x60, 0x00, 0x00, 0x00])
        assert resp.data == b"\x01\x02"
        assert resp.sw == 0x9100

    def test_connection_error_is_transport_error(self, connected_card):
        card, connection = connected_card
        connection.transmit.side_effect = CardConnectionException("card removed")
        with pytest.raises(TransportError):
            card.transmit_raw(bytes.fromhex("9060000000"))

    def test_not_connected(self):
        with pytest.raises(TransportError):
            Card().transmit_raw(b"\x90\x60\x00\x00\x00")

    def test_uid(self, connected_card):
        card, connection = connected_card
        connection.transmit.return_value = ([0x04, 0xA1], 0x90, 0x00)
        assert card.get_uid() == b"\x04\xa1"
        connection.transmit.assert_called_once_with([0xFF, 0xCA, 0x00, 0x00, 0x00])

    def test_uid_unsupported(self, connected_card):
        card, connection = connected_card
        connection.transmit.return_value = ([], 0x6A, 0x81)
        assert card.get_uid() is None

    def test_disconnect(self, connected_card):
        card, connection = connected_card
        connection.disconnect.side_effect = CardConnectionException("gone")
        card.disconnect()
        assert not card.connected
        connection.deleteObserver.assert_called_once()


class TestObserver:
    def test_colors(self):
        assert color_sw(0x91, 0xAF) == "\033[33m"
        assert color_sw(0x91, 0x00) == "\033[32m"
        assert color_sw(0x91, 0xAE) == "\033[31m"

    def test_logs_traffic(self, caplog):
        caplog.set_level(TRACE)
        observer = LoggingCardObserver()
        observer.update(None, SimpleNamespace(type="command", args=[list(range(20))]))
        observer.update(None, SimpleNamespace(type="response", args=[[0xAA], 0x91, 0x00]))
        trace = [r for r in caplog.records if r.levelno == TRACE]
        assert len(trace) == 4
        assert trace[0].getMessage().startswith(">> 00 01 02")

    def test_levels_registered(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert logging.getLevelName(PROTOCOL) == "PROTOCOL"
