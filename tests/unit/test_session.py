"""
Unit tests for the DESFire read session state machine.
"""

import pytest

from ticketexp.core.desfire import (
    DEFAULT_FILES,
    DESFire,
    DESFireSession,
    FileKind,
    ScanConfig,
    SessionState,
)
AID = bytes.fromhex("1050A0")


def _run(card, config=None, uid=None):
    return DESFireSession(DESFire(card.transmit), uid, config).run()


class TestCompleteScan:
    """A card that answers everything ends DONE with every file read."""

    def test_reads_all_files(self, ticket_card, ticket_files):
        scan = _run(ticket_card, uid=b"\x04\x01")
        assert scan.state is SessionState.DONE
        assert scan.files == ticket_files
        assert scan.aid == AID
        assert scan.application_id == "a05010"
        assert scan.uid == b"\x04\x01"
        assert not scan.encrypted

    def test_version_spans_three_frames(self, ticket_card):
        scan = _run(ticket_card)
        assert len(scan.version) == 28
        assert ticket_card.sent[:3] == ["9060000000", "90AF000000", "90AF000000"]

    def test_read_primitive_follows_file_kind(self, ticket_card):
        scan = _run(ticket_card)
        assert scan.kinds[0x05] is FileKind.VALUE
        assert scan.kinds[0x06] is FileKind.CYCLIC_RECORD
        assert "906C0000010500" in ticket_card.sent
        assert "90BB0000070600000000000000" in ticket_card.sent
        assert "90BD0000071000000000000000" in ticket_card.sent
        assert "90BD0000070500000000000000" not in ticket_card.sent

    def test_configured_aid_is_selected(self, scripted_card, card_script, ticket_files, ticket_kinds):
        other = bytes.fromhex("010203")
        script = card_script(ticket_files, ticket_kinds)
        script["906A000000"] = other.hex() + AID.hex() + "9100"
        card = scripted_card(script)
        scan = _run(card, ScanConfig(aid=AID))
        assert scan.aids == [other, AID]
        assert scan.aid == AID
        assert "905A000003" + AID.hex().upper() + "00" in card.sent


class TestPartialScan:
    """Per-command refusals never abort the session."""

    def test_failed_read_leaves_file_absent(self, scripted_card, card_script, ticket_files, ticket_kinds):
        script = card_script(ticket_files, ticket_kinds)
        script["90BD0000070200000000000000"] = "919D"
        scan = _run(scripted_card(script))
        assert scan.state is SessionState.DONE
        assert 0x02 not in scan.files
        assert 0x04 in scan.files

    def test_empty_read_is_kept(self, scripted_card, card_script, ticket_files, ticket_kinds):
        files = dict(ticket_files)
        files[0x60] = b""
        scan = _run(scripted_card(card_script(files, ticket_kinds)))
        assert scan.files[0x60] == b""

    def test_encrypted_file_is_flagged(self, scripted_card, card_script, ticket_files, ticket_kinds):
        files = {k: v for k, v in ticket_files.items() if k != 0x10}
        scan = _run(scripted_card(card_script(files, ticket_kinds, encrypted=[0x10])))
        assert scan.state is SessionState.DONE
        assert scan.encrypted
        assert scan.is_encrypted(0x10)
        assert not scan.is_encrypted(0x02)
        assert 0x10 not in scan.files

    def test_encrypted_read_after_settings(self, scripted_card, card_script, ticket_files, ticket_kinds):
        script = card_script(ticket_files, ticket_kinds)
        script["90BD0000071000000000000000"] = "91CA"
        scan = _run(scripted_card(script))
        assert scan.is_encrypted(0x10)
        assert 0x10 not in scan.files

    def test_missing_settings_falls_back_to_data_then_value(self, scripted_card, card_script, ticket_files, ticket_kinds):
        script = card_script(ticket_files, ticket_kinds)
        del script["90F50000010500"]
        card = scripted_card(script)
        scan = _run(card)
        assert 0x05 not in scan.kinds
        assert scan.files[0x05] == ticket_files[0x05]
        assert card.sent.index("90BD0000070500000000000000") < card.sent.index("906C0000010500")

    def test_file_list_refused_uses_known_files(self, scripted_card, card_script, ticket_files, ticket_kinds):
        script = card_script(ticket_files, ticket_kinds)
        script["906F000000"] = "91AE"
        card = scripted_card(script)
        scan = _run(card)
        assert scan.encrypted
        assert scan.files == ticket_files
        for fid in DEFAULT_FILES:
            assert f"90F5000001{fid:02X}00" in card.sent

    def test_version_refused_is_not_fatal(self, scripted_card, card_script, ticket_files, ticket_kinds):
        script = card_script(ticket_files, ticket_kinds)
        script["9060000000"] = "91AE"
        scan = _run(scripted_card(script))
        assert scan.version == b""
        assert scan.encrypted
        assert scan.files == ticket_files


class TestApplication:
    def test_no_application(self, scripted_card):
        card = scripted_card({"906A000000": "9100"})
        scan = _run(card)
        assert scan.state is SessionState.DONE
        assert scan.aid is None
        assert scan.files == {}

    def test_locked_application(self, scripted_card):
        card = scripted_card({
            "906A000000": AID.hex() + "9100",
            "905A0000031050A000": "91AE",
        })
        scan = _run(card)
        assert scan.state is SessionState.DONE
        assert scan.aid == AID
        assert scan.application_encrypted
        assert scan.is_encrypted(0x10)
        assert "906F000000" not in card.sent

    def test_select_failure(self, scripted_card):
        card = scripted_card({"906A000000": AID.hex() + "9100", "905A0000031050A000": "91A0"})
        scan = _run(card)
        assert scan.aid is None
        assert not scan.encrypted


class TestAbort:
    """A transport failure aborts but keeps what was gathered."""

    def test_abort_keeps_partial_files(self, scripted_card, card_script, ticket_files, ticket_kinds, transport_error):
        script = card_script(ticket_files, ticket_kinds)
        script["90F50000010600"] = transport_error
        scan = _run(scripted_card(script))
        assert scan.state is SessionState.ABORTED
        assert scan.aborted
        assert scan.error == "card removed"
        assert set(scan.files) == {0x02, 0x04, 0x05}

    def test_abort_on_first_command(self, scripted_card, transport_error):
        scan = _run(scripted_card({"9060000000": transport_error}))
        assert scan.aborted
        assert scan.version == b""

    def test_session_is_single_use(self, scripted_card):
        session = DESFireSession(DESFire(scripted_card().transmit))
        session.run()
        with pytest.raises(RuntimeError):
            session.run()

    def test_illegal_transition(self, scripted_card):
        session = DESFireSession(DESFire(scripted_card().transmit))
        with pytest.raises(RuntimeError):
            session._transition(SessionState.READING)

    def test_short_response_aborts(self, scripted_card):
        card = scripted_card({"906A000000": "91"})
        scan = _run(card)
        assert scan.aborted
        assert "short response" in scan.error
