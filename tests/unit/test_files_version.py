"""
Unit tests for GetFileSettings and GetVersion parsing.
"""

from ticketexp.core.desfire import FileKind, parse_file_settings, parse_version


class TestFileSettings:
    """File type is resolved once into a FileKind."""

    def test_standard_file(self):
        settings = parse_file_settings(bytes.fromhex("0000EEEE200000"))
        assert settings.kind is FileKind.STANDARD
        assert settings.size == 0x20
        assert settings.free_read

    def test_value_file(self):
        data = bytes.fromhex("0203" + "1032" + "00000000" + "E8030000" + "FA000000" + "00")
        settings = parse_file_settings(data)
        assert settings.kind is FileKind.VALUE
        assert settings.upper_limit == 1000
        assert settings.value == 250
        assert not settings.free_read
        assert "encrypted" in settings.describe()

    def test_cyclic_record_file(self):
        data = bytes.fromhex("0400" + "EEEE" + "100000" + "0A0000" + "050000")
        settings = parse_file_settings(data)
        assert settings.kind is FileKind.CYCLIC_RECORD
        assert settings.kind.is_record
        assert (settings.size, settings.max_records, settings.current_records) == (16, 10, 5)
        assert settings.describe() == "CYCLIC_RECORD plain read=free records=5/10 x 16"

    def test_backup_file_is_data(self):
        settings = parse_file_settings(bytes.fromhex("0100EEEE800000"))
        assert settings.kind.is_data
        assert not settings.kind.is_record

    def test_unknown_type(self):
        settings = parse_file_settings(bytes.fromhex("0700EEEE"))
        assert settings.kind is None
        assert settings.describe().startswith("type 07")

    def test_truncated_is_none(self):
        assert parse_file_settings(b"\x00\x00\xee") is None

    def test_truncated_body_keeps_kind(self):
        settings = parse_file_settings(bytes.fromhex("0200EEEE0000"))
        assert settings.kind is FileKind.VALUE
        assert settings.value == 0


class TestVersion:
    def test_full_buffer(self):
        data = bytes.fromhex(
            "04010101001805" "04010101041805" "04A1B2C3D4E5F6BA98765432" "2017"
        )
        info = parse_version(data)
        assert info.card_family == "DESFire EV1"
        assert info.vendor == "NXP Semiconductors"
        assert info.storage_bytes == 4096
        assert info.capacity == "4 KB"
        assert info.production_date == "Week 32, 2023"

    def test_hardware_frame_only(self):
        info = parse_version(bytes.fromhex("04010201001A05"))
        assert info.card_family == "DESFire EV2"
        assert info.capacity == "8 KB"
        assert info.production_date == ""

    def test_other_vendor_and_family(self):
        info = parse_version(bytes.fromhex("05010902000E05"))
        assert info.vendor == "Unknown"
        assert info.card_family == "DESFire (2.0)"
        assert info.capacity == "128 bytes"

    def test_non_desfire_type(self):
        assert parse_version(bytes.fromhex("04020101001805")).card_family == "DESFire"

    def test_invalid_production_week_is_dropped(self):
        data = bytes.fromhex("04010101001805") + bytes(19) + bytes([0x00, 0x17])
        assert parse_version(data).production_week is None

    def test_short_buffer(self):
        assert parse_version(bytes.fromhex("040101")) is None
