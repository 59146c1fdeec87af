"""Scan dumps: save what a scan read and decode it again later.

Format::

    {
      "uid": "04A1B2C3D4E5F6",
      "version": "04010101...",
      "aids": ["1050A0"],
      "aid": "1050A0",
      "encrypted": false,
      "application_encrypted": false,
      "encrypted_files": ["0x10"],
      "files": {"0x02": "00112233..."},
      "state": "done",
      "error": null
    }

Byte strings are hex; AIDs are kept in wire order. A dump of an aborted
scan keeps its state so it decodes as partial. Dumps without a state
are taken as complete.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ticketexp.core.desfire import ScanData, SessionState

lg = logging.getLogger(__name__)


def _hex(data: bytes | None) -> str | None:
    return data.hex().upper() if data is not None else None


def _unhex(text: str | None) -> bytes | None:
    return bytes.fromhex(text) if text else None


def to_dict(scan: ScanData) -> dict:
    return {
        "uid": _hex(scan.uid),
        "version": _hex(scan.version),
        "aids": [_hex(aid) for aid in scan.aids],
        "aid": _hex(scan.aid),
        "encrypted": scan.encrypted,
        "application_encrypted": scan.application_encrypted,
        "encrypted_files": [f"0x{fid:02X}" for fid in sorted(scan.encrypted_files)],
        "files": {f"0x{fid:02X}": _hex(data) for fid, data in sorted(scan.files.items())},
        "state": scan.state.value,
        "error": scan.error,
    }


def from_dict(obj: dict) -> ScanData:
    """Rebuild ScanData from a dump. Unknown keys are ignored."""
    if not isinstance(obj, dict):
        raise ValueError(f"malformed dump: expected an object, got {type(obj).__name__}")
    try:
        files = {int(fid, 16): bytes.fromhex(data) for fid, data in obj.get("files", {}).items()}
        encrypted_files = {int(fid, 16) for fid in obj.get("encrypted_files", [])}
        aids = [bytes.fromhex(aid) for aid in obj.get("aids", [])]
        state = SessionState(obj.get("state", SessionState.DONE.value))
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed dump: {exc}") from exc
    return ScanData(
        uid=_unhex(obj.get("uid")),
        version=_unhex(obj.get("version")) or b"",
        aids=aids,
        aid=_unhex(obj.get("aid")),
        files=files,
        encrypted=bool(obj.get("encrypted", False)),
        application_encrypted=bool(obj.get("application_encrypted", False)),
        encrypted_files=encrypted_files,
        state=state,
        error=obj.get("error"),
    )


def save(scan: ScanData, path: str | Path) -> None:
    Path(path).write_text(json.dumps(to_dict(scan), indent=2) + "\n")
    lg.info("scan saved to %s", path)


def load(path: str | Path) -> ScanData:
    return from_dict(json.loads(Path(path).read_text()))
