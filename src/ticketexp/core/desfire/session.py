"""Read session: walk one DESFire application and collect its files.

The session is a small state machine::

    IDLE -> APPLICATION_SELECTED -> FILES_ENUMERATED -> READING* -> DONE
       \\______________________________________________________/-> ABORTED

Per-command refusals never abort it: a file the card will not hand out
is simply missing from ``ScanData.files`` (and flagged when the card
asked for authentication). Only a TransportError aborts, and what was
gathered before it is still returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ticketexp.core.desfire.files import FileKind, FileSettings, parse_file_settings
from ticketexp.core.desfire.protocol import DESFire, split_aids
from ticketexp.core.desfire.status import Reply, status_text
from ticketexp.core.smartcard import TransportError

lg = logging.getLogger(__name__)

# Files the ticket decoder knows about, read when GetFileIDs is refused.
DEFAULT_FILES = (0x02, 0x04, 0x05, 0x06, 0x0C, 0x0D, 0x0E, 0x0F, 0x10, 0x14, 0x60)


class SessionState(Enum):
    IDLE = "idle"
    APPLICATION_SELECTED = "application selected"
    FILES_ENUMERATED = "files enumerated"
    READING = "reading"
    DONE = "done"
    ABORTED = "aborted"


_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.IDLE: {SessionState.APPLICATION_SELECTED, SessionState.DONE},
    SessionState.APPLICATION_SELECTED: {SessionState.FILES_ENUMERATED, SessionState.DONE},
    SessionState.FILES_ENUMERATED: {SessionState.READING, SessionState.DONE},
    SessionState.READING: {SessionState.READING, SessionState.DONE},
    SessionState.DONE: set(),
    SessionState.ABORTED: set(),
}


@dataclass
class ScanConfig:
    """Scan settings. ``aid`` is given as sent on the wire (LSB first)."""

    aid: bytes | None = None
    max_version_frames: int = 3
    max_read_frames: int = 32
    fallback_files: tuple[int, ...] = DEFAULT_FILES
    settle_delay: float = 1.0
    poll_interval: float = 0.5


@dataclass
class ScanData:
    """Everything one scan attempt collected from the card.

    ``files`` is the raw file table: a missing id means "not read",
    an empty value means "read, but empty".
    """

    uid: bytes | None = None
    version: bytes = b""
    aids: list[bytes] = field(default_factory=list)
    aid: bytes | None = None
    files: dict[int, bytes] = field(default_factory=dict)
    kinds: dict[int, FileKind] = field(default_factory=dict)
    settings: dict[int, FileSettings] = field(default_factory=dict)
    encrypted: bool = False
    application_encrypted: bool = False
    encrypted_files: set[int] = field(default_factory=set)
    state: SessionState = SessionState.IDLE
    error: str | None = None

    @property
    def aborted(self) -> bool:
        return self.state is SessionState.ABORTED

    @property
    def application_id(self) -> str:
        """AID for display: most significant byte first, lower-case hex."""
        if self.aid is None:
            return ""
        return self.aid[::-1].hex()

    def is_encrypted(self, file_id: int) -> bool:
        return self.application_encrypted or file_id in self.encrypted_files


class DESFireSession:
    """Drives one read of one card. Not reusable: create one per scan."""

    def __init__(
        self,
        proto: DESFire,
        uid: bytes | None = None,
        config: ScanConfig | None = None,
    ) -> None:
        self._proto = proto
        self._config = config or ScanConfig()
        self._data = ScanData(uid=uid)

    @property
    def state(self) -> SessionState:
        return self._data.state

    def _transition(self, new: SessionState) -> None:
        old = self._data.state
        if new not in _TRANSITIONS[old]:
            raise RuntimeError(f"illegal session transition {old.value} -> {new.value}")
        lg.debug("session: %s -> %s", old.value, new.value)
        self._data.state = new

    def _mark_encrypted(self, file_id: int | None, reply: Reply) -> None:
        self._data.encrypted = True
        if file_id is None:
            self._data.application_encrypted = True
            lg.info("application requires authentication (%04X)", reply.sw)
        else:
            self._data.encrypted_files.add(file_id)
            lg.info("file %02X requires authentication (%04X)", file_id, reply.sw)

    def run(self) -> ScanData:
        """Run the scan to DONE or ABORTED and return what was collected."""
        if self._data.state is not SessionState.IDLE:
            raise RuntimeError("session already used")
        try:
            self._read_version()
            if self._select_application():
                self._transition(SessionState.APPLICATION_SELECTED)
                file_ids = self._list_files()
                self._transition(SessionState.FILES_ENUMERATED)
                for file_id in file_ids:
                    self._transition(SessionState.READING)
                    self._read_file(file_id)
            self._transition(SessionState.DONE)
        except TransportError as exc:
            lg.error("scan aborted in state '%s': %s", self._data.state.value, exc)
            self._data.state = SessionState.ABORTED
            self._data.error = str(exc)
        return self._data

    # -- steps --

    def _read_version(self) -> None:
        reply = self._proto.get_version(self._config.max_version_frames)
        self._data.version = reply.data
        if reply.auth_required:
            self._data.encrypted = True
        lg.debug("version: %d bytes in %d frames", len(reply.data), reply.frames)

    def _select_application(self) -> bool:
        reply = self._proto.get_application_ids()
        if reply.auth_required:
            # card-level listing is locked, the application may still be selectable
            self._data.encrypted = True
        aids = split_aids(reply.data) if reply.has_data else []
        self._data.aids = aids

        wanted = self._config.aid
        if wanted is not None:
            if aids and wanted not in aids:
                lg.warning("AID %s not listed by the card", wanted.hex().upper())
            candidate = wanted
        elif aids:
            candidate = aids[0]
        else:
            lg.warning("no application found on the card")
            return False

        reply = self._proto.collect(self._proto.send_select_application(candidate), 1)
        if reply.auth_required:
            self._data.aid = candidate
            self._mark_encrypted(None, reply)
            return False
        if not reply.ok:
            lg.warning(
                "select %s failed: %s", candidate.hex().upper(), status_text(reply.sw)
            )
            return False
        self._data.aid = candidate
        return True

    def _list_files(self) -> list[int]:
        reply = self._proto.get_file_ids()
        if reply.ok and reply.data:
            return list(reply.data)
        if reply.auth_required:
            self._data.encrypted = True
        lg.info("file list unavailable (%04X), trying known files", reply.sw)
        return list(self._config.fallback_files)

    def _read_file(self, file_id: int) -> None:
        reply = self._proto.get_file_settings(file_id)
        if reply.auth_required:
            self._mark_encrypted(file_id, reply)
            return

        kind: FileKind | None = None
        if reply.ok:
            settings = parse_file_settings(reply.data)
            if settings is not None:
                self._data.settings[file_id] = settings
                kind = settings.kind
                if kind is None:
                    lg.info("file %02X: unsupported type %02X", file_id, settings.file_type)
                    return
                self._data.kinds[file_id] = kind

        if kind is FileKind.VALUE:
            reply = self._proto.get_value(file_id)
        elif kind is not None and kind.is_record:
            reply = self._proto.read_records(file_id, self._config.max_read_frames)
        else:
            reply = self._proto.read_data(file_id, self._config.max_read_frames)
            if kind is None and not reply.has_data and not reply.auth_required:
                reply = self._proto.get_value(file_id)

        if reply.auth_required:
            self._mark_encrypted(file_id, reply)
        elif reply.has_data:
            self._data.files[file_id] = reply.data
            lg.debug("file %02X: %d bytes", file_id, len(reply.data))
        else:
            lg.debug("file %02X not read: %s", file_id, status_text(reply.sw))
