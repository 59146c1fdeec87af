"""DESFire messages and results.

Each operation has a Message/Result pair. Results carry the decoded
payload plus the final status word; a refused command is reported, not
raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ticketexp.core.base import Message, Result
from ticketexp.core.desfire.files import FileKind, FileSettings
from ticketexp.core.desfire.session import ScanConfig, ScanData
from ticketexp.core.desfire.version import VersionInfo


@dataclass
class GetVersionMessage(Message):
    """Request GetVersion, accumulated over its continuation frames."""

    max_frames: int = 3


@dataclass
class GetVersionResult(Result):
    version: bytes
    info: VersionInfo | None
    sw: int


@dataclass
class ListApplicationsMessage(Message):
    """Request the AIDs of all applications on the card."""


@dataclass
class ListApplicationsResult(Result):
    aids: list[bytes]
    sw: int


@dataclass
class SelectApplicationMessage(Message):
    """Select an application by its 3-byte AID (wire order)."""

    aid: bytes


@dataclass
class SelectApplicationResult(Result):
    selected: bool
    encrypted: bool
    sw: int


@dataclass
class ListFilesMessage(Message):
    """Request the file ids of the selected application."""


@dataclass
class ListFilesResult(Result):
    file_ids: list[int]
    sw: int


@dataclass
class GetFileSettingsMessage(Message):
    file_id: int


@dataclass
class GetFileSettingsResult(Result):
    settings: FileSettings | None
    encrypted: bool
    sw: int


@dataclass
class ReadFileMessage(Message):
    """Read a whole file with the primitive matching its kind.

    Without a kind the file is read as a data file.
    """

    file_id: int
    kind: FileKind | None = None
    max_frames: int = 32


@dataclass
class ReadFileResult(Result):
    data: bytes | None
    encrypted: bool
    sw: int


@dataclass
class ScanMessage(Message):
    """Run a complete read session on the presented card."""

    config: ScanConfig = field(default_factory=ScanConfig)


@dataclass
class ScanResult(Result):
    scan: ScanData
