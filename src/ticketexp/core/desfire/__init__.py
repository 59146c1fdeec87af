from ticketexp.core.desfire.files import FileKind, FileSettings, parse_file_settings
from ticketexp.core.desfire.messages import (
    GetFileSettingsMessage,
    GetFileSettingsResult,
    GetVersionMessage,
    GetVersionResult,
    ListApplicationsMessage,
    ListApplicationsResult,
    ListFilesMessage,
    ListFilesResult,
    ReadFileMessage,
    ReadFileResult,
    ScanMessage,
    ScanResult,
    SelectApplicationMessage,
    SelectApplicationResult,
)
from ticketexp.core.desfire.protocol import DESFire, split_aids
from ticketexp.core.desfire.session import (
    DEFAULT_FILES,
    DESFireSession,
    ScanConfig,
    ScanData,
    SessionState,
)
from ticketexp.core.desfire.status import Reply, Status, classify_status, status_text
from ticketexp.core.desfire.terminal import DESFireTerminal
from ticketexp.core.desfire.version import VersionInfo, parse_version

__all__ = [
    "DEFAULT_FILES",
    "DESFire",
    "DESFireSession",
    "DESFireTerminal",
    "FileKind",
    "FileSettings",
    "GetFileSettingsMessage",
    "GetFileSettingsResult",
    "GetVersionMessage",
    "GetVersionResult",
    "ListApplicationsMessage",
    "ListApplicationsResult",
    "ListFilesMessage",
    "ListFilesResult",
    "ReadFileMessage",
    "ReadFileResult",
    "Reply",
    "ScanConfig",
    "ScanData",
    "ScanMessage",
    "ScanResult",
    "SelectApplicationMessage",
    "SelectApplicationResult",
    "SessionState",
    "Status",
    "VersionInfo",
    "classify_status",
    "parse_file_settings",
    "parse_version",
    "split_aids",
    "status_text",
]
