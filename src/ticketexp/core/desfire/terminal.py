"""DESFire terminal.

Translates the message vocabulary of the app layer into DESFire
commands. Single-command messages are for exploring unknown cards; the
ScanMessage runs the full read session.
"""

from __future__ import annotations

from ticketexp.core.base import Agent, Terminal, handles
from ticketexp.core.desfire.files import FileKind, parse_file_settings
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
from ticketexp.core.desfire.session import DESFireSession
from ticketexp.core.desfire.version import parse_version


class DESFireTerminal(Terminal):
    """Terminal for DESFire cards (read-only, unauthenticated)."""

    def __init__(self, agent: Agent) -> None:
        super().__init__(agent)
        self._proto = DESFire(agent.transmit)

    @handles(GetVersionMessage)
    def _get_version(self, message: GetVersionMessage) -> GetVersionResult:
        reply = self._proto.get_version(message.max_frames)
        return GetVersionResult(
            version=reply.data, info=parse_version(reply.data), sw=reply.sw
        )

    @handles(ListApplicationsMessage)
    def _list_applications(self, message: ListApplicationsMessage) -> ListApplicationsResult:
        reply = self._proto.get_application_ids()
        aids = split_aids(reply.data) if reply.has_data else []
        return ListApplicationsResult(aids=aids, sw=reply.sw)

    @handles(SelectApplicationMessage)
    def _select_application(self, message: SelectApplicationMessage) -> SelectApplicationResult:
        reply = self._proto.collect(self._proto.send_select_application(message.aid), 1)
        return SelectApplicationResult(
            selected=reply.ok, encrypted=reply.auth_required, sw=reply.sw
        )

    @handles(ListFilesMessage)
    def _list_files(self, message: ListFilesMessage) -> ListFilesResult:
        reply = self._proto.get_file_ids()
        return ListFilesResult(file_ids=list(reply.data) if reply.ok else [], sw=reply.sw)

    @handles(GetFileSettingsMessage)
    def _get_file_settings(self, message: GetFileSettingsMessage) -> GetFileSettingsResult:
        reply = self._proto.get_file_settings(message.file_id)
        settings = parse_file_settings(reply.data) if reply.ok else None
        return GetFileSettingsResult(
            settings=settings, encrypted=reply.auth_required, sw=reply.sw
        )

    @handles(ReadFileMessage)
    def _read_file(self, message: ReadFileMessage) -> ReadFileResult:
        if message.kind is FileKind.VALUE:
            reply = self._proto.get_value(message.file_id)
        elif message.kind is not None and message.kind.is_record:
            reply = self._proto.read_records(message.file_id, message.max_frames)
        else:
            reply = self._proto.read_data(message.file_id, message.max_frames)
        return ReadFileResult(
            data=reply.data if reply.has_data else None,
            encrypted=reply.auth_required,
            sw=reply.sw,
        )

    @handles(ScanMessage)
    def _scan(self, message: ScanMessage) -> ScanResult:
        session = DESFireSession(self._proto, self._agent.get_uid(), message.config)
        return ScanResult(scan=session.run())
