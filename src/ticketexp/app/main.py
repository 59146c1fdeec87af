# filename : main.py
# created  : 06/23/2025


import logging
from datetime import datetime

from ticketexp.app import ticket
from ticketexp.core.desfire import ScanConfig

lg = logging.getLogger(__name__)


def main(
    command: str = "scan",
    config: ScanConfig | None = None,
    watch: bool = False,
    save: str | None = None,
    dump: str | None = None,
    now: datetime | None = None,
):
    lg.debug("ticketexp v1")
    if command == "decode":
        return ticket.decode_session(dump, now=now)

    from ticketexp.core.smartcard.card import Card

    if command == "info":
        return ticket.info_session(Card())
    if watch:
        return ticket.watch(Card(), config)
    return ticket.session(Card(), config, save_path=save)
