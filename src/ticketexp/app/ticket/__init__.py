from ticketexp.app.ticket.assembler import assemble_ticket
from ticketexp.app.ticket.cardinfo import (
    TRIPS_ENCRYPTED,
    TRIPS_UNLIMITED,
    ProductRecord,
    ProductSlot,
    ProductStatus,
    TicketSnapshot,
)
from ticketexp.app.ticket.session import decode_session, info_session, session, watch

__all__ = [
    "ProductRecord",
    "ProductSlot",
    "ProductStatus",
    "TRIPS_ENCRYPTED",
    "TRIPS_UNLIMITED",
    "TicketSnapshot",
    "assemble_ticket",
    "decode_session",
    "info_session",
    "session",
    "watch",
]
