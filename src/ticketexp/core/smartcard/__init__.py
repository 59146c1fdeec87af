from ticketexp.core.smartcard.logging import PROTOCOL, TRACE, setup_logging
from ticketexp.core.smartcard.types import APDU, Response, TransportError

__all__ = ["APDU", "PROTOCOL", "Response", "TRACE", "TransportError", "setup_logging"]
