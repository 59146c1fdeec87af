from __future__ import annotations

import logging

TRACE = 15
PROTOCOL = 18
logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(PROTOCOL, "PROTOCOL")

LOG_FORMAT = "%(levelname)-8s %(name)s: %(message)s"


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = _trace


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure the root logger.

    PROTOCOL shows one line per card command, TRACE adds raw APDU hex,
    DEBUG adds every decode step.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = TRACE
    else:
        level = PROTOCOL
    logging.basicConfig(level=level, format=LOG_FORMAT)
