from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Message:
    """Base class for messages sent to a terminal."""


@dataclass
class Result:
    """Base class for typed results from a terminal operation.

    Results are plain values. A card refusing a command is reported in
    the result (status word, flags), never raised.
    """
