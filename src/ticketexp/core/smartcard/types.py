from __future__ import annotations

from dataclasses import dataclass


class TransportError(RuntimeError):
    """The transport returned nothing, or the link to the card broke."""


@dataclass
class APDU:
    """ISO 7816 command APDU (short form only)."""

    cla: int
    ins: int
    p1: int
    p2: int
    data: bytes = b""
    le: int | None = None

    def to_bytes(self) -> bytes:
        buf = bytearray([self.cla, self.ins, self.p1, self.p2])
        if self.data:
            buf.append(len(self.data))
            buf.extend(self.data)
        if self.le is not None:
            buf.append(0x00 if self.le == 256 else self.le)
        return bytes(buf)

    def __repr__(self) -> str:
        return self.to_bytes().hex(" ").upper()


@dataclass
class Response:
    """Response APDU: data followed by a two byte status trailer."""

    data: bytes
    sw1: int
    sw2: int

    @classmethod
    def from_bytes(cls, raw: bytes) -> Response:
        """Split a raw response into data and trailer.

        Raises TransportError when the trailer is missing.
        """
        if len(raw) < 2:
            raise TransportError(f"short response: {raw.hex().upper() or '(empty)'}")
        return cls(data=bytes(raw[:-2]), sw1=raw[-2], sw2=raw[-1])

    @property
    def sw(self) -> int:
        return (self.sw1 << 8) | self.sw2

    @property
    def success(self) -> bool:
        return self.sw1 in (0x90, 0x91) and self.sw2 == 0x00

    def __repr__(self) -> str:
        sw = f"SW={self.sw:04X}"
        if self.data:
            return f"{self.data.hex(' ').upper()} {sw}"
        return sw
