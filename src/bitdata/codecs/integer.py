from __future__ import annotations

from .base import BitDecoder
from .bitcursor import BitCursor
from ..errors import InvalidSchema


class Bits(BitDecoder):
    """Unsigned integer of a fixed bit width, MSB-first."""

    def __init__(self, width: int):
        if isinstance(width, bool) or not isinstance(width, int):
            raise InvalidSchema(f"bit width must be an int, got {width!r}")
        if width < 1:
            raise InvalidSchema(f"bit width must be >= 1, got {width}")
        self.width = width

    @property
    def length(self) -> int:
        return self.width

    def __repr__(self) -> str:
        return f"Bits({self.width})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Bits) and other.width == self.width

    def __hash__(self) -> int:
        return hash((Bits, self.width))

    def decode(self, cur: BitCursor) -> int:
        return cur.bits(self.width)

    def bit_size(self) -> int:
        return self.width
