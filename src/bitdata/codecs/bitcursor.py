from __future__ import annotations

from ..bitsource import BitSource
from ..errors import OutOfRange


class BitCursor:
    """Read position into a BitSource. The only mutable state of a decode."""

    __slots__ = ("src", "pos")

    def __init__(self, src: BitSource, pos: int = 0):
        if not (0 <= pos <= len(src)):
            raise ValueError(f"cursor {pos} out of bounds for {len(src)} bits")
        self.src = src
        self.pos = pos

    def __repr__(self) -> str:
        return f"BitCursor(pos={self.pos}, length={len(self.src)})"

    def remaining(self) -> int: return len(self.src) - self.pos
    def tell(self) -> int: return self.pos

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= len(self.src)): raise ValueError("seek out of bounds")
        self.pos = pos

    def fork(self) -> "BitCursor":
        """Scratch copy at the same position; moving it never moves this one."""
        return BitCursor(self.src, self.pos)

    def read_bit(self) -> int:
        if self.pos >= len(self.src):
            raise OutOfRange(f"bit underrun at {self.pos}", position=self.pos)
        bit = self.src[self.pos]
        self.pos += 1
        return 1 if bit else 0

    # bits (MSB-first)
    def bits(self, n: int) -> int:
        """Read ``n`` bits as an unsigned integer.

        On underrun the cursor stays where the source ran out, so the bits
        consumed before the failure are accounted for.
        """
        if n < 1: raise ValueError("bit count must be >= 1")
        start = self.pos
        val = 0
        try:
            for _ in range(n):
                val = (val << 1) | self.read_bit()
        except OutOfRange:
            raise OutOfRange(
                f"bit underrun: need {n} at {start}, only {self.pos - start} left",
                position=self.pos,
            ) from None
        return val
