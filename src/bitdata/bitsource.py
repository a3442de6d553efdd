"""
Immutable bit sequences.

Bits are stored packed, MSB-first within each byte: bit 0 of the source is
bit 7 of the first byte. This is the same order the cursor reads in, so a
source built from bytes decodes big-endian fields naturally.
"""
from __future__ import annotations

from typing import Iterable, Iterator


class BitSource:
    __slots__ = ("_data", "_length")

    def __init__(self, data: bytes | bytearray | memoryview = b"", length: int | None = None):
        data = bytes(data)
        if length is None:
            length = len(data) * 8
        if not (0 <= length <= len(data) * 8):
            raise ValueError(f"bit length {length} out of bounds for {len(data)} bytes")
        # keep only the bytes that hold bits, with the unused tail cleared
        nbytes = (length + 7) // 8
        buf = bytearray(data[:nbytes])
        if length % 8:
            buf[-1] &= (0xFF << (8 - length % 8)) & 0xFF
        self._data = bytes(buf)
        self._length = length

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview, bit_length: int | None = None) -> "BitSource":
        return cls(data, bit_length)

    @classmethod
    def from_bits(cls, bits: Iterable[int | bool]) -> "BitSource":
        buf = bytearray()
        n = 0
        for bit in bits:
            if n % 8 == 0:
                buf.append(0)
            if bit:
                buf[-1] |= 0x80 >> (n % 8)
            n += 1
        return cls(buf, n)

    @classmethod
    def from_string(cls, text: str) -> "BitSource":
        """Build from a string of ``0``/``1``; whitespace and ``_`` are ignored."""
        bits = []
        for ch in text:
            if ch in " \t\r\n_":
                continue
            if ch not in "01":
                raise ValueError(f"not a bit: {ch!r}")
            bits.append(ch == "1")
        return cls.from_bits(bits)

    @classmethod
    def from_indices(cls, length: int, set_bits: Iterable[int] = ()) -> "BitSource":
        """A ``length``-bit source, all clear except the bits at ``set_bits``."""
        if length < 0:
            raise ValueError("negative bit length")
        buf = bytearray((length + 7) // 8)
        for i in set_bits:
            if not (0 <= i < length):
                raise IndexError(f"bit index {i} out of range for length {length}")
            buf[i // 8] |= 0x80 >> (i % 8)
        return cls(buf, length)

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index: int) -> bool:
        if not (0 <= index < self._length):
            raise IndexError(f"bit index {index} out of range for length {self._length}")
        return bool((self._data[index // 8] >> (7 - index % 8)) & 1)

    def __iter__(self) -> Iterator[bool]:
        for i in range(self._length):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitSource):
            return NotImplemented
        return self._length == other._length and self._data == other._data

    def __hash__(self) -> int:
        return hash((self._length, self._data))

    def __str__(self) -> str:
        return "".join("1" if b else "0" for b in self)

    def __repr__(self) -> str:
        text = str(self)
        if len(text) > 64:
            text = text[:64] + "..."
        return f"BitSource({self._length}, '{text}')"

    def to_bytes(self) -> bytes:
        """Packed bytes, the last one zero-padded on the right."""
        return self._data
