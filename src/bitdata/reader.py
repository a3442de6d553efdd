from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from .bitsource import BitSource
from .codecs.bitcursor import BitCursor
from .dispatch import decode
from .models.result import DecodeResult

_logger = logging.getLogger(__name__)

BytesLike = Union[str, Path, bytes, bytearray, memoryview]


def load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    p = Path(str(inp))
    return p.read_bytes()


def to_source(inp: Union[BytesLike, BitSource], bit_length: Optional[int] = None) -> BitSource:
    """Bit source over raw bytes (MSB-first per byte), a path, or an existing source."""
    if isinstance(inp, BitSource):
        if bit_length is None or bit_length == len(inp):
            return inp
        return BitSource(inp.to_bytes(), bit_length)
    return BitSource.from_bytes(load_bytes(inp), bit_length)


def parse(
    target: Any,
    data: Union[BytesLike, BitSource],
    *,
    start: int = 0,
    bit_length: Optional[int] = None,
) -> DecodeResult:
    """
    Decode one ``target`` from ``data`` starting at bit ``start``.

    Errors propagate unchanged; an OutOfRange carries the bit position where
    the source ran out.
    """
    src = to_source(data, bit_length)
    cur = BitCursor(src, start)
    value = decode(target, cur)
    return DecodeResult(value=value, start=start, end=cur.tell())


def iter_parse(
    target: Any,
    data: Union[BytesLike, BitSource],
    *,
    start: int = 0,
    bit_length: Optional[int] = None,
    max_records: Optional[int] = None,
) -> Iterator[DecodeResult]:
    """
    Stream ``target`` records laid back to back until the source is used up.

    A record cut short by the end of the source raises OutOfRange.
    """
    src = to_source(data, bit_length)
    cur = BitCursor(src, start)
    emitted = 0
    while cur.remaining() > 0:
        if max_records is not None and emitted >= max_records:
            return
        start_before = cur.tell()
        value = decode(target, cur)
        if cur.tell() == start_before:  # safety
            _logger.debug("record at %d consumed no bits; stopping", start_before)
            return
        yield DecodeResult(value=value, start=start_before, end=cur.tell())
        emitted += 1
