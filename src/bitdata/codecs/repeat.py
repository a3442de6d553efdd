from __future__ import annotations

from typing import Any

from .base import ListDecoder, target_name
from .bitcursor import BitCursor
from ..errors import InvalidSchema


class Repeat(ListDecoder):
    """``count`` elements decoded back to back."""

    def __init__(self, count: int, element: Any):
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidSchema(f"repeat count must be an int, got {count!r}")
        if count < 0:
            raise InvalidSchema(f"repeat count must be >= 0, got {count}")
        super().__init__(element)
        self.count = count

    def __repr__(self) -> str:
        return f"Repeat({self.count}, {target_name(self.element)})"

    def fill(self, values: list, cur: BitCursor) -> None:
        from ..dispatch import decode
        # no retry and no truncation: an element failure propagates with the
        # elements decoded so far left in ``values``
        for _ in range(self.count):
            values.append(decode(self.element, cur))

    def bit_size(self) -> int | None:
        from ..dispatch import bit_size
        if self.count == 0:
            return 0
        one = bit_size(self.element)
        return None if one is None else one * self.count
