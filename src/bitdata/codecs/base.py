from __future__ import annotations

import abc
from typing import Any, Iterator

from .bitcursor import BitCursor


class BitDecoder(abc.ABC):
    """
    A field declaration that decodes its own value.

    Instances are shared by every record that declares them, so they hold
    only static parameters (widths, counts, element types) and never any
    decode state.
    """

    @abc.abstractmethod
    def decode(self, cur: BitCursor) -> Any:
        raise NotImplementedError

    def element_types(self) -> Iterator[Any]:
        """Targets this decoder decodes through the dispatcher."""
        return iter(())

    def bit_size(self) -> int | None:
        """Static number of bits consumed, or None when data dependent."""
        return None


class ListDecoder(BitDecoder):
    """A decoder whose value is a list filled one element at a time."""

    def __init__(self, element: Any):
        self.element = element

    @abc.abstractmethod
    def fill(self, values: list, cur: BitCursor) -> None:
        raise NotImplementedError

    def decode(self, cur: BitCursor) -> list:
        values: list = []
        self.fill(values, cur)
        return values

    def element_types(self) -> Iterator[Any]:
        yield self.element


class Decodable(abc.ABC):
    """
    A composite that hand-writes its own traversal.

    Subclasses provide ``read`` which fills the instance in place; the
    dispatcher calls it instead of walking the class attributes.
    """

    @abc.abstractmethod
    def read(self, cur: BitCursor) -> None:
        raise NotImplementedError


def target_name(target: Any) -> str:
    return target.__name__ if isinstance(target, type) else repr(target)
