from __future__ import annotations


class BitDataError(ValueError):
    pass


class OutOfRange(BitDataError):
    """A non-speculative read ran past the end of the bit source."""

    def __init__(self, message: str, *, position: int):
        super().__init__(message)
        self.position = position


class InvalidSchema(BitDataError):
    pass


class SchemaCycle(InvalidSchema):
    """A record type transitively contains itself."""

    def __init__(self, path: tuple[type, ...]):
        names = " -> ".join(t.__name__ for t in path)
        super().__init__(f"record schema cycle: {names}")
        self.path = path
