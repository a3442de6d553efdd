"""
Structural dispatch for composite records.

A record class lists its fields as class attributes, in order. Each field is
either a BitDecoder instance (``Bits``, ``Repeat``, ``Loop``, ...) or another
record class. The first time a record type is decoded its field list is
compiled into a procedure, a tuple of per-field steps run against one shared
cursor, and cached for the lifetime of the process.

Schema problems (a field that cannot be decoded, a type that contains itself)
are found while compiling and cached too: every later request for the type
raises a fresh error of the same kind, chained to the cached one, without
compiling again.
"""
from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .codecs.base import BitDecoder, Decodable, ListDecoder
from .codecs.bitcursor import BitCursor
from .errors import InvalidSchema, SchemaCycle

_logger = logging.getLogger(__name__)

Procedure = Callable[[Any, BitCursor], None]


class Record:
    """
    Base class for composites decoded field by field by the dispatcher.

        class Header(Record):
            version = Bits(3)
            flags = Repeat(5, Bits(1))
            body = Body              # another Record subclass

    Fields are the public class attributes in definition order, base class
    fields first. Functions, properties and other descriptors are not fields,
    and neither is a class defined inside the record body (refer to it by a
    separate attribute to make it a field).
    A class may instead set ``__bitfields__`` to a sequence of
    ``(name, target)`` pairs, which is then the whole schema.

    A fresh instance has every field set to None.
    """

    def __init__(self, **values: Any):
        names = [f.name for f in record_fields(type(self))]
        unknown = set(values) - set(names)
        if unknown:
            raise TypeError(f"{type(self).__name__} has no fields {sorted(unknown)}")
        for name in names:
            setattr(self, name, values.get(name))

    def __repr__(self) -> str:
        body = ", ".join(f"{f.name}={getattr(self, f.name, None)!r}" for f in record_fields(type(self)))
        return f"{type(self).__name__}({body})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            getattr(self, f.name, None) == getattr(other, f.name, None)
            for f in record_fields(type(self))
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class BitField:
    name: str
    target: Any


def record_fields(cls: type) -> Tuple[BitField, ...]:
    """The declared fields of a record class, in decode order."""
    explicit = getattr(cls, "__bitfields__", None)
    if explicit is not None:
        return tuple(BitField(name, target) for name, target in explicit)

    found: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass in (Record, Decodable) or not issubclass(klass, (Record, Decodable)):
            continue
        for name, value in vars(klass).items():
            if name.startswith("_"):
                continue
            if hasattr(type(value), "__get__"):
                # methods, properties, class/static methods
                continue
            if isinstance(value, type) and value.__qualname__ == f"{klass.__qualname__}.{name}":
                # nested class definition
                continue
            found[name] = value
    return tuple(BitField(name, target) for name, target in found.items())


def _is_record_type(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, (Record, Decodable))


# -----------------------------
# Procedure cache
# -----------------------------

class _State(enum.Enum):
    UNBUILT = "unbuilt"
    BUILDING = "building"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class _Entry:
    state: _State
    procedure: Optional[Procedure] = None
    error: Optional[InvalidSchema] = None


_cache: Dict[type, _Entry] = {}
_lock = threading.RLock()
# types being compiled by the thread holding _lock, outermost first
_building: List[type] = []


def procedure_state(cls: type) -> str:
    entry = _cache.get(cls)
    return (entry.state if entry is not None else _State.UNBUILT).value


def clear_cache() -> None:
    with _lock:
        _cache.clear()


def procedure_for(cls: type) -> Procedure:
    """Return the cached decode procedure for ``cls``, compiling it on first use."""
    entry = _cache.get(cls)
    if entry is not None and entry.state is _State.READY:
        return entry.procedure  # type: ignore[return-value]
    if not _is_record_type(cls):
        raise InvalidSchema(f"{cls!r} is not a record type")
    with _lock:
        return _resolve(cls)


def _resolve(cls: type) -> Procedure:
    entry = _cache.get(cls)
    if entry is None:
        return _build(cls)
    if entry.state is _State.READY:
        return entry.procedure  # type: ignore[return-value]
    if entry.state is _State.FAILED:
        _logger.debug("%s failed to compile earlier: %s", cls.__qualname__, entry.error)
        raise _replay(entry.error) from entry.error
    # still BUILDING further up this thread's stack
    start = _building.index(cls)
    raise SchemaCycle(tuple(_building[start:]) + (cls,))


def _replay(error: Any) -> InvalidSchema:
    if isinstance(error, SchemaCycle):
        return SchemaCycle(error.path)
    return type(error)(*error.args)


def _build(cls: type) -> Procedure:
    _logger.debug("compiling decode procedure for %s", cls.__qualname__)
    _cache[cls] = _Entry(_State.BUILDING)
    _building.append(cls)
    try:
        if issubclass(cls, Decodable):
            procedure: Procedure = cls.read
        else:
            steps = tuple(_compile_field(cls, f) for f in record_fields(cls))
            procedure = _sequence(steps)
    except InvalidSchema as exc:
        _cache[cls] = _Entry(_State.FAILED, error=exc)
        raise
    except Exception:
        del _cache[cls]
        raise
    finally:
        _building.pop()
    _cache[cls] = _Entry(_State.READY, procedure)
    return procedure


def _check_target(target: Any, where: str) -> None:
    """Validate a target and compile every record type reachable from it."""
    if isinstance(target, BitDecoder):
        for inner in target.element_types():
            _check_target(inner, where)
    elif _is_record_type(target):
        _resolve(target)
    else:
        raise InvalidSchema(f"{where} must be a bit decoder or a record type, got {target!r}")


def _compile_field(owner: type, field: BitField) -> Procedure:
    where = f"{owner.__qualname__}.{field.name}"
    target = field.target
    _check_target(target, where)
    if isinstance(target, ListDecoder):
        return _list_step(field.name, target)
    if isinstance(target, BitDecoder):
        return _value_step(field.name, target)
    return _nested_step(field.name, target, _resolve(target))


def _value_step(name: str, decoder: BitDecoder) -> Procedure:
    decode_field = decoder.decode

    def step(obj: Any, cur: BitCursor) -> None:
        setattr(obj, name, decode_field(cur))
    return step


def _list_step(name: str, decoder: ListDecoder) -> Procedure:
    def step(obj: Any, cur: BitCursor) -> None:
        values: list = []
        setattr(obj, name, values)
        decoder.fill(values, cur)
    return step


def _nested_step(name: str, cls: type, procedure: Procedure) -> Procedure:
    def step(obj: Any, cur: BitCursor) -> None:
        value = cls()
        setattr(obj, name, value)
        procedure(value, cur)
    return step


def _sequence(steps: Tuple[Procedure, ...]) -> Procedure:
    def procedure(obj: Any, cur: BitCursor) -> None:
        for step in steps:
            step(obj, cur)
    return procedure


# -----------------------------
# Uniform decode contract
# -----------------------------

def decode(target: Any, cur: BitCursor) -> Any:
    """Decode one value of ``target`` at the cursor and advance past it."""
    if isinstance(target, BitDecoder):
        return target.decode(cur)
    if _is_record_type(target):
        procedure = procedure_for(target)
        value = target()
        procedure(value, cur)
        return value
    raise InvalidSchema(f"cannot decode {target!r}: not a bit decoder or a record type")


def read_into(obj: Any, cur: BitCursor) -> Any:
    """Fill an existing record instance in place."""
    procedure_for(type(obj))(obj, cur)
    return obj


def bit_size(target: Any) -> int | None:
    """Bits a target always consumes, or None when that depends on the data."""
    if isinstance(target, BitDecoder):
        return target.bit_size()
    if not _is_record_type(target):
        raise InvalidSchema(f"{target!r} is not a bit decoder or a record type")
    procedure_for(target)
    if issubclass(target, Decodable):
        return None
    total = 0
    for f in record_fields(target):
        n = bit_size(f.target)
        if n is None:
            return None
        total += n
    return total


def as_dict(value: Any) -> Any:
    """Plain dicts, lists and ints for a decoded value."""
    if isinstance(value, (Record, Decodable)):
        return {f.name: as_dict(getattr(value, f.name, None)) for f in record_fields(type(value))}
    if isinstance(value, list):
        return [as_dict(v) for v in value]
    return value
