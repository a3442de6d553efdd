from __future__ import annotations

import operator
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from ..codecs.integer import Bits
from ..codecs.loop import Loop
from ..codecs.repeat import Repeat
from ..dispatch import Record
from ..errors import InvalidSchema

_COMPARISONS = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
}


class Condition(BaseModel):
    """Loop clause: compare one value of the trial element against a constant."""
    model_config = ConfigDict(extra="forbid")

    field: Optional[str] = None  # dotted path into the element; list items by index
    eq: Optional[int] = None
    ne: Optional[int] = None
    lt: Optional[int] = None
    le: Optional[int] = None
    gt: Optional[int] = None
    ge: Optional[int] = None

    @model_validator(mode="after")
    def one_comparison(self) -> "Condition":
        given = [op for op in _COMPARISONS if getattr(self, op) is not None]
        if len(given) != 1:
            raise ValueError(f"exactly one of {sorted(_COMPARISONS)} is required, got {given}")
        return self

    def test(self, element: Any) -> bool:
        value = element
        if self.field:
            for part in self.field.split("."):
                value = value[int(part)] if isinstance(value, list) else getattr(value, part)
        for op, compare in _COMPARISONS.items():
            bound = getattr(self, op)
            if bound is not None:
                return bool(compare(value, bound))
        return True


class _Spec(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: Optional[str] = None


class BitsSpec(_Spec):
    type: Literal["bits"]
    width: int = Field(..., ge=1)


class RepeatSpec(_Spec):
    type: Literal["repeat"]
    count: int = Field(..., ge=0)
    element: "ElementSpec"


class LoopSpec(_Spec):
    type: Literal["loop"]
    element: "ElementSpec"
    while_: Optional[Condition] = Field(None, alias="while")


class RecordRef(_Spec):
    type: Literal["record"]
    ref: str


ElementSpec = Annotated[
    Union[BitsSpec, RepeatSpec, LoopSpec, RecordRef],
    Field(discriminator="type"),
]

RepeatSpec.model_rebuild()
LoopSpec.model_rebuild()


class RecordSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fields: List[ElementSpec] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def named_fields(cls, fields: List[Any]) -> List[Any]:
        seen = set()
        for i, spec in enumerate(fields):
            if not spec.name or not spec.name.isidentifier() or spec.name.startswith("_"):
                raise ValueError(f"field {i} needs a public identifier as name, got {spec.name!r}")
            if spec.name in seen:
                raise ValueError(f"duplicate field name {spec.name!r}")
            seen.add(spec.name)
        return fields


class SchemaDocument(BaseModel):
    """
    JSON description of a set of records.

    ``compile()`` turns it into one Record subclass per entry; references
    between records may be cyclic, which surfaces as SchemaCycle on decode.
    """
    model_config = ConfigDict(extra="forbid")

    root: Optional[str] = None
    records: Dict[str, RecordSpec] = Field(..., min_length=1)

    _classes: Optional[Dict[str, type]] = PrivateAttr(default=None)

    @classmethod
    def load(cls, src: Union[str, Path]) -> "SchemaDocument":
        """Read a document from a path, or parse it when given JSON text."""
        text = str(src)
        if not text.lstrip().startswith("{"):
            text = Path(text).read_text(encoding="utf-8")
        return cls.model_validate_json(text)

    def compile(self) -> Dict[str, type]:
        """
        One Record subclass per entry, keyed by record name.

        The classes are built on the first call and reused afterwards, so a
        document compiles (and fills the dispatcher cache) once. Compiling an
        equal document loaded separately makes new classes.
        """
        if self._classes is not None:
            return self._classes
        classes: Dict[str, type] = {
            name: type(name, (Record,), {"__bitfields__": (), "__module__": __name__, "__qualname__": name})
            for name in self.records
        }
        for name, spec in self.records.items():
            classes[name].__bitfields__ = tuple(
                (f.name, _target(f, classes, self.records, f"{name}.{f.name}")) for f in spec.fields
            )
        self._classes = classes
        return classes

    def root_type(self, name: Optional[str] = None) -> type:
        classes = self.compile()
        name = name or self.root or next(iter(self.records))
        if name not in classes:
            raise InvalidSchema(f"unknown root record {name!r}; defined: {sorted(classes)}")
        return classes[name]


def _target(spec: Any, classes: Dict[str, type], records: Dict[str, RecordSpec], where: str) -> Any:
    if isinstance(spec, BitsSpec):
        return Bits(spec.width)
    if isinstance(spec, RepeatSpec):
        return Repeat(spec.count, _target(spec.element, classes, records, where))
    if isinstance(spec, LoopSpec):
        element = _target(spec.element, classes, records, where)
        if spec.while_ is None:
            return Loop(element)
        _check_condition(spec.while_, spec.element, records, where)
        return Loop(element, spec.while_.test)
    if spec.ref not in classes:
        raise InvalidSchema(f"{where} refers to unknown record {spec.ref!r}")
    return classes[spec.ref]


def _check_condition(cond: Condition, element: Any, records: Dict[str, RecordSpec], where: str) -> None:
    """The ``while`` path must lead from the loop element to a bits value."""
    spec = element
    for part in cond.field.split(".") if cond.field else ():
        if isinstance(spec, RecordRef):
            record = records.get(spec.ref)
            if record is None:
                raise InvalidSchema(f"{where} refers to unknown record {spec.ref!r}")
            match = [f for f in record.fields if f.name == part]
            if not match:
                raise InvalidSchema(
                    f"{where}: loop condition {cond.field!r}: record {spec.ref!r} has no field {part!r}"
                )
            spec = match[0]
        elif isinstance(spec, RepeatSpec):
            if not part.isdigit() or int(part) >= spec.count:
                raise InvalidSchema(
                    f"{where}: loop condition {cond.field!r}: index {part!r} outside repeat of {spec.count}"
                )
            spec = spec.element
        else:
            # bits have no parts; loop lengths are only known after decoding
            raise InvalidSchema(
                f"{where}: loop condition {cond.field!r}: cannot select {part!r} from a {spec.type} value"
            )
    if not isinstance(spec, BitsSpec):
        what = repr(cond.field) if cond.field else "the loop element"
        raise InvalidSchema(f"{where}: loop condition compares {what}, which is a {spec.type} value, not bits")
