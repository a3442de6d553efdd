from __future__ import annotations
from typing import Any
from pydantic import BaseModel, Field, computed_field, field_serializer

from ..dispatch import as_dict


class DecodeResult(BaseModel):
    value: Any
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def consumed(self) -> int:
        return self.end - self.start

    @field_serializer("value")
    def plain_value(self, value: Any) -> Any:
        return as_dict(value)
