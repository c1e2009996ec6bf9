import datetime
import decimal
import enum
from typing import Any, Dict, Optional, Sequence, Union

from pydantic import BaseModel, field_validator, model_validator

QueryValue = Union[str, int, float, decimal.Decimal, datetime.datetime, datetime.date]
QueryParams = Sequence[QueryValue]
Row = Dict[str, Any]

DEFAULT_COLUMN_TYPE = "VARCHAR(255)"


class InsertMode(str, enum.Enum):
    """How ``insert_rows`` places values into the statement."""

    PARAMETERIZED = "parameterized"
    # values are inlined as '<value>' without escaping
    RAW = "raw"

    @classmethod
    def coerce(cls, value: Union["InsertMode", bool, str]) -> "InsertMode":
        """Accept the legacy boolean raw flag, enum members, values ("raw") and names ("RAW")."""
        if isinstance(value, bool):
            return cls.RAW if value else cls.PARAMETERIZED
        if isinstance(value, str) and not isinstance(value, cls) and value.upper() in cls.__members__:
            return cls[value.upper()]
        return cls(value)


class ColumnPosition(BaseModel):
    """Where new columns go in an ``ALTER TABLE ... ADD COLUMN`` statement."""

    after: Optional[str] = None
    before: Optional[str] = None

    @field_validator("after", "before")
    def anchor_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Anchor column name must not be blank")
        return v

    @model_validator(mode="after")
    def only_one_anchor(self) -> "ColumnPosition":
        if self.after is not None and self.before is not None:
            raise ValueError("insert_after and insert_before are mutually exclusive")
        return self
