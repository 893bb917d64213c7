# toddler_fun/schemas.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from toddler_fun.models import MAX_INTEGER


class ActivityIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1, examples=["Moving and Grooving"])
    title: str = Field(..., min_length=1, examples=["Bubbles"])
    description: str = Field(..., min_length=1, examples=["Blow bubbles and chase them"])


class ActivityUpdate(BaseModel):
    # completionCount present -> overwrite the counter, other fields ignored
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: int
    category: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    completion_count: Optional[int] = Field(None, ge=0, le=MAX_INTEGER, alias="completionCount")

    @field_validator("id", "completion_count", mode="before")
    @classmethod
    def no_booleans(cls, v):
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v


class ActivityOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    category: str
    title: str
    description: str
    completion_count: int = Field(0, alias="completionCount")


class DeleteResult(BaseModel):
    success: bool
    identifier: str


class EnvCheck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    environment: str
    allow_production_writes: bool = Field(..., alias="allowProductionWrites")
    writes_enabled: bool = Field(..., alias="writesEnabled")
