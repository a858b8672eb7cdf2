from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

REGEX = "regex"

StepId = Union[int, str]


class Step(BaseModel):
    """One unit of a scaffolded problem."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    step_id: StepId = Field(alias="stepId")
    instruction: str = ""
    placeholder_code: str = Field("", alias="placeholderCode")
    validation_type: str = Field(REGEX, alias="validationType")
    validation_rule: str = Field("", alias="validationRule")
    hints: tuple[str, ...] = ()

    @field_validator("placeholder_code", mode="before")
    @classmethod
    def _placeholder_default(cls, value):
        return "" if value is None else value

    @field_validator("hints", mode="before")
    @classmethod
    def _hints_default(cls, value):
        return () if value is None else value


class Problem(BaseModel):
    """A problem split into ordered steps. Metadata is not interpreted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str] = ""
    title: str = ""
    difficulty: str = ""
    description: str = ""
    steps: tuple[Step, ...] = ()
