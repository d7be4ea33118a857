"""
Emissions core schemas for the base system

This module contains the schemas for emission reports, which are
the mutable resources guarded by entity tags, and the schemas for
the read-only daily emission records served in pages.
"""

import enum
import datetime
from typing import Any, Dict, Optional

import pydantic


@enum.unique
class ReportStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Report(pydantic.BaseModel):
    """
    Immutable snapshot of an emission report

    A new snapshot is created for every accepted change, so references
    to an older snapshot always describe exactly one historic state.
    """

    model_config = pydantic.ConfigDict(frozen=True, extra="forbid")

    id: pydantic.NonNegativeInt
    title: pydantic.constr(min_length=1, max_length=255)
    description: pydantic.constr(max_length=1023) = ""
    co2_total: pydantic.NonNegativeFloat
    status: ReportStatus = ReportStatus.DRAFT
    created_at: datetime.date
    updated_at: pydantic.AwareDatetime
    updated_by: Optional[pydantic.constr(max_length=255)] = None


class ReportPatch(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid")

    title: Optional[pydantic.constr(min_length=1, max_length=255)] = None
    description: Optional[pydantic.constr(max_length=1023)] = None
    co2_total: Optional[pydantic.NonNegativeFloat] = None
    status: Optional[ReportStatus] = None
    updated_by: Optional[pydantic.constr(max_length=255)] = None

    @pydantic.field_validator("title", "description", "co2_total", "status")
    @classmethod
    def reject_explicit_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("field can't be set to null")
        return value

    def changes(self) -> Dict[str, Any]:
        """
        Return only the fields that were explicitly given by the client
        """

        return self.model_dump(exclude_unset=True)


class Emission(pydantic.BaseModel):
    id: pydantic.PositiveInt
    company_id: pydantic.PositiveInt
    company_name: str
    date: datetime.date
    co2_tons: pydantic.NonNegativeFloat
    source: str
