"""
Emissions core extra schemas

This module contains the special schemas for paginated results.
"""

from typing import List, Optional

import pydantic

from .bases import Emission


class PaginationLinks(pydantic.BaseModel):
    self: str
    first: str
    last: str
    next: Optional[str] = None
    prev: Optional[str] = None


class Pagination(pydantic.BaseModel):
    total_records: pydantic.NonNegativeInt
    records_per_page: pydantic.PositiveInt
    current_page: pydantic.PositiveInt
    total_pages: pydantic.NonNegativeInt
    offset: pydantic.NonNegativeInt
    links: PaginationLinks


class EmissionPage(pydantic.BaseModel):
    data: List[Emission]
    pagination: Pagination
