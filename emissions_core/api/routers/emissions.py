"""
Emissions core router module for /emissions requests
"""

from typing import List, Optional

from fastapi import Depends

from ._router import router
from .. import helpers
from ..dependency import LocalRequestData
from ... import schemas


@router.get(
    "/emissions",
    tags=["Emissions"],
    response_model=schemas.EmissionPage
)
async def get_emissions_page(
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return one page of the daily emission records together with pagination metadata.

    The page size `limit` defaults to the configured default page size and is
    capped at the configured maximum page size. The `links` in the pagination
    metadata point to the first, last, previous and next page of records.
    """

    return helpers.paginate(local.emissions, local.request.url.path, local.config.general, limit, offset)


@router.get(
    "/emissions/all",
    tags=["Emissions"],
    response_model=List[schemas.Emission]
)
async def get_all_emissions(local: LocalRequestData = Depends(LocalRequestData)):
    """
    Return all daily emission records at once, which is slow for large datasets.

    Use the paginated `/emissions` endpoint instead.
    """

    return local.emissions
