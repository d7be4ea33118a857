"""
Emissions core router module for /unchecked/reports requests

These endpoints work on the same reports as the /reports endpoints,
but ignore any preconditions. Concurrent updates therefore silently
overwrite each other (the last writer wins), which is exactly the
lost update problem prevented by the conditional /reports endpoints.
"""

import pydantic
from fastapi import Depends

from ._router import router
from ..dependency import LocalRequestData
from ... import schemas


@router.get(
    "/unchecked/reports/{report_id}",
    tags=["Unchecked reports"],
    response_model=schemas.Report,
    responses={404: {"model": schemas.APIError}}
)
async def get_unchecked_report_by_id(
        report_id: pydantic.NonNegativeInt,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the report of a specific report ID without any entity tag.
    """

    return local.store.get(report_id)


@router.api_route(
    "/unchecked/reports/{report_id}",
    methods=["PUT", "PATCH"],
    tags=["Unchecked reports"],
    response_model=schemas.Report,
    responses={400: {"model": schemas.APIError}, 404: {"model": schemas.APIError}}
)
async def update_unchecked_report(
        report_id: pydantic.NonNegativeInt,
        changes: schemas.ReportPatch,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Update the given fields of an existing report without checking any precondition.

    A 404 error will be returned if the report ID is unknown.
    """

    return local.store.update(report_id, changes.changes())
