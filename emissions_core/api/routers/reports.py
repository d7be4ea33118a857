"""
Emissions core router module for /reports requests

Any report is delivered together with its current entity tag in
the ``ETag`` header. Changing a report requires the ``If-Match``
header carrying the entity tag of the state the changes are based
on. This prevents lost updates when multiple clients work on the
same report at the same time: only the first client succeeds, while
all others get a 412 error and need to fetch the report again.
"""

import logging
from typing import List

import pydantic
from fastapi import Depends

from ._router import router
from ..dependency import LocalRequestData
from ... import schemas


logger = logging.getLogger(__name__)


@router.get(
    "/reports",
    tags=["Reports"],
    response_model=List[schemas.Report]
)
async def get_all_reports(local: LocalRequestData = Depends(LocalRequestData)):
    """
    Return a list of all current reports.
    """

    return local.store.all()


@router.get(
    "/reports/{report_id}",
    tags=["Reports"],
    response_model=schemas.Report,
    responses={304: {"description": "Not Modified"}, 404: {"model": schemas.APIError}}
)
async def get_report_by_id(
        report_id: pydantic.NonNegativeInt,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the report of a specific report ID with its entity tag in the `ETag` header.

    A 304 response without body will be returned if the `If-None-Match`
    header contains the current entity tag of the report.
    A 404 error will be returned in case the report ID is unknown.
    """

    report = local.store.get(report_id)
    local.etag.compare(report)
    local.etag.add_header(local.response, report)
    return report


@router.api_route(
    "/reports/{report_id}",
    methods=["PUT", "PATCH"],
    tags=["Reports"],
    response_model=schemas.Report,
    responses={
        400: {"model": schemas.APIError},
        404: {"model": schemas.APIError},
        412: {"model": schemas.APIError},
        428: {"model": schemas.APIError}
    }
)
async def update_report(
        report_id: pydantic.NonNegativeInt,
        changes: schemas.ReportPatch,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Update the given fields of an existing report, leaving all other fields untouched.

    The `If-Match` header must contain the entity tag of the current report.
    The new entity tag will be returned in the `ETag` header on success.

    A 404 error will be returned if the report ID is unknown.
    A 412 error will be returned if the entity tag doesn't match the current
    report, which means that the user agent needs to fetch the report again.
    A 428 error will be returned if the `If-Match` header is missing.
    """

    report = local.store.compare_and_swap(report_id, local.etag.if_match(), changes.changes())
    tag = local.etag.add_header(local.response, report)
    logger.debug(f"Report {report_id} has been updated, new entity tag: {tag}")
    return report
