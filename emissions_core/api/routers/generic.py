"""
Emissions core router module generic functionalities
"""

import logging
from typing import Any, Dict

from fastapi import Depends, Response

from ._router import router
from ..dependency import LocalRequestData, MinimalRequestData
from ...schemas import config


logger = logging.getLogger(__name__)


@router.get("/health", tags=["Generic"], response_model=Dict[str, Any])
async def verify_running_backend(_: MinimalRequestData = Depends(MinimalRequestData)):
    """
    Return 200 OK with an empty object as body to only verify that the service and the middlewares work
    """

    return {}


@router.get("/settings", tags=["Generic"], response_model=config.GeneralConfig)
async def get_settings(local: MinimalRequestData = Depends(MinimalRequestData)):
    """
    Return the important settings which directly affect the handling of requests
    """

    return local.config.general


@router.post("/reset", tags=["Generic"], status_code=204)
async def reset_reports(local: LocalRequestData = Depends(LocalRequestData)):
    """
    Restore the initial set of reports, dropping all changes made so far
    """

    local.store.reset()
    logger.info("Reports have been reset on request")
    return Response(status_code=204)
