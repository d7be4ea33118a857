"""
Emissions core REST API base library

Every error response uses the ``APIError`` schema, with the single
exception of 304 (Not Modified), which never carries a body.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import schemas
from ..state import errors, validator


logger = logging.getLogger(__name__)


RECONCILIATION_HINT = (
    "The resource has been modified since you fetched it. "
    "Please fetch the latest version and try again."
)


def make_error_response(
        request: Request,
        status_code: int,
        message: str,
        details: str = "",
        repeat: bool = False,
        headers: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    error = schemas.APIError(
        status=status_code,
        method=request.method,
        request=request.url.path,
        repeat=repeat,
        message=message,
        details=details
    )
    return JSONResponse(jsonable_encoder(error), status_code=status_code, headers=headers)


async def handle_generic_exception(request: Request, _: Exception) -> Response:
    logger.exception(f"Unhandled exception during '{request.method} {request.url.path}'")
    return make_error_response(
        request,
        500,
        "Unexpected server error. The requested action wasn't completed successfully."
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> Response:
    problems = "\n".join(f"\t{'.'.join(map(str, error['loc']))}: {error['msg']}" for error in exc.errors())
    logger.debug(f"Invalid request '{request.method} {request.url.path}':\n{problems}")
    return make_error_response(
        request,
        400,
        f"Failed to process the request:\n{problems}",
        details=str(exc.errors()),
        repeat=True
    )


async def handle_state_error(request: Request, exc: errors.StateError) -> Response:
    """
    Translate exceptions of the report state into API exceptions and handle those
    """

    if isinstance(exc, errors.ReportNotFound):
        return await APIException.handle(request, NotFound(f"Report with ID {exc.report_id}"))
    if isinstance(exc, errors.WriteRejected):
        if exc.reason == validator.Reason.PRECONDITION_REQUIRED:
            return await APIException.handle(request, PreconditionRequired(request.url.path))
        return await APIException.handle(request, PreconditionFailed(request.url.path, exc.token))
    return await handle_generic_exception(request, exc)


class APIException(HTTPException):
    """
    Base class for any kind of generic API exception
    """

    def __init__(
            self,
            status_code: int,
            detail: str,
            repeat: bool = False,
            message: Optional[str] = None,
            headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.repeat = repeat
        self.message = message

    @classmethod
    async def handle(cls, request: Request, exc: StarletteHTTPException) -> Response:
        """
        Handle any HTTP exception, including the ones raised by FastAPI or Starlette themselves
        """

        message = getattr(exc, "message", None) or exc.__class__.__name__
        headers = getattr(exc, "headers", None)
        logger.debug(
            f"{type(exc).__name__} ({exc.status_code}): {message} @ "
            f"'{request.method} {request.url.path}' (details: {exc.detail})"
        )

        if exc.status_code == 304:
            return Response(status_code=304, headers=headers)
        return make_error_response(
            request,
            exc.status_code,
            message,
            details=str(exc.detail),
            repeat=getattr(exc, "repeat", False),
            headers=headers
        )


class NotModified(APIException):
    """
    Exception when the user agent already has the most recent version of a resource
    """

    def __init__(self, resource: str, etag: str):
        super().__init__(
            status_code=304,
            detail=resource,
            message="Not Modified",
            headers={"ETag": etag}
        )


class NotFound(APIException):
    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(
            status_code=404,
            detail=detail,
            message=f"{resource} was not found."
        )


class PreconditionFailed(APIException):
    """
    Exception when the entity tag of a conditional request doesn't match the resource

    The response carries the entity tag of the current resource. Executing
    the exact same request again won't help: the user agent needs to fetch
    the current resource, merge its changes and try again with the new tag.
    """

    def __init__(self, resource: str, current_tag: str):
        super().__init__(
            status_code=412,
            detail=f"Conditional request not matching current entity tag of {resource!r}: {current_tag}",
            repeat=False,
            message=RECONCILIATION_HINT,
            headers={"ETag": f'"{current_tag}"'}
        )


class PreconditionRequired(APIException):
    """
    Exception when a modifying request lacks the mandatory ``If-Match`` header

    The request can be repeated once the user agent fetched the current entity tag.
    """

    def __init__(self, resource: str):
        super().__init__(
            status_code=428,
            detail=f"Missing 'If-Match' header with an entity tag of {resource!r}",
            repeat=True,
            message="This resource requires the 'If-Match' header with a current entity tag for updates."
        )
