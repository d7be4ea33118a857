"""
Emissions core error schemas
"""

from typing import Optional

import pydantic


class APIError(pydantic.BaseModel):
    """
    Body of every error response (except 304, which has no body at all)

    `status` repeats the HTTP status code, while `method` and `request` name
    the failed request (path without query). `repeat` tells whether sending
    the very same request again might succeed: a 412 can't be fixed that way,
    since the client has to fetch the report and build a new request first.
    `message` is meant for humans, `details` mostly for debugging.
    """

    error: bool = True
    status: Optional[pydantic.NonNegativeInt] = None
    method: pydantic.constr(max_length=255)
    request: str
    repeat: bool
    message: str
    details: str
