"""
Entity tag handling of the conditional report requests

Only `If-Match` and `If-None-Match` are evaluated. Date based
conditions are ignored, since reports may change more than once
per second.
"""

import logging
from typing import List, Optional

from fastapi import Request, Response

from . import base
from .. import schemas
from ..state import validator


logger = logging.getLogger(__name__)


def quote(token: str) -> str:
    """
    Return the given entity tag as quoted strong entity tag
    """

    if not token.startswith('"'):
        token = '"' + token
    if not token.endswith('"') or len(token) == 1:
        token += '"'
    return token


def parse(header: str) -> List[str]:
    """
    Split the value of an ``If-Match`` or ``If-None-Match`` header field into entity tags

    Quotes of strong tags are removed. Weak tags are kept as they are
    (including the ``W/`` prefix), so they never equal any strong tag.
    """

    tags = []
    for tag in map(str.strip, header.split(",")):
        if not tag.startswith("W/"):
            tag = tag.strip('"')
        if tag:
            tags.append(tag)
    return tags


class ETag:
    """
    Access to the conditional headers of one request and the `ETag` header of its response
    """

    request: Request

    def __init__(self, request: Request):
        self.request = request

        for field in ["If-Modified-Since", "If-Unmodified-Since", "If-Range"]:
            if request.headers.get(field):
                logger.warning(f"Ignoring unsupported header '{field}: {request.headers.get(field)}'")

    def add_header(self, response: Response, report: schemas.Report) -> str:
        """
        Add the ETag header field of the report to the response

        :param response: response of the path operation
        :param report: current state of the report delivered in the response
        :return: the quoted entity tag that has been set
        """

        tag = quote(validator.compute_token(report))
        response.headers["ETag"] = tag
        return tag

    def if_match(self) -> Optional[List[str]]:
        """
        Return the entity tags of the ``If-Match`` header or None if there are none

        The wildcard ``*`` asserts no particular state of the resource and
        is therefore treated like a missing header. Note that a header with
        only weak tags yields those tags, which will never match.
        """

        values = self.request.headers.getlist("If-Match")
        if len(values) > 1:
            logger.warning(f"More than one 'If-Match' header: {values}")
        tags = [tag for value in values for tag in parse(value)]
        if "*" in tags:
            logger.warning(
                f"Request for '{self.request.method} {self.request.url.path}' "
                f"had 'If-Match' header value '*', which is not accepted as precondition."
            )
            tags = [tag for tag in tags if tag != "*"]
        return tags or None

    def compare(self, report: schemas.Report):
        """
        Compare the ``If-None-Match`` header with the entity tag of the current report

        :param report: current state of the report
        :raises NotModified: if the user agent already has the most recent version
        """

        match = self.request.headers.get("If-None-Match")
        if not match:
            return
        tag = validator.compute_token(report)
        tags = parse(match)
        if "*" in tags or tag in tags or f"W/{quote(tag)}" in tags:
            raise base.NotModified(self.request.url.path, quote(tag))
