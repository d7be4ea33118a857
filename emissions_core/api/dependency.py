"""
Emissions core API dependency library
"""

from typing import List

from fastapi import Request, Response

from .etag import ETag
from .. import schemas
from ..settings import Settings
from ..state.store import ReportStore


class MinimalRequestData:
    """
    Request and response of a path operation together with the app's settings
    """

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response

    @property
    def config(self) -> Settings:
        return self.request.app.state.settings


class LocalRequestData(MinimalRequestData):
    """
    Dependency of all path operations working on reports or emission records

    The store and the dataset belong to the app, so multiple apps in one
    process (as in the unit tests) don't share any reports. The ``etag``
    helper reads the conditional headers of the request.
    """

    def __init__(self, request: Request, response: Response):
        super().__init__(request, response)
        self.etag = ETag(request)

    @property
    def store(self) -> ReportStore:
        return self.request.app.state.store

    @property
    def emissions(self) -> List[schemas.Emission]:
        return self.request.app.state.emissions
