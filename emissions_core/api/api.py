"""
Emissions core REST API definitions

This API serves two toy datasets to demonstrate two API design concerns.

The first one is optimistic concurrency control with conditional requests.
Any report delivered by the `/reports` endpoints carries the `ETag` header
set to an entity tag derived from the complete current state of the report.
Modifying a report requires the `If-Match` header with that entity tag.
The handling of incoming modifying requests is described as follows:

1. Calculate the current `ETag` of the report in question
2. In case the `If-Match` header field is missing (or only contains the
   special value `*`), respond with 428 (Precondition Required)
3. In case the `If-Match` header field contains that tag, perform the
   operation and respond with the new report and its new `ETag`
4. Otherwise, respond with 412 (Precondition Failed) and leave the
   report untouched; the user agent needs to fetch the report again

Reading a report with the `If-None-Match` header set to its current
entity tag results in an empty 304 (Not Modified) response. For
comparison, the `/unchecked/reports` endpoints accept any change
without preconditions, so concurrent changes get lost silently.

The second one is pagination. The `/emissions` endpoint returns pages of
daily emission records with metadata and links to neighbouring pages,
while the `/emissions/all` endpoint returns the whole dataset at once.

All error responses (except 304) use the schema of the `APIError`.
Invalid requests are answered with 400 instead of 422.
"""

import logging.config
from typing import Any, Dict, Optional, Union

import fastapi
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import base
from .routers import router
from .. import schemas, __version__
from ..persistence import database
from ..persistence.store import DatabaseReportStore
from ..settings import Settings, load_settings
from ..state import dataset, errors
from ..state.store import MemoryReportStore, ReportStore


EXCEPTION_HANDLERS = {
    StarletteHTTPException: base.APIException.handle,
    RequestValidationError: base.handle_request_validation_error,
    errors.StateError: base.handle_state_error,
    Exception: base.handle_generic_exception
}


class EmissionsAPI(fastapi.FastAPI):
    """
    FastAPI class without the 422 responses in its OpenAPI schema, since those are sent as 400
    """

    def openapi(self) -> Dict[str, Any]:
        if self.openapi_schema:
            return self.openapi_schema
        schema = super().openapi()
        for operations in schema.get("paths", {}).values():
            for operation in operations.values():
                operation.get("responses", {}).pop("422", None)
        return schema


def make_store(settings: Settings, configure_database: bool = True) -> ReportStore:
    """
    Create the report store selected by the database section of the settings
    """

    if settings.database.connection is None:
        return MemoryReportStore()
    if configure_database:
        database.init(settings.database.connection, settings.database.debug_sql)
    return DatabaseReportStore()


def create_app(
        settings: Optional[Settings] = None,
        configure_logging: bool = True,
        configure_database: bool = True
) -> fastapi.FastAPI:
    """
    Create a new ``FastAPI`` instance with its own report store and emission dataset

    Multiple independent instances may live in one process, which is
    used by the unit tests. Note that the database bindings are global.

    :param settings: optional Settings instance (loaded from all sources if not present)
    :param configure_logging: switch whether to apply the logging config of the settings
    :param configure_database: switch whether to initialize the configured database (if any)
    :return: new ``FastAPI`` instance
    """

    if settings is None:
        settings = load_settings()

    if configure_logging:
        logging.config.dictConfig(settings.logging.model_dump())
    logger = logging.getLogger(__name__)

    app = EmissionsAPI(
        title="Emissions core REST API",
        version=__version__,
        description=__doc__,
        responses={400: {"model": schemas.APIError}}
    )
    for exc, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc, handler)
    app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def redirect_root():
        return RedirectResponse("./docs")

    app.state.settings = settings
    app.state.store = make_store(settings, configure_database)
    app.state.emissions = dataset.generate_emissions(settings.general.dataset_size, settings.general.dataset_seed)
    logger.info(
        f"Serving {len(app.state.store.all())} reports using {type(app.state.store).__name__} "
        f"and {len(app.state.emissions)} emission records"
    )
    return app


class APIWrapper:
    """
    Lazy holder of the default application for ``uvicorn emissions_core.api:api.app``

    The application is only created (with the settings from all sources)
    when the ``app`` attribute is accessed for the first time, so merely
    importing this module neither reads any config nor touches a database.
    """

    def __init__(self, application: Optional[fastapi.FastAPI] = None):
        self._app = application

    @property
    def app(self) -> fastapi.FastAPI:
        if self._app is None:
            self._app = create_app()
        return self._app

    @app.setter
    def app(self, application: Union[fastapi.FastAPI, None]):
        if application is not None and not isinstance(application, fastapi.FastAPI):
            raise TypeError(f"Expected 'FastAPI' instance, got {type(application)}")
        self._app = application


api = APIWrapper()
