"""
Helper classes for the unit tests of the emissions core
"""

import os
import sys
import secrets
import datetime
import unittest
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, Union

import httpx
import pydantic
from fastapi.testclient import TestClient

from emissions_core import schemas as _schemas, settings as _settings
from emissions_core.api.api import create_app
from emissions_core.persistence import database

from . import conf


class BaseTest(unittest.TestCase):
    """
    Base class for all unit tests, providing a private config file path and a private database URL

    Neither the config file nor the database file are created here, but both
    will be removed after each test. Subclasses overwriting ``setUp`` or
    ``tearDown`` must call the method of the superclass as well.
    """

    config_file: Optional[str] = None
    database_url: Optional[str] = None
    _database_file: Optional[str] = None
    _previous_config_paths: Optional[List[str]] = None

    def _choose_database_file(self) -> Optional[str]:
        path = conf.DATABASE_DEFAULT_FILE_FORMAT.format(os.getpid(), secrets.token_hex(4))
        try:
            with open(path, "wb"):
                pass
            os.remove(path)
        except OSError as exc:
            print(f"{exc}: using the in-memory database instead", file=sys.stderr)
            return None
        return path

    def setUp(self) -> None:
        self.config_file = os.path.join("/tmp", f"emissions_config_{os.getpid()}_{secrets.token_hex(6)}.json")
        self._previous_config_paths = _settings.CONFIG_PATHS
        _settings.CONFIG_PATHS = [self.config_file]

        self._database_file = self._choose_database_file()
        if self._database_file is None:
            self.database_url = conf.DATABASE_FALLBACK_URL
        else:
            self.database_url = conf.DATABASE_URL_FORMAT.format(self._database_file)

    def tearDown(self) -> None:
        database.dispose()
        for path in [self._database_file, self.config_file]:
            if path and os.path.exists(path):
                os.remove(path)
        _settings.CONFIG_PATHS = self._previous_config_paths

    def init_database(self):
        database.PRINT_SQLITE_WARNING = False
        database.init(self.database_url, conf.SQLALCHEMY_ECHOING)

    @staticmethod
    def get_sample_report(**kwargs) -> _schemas.Report:
        values = {
            "id": 1,
            "title": "Informe Anual de Emisiones 2023",
            "description": "Análisis de la huella de carbono corporativa",
            "co2_total": 1500.5,
            "status": "draft",
            "created_at": datetime.date(2023, 10, 15),
            "updated_at": datetime.datetime(2023, 12, 20, 14, 30, tzinfo=datetime.timezone.utc)
        }
        values.update(kwargs)
        return _schemas.Report(**values)


class BaseAPITests(BaseTest):
    """
    Base class for tests of the whole API, served by a fresh app for every single test

    The reports are kept in memory, unless ``use_database`` is set,
    which stores them in the private sqlite database of the test.
    """

    use_database: bool = False
    client: Optional[TestClient] = None

    def make_settings(self) -> _settings.Settings:
        overrides = {}
        if conf.SERVER_LOGGING_OVERWRITE:
            overrides["logging"] = conf.SERVER_LOGGING_OVERWRITE
        return _settings.Settings(
            general={"dataset_size": conf.DATASET_SIZE, "dataset_seed": conf.DATASET_SEED},
            database={
                "connection": self.database_url if self.use_database else None,
                "debug_sql": conf.SQLALCHEMY_ECHOING
            },
            **overrides
        )

    def setUp(self) -> None:
        super().setUp()
        database.PRINT_SQLITE_WARNING = False
        app = create_app(self.make_settings(), configure_logging=conf.SERVER_LOGGING_OVERWRITE is not None)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.client.close()
        super().tearDown()

    def assertQuery(
            self,
            endpoint: Tuple[str, str],
            status_code: Union[int, Iterable[int]] = 200,
            json: Optional[Union[dict, pydantic.BaseModel]] = None,
            headers: Optional[dict] = None,
            r_none: bool = False,
            r_is_json: bool = True,
            r_headers: Optional[Union[Mapping[str, str], Iterable[str]]] = None,
            r_schema: Optional[Union[pydantic.BaseModel, Type[pydantic.BaseModel]]] = None,
            **kwargs
    ) -> httpx.Response:
        """
        Send a request to the endpoint (a tuple of method and path) and check the response

        :param endpoint: tuple of the HTTP method and the path (optionally including the query)
        :param status_code: expected status code or collection of allowed status codes
        :param json: request body as dictionary or model (unset fields of models are skipped)
        :param headers: request headers, e.g. ``If-Match`` for conditional requests
        :param r_none: expect an empty body (e.g. for 204 or 304), skipping all body checks
        :param r_is_json: expect a JSON body
        :param r_headers: header names which must be present in the response,
            or a mapping of header names to their expected values
        :param r_schema: schema class the response body must validate against,
            or a schema instance the response body must be equal to
        :param kwargs: further keyword arguments for ``TestClient.request``, e.g. ``params``
        :return: the response
        """

        method, path = endpoint
        if isinstance(json, pydantic.BaseModel):
            json = json.model_dump(mode="json", exclude_unset=True)
        response = self.client.request(method, path, json=json, headers=headers, **kwargs)

        if isinstance(status_code, int):
            self.assertEqual(status_code, response.status_code, response.text)
        else:
            self.assertIn(response.status_code, list(status_code), response.text)

        expected_headers = r_headers if isinstance(r_headers, Mapping) else {k: None for k in r_headers or []}
        for name, value in expected_headers.items():
            self.assertIn(name, response.headers, response.headers)
            if value is not None:
                self.assertEqual(value, response.headers[name], response.headers)

        if r_none:
            self.assertEqual(b"", response.content)
            return response

        if r_is_json:
            try:
                body = response.json()
            except ValueError:
                self.fail(f"No JSON content in response: {response.text!r}")
            if isinstance(r_schema, pydantic.BaseModel):
                self.assertEqual(r_schema, type(r_schema).model_validate(body))
            elif r_schema is not None:
                r_schema.model_validate(body)
        return response

    def get_report(self, report_id: int) -> Dict[str, Any]:
        """
        Return the report together with its entity tag (key ``etag``) as delivered by the API
        """

        response = self.assertQuery(("GET", f"/reports/{report_id}"), 200, r_headers=["ETag"])
        return dict(response.json(), etag=response.headers["ETag"])
