"""
Emissions core settings provider

The settings are collected from (in descending priority) keyword arguments,
environment variables like ``DATABASE__CONNECTION``, the ``.env`` file,
secret files and finally the JSON config file found in ``CONFIG_PATHS``.
"""

import os
import sys
import json
import functools
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import pydantic
import pydantic_settings
from pydantic.fields import FieldInfo

from .schemas import config


SETTINGS_CREATE_NONEXISTENT: bool = False
"""
switch to write a default configuration file if no existing file has been found
"""

SETTINGS_LOG_ERROR_FUNCTION: Optional[Callable[[str], Any]] = functools.partial(print, file=sys.stderr)
"""
optional function to accept log messages on failure
"""

CONFIG_PATHS: List[str] = [os.environ["CONFIG_PATH"]] if os.environ.get("CONFIG_PATH") else [
    "config.json",
    os.path.join("..", "config.json")
]
"""
list of search paths for the config file, can be overwritten by the env variable ``CONFIG_PATH``
"""


def get_db_from_env(db_override: Optional[str] = None) -> Optional[str]:
    return db_override or os.environ.get("DATABASE__CONNECTION") or os.environ.get("DATABASE_CONNECTION")


def find_config_file() -> Optional[str]:
    return next(filter(os.path.exists, CONFIG_PATHS), None)


class ConfigFileSource(pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source providing the whole content of the JSON config file
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        path = find_config_file()
        if path is not None:
            with open(path, "r", encoding="UTF-8") as f:
                return json.load(f)
        if SETTINGS_CREATE_NONEXISTENT:
            return store_configuration().model_dump(mode="json")
        return {}


class Settings(pydantic_settings.BaseSettings, config.CoreConfig):
    """
    Emissions core settings

    Do not change the settings at runtime, but restart the server after changing
    the config file. The unit tests create their settings programmatically instead.
    """

    model_config = pydantic_settings.SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls: Type[pydantic_settings.BaseSettings],
            init_settings: pydantic_settings.PydanticBaseSettingsSource,
            env_settings: pydantic_settings.PydanticBaseSettingsSource,
            dotenv_settings: pydantic_settings.PydanticBaseSettingsSource,
            file_secret_settings: pydantic_settings.PydanticBaseSettingsSource
    ) -> Tuple[pydantic_settings.PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, dotenv_settings, file_secret_settings, ConfigFileSource(settings_cls)


def default_core_config(database: Optional[str] = None) -> config.CoreConfig:
    return config.CoreConfig(database=config.DatabaseConfig(connection=database))


def store_configuration(conf: Optional[config.CoreConfig] = None, path: Optional[str] = None) -> config.CoreConfig:
    """
    Write the configuration (or a default one) as JSON file to the path (or the first search path)
    """

    conf = conf or default_core_config(get_db_from_env())
    with open(path or CONFIG_PATHS[0], "w", encoding="UTF-8") as f:
        json.dump(conf.model_dump(mode="json"), f, indent=4)
    return conf


def load_settings(**overrides) -> Settings:
    try:
        return Settings(**overrides)
    except pydantic.ValidationError as exc:
        if SETTINGS_LOG_ERROR_FUNCTION:
            SETTINGS_LOG_ERROR_FUNCTION(f"Invalid configuration (search paths: {CONFIG_PATHS}):\n{exc}")
        raise
