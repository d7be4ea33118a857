"""
Special schemas for the configuration file and its properties

Every section has usable defaults, so an empty config file (or none
at all) results in a server with in-memory reports on localhost.
"""

from typing import Any, Dict, Optional

import pydantic


class GeneralConfig(pydantic.BaseModel):
    """
    Settings directly affecting the handling of requests
    """

    default_page_size: pydantic.PositiveInt = 50
    max_page_size: pydantic.PositiveInt = 100
    dataset_size: pydantic.NonNegativeInt = 10000
    dataset_seed: Optional[int] = None

    @pydantic.model_validator(mode="after")
    def enforce_page_size_limits(self) -> "GeneralConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("Field 'default_page_size' must not exceed 'max_page_size'")
        return self


class ServerConfig(pydantic.BaseModel):
    host: str = "127.0.0.1"
    port: pydantic.conint(gt=0, lt=65536) = 8000


class DatabaseConfig(pydantic.BaseModel):
    """
    Database settings, where a missing connection URL keeps all reports in memory
    """

    connection: Optional[str] = None
    debug_sql: bool = False


def _log_format(datefmt: str, prefix: str = "") -> Dict[str, str]:
    return {
        "style": "{",
        "format": prefix + "{asctime} [{levelname}] {name}: {message}",
        "datefmt": datefmt
    }


class LoggingConfig(pydantic.BaseModel):
    """
    Logging configuration in the format of ``logging.config.dictConfig``

    The SQL statements echoed by SQLAlchemy only reach the log file,
    while the uvicorn access log is written into a separate file.
    """

    version: pydantic.conint(ge=1, le=1) = 1
    disable_existing_loggers: bool = False
    incremental: bool = False
    filters: Dict[str, Dict[str, Any]] = {
        "no_sql_echo": {
            "()": "emissions_core.misc.logger.NoDebugFilter",
            "name": "sqlalchemy.engine"
        }
    }
    formatters: Dict[str, Dict[str, str]] = {
        "console": _log_format("%H:%M:%S", "emissions ({process}) "),
        "logfile": _log_format("%Y-%m-%d %H:%M:%S"),
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": "%(asctime)s %(client_addr)s \"%(request_line)s\" %(status_code)s"
        }
    }
    loggers: Dict[str, Dict[str, Any]] = {
        "uvicorn.access": {
            "handlers": ["access"],
            "propagate": False
        }
    }
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "console",
            "filters": ["no_sql_echo"]
        },
        "logfile": {
            "level": "DEBUG",
            "class": "logging.FileHandler",
            "filename": "./emissions.log",
            "formatter": "logfile"
        },
        "access": {
            "level": "INFO",
            "class": "logging.FileHandler",
            "filename": "./access.log",
            "formatter": "access"
        }
    }
    root: Dict[str, Any] = {
        "level": "INFO",
        "handlers": ["console", "logfile"]
    }


class CoreConfig(pydantic.BaseModel):
    general: GeneralConfig = pydantic.Field(default_factory=GeneralConfig)
    server: ServerConfig = pydantic.Field(default_factory=ServerConfig)
    database: DatabaseConfig = pydantic.Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = pydantic.Field(default_factory=LoggingConfig)
