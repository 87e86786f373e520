# roster/core/config.py
import codecs
import logging
from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

class Settings(BaseSettings):
    APP_NAME: str = "Employee Roster"
    APP_VERSION: str = "0.1.0"

    # Snapshot
    DATA_FILE: str = "employees.dat"
    # con utf-8 el archivo es el mismo que escribe un BinaryWriter de .NET
    SNAPSHOT_ENCODING: str = "utf-16-le"

    EMPLOYEE_ID_START: int = 1000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("SNAPSHOT_ENCODING")
    @classmethod
    def known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"unknown encoding {v!r}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v

    @property
    def data_path(self) -> Path:
        return Path(self.DATA_FILE).expanduser().resolve()

@lru_cache
def get_settings() -> Settings:
    return Settings()
