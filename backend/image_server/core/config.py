from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    secret_key: str = Field(..., min_length=1, alias="SECRET_KEY")

    upload_dir_path: Path = Field(default=Path("uploads"), alias="UPLOAD_DIR_PATH")

    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8000, ge=1, le=65535, alias="SERVER_PORT")

    base_url: str = Field(default="http://localhost:8000", alias="BASE_URL")

    @field_validator("server_port", mode="before")
    @classmethod
    def _strip_port_colon(cls, value: Any) -> Any:
        # ":8000" is accepted for compatibility with listen-address style values
        if isinstance(value, str):
            return value.strip().removeprefix(":")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
