import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("ONLINE_MONITOR_CONFIG", "config.toml")
_ENV_PATH = os.getenv("ONLINE_MONITOR_ENV", ".env")


class DatabaseType(str, Enum):
    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"


class PoolSettings(BaseModel):
    size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=5, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0)
    recycle_seconds: int = 1800


class DatabaseSettings(BaseModel):
    type: DatabaseType = DatabaseType.SQLITE
    # Full SQLAlchemy URL; overrides every other connection field when set
    url: Optional[str] = None
    sqlite_path: Path = Path("statistics.db")
    host: str = "localhost"
    port: Optional[int] = None
    name: str = "minecraft_stats"
    user: str = "root"
    password: str = ""
    echo: bool = False
    pool: PoolSettings = Field(default_factory=PoolSettings)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ONLINE_MONITOR_",
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
        extra="ignore",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    timezone_offset: str = "+3"

    snapshot_interval_minutes: int = Field(default=5, ge=1)
    snapshot_days_to_keep: int = Field(default=30, ge=1)
    cleanup_interval_hours: int = Field(default=24, ge=1)
    afk_threshold_minutes: int = Field(default=5, ge=1)

    write_workers: int = Field(default=4, ge=1)
    write_queue_size: int = Field(default=1000, ge=1)

    logs_dir: Path = Field(default=Path("logs"))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
