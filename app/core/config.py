from typing import List, Optional
from pydantic import Field
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import ExportUpdateMode


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    allowed_origins: List[str] = Field(default=["*"])
    allowed_methods: List[str] = Field(default=["*"])
    allowed_headers: List[str] = Field(default=["*"])
    allow_credentials: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="CORS_", extra="ignore")


class ExportSettings(BaseSettings):
    """Tabular export (CSV + workbook) settings."""

    directory: str = Field(default="./excel_data")
    backup_suffix: str = Field(default=".bak")
    encoding: str = Field(default="utf-8")
    # append keeps every version of a record, upsert keeps one row per Entry ID
    update_mode: ExportUpdateMode = Field(default=ExportUpdateMode.APPEND)
    serialize_writes: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="EXPORT_", extra="ignore")


class StorageSettings(BaseSettings):
    """File storage configuration settings."""

    upload_dir: str = Field(default="./uploads")
    public_prefix: str = Field(default="/uploads")
    max_file_size: int = 4 * 1024 * 1024  # 4MB in bytes
    allowed_content_types: List[str] = Field(default=["application/pdf"])
    allowed_extensions: List[str] = Field(default=[".pdf"])

    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")


class SecuritySettings(BaseSettings):
    """Security configuration settings."""

    secret_key: str = Field(default="change-me-in-production")
    algorithm: str = Field(default="HS256")
    access_token_expire: int = Field(default=60 * 24)  # minutes

    model_config = SettingsConfigDict(env_prefix="SECURITY_", extra="ignore")


class LoggingSettings(BaseSettings):
    level: str = Field(default="INFO")
    json_format: bool = Field(default=False)
    format: str = Field(default="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    file_path: Optional[str] = Field(default=None)
    max_bytes: int = Field(default=10 * 1024 * 1024)
    backup_count: int = Field(default=5)

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")


class Settings(BaseSettings):
    PROJECT_NAME: str = Field(default="Faculty Incentive Tracker")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)

    cors_settings: CORSSettings = Field(default_factory=CORSSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="allow", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
