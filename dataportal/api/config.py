"""
Portal Configuration
Settings for the data portal front-end and its remote search service.
"""

import json
from pathlib import Path
from typing import List, Optional, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator

DEFAULT_STYLESHEET = Path(__file__).parent / "stylesheets" / "dif2html.xslt"


class PortalSettings(BaseSettings):
    """
    Portal configuration settings.

    Load from environment variables (or a .env file) through the field aliases.
    """

    # App info
    app_name: str = "Example Data Portal"
    version: str = "0.1.0"
    description: str = "HTML front-end for a SOAP metadata search service"

    # Server settings
    host: str = Field(default="0.0.0.0", alias="PORTAL_HOST")
    port: int = Field(default=8000, alias="PORTAL_PORT")
    reload: bool = Field(default=False, alias="PORTAL_RELOAD")

    # Remote search service
    wsdl_url: str = Field(
        default="http://127.0.0.1:8801/axis/Search?wsdl",
        alias="SEARCH_WSDL_URL"
    )
    search_timeout: float = Field(default=30.0, alias="SEARCH_TIMEOUT")  # seconds

    # Search defaults
    index_name: str = Field(default="dataportal", alias="PORTAL_INDEX")
    sort_field: Optional[str] = Field(default=None, alias="PORTAL_SORT_FIELD")
    sort_reverse: Optional[bool] = Field(default=None, alias="PORTAL_SORT_REVERSE")

    # Facet selector
    facet_field: str = Field(default="dataCenterFull", alias="PORTAL_FACET_FIELD")
    facet_label: str = Field(default="Data Center", alias="PORTAL_FACET_LABEL")
    max_terms: int = Field(default=65536, alias="PORTAL_MAX_TERMS")
    terms_cache_ttl: int = Field(default=300, alias="PORTAL_TERMS_CACHE_TTL")  # 0 disables

    # Redis settings (facet terms cache)
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=2, alias="REDIS_DB")
    redis_timeout: float = Field(default=1.0, alias="REDIS_TIMEOUT")  # seconds

    # Paging
    page_size: int = Field(default=10, ge=1, alias="PORTAL_PAGE_SIZE")
    navigator_window: int = Field(default=10, ge=1, alias="PORTAL_NAVIGATOR_WINDOW")

    # Rendering
    stylesheet_path: Path = Field(default=DEFAULT_STYLESHEET, alias="PORTAL_STYLESHEET")
    suggest_count: int = Field(default=10, alias="PORTAL_SUGGEST_COUNT")

    # Fields shown on the document page (empty shows all stored fields)
    document_fields: List[str] = Field(default=[], alias="PORTAL_DOCUMENT_FIELDS")

    # Logging
    log_level: str = Field(default="INFO", alias="PORTAL_LOG_LEVEL")
    slow_request_ms: float = Field(default=300.0, alias="PORTAL_SLOW_REQUEST_MS")

    @field_validator("document_fields", mode="before")
    @classmethod
    def parse_document_fields(cls, v: Any) -> List[str]:
        """Parse field names from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # Fall back to comma-separated list
                return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @model_validator(mode="after")
    def default_sort_direction(self) -> "PortalSettings":
        """The service ignores a sort field sent without a direction."""
        if self.sort_field and self.sort_reverse is None:
            self.sort_reverse = False
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_prefix="",
        validate_default=True,
        populate_by_name=True
    )


# Global settings instance
_settings: Optional[PortalSettings] = None


def get_settings() -> PortalSettings:
    """Get global portal settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = PortalSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
