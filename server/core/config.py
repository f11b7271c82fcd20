"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ProjectFields(BaseModel):
    """Column names of the projects table that have a role on the card."""

    title: str = "Titulo"
    description: str = "Descripcion"
    image: str = "Imagen"
    link: str = "Enlace"

    def base_field_ids(self) -> list:
        return [self.title, self.description, self.image, self.link]


class SiteFields(BaseModel):
    """Column names of the one-row site data table."""

    title: str = "titulo"
    description: str = "descripcion"
    site_url: str = "urlSitio"
    intro_title: str = "introTitulo"
    intro_text: str = "introTexto"
    collection_title: str = "coleccionTitulo"
    collection_text: str = "coleccionTexto"


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1024, le=65535)
    debug: bool = Field(default=False)

    # Site defaults (used when no site data table is configured)
    site_title: str = Field(default="Portfolio")
    site_description: str = Field(default="A collection of projects")
    site_url: str = Field(default="http://localhost:8080")

    # Baserow
    baserow_api_url: str = Field(default="https://api.baserow.io")
    baserow_token: Optional[str] = Field(default=None)
    baserow_timeout: float = Field(default=15.0, ge=1.0, le=120.0)
    baserow_page_size: int = Field(default=200, ge=1, le=200)

    projects_table_id: int = Field(default=0, ge=0)
    project_fields: ProjectFields = Field(default_factory=ProjectFields)

    site_table_id: int = Field(default=0, ge=0)
    site_fields: SiteFields = Field(default_factory=SiteFields)

    # Cache Configuration
    cache_enabled: bool = Field(default=True)
    cache_ttl: int = Field(default=300)  # seconds; <= 0 never satisfies a read
    cache_backend: Literal["sqlite", "memory"] = Field(default="sqlite")
    database_url: str = Field(default="sqlite+aiosqlite:///./data/portfolio.db")
    database_echo: bool = Field(default=False)

    # Static snapshot mode
    static_mode: bool = Field(default=False)
    static_path: str = Field(default="./data/proyectos.json")

    # Lifecycle
    reload_interval: int = Field(default=0, ge=0)  # seconds; 0 disables
    search_debounce_seconds: float = Field(default=0.3, gt=0.0, le=5.0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")
    log_file: Optional[str] = Field(default=None)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database directory exists for SQLite."""
        if v and v.startswith("sqlite"):
            if ":///" in v:
                db_path = v.split("///")[1]
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def effective_log_level(self) -> str:
        """Debug mode always logs at DEBUG."""
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def cache_key(self) -> str:
        """Key of the persisted project list for the configured table."""
        return f"baserow_cache_{self.projects_table_id}"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
        "env_nested_delimiter": "__",
    }
