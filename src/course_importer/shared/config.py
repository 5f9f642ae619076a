"""
Configuration Module - Load and validate importer settings.
===========================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Environment variables override YAML defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early
load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


class ParsingConfig(BaseModel):
    """Format parser and link extraction settings."""

    min_link_length: int = 11
    max_links_per_record: int = 10
    attach_global_links: bool = True
    max_scan_depth: int = 32
    min_description_length: int = 10


class SyllabusConfig(BaseModel):
    """Nested syllabus extraction settings."""

    reserved_keys: list[str] = Field(default_factory=lambda: ["Overview"])
    default_difficulty: str = "intermediate"
    default_duration: str = "1 week"
    default_description: str = "Course module from imported syllabus"
    description_separator: str = " | "


class ValidationConfig(BaseModel):
    """Preview validation settings."""

    min_topic_length: int = 3
    max_reported_invalid_links: int = 2
    error_separator: str = " | "


class MaterializationConfig(BaseModel):
    """Course materialization settings."""

    default_category: str = "General"
    default_difficulty: str = "beginner"
    default_estimated_time: str = "1 hour"
    default_visibility: str = "private"
    default_status: str = "draft"
    default_lang_code: str = "en"
    default_lang_name: str = "English"
    hours_per_module: int = 1


class ServicesConfig(BaseModel):
    """External collaborator endpoints."""

    commit_url: str = "http://localhost:3000/api/courses/import"
    enhance_url: str = "http://localhost:3000/api/ai/enhance-course"
    upload_url: str = "http://localhost:3000/api/upload/document"
    timeout: int = 30
    max_retries: int = 3
    retry_min_wait: int = 2
    retry_max_wait: int = 10
    user_agent: str = "CourseImporter/0.1.0"


class UploadsConfig(BaseModel):
    """Bulk document upload limits."""

    max_file_size_mb: int = 50
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".pdf", ".doc", ".docx", ".txt"]
    )


class BatchConfig(BaseModel):
    """Batch import settings."""

    max_workers: int = 4


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main importer settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API token (from environment only)
    course_api_token: str = Field(default="", validation_alias="COURSE_API_TOKEN")

    # Top-level environment overrides
    course_api_url: Optional[str] = Field(default=None, validation_alias="COURSE_API_URL")
    enhance_api_url: Optional[str] = Field(default=None, validation_alias="ENHANCE_API_URL")
    upload_api_url: Optional[str] = Field(default=None, validation_alias="UPLOAD_API_URL")
    max_workers: Optional[int] = Field(default=None, validation_alias="IMPORT_MAX_WORKERS")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    syllabus: SyllabusConfig = Field(default_factory=SyllabusConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    materialization: MaterializationConfig = Field(default_factory=MaterializationConfig)
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _project_root: Path = PROJECT_ROOT

    @field_validator("course_api_token", mode="before")
    @classmethod
    def validate_api_token(cls, v: Any) -> str:
        """Allow an empty token; the commit endpoint may be unauthenticated."""
        if v is None:
            return ""
        return str(v)

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._project_root

    def get_effective_commit_url(self) -> str:
        """Get the effective course-creation URL (env override or config)."""
        return self.course_api_url or self.services.commit_url

    def get_effective_enhance_url(self) -> str:
        """Get the effective enhancement URL (env override or config)."""
        return self.enhance_api_url or self.services.enhance_url

    def get_effective_upload_url(self) -> str:
        """Get the effective document upload URL (env override or config)."""
        return self.upload_api_url or self.services.upload_url

    def get_effective_max_workers(self) -> int:
        """Get the effective batch worker count (env override or config)."""
        if self.max_workers is not None:
            return max(1, self.max_workers)
        return max(1, self.batch.max_workers)

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)

    return Settings(**yaml_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Returns:
        Settings instance with merged configuration

    Example:
        >>> settings = get_settings()
        >>> print(settings.parsing.max_links_per_record)
        10
    """
    return _create_settings()


def reload_settings() -> Settings:
    """
    Force reload of settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
