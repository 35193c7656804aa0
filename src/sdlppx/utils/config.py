"""Configuration management for sdlppx.

Handles conversion options and logging settings using Pydantic Settings.
Supports environment variables and .env files.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sdlppx import __version__
from sdlppx.core.models import OutputFormat, SynonymLayout


class Settings(BaseSettings):
    """Conversion settings.

    Loads configuration from environment variables or .env file.
    All settings can be overridden via environment variables with SDLPPX_ prefix.
    Components receive a Settings instance at construction.

    Example .env file:
        SDLPPX_SKIP_TRANSLATION_MEMORY=true
        SDLPPX_SYNONYM_LAYOUT=pipe
        SDLPPX_OUTPUT_FORMAT=semicolon

    Example usage:
        >>> settings = Settings(output_format=OutputFormat.COMMA)
        >>> print(settings.output_format.extension)
        .csv
    """

    # Unpack steps
    skip_glossary: bool = Field(
        default=False,
        description="Do not export termbases found in the package",
        json_schema_extra={"env": "SDLPPX_SKIP_GLOSSARY"},
    )

    skip_translation_memory: bool = Field(
        default=False,
        description="Do not export translation memories found in the package",
        json_schema_extra={"env": "SDLPPX_SKIP_TRANSLATION_MEMORY"},
    )

    skip_source_documents: bool = Field(
        default=False,
        description="Do not extract the bilingual documents of the package",
        json_schema_extra={"env": "SDLPPX_SKIP_SOURCE_DOCUMENTS"},
    )

    # Termbase export
    synonym_layout: SynonymLayout = Field(
        default=SynonymLayout.COLUMN,
        description="Synonym layout in termbase exports (column, pipe)",
        json_schema_extra={"env": "SDLPPX_SYNONYM_LAYOUT"},
    )

    output_format: OutputFormat = Field(
        default=OutputFormat.GLOSSARY,
        description="Termbase export format (comma, semicolon, tab, glossary)",
        json_schema_extra={"env": "SDLPPX_OUTPUT_FORMAT"},
    )

    # Package transformation
    backup_suffix: str = Field(
        default=".bak",
        description="Suffix appended to the package name for the backup copy",
        min_length=1,
        json_schema_extra={"env": "SDLPPX_BACKUP_SUFFIX"},
    )

    # TMX header
    creation_tool: str = Field(
        default="sdlppx",
        description="Creation tool written in TMX headers",
        json_schema_extra={"env": "SDLPPX_CREATION_TOOL"},
    )

    creation_tool_version: str = Field(
        default=__version__,
        description="Creation tool version written in TMX headers",
        json_schema_extra={"env": "SDLPPX_CREATION_TOOL_VERSION"},
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        json_schema_extra={"env": "SDLPPX_LOG_LEVEL"},
    )

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SDLPPX_",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance, used by the CLI only
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance

    Example:
        >>> settings = get_settings()
        >>> print(settings.synonym_layout)
        SynonymLayout.COLUMN
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
