"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DECLGRAPH__SECTION__KEY)
3. Repo YAML (<root>/.declgraph/config.yaml)
4. Global YAML (~/.config/declgraph/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DECLGRAPH__<SECTION>__<KEY>=<VALUE>

Examples:
    DECLGRAPH__LOGGING__LEVEL=DEBUG
    DECLGRAPH__ANALYSIS__WORKERS=4
    DECLGRAPH__ANALYSIS__MAX_FILE_SIZE_KB=512
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DECLGRAPH__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. The CLI raises it to DEBUG with -v.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class AnalysisConfig(BaseModel):
    """Source discovery and extraction settings.

    Env vars:
        DECLGRAPH__ANALYSIS__WORKERS: Parallel extraction processes (0 = one per CPU)
        DECLGRAPH__ANALYSIS__MAX_FILE_SIZE_KB: Skip files larger than this
    """

    workers: int = Field(
        default=1,
        description="Extraction worker processes. 1 runs in-process, 0 uses os.cpu_count().",
    )
    max_file_size_kb: int = Field(
        default=1024,
        description="Files larger than this are reported as skipped instead of parsed.",
    )
    extensions: list[str] = Field(
        default_factory=lambda: ["swift"],
        description="Source file extensions to analyze, without the leading dot.",
    )
    manifest_name: str = Field(
        default="Package.swift",
        description="File name that marks a package root.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directory names pruned during discovery.",
    )

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"workers must be >= 0, got {v}")
        return v

    @field_validator("max_file_size_kb")
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_file_size_kb must be > 0, got {v}")
        return v

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower().lstrip(".") for ext in v if ext.strip(".")]


class DeclGraphConfig(BaseModel):
    """Root configuration for declgraph.

    All settings can be configured via:
    1. Environment variables: DECLGRAPH__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
