"""Core module exports."""

from declgraph.core.errors import (
    AnalysisPathError,
    ConfigError,
    DeclGraphError,
    ErrorCode,
    ParseError,
    UnknownTypeError,
)
from declgraph.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from declgraph.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "AnalysisPathError",
    "ConfigError",
    "DeclGraphError",
    "ErrorCode",
    "ParseError",
    "UnknownTypeError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "spinner",
    "status",
]
