"""Config module exports."""

from declgraph.config.loader import load_config
from declgraph.config.models import (
    AnalysisConfig,
    DeclGraphConfig,
    LoggingConfig,
    LogOutputConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "DeclGraphConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
