"""declgraph error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Analysis (files, parsing)
- 4xxx: Query

Only errors that abort an operation are exceptions. Per-file and per-node
problems found during analysis are collected as ``Diagnostic`` records on the
run result instead (see ``declgraph.index.models``).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Analysis (3xxx)
    PATH_NOT_FOUND = 3001
    PARSE_FAILED = 3002
    LANGUAGE_UNAVAILABLE = 3003

    # Query (4xxx)
    UNKNOWN_TYPE = 4001


@dataclass(frozen=True, slots=True)
class DeclGraphError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'UNKNOWN_TYPE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DeclGraphError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class AnalysisPathError(DeclGraphError):
    """The analysis root cannot be read. Fatal for the run."""

    @classmethod
    def not_found(cls, path: str) -> "AnalysisPathError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"Path does not exist: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "AnalysisPathError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"Cannot read {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class ParseError(DeclGraphError):
    """The parser failed on a whole file.

    Raised by the parsing layer and caught per file by the extraction
    pipeline, which turns it into a ``parse_error`` diagnostic.
    """

    @classmethod
    def failed(cls, path: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_FAILED,
            message=f"Could not parse {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def language_unavailable(cls, path: str, language: str, package: str) -> "ParseError":
        return cls(
            code=ErrorCode.LANGUAGE_UNAVAILABLE,
            message=f"No grammar available for {language} ({path}); install {package}",
            details={"path": path, "language": language, "package": package},
        )


class UnknownTypeError(DeclGraphError):
    """A queried type name has no declaration anywhere in the analyzed set."""

    @classmethod
    def for_name(cls, type_name: str) -> "UnknownTypeError":
        return cls(
            code=ErrorCode.UNKNOWN_TYPE,
            message=f"Type name {type_name} not found in the index.",
            details={"type_name": type_name},
        )
