"""
Package-level exception hierarchy for QueryAdvisor.

All exceptions inherit from QueryAdvisorError, enabling:
- Catching all QueryAdvisor errors with a single except clause
- Context fields for debugging (stage, source, config_key)
- Structured serialization via to_dict() for JSON error responses

Hierarchy:
    QueryAdvisorError
    ├── AnalysisError               – Pipeline failure surfaced by the orchestrator
    │   ├── MalformedInputError     – Input is not analyzable text at all
    │   └── InternalExtractionError – Extractor produced an inconsistent record
    ├── RegistryError               – Index registry file cannot be loaded
    └── ConfigurationError          – Invalid configuration value
"""

from __future__ import annotations

from typing import Any


class QueryAdvisorError(Exception):
    """
    Base exception for all QueryAdvisor errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error responses."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Analysis Errors ──────────────────────────────────────────────────────


class AnalysisError(QueryAdvisorError):
    """
    A single analysis call failed.

    Raised atomically by the orchestrator: no partial bundle accompanies it.

    Attributes:
        stage: Pipeline stage that failed (extract, plan, recommend, statistics).
        original_error: The underlying exception, when one was wrapped.
    """

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.stage = stage
        self.original_error = original_error
        super().__init__(message)

    @classmethod
    def wrap(cls, stage: str, original_error: Exception) -> "AnalysisError":
        """Build an error describing an unexpected failure in a stage."""
        message = (
            f"Analysis stage '{stage}' failed: "
            f"{original_error.__class__.__name__}: {original_error}"
        )
        return cls(message, stage=stage, original_error=original_error)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.stage
        if self.original_error is not None:
            result["original_error_type"] = self.original_error.__class__.__name__
            result["original_error_message"] = str(self.original_error)
        return result


class MalformedInputError(AnalysisError):
    """
    Input is not analyzable text at all.

    Raised for missing, non-textual or blank SQL, or a registry argument
    that cannot be turned into a snapshot. Never raised because a clause
    is absent from otherwise valid text.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, stage="input")


class InternalExtractionError(AnalysisError):
    """The clause extractor produced a record that violates its invariants."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, stage="extract", original_error=original_error)


# ── Registry Errors ──────────────────────────────────────────────────────


class RegistryError(QueryAdvisorError):
    """
    Failed to load an index registry file.

    Attributes:
        source: Path (or description) of the registry source.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["source"] = self.source
        return result


# ── Configuration Errors ─────────────────────────────────────────────────


class ConfigurationError(QueryAdvisorError):
    """
    Invalid configuration.

    Attributes:
        config_key: The configuration key that caused the error (if known).
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result
