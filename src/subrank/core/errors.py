"""Custom exceptions for configuration, scope, and store errors."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class InvalidScopeError(ConfigurationError):
    """Error when a ranking scope has no usable school identifiers."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Invalid ranking scope: {reason}",
            "Pass at least one non-empty school ID (e.g., --school lincoln-elem).",
        )


class MissingTokenError(ConfigurationError):
    """Error when the Firestore backend has no access token."""

    def __init__(self) -> None:
        super().__init__(
            "Access token required for the Firestore review store",
            "Set FIRESTORE_TOKEN or add store.token to config.yaml.",
        )


class ReviewStoreError(Exception):
    """Raised by a review store backend when a fetch cannot be completed."""

    def __init__(self, school_id: str, reason: str) -> None:
        self.school_id = school_id
        self.reason = reason
        super().__init__(f"Failed to fetch reviews for school '{school_id}': {reason}")
