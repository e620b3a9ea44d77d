"""Concourse wallboard exceptions."""

from __future__ import annotations


class ConcourseError(Exception):
    """Base exception for wallboard operations."""


class ConfigError(ConcourseError):
    """Raised when command-line flags or settings are missing or contradictory."""


class CredentialStoreError(ConcourseError):
    """Raised when the credential file cannot be read or written."""


class TargetNotFoundError(CredentialStoreError):
    """Raised when a named target is not present in the credential file."""

    def __init__(self, name: str, known: list[str] | None = None) -> None:
        self.name = name
        self.known = known or []
        msg = f"Target '{name}' not found"
        if self.known:
            msg += f" (known targets: {', '.join(self.known)})"
        super().__init__(msg)


class NetworkError(ConcourseError):
    """Raised when the Concourse server cannot be reached."""


class MalformedResponseError(ConcourseError):
    """Raised when a successful response body cannot be decoded."""


class MalformedTokenResponseError(MalformedResponseError):
    """Raised when the token endpoint answers without a usable token."""


class ConcourseApiError(ConcourseError):
    """Raised when the Concourse API returns a non-success response."""

    def __init__(self, status_code: int, status_text: str, body: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"Concourse API Error {status_code} {status_text}: {body}")


class ConcourseAuthError(ConcourseApiError):
    """Raised when a saved token is no longer accepted (HTTP 401)."""

    def __init__(self, body: str = "") -> None:
        super().__init__(401, "Unauthorized", body)


class AuthenticationRejectedError(ConcourseApiError):
    """Raised when the token endpoint refuses the supplied username and password."""
