"""Tagged failures raised by the publish pipeline.

Callers branch on ``PublishError.kind`` rather than on PyGithub exception
types, so the HTTP layer never imports ``github``.
"""

from __future__ import annotations

from enum import Enum

import requests
from github import BadCredentialsException, GithubException, UnknownObjectException


class PublishErrorKind(str, Enum):
    NETWORK = "network"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class DataFileError(ValueError):
    """The existing data file cannot be extended without losing reviews."""


class PublishError(Exception):
    """A failed remote step. ``step`` names the orchestration stage that failed."""

    def __init__(self, kind: PublishErrorKind, step: str, message: str, status: int | None = None):
        super().__init__(f"{step}: {message}")
        self.kind = kind
        self.step = step
        self.message = message
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.kind in (PublishErrorKind.NETWORK, PublishErrorKind.CONFLICT)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "step": self.step,
            "status": self.status,
            "message": self.message,
        }


def _github_message(exc: GithubException) -> str:
    data = exc.data
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(data) if data else type(exc).__name__


def classify_github_error(exc: Exception, step: str) -> PublishError:
    """Map a PyGithub / requests exception onto a PublishError."""
    if isinstance(exc, PublishError):
        return exc
    if isinstance(exc, DataFileError):
        return PublishError(PublishErrorKind.VALIDATION, step, str(exc))
    if isinstance(exc, requests.RequestException):
        return PublishError(PublishErrorKind.NETWORK, step, str(exc) or type(exc).__name__)
    if isinstance(exc, GithubException):
        status = exc.status
        message = _github_message(exc)
        if isinstance(exc, BadCredentialsException) or status in (401, 403):
            kind = PublishErrorKind.UNAUTHORIZED
        elif isinstance(exc, UnknownObjectException) or status == 404:
            kind = PublishErrorKind.NOT_FOUND
        elif status in (409, 422):
            kind = PublishErrorKind.CONFLICT
        else:
            kind = PublishErrorKind.UNKNOWN
        return PublishError(kind, step, message, status=status)
    return PublishError(PublishErrorKind.UNKNOWN, step, str(exc) or type(exc).__name__)
