"""
Workdeck Planner Error Hierarchy — Structured exceptions for API and config failures.

Every error carries its message plus arbitrary keyword context and can be
serialized for the structured log files (see engine.logging).

Hierarchy:
    WorkdeckError
    ├── AuthenticationError   — Missing token / HTTP 401
    ├── AccessDeniedError     — HTTP 403
    ├── NotFoundError         — HTTP 404
    ├── ApiError              — Any other non-2xx status
    ├── NetworkError          — Transport failure (DNS, refused, timeout)
    └── ConfigError           — Invalid workdeck.yaml / environment

Missing optional fields in API payloads are NOT errors: the transformer
resolves them to documented defaults.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class WorkdeckError(Exception):
    """
    Base error for all planner failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.endpoint: Optional[str] = context.get("endpoint")
        self.method: Optional[str] = context.get("method")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "endpoint": self.endpoint,
            "method": self.method,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("endpoint", "method")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.method and self.endpoint:
            parts.append(f"{self.method} {self.endpoint}")
        elif self.endpoint:
            parts.append(f"endpoint={self.endpoint}")
        return " | ".join(parts)


class AuthenticationError(WorkdeckError):
    """No bearer token available, or the server rejected it (401)."""

    def __init__(self, message: str = "Authentication failed. Please check your token.", **context: Any):
        super().__init__(message, **context)


class AccessDeniedError(WorkdeckError):
    """Token is valid but lacks permission for the resource (403)."""

    def __init__(
        self,
        message: str = "Access denied. You may not have permission to access this resource.",
        **context: Any,
    ):
        super().__init__(message, **context)


class NotFoundError(WorkdeckError):
    """Endpoint or resource does not exist (404)."""

    def __init__(
        self,
        message: str = "Resource not found. The requested endpoint may not exist.",
        **context: Any,
    ):
        super().__init__(message, **context)


class ApiError(WorkdeckError):
    """
    Any other failed HTTP response.
    Carries the status code and reason phrase.
    """

    def __init__(self, message: str, **context: Any):
        self.status_code: Optional[int] = context.get("status_code")
        self.status_text: Optional[str] = context.get("status_text")
        super().__init__(message, **context)

    @classmethod
    def from_status(cls, status_code: int, status_text: str, **context: Any) -> "ApiError":
        return cls(
            f"API Error: {status_code} {status_text}".rstrip(),
            status_code=status_code,
            status_text=status_text,
            **context,
        )

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["status_code"] = self.status_code
        d["status_text"] = self.status_text
        return d


class NetworkError(WorkdeckError):
    """Transport-level failure before any HTTP status was received."""
    pass


class ConfigError(WorkdeckError):
    """Configuration error — invalid workdeck.yaml or override value."""
    pass
