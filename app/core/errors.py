"""
Gateway error taxonomy
Each error knows the HTTP status and the user-facing message it maps to
"""
import re
from typing import Optional

# Bearer/session tokens and JWT-looking blobs that upstream services may echo back
_TOKEN_PATTERNS = [
    re.compile(r'(Bearer\s+)[A-Za-z0-9._\-]+', re.I),
    re.compile(r'(Snowflake Token=")[^"]+', re.I),
    re.compile(r'("token"\s*:\s*")[^"]+', re.I),
    re.compile(r'()eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+'),
]


def scrub_secrets(text: str, limit: int = 500) -> str:
    """Remove anything token-shaped from upstream error text before surfacing it"""
    scrubbed = text or ""
    for pattern in _TOKEN_PATTERNS:
        scrubbed = pattern.sub(r"\1[REDACTED]", scrubbed)
    return scrubbed[:limit]


class GatewayError(Exception):
    """Base class for errors surfaced to gateway callers"""
    status_code: int = 500
    error: str = "Internal error"

    def __init__(self, error: Optional[str] = None, details: Optional[str] = None):
        self.error = error or self.error
        self.details = details
        super().__init__(self.error if not details else f"{self.error}: {details}")

    def to_payload(self) -> dict:
        payload = {"error": self.error}
        if self.details:
            payload["details"] = self.details
        return payload


class InputError(GatewayError):
    """Missing or malformed caller input"""
    status_code = 400
    error = "Invalid request"


class ValidationRejected(GatewayError):
    """SQL failed the security policy; reason is shown to the user verbatim"""
    status_code = 400
    error = "Query validation failed"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(details=reason)


class AuthFailure(GatewayError):
    """Every configured warehouse credential strategy failed"""
    status_code = 500
    error = "Failed to authenticate with Snowflake"


class ExecutionFailure(GatewayError):
    """Warehouse rejected or errored after authentication"""
    status_code = 500
    error = "Failed to execute Snowflake query"

    def __init__(self, details: Optional[str] = None, sql: str = ""):
        self.sql = sql
        super().__init__(details=scrub_secrets(details) if details else None)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.sql:
            payload["sql"] = self.sql
        return payload


class PollTimeout(Exception):
    """Statement still running after the polling ceiling (non-fatal)"""

    def __init__(self, statement_handle: str, attempts: int):
        self.statement_handle = statement_handle
        self.attempts = attempts
        super().__init__(f"Statement {statement_handle} still running after {attempts} polls")


class CompletionServiceError(Exception):
    """Completion service unavailable, unconfigured or returned garbage"""
