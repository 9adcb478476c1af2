"""
Warehouse execution DTOs
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict

from app.dtos.query.context import ResultSet


class CredentialKind(str, Enum):
    KEYPAIR_JWT = "KEYPAIR_JWT"
    SESSION_TOKEN = "SESSION_TOKEN"


class WarehouseCredential(BaseModel):
    """
    Short-lived warehouse credential, scoped to one request
    Never cached, never logged
    """
    model_config = ConfigDict(frozen=True)

    kind: CredentialKind
    token: str
    expires_at: Optional[int] = None
    issuer: Optional[str] = None  # JWT only, safe to log
    subject: Optional[str] = None

    def __repr__(self) -> str:
        return f"WarehouseCredential(kind={self.kind.value}, issuer={self.issuer!r})"

    __str__ = __repr__


class ExecutionHandle(BaseModel):
    """Asynchronous statement handle returned by the SQL API"""
    model_config = ConfigDict(frozen=True)

    statement_handle: str
    status_url: str


class ExecutionState(str, Enum):
    """Per-request executor state machine"""
    START = "start"
    AUTHENTICATED = "authenticated"
    SUBMITTED = "submitted"
    SYNC_COMPLETE = "sync_complete"
    ASYNC_PENDING = "async_pending"
    POLLING = "polling"
    POLL_COMPLETE = "poll_complete"
    POLL_TIMEOUT = "poll_timeout"
    ABORTED = "aborted"
    NORMALIZED = "normalized"


class ExecutionResult(BaseModel):
    """Outcome of a successful execution"""
    sql: str
    result_set: ResultSet
    state: ExecutionState
    credential_kind: CredentialKind
    statement_handle: Optional[str] = None
    poll_attempts: int = 0
