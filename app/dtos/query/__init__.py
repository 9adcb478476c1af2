"""
Query DTOs
"""
from app.dtos.query.context import QueryRequest, SqlExecutionRequest, ResultSet, QueryResponse
from app.dtos.query.intent import Intent, FixedDashboard, DataQuery, DashboardKind, DATA_QUERY_TAG
from app.dtos.query.validation import SqlCandidate, ValidatedSql, Rejected
from app.dtos.query.execution import (
    CredentialKind,
    WarehouseCredential,
    ExecutionHandle,
    ExecutionState,
    ExecutionResult,
)

__all__ = [
    "QueryRequest",
    "SqlExecutionRequest",
    "ResultSet",
    "QueryResponse",
    "Intent",
    "FixedDashboard",
    "DataQuery",
    "DashboardKind",
    "DATA_QUERY_TAG",
    "SqlCandidate",
    "ValidatedSql",
    "Rejected",
    "CredentialKind",
    "WarehouseCredential",
    "ExecutionHandle",
    "ExecutionState",
    "ExecutionResult",
]
