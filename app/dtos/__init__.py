"""
DTOs (Data Transfer Objects)
Internal objects for passing data between layers
"""
from app.dtos.query import (
    QueryRequest,
    SqlExecutionRequest,
    ResultSet,
    QueryResponse,
    Intent,
    FixedDashboard,
    DataQuery,
    DashboardKind,
    SqlCandidate,
    ValidatedSql,
    Rejected,
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
    "SqlCandidate",
    "ValidatedSql",
    "Rejected",
    "WarehouseCredential",
    "ExecutionHandle",
    "ExecutionState",
    "ExecutionResult",
]
