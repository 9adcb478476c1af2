"""
Query request/response DTOs
Everything here lives for exactly one request
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """Natural-language query as received; immutable"""
    model_config = ConfigDict(frozen=True)

    text: str
    group_id: Optional[str] = None
    report_id: Optional[str] = None


class SqlExecutionRequest(BaseModel):
    """Direct SQL execution request; still goes through the validator"""
    model_config = ConfigDict(frozen=True)

    sql: str
    timeout: Optional[int] = None


class ResultSet(BaseModel):
    """
    Normalized tabular result
    Column names are unique; every record has exactly those keys, in column order
    """
    columns: List[str] = Field(default_factory=list)
    records: List[Dict[str, Any]] = Field(default_factory=list)
    total_rows: Optional[int] = None  # as reported by the warehouse, may exceed len(records)

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


class QueryResponse(BaseModel):
    """
    Response of one gateway cycle
    `message` is the resolved intent tag; `sql` is empty when nothing was executed
    """
    query: str
    message: str
    summary: str
    sql: str = ""
    results: List[Dict[str, Any]] = Field(default_factory=list)
    columns: List[str] = Field(default_factory=list)
    row_count: int = 0
    group_id: Optional[str] = None
    report_id: Optional[str] = None
