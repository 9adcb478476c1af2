"""
SQL validation DTOs
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, PrivateAttr

# Only the security validator holds a reference to this token
_PROVENANCE = object()


class SqlCandidate(BaseModel):
    """
    SQL text proposed by the synthesizer (or a caller)
    Untrusted: has no execution rights until validated
    """
    model_config = ConfigDict(frozen=True)

    sql: str
    source: str = "llm"


class Rejected(BaseModel):
    """Security policy rejection with a user-displayable reason"""
    model_config = ConfigDict(frozen=True)

    reason: str


class ValidatedSql(BaseModel):
    """
    SQL that passed the security validator, row cap already applied
    The only form the executor accepts
    """
    model_config = ConfigDict(frozen=True)

    sql: str
    original_sql: str
    limit_applied: bool = False

    _provenance: Optional[object] = PrivateAttr(default=None)

    def __init__(self, *, _token: Optional[object] = None, **data):
        if _token is not _PROVENANCE:
            raise TypeError("ValidatedSql can only be produced by the SQL security validator")
        super().__init__(**data)
        self._provenance = _token

    @property
    def is_validated(self) -> bool:
        return self._provenance is _PROVENANCE


def _issue_validated(sql: str, original_sql: str, limit_applied: bool) -> ValidatedSql:
    """Constructor used by the SQL security validator"""
    return ValidatedSql(
        _token=_PROVENANCE,
        sql=sql,
        original_sql=original_sql,
        limit_applied=limit_applied,
    )
