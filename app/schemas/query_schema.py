from pydantic import BaseModel
from typing import Optional


class NaturalLanguageQuery(BaseModel):
    query: Optional[str] = None

    # Dashboard targeting (echoed back for fixed-dashboard intents)
    group_id: Optional[str] = None
    report_id: Optional[str] = None


class DirectSqlQuery(BaseModel):
    sql: Optional[str] = None
    timeout: Optional[int] = 60


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    sql: Optional[str] = None
