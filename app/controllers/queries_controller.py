"""
Gateway endpoints
Natural-language queries and direct (validated) SQL execution
"""
from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from app.core.http import json_response, preflight_response
from app.dtos import QueryRequest, QueryResponse, SqlExecutionRequest
from app.schemas.query_schema import NaturalLanguageQuery, DirectSqlQuery, ErrorResponse
from app.services import QueryService

router = APIRouter(tags=["Query"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or SQL rejected by the security policy"},
    500: {"model": ErrorResponse, "description": "Warehouse authentication or execution failed"},
}


def get_query_service() -> QueryService:
    """New service per request; nothing is shared between requests"""
    return QueryService()


def _response_payload(result: QueryResponse) -> dict:
    """Serialize a QueryResponse; dashboard targets only when set"""
    payload = result.model_dump(mode="json")
    for key in ("group_id", "report_id"):
        if payload.get(key) is None:
            payload.pop(key, None)
    return payload


@router.options("/process-nlq", include_in_schema=False)
def process_nlq_preflight() -> Response:
    return preflight_response()


@router.post("/process-nlq", responses=ERROR_RESPONSES)
def process_nlq(
    body: NaturalLanguageQuery,
    service: QueryService = Depends(get_query_service)
) -> JSONResponse:
    """
    Main endpoint for natural language queries

    Returns {query, message, summary, sql, results, columns, row_count};
    failures return {error, details}
    """
    request = QueryRequest(
        text=body.query or "",
        group_id=body.group_id,
        report_id=body.report_id,
    )
    result = service.process_nlq(request)
    return json_response(_response_payload(result))


@router.options("/snowflake-query", include_in_schema=False)
def snowflake_query_preflight() -> Response:
    return preflight_response()


@router.post("/snowflake-query", responses=ERROR_RESPONSES)
def snowflake_query(
    body: DirectSqlQuery,
    service: QueryService = Depends(get_query_service)
) -> JSONResponse:
    """
    Execute caller-supplied SQL

    Gated by the same security validator as generated SQL
    """
    request = SqlExecutionRequest(sql=body.sql or "", timeout=body.timeout)
    result = service.execute_sql(request)
    payload = _response_payload(result)
    payload["success"] = True
    return json_response(payload)
