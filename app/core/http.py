"""
HTTP response helpers shared by controllers and exception handlers
"""
from typing import Any, Dict

from fastapi import Response
from fastapi.responses import JSONResponse

from app.core.config import settings

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


def json_response(payload: Any, status_code: int = 200) -> JSONResponse:
    """JSON body with CORS headers"""
    return JSONResponse(content=payload, status_code=status_code, headers=cors_headers())


def preflight_response() -> Response:
    """CORS preflight answer: headers only, no body"""
    return Response(status_code=200, headers=cors_headers())
