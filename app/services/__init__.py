"""
Service layer for business logic
"""
from app.services.query_service import QueryService

__all__ = [
    "QueryService",
]
