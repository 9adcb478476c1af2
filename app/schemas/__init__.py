from .query_schema import NaturalLanguageQuery, DirectSqlQuery, ErrorResponse

__all__ = [
    "NaturalLanguageQuery",
    "DirectSqlQuery",
    "ErrorResponse",
]
