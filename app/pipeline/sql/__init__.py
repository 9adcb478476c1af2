"""
SQL utilities (execution, normalization)
"""
from app.pipeline.sql.executor import QueryExecutor, StatementRun
from app.pipeline.sql.normalizer import column_names, normalize_rows, build_result_set

__all__ = [
    "QueryExecutor",
    "StatementRun",
    "column_names",
    "normalize_rows",
    "build_result_set",
]
