"""
Pipeline stages (ordered execution flow)

1. intent_analyzer → Classify the raw query
2. sql_generator → Synthesize a candidate statement
3. sql_validator → Enforce the security policy
4. result_enricher → Summarize results
"""
from app.pipeline.stages.intent_analyzer import (
    classify_intent,
    looks_like_data_request,
)
from app.pipeline.stages.sql_generator import generate_sql
from app.pipeline.stages.sql_validator import (
    validate_sql,
    apply_row_limit,
)
from app.pipeline.stages.result_enricher import (
    summarize,
    describe_rows,
    APOLOGY_SUMMARY,
)

__all__ = [
    # Stage 1: Intent
    "classify_intent",
    "looks_like_data_request",
    # Stage 2: SQL Generation
    "generate_sql",
    # Stage 3: Validation
    "validate_sql",
    "apply_row_limit",
    # Stage 4: Summary
    "summarize",
    "describe_rows",
    "APOLOGY_SUMMARY",
]
