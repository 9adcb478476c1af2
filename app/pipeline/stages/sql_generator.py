"""
Stage 2: SQL Generation
Asks the completion service for a candidate statement
"""
import logging
from typing import Optional

import httpx

from app.core.config import Settings, settings as default_settings
from app.core.errors import CompletionServiceError
from app.dtos.query import SqlCandidate
from app.pipeline.llm.client import call_llm
from app.pipeline.llm.prompts import build_sql_generation_prompt
from app.pipeline.llm.parsers import parse_sql

logger = logging.getLogger(__name__)


def generate_sql(
    query: str,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> Optional[SqlCandidate]:
    """
    Generate SQL from natural language

    Simple 3-step process:
    1. Build SQL generation prompt
    2. Call LLM (temperature 0, 500 tokens)
    3. Strip markdown fences from the response

    Returns an untrusted SqlCandidate, or None when the service
    is unavailable or returns nothing
    """
    settings = settings or default_settings
    logger.info(f"Generating SQL for: '{query[:50]}...'")

    # Step 1: Build prompt
    messages = build_sql_generation_prompt(
        query,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        limit=settings.DEFAULT_ROW_LIMIT,
    )

    # Step 2: Call LLM
    try:
        response = call_llm(messages, temperature=0, max_tokens=500, client=client, settings=settings)
    except CompletionServiceError as e:
        logger.warning(f"SQL generation skipped: {e}")
        return None

    # Step 3: Parse SQL
    sql = parse_sql(response)
    if not sql:
        logger.warning("Completion service returned no SQL")
        return None

    logger.info(f"Generated SQL: {sql[:100]}...")

    return SqlCandidate(sql=sql, source="llm")
