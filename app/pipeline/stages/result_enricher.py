"""
Stage 5: Result Enrichment
Narrates results (or the intended query) in natural language
"""
import logging
from typing import Optional

import httpx

from app.core.config import Settings, settings as default_settings
from app.core.errors import CompletionServiceError
from app.dtos.query import ResultSet
from app.pipeline.llm.client import call_llm
from app.pipeline.llm.prompts import build_summary_prompt

logger = logging.getLogger(__name__)

APOLOGY_SUMMARY = (
    "I apologize, but I encountered an error while processing your query. Please try again."
)
EMPTY_SUMMARY = "Unable to generate summary."


def summarize(
    query: str,
    sql: Optional[str],
    result_set: Optional[ResultSet],
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Generate a user-facing summary

    Never raises: completion-service failures degrade to APOLOGY_SUMMARY.
    """
    records = result_set.records if result_set else []
    messages = build_summary_prompt(query, sql, records)

    try:
        response = call_llm(messages, temperature=0.7, max_tokens=1000, client=client, settings=settings or default_settings)
    except CompletionServiceError as e:
        logger.error(f"Summary generation failed: {e}")
        return APOLOGY_SUMMARY

    summary = response.strip()
    if not summary:
        return EMPTY_SUMMARY

    logger.info("Summary generated successfully")

    return summary


def describe_rows(result_set: ResultSet) -> str:
    """Deterministic summary for direct SQL execution (no completion call)"""
    count = result_set.row_count
    if count == 0:
        return "The query returned no rows."
    noun = "row" if count == 1 else "rows"
    return f"The query returned {count} {noun}."
