"""
LLM utilities (client, prompts, parsers)
"""
from app.pipeline.llm.client import call_llm, completion_url
from app.pipeline.llm.prompts import (
    build_schema_context,
    build_sql_generation_prompt,
    build_summary_prompt,
)
from app.pipeline.llm.parsers import parse_sql

__all__ = [
    "call_llm",
    "completion_url",
    "build_schema_context",
    "build_sql_generation_prompt",
    "build_summary_prompt",
    "parse_sql",
]
