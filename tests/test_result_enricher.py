from __future__ import annotations

import json

from app.core.errors import CompletionServiceError
from app.dtos.query import ResultSet
from app.pipeline.llm.prompts import SUMMARY_SYSTEM_PROMPT, build_summary_prompt
from app.pipeline.stages.result_enricher import (
    APOLOGY_SUMMARY,
    EMPTY_SUMMARY,
    describe_rows,
    summarize,
)


def _records(n: int) -> list:
    return [{"ID": i, "AMOUNT": i * 10} for i in range(n)]


def test_summary_prompt_with_results_samples_first_rows():
    messages = build_summary_prompt("total spend", "SELECT 1", _records(15))
    user = messages[1]["content"]

    assert messages[0]["content"] == SUMMARY_SYSTEM_PROMPT
    assert "User query: total spend" in user
    assert "Data retrieved (15 rows):" in user
    assert json.dumps(_records(10), indent=2) in user
    assert '"ID": 10' not in user


def test_summary_prompt_with_sql_only():
    user = build_summary_prompt("total spend", "SELECT SUM(A) FROM FINANCIAL_TRANSACTIONS", [])[1]["content"]

    assert "I generated this SQL query: SELECT SUM(A) FROM FINANCIAL_TRANSACTIONS" in user
    assert "couldn't retrieve results" in user


def test_summary_prompt_with_nothing_is_raw_query():
    assert build_summary_prompt("hello", "", [])[1]["content"] == "hello"


def test_summarize_uses_completion(monkeypatch, settings):
    seen = {}

    def fake_call_llm(messages, **kwargs):
        seen.update(kwargs)
        seen["messages"] = messages
        return "  There were **2** transactions.  "

    monkeypatch.setattr("app.pipeline.stages.result_enricher.call_llm", fake_call_llm)

    summary = summarize("count", "SELECT 1", ResultSet(columns=["ID"], records=[{"ID": 1}, {"ID": 2}]), settings=settings)

    assert summary == "There were **2** transactions."
    assert seen["temperature"] == 0.7
    assert seen["max_tokens"] == 1000
    assert "Data retrieved (2 rows)" in seen["messages"][1]["content"]


def test_summarize_falls_back_to_apology(monkeypatch, settings):
    def failing_call_llm(messages, **kwargs):
        raise CompletionServiceError("down")

    monkeypatch.setattr("app.pipeline.stages.result_enricher.call_llm", failing_call_llm)

    assert summarize("count", "", None, settings=settings) == APOLOGY_SUMMARY


def test_summarize_empty_completion(monkeypatch, settings):
    monkeypatch.setattr("app.pipeline.stages.result_enricher.call_llm", lambda messages, **kwargs: "   ")

    assert summarize("count", "", ResultSet(), settings=settings) == EMPTY_SUMMARY


def test_describe_rows():
    assert describe_rows(ResultSet()) == "The query returned no rows."
    assert describe_rows(ResultSet(columns=["A"], records=[{"A": 1}])) == "The query returned 1 row."
    assert describe_rows(ResultSet(columns=["A"], records=[{"A": 1}, {"A": 2}])) == "The query returned 2 rows."
