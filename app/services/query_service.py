"""
Service for query execution orchestration
Encapsulates the full gateway request/response cycle
"""
import time
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import httpx

from app.core.config import Settings, settings as default_settings
from app.core.errors import InputError, PollTimeout, ValidationRejected
from app.dtos import (
    QueryRequest,
    SqlExecutionRequest,
    QueryResponse,
    ResultSet,
    FixedDashboard,
    Rejected,
    ValidatedSql,
)
from app.dtos.query import DATA_QUERY_TAG
from app.pipeline.stages import (
    classify_intent,
    looks_like_data_request,
    generate_sql,
    validate_sql,
    summarize,
    describe_rows,
)
from app.pipeline.sql import QueryExecutor

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.Client]


class QueryService:
    """
    Orchestrates the gateway pipeline

    raw query → intent → (fixed dashboard) or
    (synthesize → validate → authenticate → execute → normalize) → summarize

    Stateless between requests: each call opens its own HTTP client and
    re-authenticates to the warehouse.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.settings = settings or default_settings
        self.client_factory = client_factory or self._default_client
        self.sleep = sleep

    def _default_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.settings.SNOWFLAKE_STATEMENT_TIMEOUT + 10.0, connect=10.0))

    @contextmanager
    def _client(self) -> Iterator[httpx.Client]:
        client = self.client_factory()
        try:
            yield client
        finally:
            client.close()

    # ============================================
    # NATURAL-LANGUAGE ENTRY POINT
    # ============================================

    def process_nlq(self, request: QueryRequest) -> QueryResponse:
        """
        Main entry point for natural-language queries

        Flow:
        1. Classify intent; fixed dashboards return immediately
        2. If the text looks like a data request → generate SQL
        3. Validate SQL (rejection is surfaced to the caller)
        4. Execute (poll timeout degrades to "no results")
        5. Summarize

        Raises:
            InputError: blank query
            ValidationRejected: synthesized SQL failed the security policy
            AuthFailure / ExecutionFailure: warehouse unavailable for this query
        """
        query = (request.text or "").strip()
        if not query:
            raise InputError(error="Query is required")

        # Step 1: Intent
        intent = classify_intent(query)
        if isinstance(intent, FixedDashboard):
            return QueryResponse(
                query=query,
                message=intent.tag,
                summary=intent.summary,
                group_id=request.group_id,
                report_id=request.report_id,
            )

        sql = ""
        result_set = ResultSet()

        with self._client() as client:
            # Step 2: SQL synthesis
            candidate = None
            if looks_like_data_request(query):
                candidate = generate_sql(query, client=client, settings=self.settings)

            if candidate:
                # Step 3: Validation
                validated = self._validate(candidate.sql)
                sql = validated.sql

                # Step 4: Execution
                try:
                    result = self._executor(client).execute(validated)
                    result_set = result.result_set
                except PollTimeout as e:
                    logger.warning(f"Degrading to explanatory summary: {e}")

            # Step 5: Summary
            summary = summarize(query, sql, result_set, client=client, settings=self.settings)

        return QueryResponse(
            query=query,
            message=DATA_QUERY_TAG,
            summary=summary,
            sql=sql,
            results=result_set.records,
            columns=result_set.columns,
            row_count=result_set.row_count,
        )

    # ============================================
    # DIRECT SQL ENTRY POINT
    # ============================================

    def execute_sql(self, request: SqlExecutionRequest) -> QueryResponse:
        """
        Execute caller-supplied SQL through the same security validator

        No completion-service call: the summary is a row-count sentence.
        """
        raw_sql = (request.sql or "").strip()
        if not raw_sql:
            raise InputError(error="SQL query is required")

        validated = self._validate(raw_sql)

        with self._client() as client:
            try:
                result = self._executor(client).execute(validated, timeout=request.timeout)
                result_set = result.result_set
                summary = describe_rows(result_set)
            except PollTimeout as e:
                logger.warning(f"Direct query returned no results: {e}")
                result_set = ResultSet()
                summary = "The query is still running in Snowflake; no results were available before the polling limit."

        return QueryResponse(
            query=raw_sql,
            message=DATA_QUERY_TAG,
            summary=summary,
            sql=validated.sql,
            results=result_set.records,
            columns=result_set.columns,
            row_count=result_set.total_rows or result_set.row_count,
        )

    # ============================================
    # HELPERS
    # ============================================

    def _validate(self, sql: str) -> ValidatedSql:
        outcome = validate_sql(sql, row_limit=self.settings.DEFAULT_ROW_LIMIT)
        if isinstance(outcome, Rejected):
            raise ValidationRejected(outcome.reason)
        return outcome

    def _executor(self, client: httpx.Client) -> QueryExecutor:
        return QueryExecutor(self.settings, client, sleep=self.sleep)
