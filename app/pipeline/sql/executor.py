"""
SQL Executor
Runs validated statements against the warehouse

Per-request state machine:
START → AUTHENTICATED → SUBMITTED → SYNC_COMPLETE → NORMALIZED
                                  ↘ ASYNC_PENDING → POLLING → POLL_COMPLETE → NORMALIZED
                                                             ↘ POLL_TIMEOUT
any state → ABORTED
"""
import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from app.core.config import Settings
from app.core.errors import AuthFailure, ExecutionFailure, PollTimeout
from app.dtos.query import ValidatedSql, ResultSet
from app.dtos.query.execution import (
    CredentialKind,
    ExecutionHandle,
    ExecutionResult,
    ExecutionState,
    WarehouseCredential,
)
from app.pipeline.sql.normalizer import build_result_set
from app.pipeline.warehouse.auth import CredentialProvider, build_providers

logger = logging.getLogger(__name__)

STATEMENTS_PATH = "/api/v2/statements"
QUERY_REQUEST_PATH = "/queries/v1/query-request"

# Session API codes meaning "still executing"
_SESSION_IN_PROGRESS_CODES = {"333333", "333334"}

_TRANSITIONS = {
    ExecutionState.START: {ExecutionState.AUTHENTICATED},
    ExecutionState.AUTHENTICATED: {ExecutionState.SUBMITTED},
    ExecutionState.SUBMITTED: {ExecutionState.SYNC_COMPLETE, ExecutionState.ASYNC_PENDING},
    ExecutionState.ASYNC_PENDING: {ExecutionState.POLLING},
    ExecutionState.POLLING: {ExecutionState.POLLING, ExecutionState.POLL_COMPLETE, ExecutionState.POLL_TIMEOUT},
    ExecutionState.SYNC_COMPLETE: {ExecutionState.NORMALIZED},
    ExecutionState.POLL_COMPLETE: {ExecutionState.NORMALIZED},
    ExecutionState.POLL_TIMEOUT: set(),
    ExecutionState.ABORTED: set(),
    ExecutionState.NORMALIZED: set(),
}


class StatementRun:
    """State of one statement execution attempt"""

    def __init__(self, sql: str):
        self.sql = sql
        self.state = ExecutionState.START
        self.handle: Optional[ExecutionHandle] = None
        self.poll_attempts = 0

    def advance(self, new_state: ExecutionState) -> None:
        if new_state is not ExecutionState.ABORTED and new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal executor transition {self.state.value} → {new_state.value}")
        if new_state is not self.state:
            logger.debug(f"Executor: {self.state.value} → {new_state.value}")
        self.state = new_state


class QueryExecutor:
    """
    Executes ValidatedSql with the configured credential strategies

    The first strategy is primary; if it fails outright (auth or execution)
    the next one is tried exactly once.

    Example:
        with httpx.Client() as client:
            executor = QueryExecutor(settings, client)
            result = executor.execute(validated)
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.Client,
        providers: Optional[List[CredentialProvider]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.client = client
        self.providers = build_providers(settings) if providers is None else providers
        self.sleep = sleep

    # ============================================
    # ENTRY POINT
    # ============================================

    def execute(self, validated: ValidatedSql, timeout: Optional[int] = None) -> ExecutionResult:
        """
        Execute a validated statement

        Args:
            validated: Output of the SQL security validator
            timeout: Requested statement timeout in seconds (clamped to the configured max)

        Returns:
            ExecutionResult with the normalized ResultSet

        Raises:
            TypeError: statement did not come from the validator
            AuthFailure: no strategy could authenticate
            ExecutionFailure: warehouse rejected the statement on every strategy tried
            PollTimeout: asynchronous statement still running after the polling ceiling
        """
        if not isinstance(validated, ValidatedSql) or not validated.is_validated:
            raise TypeError("QueryExecutor only accepts ValidatedSql from the SQL security validator")

        if not self.providers:
            raise AuthFailure(error="Snowflake credentials not configured")

        statement_timeout = self._statement_timeout(timeout)
        attempts = self.providers[:2]
        errors: List[Exception] = []

        for index, provider in enumerate(attempts):
            if index > 0:
                logger.info(f"Snowflake: falling back to {provider.name} authentication")
            run = StatementRun(validated.sql)
            try:
                credential = provider.authenticate(self.client)
                run.advance(ExecutionState.AUTHENTICATED)
                return self._run(run, credential, statement_timeout)
            except (AuthFailure, ExecutionFailure) as e:
                run.advance(ExecutionState.ABORTED)
                logger.warning(f"Snowflake {provider.name} path failed: {e}")
                errors.append(e)

        if all(isinstance(e, AuthFailure) for e in errors):
            last = errors[-1]
            raise AuthFailure(error=last.error, details=last.details)

        last_execution = [e for e in errors if isinstance(e, ExecutionFailure)][-1]
        raise ExecutionFailure(details=last_execution.details, sql=validated.sql)

    def _statement_timeout(self, requested: Optional[int]) -> int:
        ceiling = self.settings.SNOWFLAKE_STATEMENT_TIMEOUT
        if not requested or requested <= 0:
            return ceiling
        return min(int(requested), ceiling)

    def _run(self, run: StatementRun, credential: WarehouseCredential, statement_timeout: int) -> ExecutionResult:
        if credential.kind is CredentialKind.KEYPAIR_JWT:
            result_set = self._run_statement_api(run, credential, statement_timeout)
        else:
            result_set = self._run_session_query(run, credential, statement_timeout)

        run.advance(ExecutionState.NORMALIZED)
        logger.info(f"Snowflake returned {result_set.row_count} rows")

        return ExecutionResult(
            sql=run.sql,
            result_set=result_set,
            state=run.state,
            credential_kind=credential.kind,
            statement_handle=run.handle.statement_handle if run.handle else None,
            poll_attempts=run.poll_attempts,
        )

    # ============================================
    # SQL API (key-pair JWT)
    # ============================================

    def _statement_headers(self, credential: WarehouseCredential) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {credential.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Snowflake-Authorization-Token-Type": "KEYPAIR_JWT",
        }

    def _run_statement_api(self, run: StatementRun, credential: WarehouseCredential, statement_timeout: int) -> ResultSet:
        s = self.settings
        url = f"{s.snowflake_base_url}{STATEMENTS_PATH}"
        body: Dict[str, Any] = {
            "statement": run.sql,
            "timeout": statement_timeout,
            "database": s.SNOWFLAKE_DATABASE,
            "schema": s.SNOWFLAKE_SCHEMA,
            "warehouse": s.SNOWFLAKE_WAREHOUSE,
        }
        if s.SNOWFLAKE_ROLE:
            body["role"] = s.SNOWFLAKE_ROLE

        logger.info("Snowflake: executing validated query via SQL API")
        data = self._request("POST", url, self._statement_headers(credential), body)
        run.advance(ExecutionState.SUBMITTED)

        if isinstance(data.get("data"), list):
            run.advance(ExecutionState.SYNC_COMPLETE)
            return self._statement_api_result(data)

        if data.get("statementHandle"):
            handle = ExecutionHandle(
                statement_handle=data["statementHandle"],
                status_url=self._status_url(data.get("statementStatusUrl"), f"{STATEMENTS_PATH}/{data['statementHandle']}"),
            )
            logger.info(f"Query submitted, statement handle: {handle.statement_handle}")
            run.handle = handle
            run.advance(ExecutionState.ASYNC_PENDING)
            return self._poll(run, self._statement_headers(credential), self._statement_api_poll)

        raise ExecutionFailure(details=data.get("message") or "Unexpected Snowflake response")

    @staticmethod
    def _statement_api_result(data: Dict[str, Any]) -> ResultSet:
        meta = data.get("resultSetMetaData") or {}
        return build_result_set(meta.get("rowType"), data.get("data"), meta.get("numRows"))

    def _statement_api_poll(self, response: httpx.Response) -> Optional[ResultSet]:
        """None while the statement is still running"""
        if response.status_code == 202:
            return None
        data = self._json(response)
        if isinstance(data.get("data"), list):
            return self._statement_api_result(data)
        if data.get("statementStatusUrl") or data.get("statementHandle"):
            return None
        raise ExecutionFailure(details=data.get("message") or "Unexpected Snowflake status response")

    # ============================================
    # Session API (login token)
    # ============================================

    def _session_headers(self, credential: WarehouseCredential) -> Dict[str, str]:
        return {
            "Authorization": f'Snowflake Token="{credential.token}"',
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _run_session_query(self, run: StatementRun, credential: WarehouseCredential, statement_timeout: int) -> ResultSet:
        s = self.settings
        url = f"{s.snowflake_base_url}{QUERY_REQUEST_PATH}?requestId={uuid.uuid4()}"
        body = {
            "sqlText": run.sql,
            "asyncExec": False,
            "sequenceId": 1,
            "querySubmissionTime": int(time.time() * 1000),
            "parameters": {"STATEMENT_TIMEOUT_IN_SECONDS": statement_timeout},
        }

        logger.info("Snowflake: executing validated query with session token")
        data = self._request("POST", url, self._session_headers(credential), body)
        run.advance(ExecutionState.SUBMITTED)

        result = self._session_result(data)
        if result is not None:
            run.advance(ExecutionState.SYNC_COMPLETE)
            return result

        payload = data.get("data") or {}
        query_id = payload.get("queryId") or "unknown"
        run.handle = ExecutionHandle(
            statement_handle=query_id,
            status_url=self._status_url(payload.get("getResultUrl"), f"/queries/{query_id}/result"),
        )
        logger.info(f"Query still running, query id: {query_id}")
        run.advance(ExecutionState.ASYNC_PENDING)
        return self._poll(run, self._session_headers(credential), self._session_poll)

    @staticmethod
    def _session_result(data: Dict[str, Any]) -> Optional[ResultSet]:
        """ResultSet, None while running, ExecutionFailure on error"""
        if str(data.get("code")) in _SESSION_IN_PROGRESS_CODES:
            return None
        if data.get("success") is False:
            raise ExecutionFailure(details=data.get("message") or "Snowflake query failed")
        payload = data.get("data") or {}
        return build_result_set(payload.get("rowtype"), payload.get("rowset"), payload.get("total"))

    def _session_poll(self, response: httpx.Response) -> Optional[ResultSet]:
        return self._session_result(self._json(response))

    # ============================================
    # POLLING
    # ============================================

    def _poll(
        self,
        run: StatementRun,
        headers: Dict[str, str],
        interpret: Callable[[httpx.Response], Optional[ResultSet]],
    ) -> ResultSet:
        """
        Poll the status URL at a fixed interval, bounded by the attempt ceiling

        Raises:
            ExecutionFailure: a poll failed outright (aborts)
            PollTimeout: ceiling reached while still running
        """
        interval = self.settings.SNOWFLAKE_POLL_INTERVAL_SECONDS
        max_attempts = self.settings.SNOWFLAKE_POLL_MAX_ATTEMPTS
        run.advance(ExecutionState.POLLING)

        while run.poll_attempts < max_attempts:
            self.sleep(interval)
            run.poll_attempts += 1

            try:
                response = self.client.get(run.handle.status_url, headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"Status check failed: {e}")
                raise ExecutionFailure(details=str(e)) from e

            if not response.is_success:
                logger.error(f"Status check failed: {response.status_code}")
                raise ExecutionFailure(details=response.text)

            result = interpret(response)
            if result is not None:
                run.advance(ExecutionState.POLL_COMPLETE)
                return result

            logger.info(f"Query still running... (poll {run.poll_attempts}/{max_attempts})")
            run.advance(ExecutionState.POLLING)

        run.advance(ExecutionState.POLL_TIMEOUT)
        logger.warning(f"Statement {run.handle.statement_handle} still running after {max_attempts} polls")
        raise PollTimeout(run.handle.statement_handle, max_attempts)

    # ============================================
    # HTTP HELPERS
    # ============================================

    def _status_url(self, reported: Optional[str], fallback_path: str) -> str:
        base = f"{self.settings.snowflake_base_url}/"
        fallback = urljoin(base, fallback_path)
        if not reported:
            return fallback

        url = urljoin(base, reported)
        if urlsplit(url)[:2] != urlsplit(base)[:2]:
            # The bearer token is only ever sent to the configured account host
            logger.warning(f"Ignoring status URL on foreign host {urlsplit(url).netloc}")
            return fallback
        return url

    def _request(self, method: str, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Snowflake request failed: {e}")
            raise ExecutionFailure(details=str(e)) from e

        logger.info(f"Snowflake: Response status: {response.status_code}")
        if not response.is_success:
            logger.error(f"Snowflake API error: {response.status_code}")
            raise ExecutionFailure(details=response.text)

        return self._json(response)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ExecutionFailure(details="Failed to parse Snowflake response") from e
        if not isinstance(data, dict):
            raise ExecutionFailure(details="Failed to parse Snowflake response")
        return data
