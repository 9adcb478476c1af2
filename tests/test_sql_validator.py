from __future__ import annotations

import pytest

from app.dtos.query import Rejected, ValidatedSql
from app.pipeline.stages.sql_validator import apply_row_limit, validate_sql


def _rejection(sql: str) -> str:
    outcome = validate_sql(sql)
    assert isinstance(outcome, Rejected), f"expected rejection for {sql!r}"
    return outcome.reason


@pytest.mark.parametrize("sql", [
    "DELETE FROM FINANCIAL_TRANSACTIONS",
    "  with t as (select 1) select * from FINANCIAL_TRANSACTIONS",
    "DROP TABLE FINANCIAL_TRANSACTIONS",
    "",
    "SHOW TABLES",
])
def test_non_select_rejected(sql):
    assert _rejection(sql) == "Only SELECT queries are allowed"


def test_leading_whitespace_and_case_ignored():
    outcome = validate_sql("   select * from financial_transactions")
    assert isinstance(outcome, ValidatedSql)


@pytest.mark.parametrize("sql,keyword", [
    ("SELECT * FROM FINANCIAL_TRANSACTIONS; DROP TABLE FINANCIAL_REPORTS", "DROP"),
    ("SELECT * FROM FINANCIAL_TRANSACTIONS WHERE update_flag = 1 OR TRUNCATE", "TRUNCATE"),
    ("SELECT * FROM MEDICAL_RECORDS WHERE x = (CALL proc())", "CALL"),
    ("select grant from MEDICAL_REPORTS", "GRANT"),
])
def test_blocked_keyword_rejected(sql, keyword):
    assert _rejection(sql) == f"{keyword} operations are not allowed"


@pytest.mark.parametrize("sql", [
    "SELECT DROPDOWN_FLAG FROM FINANCIAL_TRANSACTIONS",
    "SELECT UPDATED_AT, CREATED_BY FROM FINANCIAL_TRANSACTIONS",
    "SELECT * FROM MEDICAL_RECORDS WHERE DELETED_FLAG = 0",
])
def test_keyword_inside_identifier_allowed(sql):
    assert isinstance(validate_sql(sql), ValidatedSql)


@pytest.mark.parametrize("sql", [
    "SELECT * FROM USERS",
    "SELECT 1",
    "SELECT * FROM FINANCIAL_TRANSACTIONS t JOIN USERS u ON u.id = t.user_id",
    "SELECT * FROM SECRET_DB.PUBLIC.PAYROLL WHERE note = 'FINANCIAL_REPORTS'",
    "SELECT * FROM FINANCIAL_TRANSACTIONS, SNOWFLAKE.ACCOUNT_USAGE.LOGIN_HISTORY",
    "SELECT * FROM FINANCIAL_TRANSACTIONS t, USERS u WHERE t.USER_ID = u.ID",
    "SELECT $1 AS FINANCIAL_TRANSACTIONS FROM @SECRET_STAGE",
    "SELECT 'FINANCIAL_REPORTS' FROM 'FINANCIAL_REPORTS'",
    "SELECT * FROM TABLE(RESULT_SCAN(LAST_QUERY_ID()))",
    "SELECT * FROM (VALUES (1)) v",
    "SELECT * FROM (SELECT * FROM USERS) u JOIN FINANCIAL_TRANSACTIONS t ON t.ID = u.ID",
])
def test_unapproved_tables_rejected(sql):
    assert _rejection(sql) == "Query must use approved tables only"


@pytest.mark.parametrize("sql", [
    "SELECT * FROM FINANCIAL_DEMO.PUBLIC.MEDICAL_RECORDS",
    'SELECT * FROM "FINANCIAL_DEMO"."PUBLIC"."FINANCIAL_REPORTS"',
    "SELECT r.* FROM MEDICAL_REPORTS r JOIN MEDICAL_RECORDS m ON m.ID = r.RECORD_ID",
    "SELECT EXTRACT(YEAR FROM TXN_DATE) AS Y, COUNT(*) FROM FINANCIAL_TRANSACTIONS GROUP BY 1",
    "SELECT * FROM FINANCIAL_TRANSACTIONS WHERE A IS DISTINCT FROM B",
    "SELECT * FROM FINANCIAL_TRANSACTIONS t, FINANCIAL_REPORTS r WHERE t.ID = r.ID",
    "SELECT * FROM FINANCIAL_TRANSACTIONS AS t LEFT JOIN MEDICAL_RECORDS m ON m.ID = t.ID",
    "SELECT * FROM MEDICAL_RECORDS WHERE NOTE = 'a; b from x'",
])
def test_approved_table_forms_accepted(sql):
    assert isinstance(validate_sql(sql), ValidatedSql)


def test_parenthesis_ceiling():
    five = "SELECT COUNT(a), SUM(b), AVG(c), MIN(d), MAX(e) FROM FINANCIAL_TRANSACTIONS"
    six = "SELECT COUNT(a), SUM(b), AVG(c), MIN(d), MAX(e), COUNT(f) FROM FINANCIAL_TRANSACTIONS"

    assert isinstance(validate_sql(five), ValidatedSql)
    assert _rejection(six) == "Query is too complex"


@pytest.mark.parametrize("sql", [
    "SELECT * FROM FINANCIAL_TRANSACTIONS -- trailing comment",
    "SELECT * /* hidden */ FROM FINANCIAL_TRANSACTIONS",
    "SELECT * FROM FINANCIAL_TRANSACTIONS; SELECT * FROM MEDICAL_RECORDS",
    "SELECT A FROM FINANCIAL_TRANSACTIONS UNION ALL SELECT A FROM FINANCIAL_REPORTS",
    "SELECT * FROM MEDICAL_RECORDS WHERE ID = 7 OR 1=1",
    "SELECT * FROM MEDICAL_RECORDS WHERE ID = 7 and 1 = 1",
])
def test_injection_patterns_rejected(sql):
    assert _rejection(sql) == "Query contains disallowed pattern"


@pytest.mark.parametrize("sql", [
    "SELECT * FROM FINANCIAL_TRANSACTIONS; SHOW GRANTS",
    "SELECT * FROM FINANCIAL_TRANSACTIONS;USE ROLE ACCOUNTADMIN;",
])
def test_chained_statement_rejected(sql):
    assert _rejection(sql) == "Query contains disallowed pattern"


def test_plain_union_allowed():
    sql = "SELECT A FROM FINANCIAL_TRANSACTIONS UNION SELECT A FROM FINANCIAL_REPORTS"
    assert isinstance(validate_sql(sql), ValidatedSql)


def test_checks_run_in_order():
    # Non-SELECT wins over everything else
    assert _rejection("DROP TABLE USERS -- x") == "Only SELECT queries are allowed"
    # Blocked keyword wins over the table allow-list
    assert _rejection("SELECT * FROM USERS; DELETE FROM USERS") == "DELETE operations are not allowed"


# ============================================
# ROW CAP
# ============================================

def test_limit_appended_once():
    outcome = validate_sql("SELECT * FROM FINANCIAL_TRANSACTIONS")

    assert isinstance(outcome, ValidatedSql)
    assert outcome.sql == "SELECT * FROM FINANCIAL_TRANSACTIONS LIMIT 100"
    assert outcome.original_sql == "SELECT * FROM FINANCIAL_TRANSACTIONS"
    assert outcome.limit_applied is True
    assert outcome.sql.upper().count("LIMIT") == 1


def test_configured_row_limit_used():
    outcome = validate_sql("SELECT * FROM FINANCIAL_REPORTS", row_limit=25)
    assert outcome.sql.endswith("LIMIT 25")


def test_existing_trailing_limit_kept():
    outcome = validate_sql("SELECT * FROM FINANCIAL_TRANSACTIONS LIMIT 10 OFFSET 20")

    assert outcome.sql == "SELECT * FROM FINANCIAL_TRANSACTIONS LIMIT 10 OFFSET 20"
    assert outcome.limit_applied is False


def test_trailing_semicolon_stripped_before_limit():
    outcome = validate_sql("SELECT * FROM FINANCIAL_TRANSACTIONS;\n")
    assert outcome.sql == "SELECT * FROM FINANCIAL_TRANSACTIONS LIMIT 100"


@pytest.mark.parametrize("sql", [
    "SELECT * FROM (SELECT * FROM FINANCIAL_TRANSACTIONS LIMIT 5) t",
    "SELECT * FROM FINANCIAL_TRANSACTIONS WHERE NOTE = 'LIMIT 5'",
])
def test_embedded_limit_does_not_lift_cap(sql):
    outcome = validate_sql(sql)
    assert outcome.limit_applied is True
    assert outcome.sql.endswith(" LIMIT 100")


def test_validation_is_idempotent():
    first = validate_sql("SELECT * FROM MEDICAL_REPORTS")
    second = validate_sql(first.sql)

    assert second.sql == first.sql
    assert second.limit_applied is False


def test_apply_row_limit_reports_whether_applied():
    assert apply_row_limit("SELECT 1 FROM MEDICAL_RECORDS", 5) == ("SELECT 1 FROM MEDICAL_RECORDS LIMIT 5", True)
    assert apply_row_limit("SELECT 1 FROM MEDICAL_RECORDS limit 3;", 5) == ("SELECT 1 FROM MEDICAL_RECORDS limit 3", False)


def test_validated_sql_cannot_be_built_directly():
    with pytest.raises(TypeError):
        ValidatedSql(sql="DROP TABLE X", original_sql="DROP TABLE X")
