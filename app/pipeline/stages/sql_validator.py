"""
Stage 3: SQL Validation
Security policy applied to every statement before it reaches the warehouse

Pattern-matching heuristics, not a SQL parser. The statement-kind check and the
table allow-list carry the weight; the complexity ceiling and the injection
patterns are defense in depth. A grammar-based validator can replace this module
as long as it keeps the validate_sql() contract.
"""
import logging
import re
from typing import Union

from app.dtos.query import ValidatedSql, Rejected
from app.dtos.query.validation import _issue_validated

logger = logging.getLogger(__name__)


BLOCKED_KEYWORDS = [
    "INSERT", "UPDATE", "DELETE", "DROP", "CREATE", "ALTER", "TRUNCATE",
    "EXEC", "EXECUTE", "GRANT", "REVOKE", "MERGE", "CALL",
]

ALLOWED_TABLES = [
    "FINANCIAL_TRANSACTIONS",
    "FINANCIAL_REPORTS",
    "MEDICAL_RECORDS",
    "MEDICAL_REPORTS",
]

# Open-parenthesis count, a proxy for nested subquery depth
MAX_PARENTHESES = 5

INJECTION_PATTERNS = [
    re.compile(r"--"),                  # line comments
    re.compile(r"/\*"),                 # block comments
    re.compile(r";\s*SELECT", re.I),    # chained statements
    re.compile(r"UNION\s+ALL", re.I),   # UNION ALL exfiltration (plain UNION allowed)
    re.compile(r"\bOR\s+1\s*=\s*1", re.I),
    re.compile(r"\bAND\s+1\s*=\s*1", re.I),
]

DEFAULT_ROW_LIMIT = 100

_BLOCKED_RES = [(kw, re.compile(rf"\b{kw}\b", re.I)) for kw in BLOCKED_KEYWORDS]

_COMMENT = re.compile(r"--[^\n]*|/\*.*?\*/", re.S)
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")

# FROM inside these is not a table reference: EXTRACT(YEAR FROM d), IS DISTINCT FROM x
_NON_TABLE_FROM = re.compile(
    r"\b(?:EXTRACT|TRIM|SUBSTRING|POSITION|OVERLAY)\s*\([^()]*\)|\bDISTINCT\s+FROM\b",
    re.I
)

_SOURCE_START = re.compile(r"\b(?:FROM|JOIN)\b", re.I)

# Clause keywords closing a FROM/JOIN source list
_SOURCE_END = re.compile(
    r"(?:WHERE|GROUP|ORDER|HAVING|QUALIFY|LIMIT|OFFSET|FETCH|UNION|EXCEPT|MINUS|INTERSECT|WINDOW"
    r"|JOIN|INNER|LEFT|RIGHT|FULL|CROSS|NATURAL|ON|USING)\b",
    re.I
)

_IDENT = r'(?:"[^"]+"|`[^`]+`|[A-Za-z_][A-Za-z0-9_$]*)'

# db.schema."TABLE" [AS] alias
_SOURCE_ITEM = re.compile(rf"^((?:{_IDENT}\.){{0,2}}({_IDENT}))(?:\s+(?:AS\s+)?{_IDENT})?$", re.I)
_SUBQUERY = re.compile(r"^\(\s*SELECT\b", re.I)

# LIMIT n [OFFSET m] closing the statement
_TRAILING_LIMIT = re.compile(r"\bLIMIT\s+\d+(?:\s+OFFSET\s+\d+)?\s*$", re.I)


def validate_sql(sql: str, row_limit: int = DEFAULT_ROW_LIMIT) -> Union[ValidatedSql, Rejected]:
    """
    Validate a statement against the security policy

    Checks, in order, stopping at the first failure:
    1. Starts with SELECT
    2. No blocked keyword as a whole word
    3. References allow-listed tables only (and at least one)
    4. Parenthesis count within MAX_PARENTHESES
    5. No injection pattern

    On success the row cap is applied (once) and a ValidatedSql is returned.

    Args:
        sql: Candidate statement
        row_limit: Cap appended when the statement has no trailing LIMIT

    Returns:
        ValidatedSql, or Rejected with a reason safe to show the user
    """
    rejection = _check_policy(sql or "")
    if rejection:
        logger.warning(f"SQL validation failed: {rejection}")
        return Rejected(reason=rejection)

    limited, applied = apply_row_limit(sql, row_limit)
    return _issue_validated(sql=limited, original_sql=sql, limit_applied=applied)


def _check_policy(sql: str) -> str | None:
    sql_upper = sql.upper().strip()

    # 1. Only read queries
    if not sql_upper.startswith("SELECT"):
        return "Only SELECT queries are allowed"

    # 2. Mutation / DDL / procedural keywords
    for keyword, pattern in _BLOCKED_RES:
        if pattern.search(sql):
            return f"{keyword} operations are not allowed"

    # 3. Allow-listed tables, every source of every FROM/JOIN
    tables = []
    for item in _source_items(sql):
        if _SUBQUERY.match(item):
            continue
        match = _SOURCE_ITEM.match(item)
        if not match or match.group(2).strip('`"').upper() not in ALLOWED_TABLES:
            return "Query must use approved tables only"
        tables.append(match.group(2))
    if not tables:
        return "Query must use approved tables only"

    # 4. Complexity
    if sql.count("(") > MAX_PARENTHESES:
        return "Query is too complex"

    # 5. Injection idioms, and anything chained after the statement
    for pattern in INJECTION_PATTERNS:
        if pattern.search(sql):
            return "Query contains disallowed pattern"
    if ";" in _STRING_LITERAL.sub("''", _strip_terminator(sql)):
        return "Query contains disallowed pattern"

    return None


def _source_items(sql: str) -> list[str]:
    """
    Every element of every FROM/JOIN source list

    "FROM A a, B.C JOIN (SELECT ...) s ON ..." → ["A a", "B.C", "(SELECT ...) s", ...]
    Comments and string literals are blanked first; FROM inside a subquery
    yields its own list.
    """
    text = _NON_TABLE_FROM.sub(" ", _STRING_LITERAL.sub("''", _COMMENT.sub(" ", sql)))
    items = []

    for match in _SOURCE_START.finditer(text):
        start = pos = match.end()
        depth = 0
        while pos < len(text):
            ch = text[pos]
            if ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    break
                depth -= 1
            elif depth == 0:
                if ch == ";":
                    break
                at_word_start = not (text[pos - 1].isalnum() or text[pos - 1] in "_$")
                if at_word_start and _SOURCE_END.match(text, pos):
                    break
            pos += 1
        items.extend(part.strip() for part in _split_top_level(text[start:pos]))

    return items


def _split_top_level(segment: str) -> list[str]:
    parts, depth, current = [], 0, []
    for ch in segment:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _strip_terminator(sql: str) -> str:
    return re.sub(r"[;\s]+$", "", sql.strip())


def apply_row_limit(sql: str, row_limit: int = DEFAULT_ROW_LIMIT) -> tuple[str, bool]:
    """
    Append LIMIT unless the statement already ends with one

    Only a LIMIT closing the statement counts: a LIMIT inside a subquery
    or a string literal does not lift the cap.

    Returns:
        (statement, whether a limit was appended)
    """
    statement = _strip_terminator(sql)

    if _TRAILING_LIMIT.search(statement):
        return statement, False

    return f"{statement} LIMIT {row_limit}", True
