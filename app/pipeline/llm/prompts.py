"""
All LLM prompts consolidated in one place
"""
import json
from typing import Any, Dict, List, Optional

# Tables the synthesizer may use, with their purpose
SCHEMA_TABLES = [
    ("FINANCIAL_REPORTS", "Contains financial report data (reports, summaries, financial statements)"),
    ("FINANCIAL_TRANSACTIONS", "Contains all financial transactions (transaction records, amounts, dates, types)"),
    ("MEDICAL_RECORDS", "Contains patient medical records (patient data, treatments, diagnoses)"),
    ("MEDICAL_REPORTS", "Contains medical reports and analytics (healthcare metrics, outcomes)"),
]

SUMMARY_SAMPLE_ROWS = 10


# ============================================
# SCHEMA CONTEXT
# ============================================

def build_schema_context(database: str, schema: str, limit: int) -> str:
    """Fixed schema description handed to the SQL synthesizer"""
    tables = "\n".join(f"- {name} - {purpose}" for name, purpose in SCHEMA_TABLES)
    return f"""
You have access to a Snowflake data warehouse with the following schema:

Database: {database}
Schema: {schema}

Tables available:
{tables}

When generating SQL:
- Use proper Snowflake SQL syntax
- Always use fully qualified table names: {database}.{schema}.TABLE_NAME
- Limit results to {limit} rows unless user specifies otherwise
- Use appropriate aggregations and groupings
- Format dates properly
- Use SELECT * to explore table structure if unsure about columns
"""


# ============================================
# SQL GENERATION PROMPTS
# ============================================

def build_sql_generation_prompt(
    query: str,
    database: str,
    schema: str,
    limit: int
) -> list[dict]:
    """Build NL→SQL prompt"""
    system = f"""You are a SQL expert for Snowflake data warehouse. Generate ONLY the SQL query, no explanations.
{build_schema_context(database, schema, limit)}

Rules:
- Return ONLY the SQL query, nothing else
- Do not include markdown code blocks
- Ensure the query is valid Snowflake SQL
- Always limit to {limit} rows unless specified
- Use proper date formatting"""

    return [
        {"role": "system", "content": system},
        {"role": "user", "content": f"Generate a SQL query for: {query}"}
    ]


# ============================================
# SUMMARY PROMPTS
# ============================================

SUMMARY_SYSTEM_PROMPT = """You are an intelligent financial and data analytics assistant for SCODAC.

Your capabilities include:
- Answering questions about financial data and analytics
- Providing insights on accounts payable and receivable
- Explaining financial metrics and trends
- Summarizing query results in a clear, actionable way

When responding:
- Be concise but informative
- Use **bold** for important terms and numbers
- Format numbers with appropriate separators (e.g., $1,234,567.89)
- Provide actionable insights when possible
- If data was retrieved, summarize the key findings"""


def build_summary_prompt(
    query: str,
    sql: Optional[str],
    records: List[Dict[str, Any]]
) -> list[dict]:
    """
    Build the summary prompt

    Three shapes:
    1. Results retrieved → sample of the first rows
    2. SQL but no results → explain what the query would retrieve
    3. Neither → answer the raw query
    """
    if records:
        sample = json.dumps(records[:SUMMARY_SAMPLE_ROWS], indent=2, default=str)
        user = (
            f"User query: {query}\n\n"
            f"Data retrieved ({len(records)} rows):\n{sample}\n\n"
            f"Please summarize these results for the user."
        )
    elif sql:
        user = (
            f"User query: {query}\n\n"
            f"I generated this SQL query: {sql}\n\n"
            f"However, I couldn't retrieve results from the database at this time. "
            f"Please explain what data this query would retrieve and how it would answer the user's question."
        )
    else:
        user = query

    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": user}
    ]
