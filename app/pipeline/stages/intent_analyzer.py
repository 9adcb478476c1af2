"""
Stage 1: Intent Analysis
Routes a raw query to a fixed dashboard or to the data-query path
"""
import logging
from typing import List, Tuple

from app.dtos.query import Intent, FixedDashboard, DataQuery, DashboardKind

logger = logging.getLogger(__name__)


# Checked in this order; first match wins. Sets must stay disjoint.
DASHBOARD_KEYWORDS: List[Tuple[DashboardKind, Tuple[str, ...]]] = [
    (DashboardKind.FINANCIAL, (
        "financial dashboard", "finance dashboard", "financial analytics", "show financial",
    )),
    (DashboardKind.MEDICAL, (
        "medical dashboard", "healthcare dashboard", "medical analytics", "patient dashboard",
    )),
    (DashboardKind.PAYABLE, (
        "invoice", "accounts payable", "ap automation", "vendor payment",
    )),
    (DashboardKind.RECEIVABLE, (
        "receivable", "accounts receivable", "ar automation", "customer payment", "collections",
    )),
]

DASHBOARD_SUMMARIES = {
    DashboardKind.FINANCIAL: (
        "I'm loading your **Financial Analytics Dashboard** powered by Power BI. "
        "This dashboard provides real-time insights into your financial performance, "
        "including revenue trends, expense analysis, and key financial metrics."
    ),
    DashboardKind.MEDICAL: (
        "I'm loading your **Medical Analytics Dashboard** powered by Power BI. "
        "This dashboard provides comprehensive healthcare analytics including patient outcomes, "
        "treatment efficacy, and operational metrics."
    ),
    DashboardKind.PAYABLE: (
        "I'm loading your **Accounts Payable Automation Suite**. "
        "This intelligent dashboard helps you manage invoices, track approval workflows, "
        "and automate vendor payments."
    ),
    DashboardKind.RECEIVABLE: (
        "I'm loading your **Accounts Receivable Automation Suite**. "
        "This intelligent dashboard helps you track customer payments, manage collections, "
        "and optimize your receivables process."
    ),
}

# Deliberately permissive: a false positive only costs one completion call
DATA_REQUEST_KEYWORDS = (
    "show", "list", "get", "find", "how many", "count", "total", "sum", "average",
    "top", "bottom", "highest", "lowest", "transactions", "records", "data",
    "revenue", "sales", "expenses", "profit", "balance", "customers", "orders",
    "patients", "claims", "payments", "vendors", "amount", "compare", "comparison",
    "cost", "costs", "treatment", "medical", "financial", "report", "reports",
    "asthma", "arthritis", "diagnosis", "health", "what", "which", "query",
    "select", "table", "tables", "columns", "all", "give", "fetch", "display",
)


def classify_intent(text: str) -> Intent:
    """
    Classify a raw query

    Total and deterministic: every input yields exactly one intent.
    Dashboard keyword sets are tested in DASHBOARD_KEYWORDS order;
    no match means a data query.
    """
    normalized = (text or "").lower()

    for kind, keywords in DASHBOARD_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            logger.info(f"Intent: fixed dashboard {kind.value}")
            return FixedDashboard(kind=kind, summary=DASHBOARD_SUMMARIES[kind])

    logger.info("Intent: data query")
    return DataQuery()


def looks_like_data_request(text: str) -> bool:
    """Second-stage filter deciding whether SQL synthesis is worth attempting"""
    normalized = (text or "").lower()
    return any(keyword in normalized for keyword in DATA_REQUEST_KEYWORDS)
