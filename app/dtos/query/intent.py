"""
Intent DTOs
"""
from enum import Enum
from typing import Literal, Union
from pydantic import BaseModel, ConfigDict


class DashboardKind(str, Enum):
    """Fixed dashboards a query can be routed to (value is the response tag)"""
    FINANCIAL = "powerbi_financial_dashboard"
    MEDICAL = "powerbi_medical_dashboard"
    PAYABLE = "genai_invoice_suite"
    RECEIVABLE = "genai_ar_suite"


DATA_QUERY_TAG = "snowflake_query"


class FixedDashboard(BaseModel):
    """
    Redirect to a canned dashboard
    Carries its summary; never produces SQL or results
    """
    model_config = ConfigDict(frozen=True)

    type: Literal["fixed_dashboard"] = "fixed_dashboard"
    kind: DashboardKind
    summary: str

    @property
    def tag(self) -> str:
        return self.kind.value


class DataQuery(BaseModel):
    """Ad hoc question answered from the warehouse"""
    model_config = ConfigDict(frozen=True)

    type: Literal["data_query"] = "data_query"

    @property
    def tag(self) -> str:
        return DATA_QUERY_TAG


Intent = Union[FixedDashboard, DataQuery]
