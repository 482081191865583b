"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ReportRequestBody(BaseModel):
    """Request body for POST /v1/report"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    timeframe: str = Field("30d", description="Lookback window: <n>d, <n>m, <n>y or all")
    include_detailed: bool = Field(True, description="Include cadence, recurring, travel and rules sections")
    format: str = Field("json", description="json, html or pdf; anything else renders as json")


class StatementReportRequest(BaseModel):
    """Request body for POST /v1/report/statement"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    statement_data: Dict[str, Any] = Field(..., description="Accounts, transactions and optional date range")
    timeframe: str = "30d"
    include_detailed: bool = True
    format: str = "json"


class BulkReportRequest(BaseModel):
    """Request body for POST /v1/reports/bulk"""

    user_ids: List[str] = Field(..., min_length=1, description="Users to generate reports for")
    timeframe: str = "30d"
    include_detailed: bool = True


class BulkItemSchema(BaseModel):
    """Outcome for a single user in a bulk run"""

    user_id: str
    success: bool
    error: Optional[str] = None


class BulkReportResponse(BaseModel):
    """Response for POST /v1/reports/bulk"""

    total: int
    successful: int
    failed: int
    results: List[BulkItemSchema]


class CacheStatsResponse(BaseModel):
    """Response for GET /v1/report/cache"""

    size: int
    max_size: int
    ttl_seconds: float
    hits: int
    misses: int
    total_access: int
    oldest_entry_age_seconds: float
    newest_entry_age_seconds: float


class CacheClearResponse(BaseModel):
    """Response for DELETE /v1/report/cache"""

    cleared: int
