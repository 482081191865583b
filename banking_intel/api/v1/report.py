"""Report endpoints - single user, uploaded statement, bulk and cache admin"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from banking_intel.api.v1.schemas import (
    BulkReportRequest,
    BulkReportResponse,
    CacheClearResponse,
    CacheStatsResponse,
    ReportRequestBody,
    StatementReportRequest,
)
from banking_intel.api.dependencies import get_report_cache, get_report_service, get_request_id
from banking_intel.domain.exceptions import BankAPIError, InsufficientDataError, InvalidDateRangeError
from banking_intel.domain.formatter import AVAILABLE_FORMATS, format_report, resolve_format
from banking_intel.domain.models import ReportFormat, ReportRequest
from banking_intel.infrastructure.cache import ReportCache
from banking_intel.services.reports import ReportResult, ReportService

router = APIRouter()


def _render(result: ReportResult, fmt: ReportFormat, request_id: str):
    """HTML is returned as a document; json and pdf as the envelope plus _metadata"""
    headers = {
        "X-Report-Source": "cache" if result.from_cache else "generated",
        "X-Report-ID": request_id,
    }
    envelope = format_report(result.report, fmt)

    if fmt is ReportFormat.HTML:
        return HTMLResponse(content=envelope["html_content"], headers=headers)

    body: Dict[str, Any] = {
        **envelope,
        "_metadata": {
            "from_cache": result.from_cache,
            "generation_ms": result.generation_ms,
            "available_formats": list(AVAILABLE_FORMATS),
        },
    }
    return JSONResponse(content=body, headers=headers)


async def _generate(service: ReportService, report_request: ReportRequest) -> ReportResult:
    request_id = report_request.request_id
    try:
        return await service.generate(report_request)

    except BankAPIError:
        raise HTTPException(status_code=503, detail="Bank service unavailable")

    except InvalidDateRangeError as e:
        logging.warning(f"Invalid date range: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except InsufficientDataError as e:
        logging.warning(f"Insufficient data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/report")
async def create_report(
    request_body: ReportRequestBody,
    request: Request,
    service: ReportService = Depends(get_report_service),
):
    """
    Generate a banking intelligence report for a user.

    Flow:
    1. Serve from cache when fresh
    2. Fetch account/transaction snapshot from bank API
    3. Run signal extractors and render sections
    4. Return json envelope, html document or pdf-pending envelope
    """
    request_id = get_request_id(request)
    fmt = resolve_format(request_body.format)

    result = await _generate(
        service,
        ReportRequest(
            user_id=request_body.user_id,
            timeframe=request_body.timeframe,
            request_id=request_id,
            include_detailed=request_body.include_detailed,
            format=fmt,
        ),
    )
    return _render(result, fmt, request_id)


@router.post("/report/statement")
async def create_statement_report(
    request_body: StatementReportRequest,
    request: Request,
    service: ReportService = Depends(get_report_service),
):
    """Generate a report from a caller-supplied statement; never cached"""
    request_id = get_request_id(request)
    fmt = resolve_format(request_body.format)

    result = await _generate(
        service,
        ReportRequest(
            user_id=request_body.user_id,
            timeframe=request_body.timeframe,
            request_id=request_id,
            include_detailed=request_body.include_detailed,
            format=fmt,
            statement_data=request_body.statement_data,
        ),
    )
    return _render(result, fmt, request_id)


@router.post("/reports/bulk", response_model=BulkReportResponse)
async def create_bulk_reports(
    request_body: BulkReportRequest,
    service: ReportService = Depends(get_report_service),
):
    """Generate reports for many users; per-user failures are reported, not raised"""
    result = await service.generate_bulk(
        request_body.user_ids,
        timeframe=request_body.timeframe,
        include_detailed=request_body.include_detailed,
    )
    return BulkReportResponse(**result.to_dict())


@router.get("/report/cache", response_model=CacheStatsResponse)
def get_cache_stats(cache: ReportCache = Depends(get_report_cache)):
    return CacheStatsResponse(**cache.stats())


@router.delete("/report/cache", response_model=CacheClearResponse)
def clear_cache(cache: ReportCache = Depends(get_report_cache)):
    return CacheClearResponse(cleared=cache.clear())
