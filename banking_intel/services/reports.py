"""Report service - cache lookup, snapshot fetch, synthesis and bulk fan-out"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from banking_intel.domain.exceptions import BankAPIError
from banking_intel.domain.models import Report, ReportRequest
from banking_intel.domain.report import ReportSynthesizer
from banking_intel.domain.timeframe import resolve_timeframe
from banking_intel.infrastructure.cache import ReportCache, report_cache_key
from banking_intel.infrastructure.clients.bank import BankClient
from banking_intel.infrastructure.observability.logging import log_report, log_report_requested
from banking_intel.infrastructure.observability.metrics import (
    bank_fetch_failures_counter,
    bulk_outcome_counter,
    cache_lookup_counter,
    record_report,
)
from banking_intel.utils.date_utils import utc_now


@dataclass(frozen=True)
class ReportResult:
    report: Report
    from_cache: bool
    generation_ms: float


@dataclass(frozen=True)
class BulkItem:
    user_id: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"user_id": self.user_id, "success": self.success}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class BulkReportResult:
    results: List[BulkItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for item in self.results if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "results": [item.to_dict() for item in self.results],
        }


class ReportService:
    """Coordinates the bank client, the cache and the synthesizer for one process"""

    def __init__(
        self,
        synthesizer: ReportSynthesizer,
        bank_client: BankClient,
        cache: Optional[ReportCache] = None,
        max_concurrency: int = 5,
    ):
        self.synthesizer = synthesizer
        self.bank_client = bank_client
        self.cache = cache
        self.max_concurrency = max(1, max_concurrency)

    async def generate(self, request: ReportRequest, now: Optional[datetime] = None) -> ReportResult:
        """
        Produce a report for one request.

        Flow:
        1. Serve from cache when the request is cacheable and fresh
        2. Fetch the account/transaction snapshot unless a statement was supplied
        3. Synthesize, then cache user reports (never statement reports)

        Raises:
            BankAPIError: snapshot fetch failed
            InsufficientDataError: nothing to analyze
            InvalidDateRangeError: statement range is inverted
        """
        start_time = time.time()
        request_id = request.request_id or f"rpt-{uuid.uuid4().hex[:12]}"
        request = replace(request, request_id=request_id)
        log_report_requested(
            request_id, request.user_id, request.timeframe, request.format.value, request.include_detailed
        )

        cacheable = self.cache is not None and request.statement_data is None
        key = report_cache_key(request.user_id, request.timeframe, request.include_detailed)

        if cacheable:
            cached = self.cache.get(key)
            cache_lookup_counter.labels(result="hit" if cached is not None else "miss").inc()
            if cached is not None:
                duration_ms = (time.time() - start_time) * 1000
                log_report(request_id, request.user_id, len(cached.sections), cached.fallback_count, duration_ms, True)
                return ReportResult(report=cached, from_cache=True, generation_ms=round(duration_ms, 2))

        now = now or utc_now()
        accounts = transactions = None
        if request.statement_data is None:
            date_range = resolve_timeframe(request.timeframe, now)
            try:
                accounts, transactions = await self.bank_client.get_snapshot(request.user_id, date_range)
            except BankAPIError as e:
                bank_fetch_failures_counter.inc()
                logging.error(
                    f"Bank API error: {e}",
                    extra={"request_id": request_id, "user_id": request.user_id, "step": "snapshot_fetch"},
                )
                raise

        report = await self.synthesizer.generate_report(request, accounts, transactions, now=now)

        if cacheable:
            self.cache.set(key, report)

        duration_ms = (time.time() - start_time) * 1000
        record_report(report, request.include_detailed)
        log_report(request_id, request.user_id, len(report.sections), report.fallback_count, duration_ms, False)
        return ReportResult(report=report, from_cache=False, generation_ms=round(duration_ms, 2))

    async def generate_bulk(
        self,
        user_ids: Sequence[str],
        timeframe: str = "30d",
        include_detailed: bool = True,
    ) -> BulkReportResult:
        """Generate one report per user; a failure for one user never affects the others"""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_one(user_id: str) -> BulkItem:
            async with semaphore:
                try:
                    await self.generate(
                        ReportRequest(user_id=user_id, timeframe=timeframe, include_detailed=include_detailed)
                    )
                except Exception as e:
                    bulk_outcome_counter.labels(outcome="failure").inc()
                    logging.warning(
                        f"Bulk report failed for user: {e}",
                        extra={"user_id": user_id, "step": "bulk_item", "error_type": type(e).__name__},
                    )
                    return BulkItem(user_id=user_id, success=False, error=str(e) or type(e).__name__)

                bulk_outcome_counter.labels(outcome="success").inc()
                return BulkItem(user_id=user_id, success=True)

        items = await asyncio.gather(*(run_one(user_id) for user_id in user_ids))
        result = BulkReportResult(results=list(items))

        logging.info(
            "Bulk report run completed",
            extra={
                "step": "bulk_complete",
                "total": result.total,
                "successful": result.successful,
                "failed": result.failed,
            },
        )
        return result
