"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from banking_intel.config import settings
from banking_intel.domain.report import ReportSynthesizer, TextOracle
from banking_intel.infrastructure.cache import ReportCache
from banking_intel.infrastructure.clients.bank import BankClient
from banking_intel.infrastructure.clients.oracle import HttpTextOracle
from banking_intel.services.reports import ReportService

# One cache per process so entries survive across requests
_report_cache = ReportCache(
    ttl_seconds=settings.report_cache_ttl_seconds,
    max_size=settings.report_cache_max_size,
)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_bank_client() -> BankClient:
    """Provide Bank API client instance"""
    return BankClient()


def get_oracle() -> TextOracle:
    """Provide text-generation oracle instance"""
    return HttpTextOracle()


def get_report_cache() -> ReportCache:
    """Provide the process-wide report cache"""
    return _report_cache


def get_report_service(
    bank_client: BankClient = Depends(get_bank_client),
    oracle: TextOracle = Depends(get_oracle),
    cache: ReportCache = Depends(get_report_cache),
) -> ReportService:
    """Provide a report service wired to the injected collaborators"""
    return ReportService(
        synthesizer=ReportSynthesizer(oracle=oracle, oracle_timeout=settings.oracle_timeout_seconds),
        bank_client=bank_client,
        cache=cache,
        max_concurrency=settings.bulk_max_concurrency,
    )
