"""Pytest fixtures for testing"""

import asyncio
import pytest
from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple
from fastapi.testclient import TestClient

from banking_intel.api.main import create_app
from banking_intel.api.dependencies import get_oracle, get_report_cache
from banking_intel.domain.exceptions import BankAPIError, OracleError
from banking_intel.infrastructure.cache import ReportCache

NOW = datetime(2024, 6, 30, 12, 0, 0)


class FakeOracle:
    """Oracle that always answers and records which sections it was asked for"""

    def __init__(self, text: str = "Generated analysis."):
        self.text = text
        self.calls: List[str] = []

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str:
        self.calls.append(section_kind)
        return f"{self.text} [{section_kind}]"


class FailingOracle:
    """Oracle whose every call fails"""

    def __init__(self):
        self.calls: List[str] = []

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str:
        self.calls.append(section_kind)
        raise OracleError("oracle unavailable")


class SelectiveOracle(FakeOracle):
    """Oracle that fails only for the given section kinds"""

    def __init__(self, failing_sections):
        super().__init__()
        self.failing_sections = set(failing_sections)

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str:
        if section_kind in self.failing_sections:
            self.calls.append(section_kind)
            raise RuntimeError(f"boom in {section_kind}")
        return await super().generate(prompt, request_id=request_id, section_kind=section_kind)


class SlowOracle:
    """Oracle that never answers within a short timeout"""

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str:
        await asyncio.sleep(5)
        return "too late"


class FakeBankClient:
    """Bank client serving one snapshot for every user except the failing ones"""

    def __init__(self, accounts, transactions, failing_users=()):
        self.accounts = accounts
        self.transactions = transactions
        self.failing_users = set(failing_users)
        self.calls: List[str] = []

    async def get_snapshot(self, user_id, date_range):
        self.calls.append(user_id)
        if user_id in self.failing_users:
            raise BankAPIError("Bank API error: 503")
        return self.accounts, self.transactions


def _txn(index: int, days_ago: int, description: str, amount: float, category: str, hour: int = 10, **extra) -> Dict[str, Any]:
    record = {
        "transactionId": f"txn_{index}",
        "accountId": "acc_checking",
        "date": (NOW - timedelta(days=days_ago)).replace(hour=hour).isoformat(),
        "description": description,
        "amount": amount,
        "category": category,
        "pending": False,
    }
    record.update(extra)
    return record


def build_demo_snapshot() -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """One checking account and 20 transactions spread over 90 days"""
    accounts = [
        {
            "accountId": "acc_checking",
            "name": "Everyday Checking",
            "type": "depository",
            "subtype": "checking",
            "balance": "4879.23",
            "availableBalance": 4800.00,
            "currency": "USD",
        }
    ]

    records = [
        (85, "PAYROLL DEPOSIT ACME CORP", 2650.25, "Income", {}),
        (55, "PAYROLL DEPOSIT ACME CORP", 2650.25, "Income", {}),
        (25, "PAYROLL DEPOSIT ACME CORP", 2650.25, "Income", {}),
        (60, "ACH RENT PAYMENT OAK APTS", -1950.00, "Housing", {}),
        (80, "NETFLIX.COM", -15.49, "Entertainment", {"merchantName": "Netflix"}),
        (50, "NETFLIX.COM", -15.49, "Entertainment", {"merchantName": "Netflix"}),
        (20, "NETFLIX.COM", -15.49, "Entertainment", {"merchantName": "Netflix"}),
        (70, "POS STARBUCKS #1234", -5.75, "Coffee Shops", {}),
        (45, "POS STARBUCKS #1234", -5.75, "Coffee Shops", {}),
        (30, "POS STARBUCKS #1234", -5.75, "Coffee Shops", {}),
        (10, "POS STARBUCKS #1234", -5.75, "Coffee Shops", {}),
        (75, "DEBIT WHOLE FOODS MARKET", -82.13, "Groceries", {}),
        (47, "DEBIT WHOLE FOODS MARKET", -95.40, "Groceries", {}),
        (17, "DEBIT WHOLE FOODS MARKET", -76.88, "Groceries", {}),
        (40, "DELTA AIRLINE TICKET", -420.00, "Travel", {}),
        (38, "MARRIOTT HOTEL CHICAGO", -310.00, "Travel", {}),
        (65, "SHELL GAS STATION", -45.00, "Gas", {}),
        (35, "SHELL GAS STATION", -45.00, "Gas", {}),
        (62, "AMAZON MKTPLACE", -34.99, "Shopping", {}),
        (32, "AMAZON MKTPLACE", -34.99, "Shopping", {}),
    ]
    transactions = [
        _txn(i, days_ago, description, amount, category, **extra)
        for i, (days_ago, description, amount, category, extra) in enumerate(records)
    ]
    return accounts, transactions


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def demo_snapshot() -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Demo account/transaction snapshot as raw upstream records"""
    return build_demo_snapshot()


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def failing_oracle() -> FailingOracle:
    return FailingOracle()


@pytest.fixture
def report_cache() -> ReportCache:
    return ReportCache(ttl_seconds=300, max_size=10)


@pytest.fixture
def client(fake_oracle: FakeOracle, report_cache: ReportCache) -> TestClient:
    """Create FastAPI test client with a fake oracle and an isolated cache"""
    app = create_app()
    app.dependency_overrides[get_oracle] = lambda: fake_oracle
    app.dependency_overrides[get_report_cache] = lambda: report_cache
    return TestClient(app)
