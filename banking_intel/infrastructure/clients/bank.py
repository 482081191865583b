"""Bank API HTTP client for fetching account and transaction snapshots"""

import httpx
from typing import Any, Dict, List, Tuple
from banking_intel.domain.models import DateRange
from banking_intel.domain.exceptions import BankAPIError
from banking_intel.config import settings


class BankClient:
    """Client for the external account/transaction snapshot API"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.bank_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_snapshot(
        self, user_id: str, date_range: DateRange
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Fetch raw accounts and transactions for a user within date_range.

        Records are returned as received; the normalizer coerces them.

        Raises:
            BankAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/bank/snapshot",
                    params={
                        "user_id": user_id,
                        "start_date": date_range.start_date.date().isoformat(),
                        "end_date": date_range.end_date.date().isoformat(),
                    },
                )
                response.raise_for_status()
                data = response.json()

                accounts = data.get("accounts") or []
                transactions = data.get("transactions") or []
                if not isinstance(accounts, list) or not isinstance(transactions, list):
                    raise TypeError("accounts and transactions must be lists")
                return accounts, transactions

            except httpx.TimeoutException as e:
                raise BankAPIError(f"Bank API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise BankAPIError(f"Bank API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise BankAPIError(f"Bank API unreachable: {e}") from e
            except (AttributeError, ValueError, TypeError) as e:
                raise BankAPIError(f"Invalid snapshot data from bank: {e}") from e
