"""Supabase (PostgREST) record store over httpx."""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from pricewatch.core.exceptions import RecordStoreError
from pricewatch.schemas import PriceRecord, Vendor, VendorURLTask
from pricewatch.scrapers.utils.retry import http_retry
from pricewatch.stores.base import RecordStore, parse_tasks, parse_vendors

logger = structlog.get_logger(__name__)


class SupabaseRecordStore(RecordStore):
    """Reads and appends rows through the Supabase REST API.

    Tables: ``vendors``, ``vendor_urls`` (read) and ``product_prices``
    (insert only).
    """

    VENDORS_TABLE = "vendors"
    TASKS_TABLE = "vendor_urls"
    PRICES_TABLE = "product_prices"

    def __init__(
        self,
        url: str,
        key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """Initialize the store.

        Args:
            url: Supabase project URL (e.g. https://xyz.supabase.co)
            key: Service or anon API key
            http_client: Shared client; one is created (and owned) if omitted
            timeout: Request timeout in seconds for an owned client
        """
        self._rest_url = url.rstrip("/") + "/rest/v1"
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self.logger = logger.bind(store="supabase")

    async def fetch_vendors(self) -> List[Vendor]:
        rows = await self._select(self.VENDORS_TABLE)
        vendors = parse_vendors(rows)
        self.logger.info("vendors_loaded", count=len(vendors))
        return vendors

    async def fetch_tasks(self) -> List[VendorURLTask]:
        rows = await self._select(self.TASKS_TABLE)
        tasks = parse_tasks(rows)
        self.logger.info("tasks_loaded", count=len(tasks), rows=len(rows))
        return tasks

    async def append_price(self, record: PriceRecord) -> None:
        try:
            await self._insert(self.PRICES_TABLE, record.to_row())
        except httpx.HTTPError as e:
            raise RecordStoreError(f"insert into {self.PRICES_TABLE}", _describe(e)) from e

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _select(self, table: str) -> List[Dict[str, Any]]:
        try:
            rows = await self._get_rows(table)
        except httpx.HTTPError as e:
            raise RecordStoreError(f"read of {table}", _describe(e)) from e
        except ValueError as e:
            raise RecordStoreError(f"read of {table}", f"invalid JSON: {e}") from e

        if not isinstance(rows, list):
            raise RecordStoreError(f"read of {table}", "expected a JSON array")
        return rows

    @http_retry
    async def _get_rows(self, table: str) -> Any:
        response = await self._client.get(
            f"{self._rest_url}/{table}",
            params={"select": "*"},
            headers=self._headers,
        )
        response.raise_for_status()
        return response.json()

    @http_retry
    async def _insert(self, table: str, row: Dict[str, Any]) -> None:
        response = await self._client.post(
            f"{self._rest_url}/{table}",
            json=row,
            headers={**self._headers, "Prefer": "return=minimal"},
        )
        response.raise_for_status()


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}: {exc.response.text[:300]}"
    return str(exc) or type(exc).__name__
