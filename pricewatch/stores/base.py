"""Record store interface.

The scraper only ever needs three things from persistence: the vendor
registry, the list of vendor URLs to scrape, and a way to append a price
observation. Implementations raise RecordStoreError for any I/O failure.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List

import structlog
from pydantic import ValidationError

from pricewatch.schemas import PriceRecord, Vendor, VendorURLTask

logger = structlog.get_logger(__name__)


class RecordStore(ABC):
    """Abstract base class for record stores."""

    @abstractmethod
    async def fetch_vendors(self) -> List[Vendor]:
        """Return the full vendor registry.

        Raises:
            RecordStoreError: If the registry cannot be read
        """
        pass

    @abstractmethod
    async def fetch_tasks(self) -> List[VendorURLTask]:
        """Return every vendor URL to scrape.

        Raises:
            RecordStoreError: If the task list cannot be read
        """
        pass

    @abstractmethod
    async def append_price(self, record: PriceRecord) -> None:
        """Insert one price record. Never updates existing rows.

        Raises:
            RecordStoreError: If the insert fails after retries
        """
        pass

    async def close(self) -> None:
        """Release connections held by the store."""

    async def __aenter__(self) -> "RecordStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def parse_vendors(rows: Iterable[dict]) -> List[Vendor]:
    """Validate vendor rows, dropping (and logging) malformed ones."""
    vendors = []
    for row in rows:
        try:
            vendors.append(Vendor.model_validate(row))
        except ValidationError as e:
            logger.warning("vendor_row_invalid", row=row, error=str(e))
    return vendors


def parse_tasks(rows: Iterable[dict]) -> List[VendorURLTask]:
    """Validate vendor URL rows, dropping (and logging) malformed ones."""
    tasks = []
    for row in rows:
        try:
            tasks.append(VendorURLTask.model_validate(row))
        except ValidationError as e:
            logger.warning("task_row_invalid", row=row, error=str(e))
    return tasks
