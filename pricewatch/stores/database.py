"""SQLAlchemy record store, for self-hosted Postgres or local SQLite."""

from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pricewatch import models
from pricewatch.core.exceptions import RecordStoreError
from pricewatch.schemas import PriceRecord, Vendor, VendorURLTask
from pricewatch.scrapers.utils.retry import db_retry
from pricewatch.stores.base import RecordStore, parse_tasks

logger = structlog.get_logger(__name__)


class DatabaseRecordStore(RecordStore):
    """Record store backed by the ``vendors``, ``vendor_urls`` and
    ``product_prices`` tables. Each price record is its own transaction."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        """Initialize the store.

        Args:
            session_factory: Async session factory for database access
            engine: Engine to dispose on close (omit if owned elsewhere)
        """
        self.session_factory = session_factory
        self._engine = engine
        self.logger = logger.bind(store="database")

    async def create_schema(self) -> None:
        """Create missing tables."""
        if self._engine is None:
            raise RecordStoreError("schema creation", "no engine configured")
        async with self._engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)

    async def fetch_vendors(self) -> List[Vendor]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(models.Vendor).order_by(models.Vendor.id))
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise RecordStoreError("read of vendors", str(e)) from e

        vendors = [Vendor(id=row.id, name=row.name) for row in rows]
        self.logger.info("vendors_loaded", count=len(vendors))
        return vendors

    async def fetch_tasks(self) -> List[VendorURLTask]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(models.VendorURL).order_by(models.VendorURL.id))
                rows = [
                    {"url": row.url, "vendor_id": row.vendor_id, "product_id": row.product_id}
                    for row in result.scalars().all()
                ]
        except SQLAlchemyError as e:
            raise RecordStoreError("read of vendor_urls", str(e)) from e

        tasks = parse_tasks(rows)
        self.logger.info("tasks_loaded", count=len(tasks), rows=len(rows))
        return tasks

    async def append_price(self, record: PriceRecord) -> None:
        try:
            await self._insert(record)
        except SQLAlchemyError as e:
            raise RecordStoreError("insert into product_prices", str(e)) from e

    @db_retry
    async def _insert(self, record: PriceRecord) -> None:
        async with self.session_factory() as db:
            db.add(
                models.ProductPrice(
                    product_id=record.product_id,
                    vendor_id=record.vendor_id,
                    price=record.price,
                    availability=record.availability,
                    scraped_at=record.scraped_at,
                )
            )
            await db.commit()

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
