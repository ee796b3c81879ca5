"""Pydantic schemas for rows exchanged with the record store.

These mirror the three tables the scraper touches: ``vendors``,
``vendor_urls`` and ``product_prices``. Identifiers are kept exactly as the
store returns them so they can be written back unchanged.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordId = Union[int, str]


class Vendor(BaseModel):
    """A vendor registry entry. Extra columns are kept but never interpreted."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: RecordId
    name: str = ""


class VendorURLTask(BaseModel):
    """One product page to scrape, as listed in ``vendor_urls``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., min_length=1)
    vendor_id: RecordId
    product_id: RecordId

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Unsupported URL scheme: {value!r}")
        return value


class PriceRecord(BaseModel):
    """Append-only price observation written after a successful scrape."""

    model_config = ConfigDict(frozen=True)

    product_id: RecordId
    vendor_id: RecordId
    price: Decimal = Field(..., ge=0)
    availability: bool
    scraped_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_row(self) -> dict:
        """Serialize for a JSON insert (price as a number, timestamp as ISO-8601)."""
        return {
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "price": float(self.price),
            "availability": self.availability,
            "scraped_at": self.scraped_at.isoformat(),
        }
