"""Price history: one row per successful scrape."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from pricewatch.models.base import Base


class ProductPrice(Base):
    """Append-only price observation for a product at a vendor.

    Rows are never updated; the table is a time series per
    (product_id, vendor_id).
    """

    __tablename__ = "product_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    vendor_id: Mapped[int] = mapped_column(ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, comment="Price at scrape time")
    availability: Mapped[bool] = mapped_column(Boolean, nullable=False)
    scraped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When this price was scraped",
    )

    __table_args__ = (
        Index("idx_product_prices_product_scraped", "product_id", "scraped_at"),
    )

    def __repr__(self) -> str:
        return f"<ProductPrice(id={self.id}, product_id={self.product_id}, price={self.price}, scraped_at={self.scraped_at})>"
