"""Product page URLs per vendor: the scrape task list."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base

if TYPE_CHECKING:
    from pricewatch.models.vendor import Vendor


class VendorURL(Base):
    """Maps a product to its page on one vendor's site."""

    __tablename__ = "vendor_urls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    url: Mapped[str] = mapped_column(String(2000), nullable=False)
    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    vendor: Mapped["Vendor"] = relationship(back_populates="urls")

    def __repr__(self) -> str:
        return f"<VendorURL(id={self.id}, vendor_id={self.vendor_id}, product_id={self.product_id})>"
