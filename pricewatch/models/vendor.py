"""Vendor registry model."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base

if TYPE_CHECKING:
    from pricewatch.models.vendor_url import VendorURL


class Vendor(Base):
    """E-commerce site selling tracked products (e.g. Galaxus, Brack)."""

    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    urls: Mapped[list["VendorURL"]] = relationship(back_populates="vendor", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, name='{self.name}')>"
