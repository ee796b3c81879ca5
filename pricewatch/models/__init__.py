"""SQLAlchemy models for the database record store."""

from pricewatch.models.base import Base
from pricewatch.models.vendor import Vendor
from pricewatch.models.vendor_url import VendorURL
from pricewatch.models.product_price import ProductPrice

__all__ = [
    "Base",
    "Vendor",
    "VendorURL",
    "ProductPrice",
]
