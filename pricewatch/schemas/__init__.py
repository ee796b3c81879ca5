from pricewatch.schemas.records import PriceRecord, RecordId, Vendor, VendorURLTask

__all__ = [
    "PriceRecord",
    "RecordId",
    "Vendor",
    "VendorURLTask",
]
