"""Galaxus fallback: Open Graph product meta tags."""

from typing import Optional

from pricewatch.scrapers.base import ExtractionResult, ExtractionStrategy, PageSnapshot
from pricewatch.scrapers.utils.normalizer import PriceNormalizer, is_in_stock


class GalaxusMetaStrategy(ExtractionStrategy):
    """Reads ``product:price:amount`` and ``og:availability`` meta tags."""

    name = "galaxus_meta"
    domains = ("galaxus.ch",)

    def extract(self, snapshot: PageSnapshot) -> Optional[ExtractionResult]:
        soup = snapshot.soup
        price_tag = soup.select_one('meta[property="product:price:amount"]')
        availability_tag = soup.select_one('meta[property="og:availability"]')
        if price_tag is None or availability_tag is None:
            return None

        raw_price = price_tag.get("content")
        raw_availability = availability_tag.get("content")
        if not raw_price or not raw_availability:
            return None

        price = PriceNormalizer.parse_price(raw_price)
        if price is None:
            return None

        return ExtractionResult(
            price=price,
            availability=is_in_stock(raw_availability),
            strategy=self.name,
        )
