"""Generic CSS selector fallback for shops without structured data."""

from typing import Optional

from pricewatch.scrapers.base import ExtractionResult, ExtractionStrategy, PageSnapshot
from pricewatch.scrapers.utils.normalizer import PriceNormalizer, is_in_stock

PRICE_SELECTOR = ", ".join([
    '[data-test="price"]',
    ".price",
    ".product-price",
    '[itemprop="price"]',
])

AVAILABILITY_SELECTOR = ", ".join([
    '[data-test="availability"]',
    ".availability",
    ".stock-status",
    '[itemprop="availability"]',
])


class SelectorStrategy(ExtractionStrategy):
    """First element matching common price/availability selectors."""

    name = "css_selectors"

    def extract(self, snapshot: PageSnapshot) -> Optional[ExtractionResult]:
        soup = snapshot.soup

        price = None
        price_el = soup.select_one(PRICE_SELECTOR)
        if price_el is not None:
            # <meta itemprop="price" content="..."> has no text
            raw = price_el.get_text(" ", strip=True) or price_el.get("content", "")
            price = PriceNormalizer.parse_price(raw)

        if price is None:
            return None

        availability = False
        availability_el = soup.select_one(AVAILABILITY_SELECTOR)
        if availability_el is not None:
            availability = is_in_stock(
                availability_el.get_text(" ", strip=True)
                or availability_el.get("content", "")
                or availability_el.get("href", "")
            )

        return ExtractionResult(price=price, availability=availability, strategy=self.name)
