"""Normalization of scraped price and availability strings."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)

# First price-like number: grouped thousands ("1'234,50", "1 234.50",
# "1.234.567") or a plain number with an optional decimal part ("12.99")
_PRICE_TOKEN = re.compile(
    r"\d{1,3}(?:[ '\u2019\u00a0\u202f.,]\d{3})+(?:[.,]\d+)?(?!\d)"
    r"|\d+(?:[.,]\d+)?"
)
_NEGATIVE_PREFIX = re.compile(r"-\s*$")
# Everything except digits and the two separators is noise ("'", spaces)
_NON_NUMERIC = re.compile(r"[^\d.,]")
_AVAILABILITY_NOISE = re.compile(r"[\s_\-]+")


class PriceNormalizer:
    """Price parsing utilities.

    Handles the formats vendors actually print:
    - "1'234,50 CHF" -> 1234.50
    - "1 234,50" -> 1234.50
    - "12.99" -> 12.99
    - "1,234.50" -> 1234.50
    - "1.234.567" -> 1234567
    - "49.90 59.90" (sale price, old price) -> 49.90
    - "CHF 39.90 -20%" -> 39.90
    """

    @staticmethod
    def parse_price(raw: Any) -> Optional[Decimal]:
        """Parse a price from text or a JSON number.

        Only the first price-like number in the text is read, so old
        prices and discount badges in the same element are ignored. Within
        that number, when both separators occur the last one is the decimal
        point, a single comma is a decimal comma, and a separator repeated
        more than once is a thousands separator.

        Args:
            raw: Raw price (str, int, float or Decimal)

        Returns:
            Non-negative Decimal, or None if nothing parseable is found
        """
        if raw is None or isinstance(raw, bool):
            return None

        if isinstance(raw, (int, float, Decimal)):
            cleaned = str(raw)
        else:
            cleaned = PriceNormalizer.extract_price_token(str(raw))
            if cleaned is None:
                return None

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            logger.debug("price_unparseable", raw=str(raw)[:50])
            return None

        if not value.is_finite() or value < 0:
            return None
        return value

    @staticmethod
    def extract_price_token(text: str) -> Optional[str]:
        """Find the first price-like number in text and normalize its separators.

        Args:
            text: Text containing price information

        Returns:
            Number string with "." as the only separator, or None if the
            text holds no number or the number carries a minus sign
        """
        match = _PRICE_TOKEN.search(text)
        if match is None:
            return None
        if _NEGATIVE_PREFIX.search(text[:match.start()]):
            return None

        token = _NON_NUMERIC.sub("", match.group())
        commas, dots = token.count(","), token.count(".")
        if commas and dots:
            if token.rfind(",") > token.rfind("."):
                return token.replace(".", "").replace(",", ".")
            return token.replace(",", "")
        if commas > 1:
            return token.replace(",", "")
        if dots > 1:
            return token.replace(".", "")
        return token.replace(",", ".")


def is_in_stock(text: Any) -> bool:
    """Decide availability from free text or a schema.org enum.

    "In Stock", "in stock", "INSTOCK" and "https://schema.org/InStock" are all
    available; "OutOfStock", "not in stock" and anything without a stock
    phrase are not.
    """
    if not text or not isinstance(text, str):
        return False
    compact = _AVAILABILITY_NOISE.sub("", text.lower())
    return "instock" in compact and "notinstock" not in compact
