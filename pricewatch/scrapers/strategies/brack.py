"""Brack fallback: the Tealium ``legacy_utag_data`` object in the utag script."""

import json
import re
from typing import Any, Optional

from pricewatch.scrapers.base import ExtractionResult, ExtractionStrategy, PageSnapshot
from pricewatch.scrapers.utils.normalizer import PriceNormalizer

UTAG_SELECTOR = 'script[data-name="utag"]'
_UTAG_ASSIGNMENT = re.compile(r"(?:var\s+)?legacy_utag_data\s*=\s*(?=\{)")
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


def parse_utag_data(script_text: Optional[str]) -> Optional[dict]:
    """Extract the object literal assigned to ``legacy_utag_data``.

    Decoding stops at the end of the object, so code following the
    assignment in the same script does not matter.
    """
    if not script_text:
        return None
    match = _UTAG_ASSIGNMENT.search(script_text)
    if match is None:
        return None
    try:
        data, _ = json.JSONDecoder().raw_decode(script_text, match.end())
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _stock_count(raw: Any) -> int:
    """Read the leading integer of a stock value ("5 Stk." is 5, "0.5" is 0)."""
    if raw is None or isinstance(raw, bool):
        return 0
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else 0


class BrackUtagStrategy(ExtractionStrategy):
    """Reads the first ``prod`` entry of the utag data layer."""

    name = "brack_utag"
    domains = ("brack.ch",)

    def extract(self, snapshot: PageSnapshot) -> Optional[ExtractionResult]:
        script = snapshot.soup.select_one(UTAG_SELECTOR)
        if script is None:
            return None

        data = parse_utag_data(script.string)
        if data is None:
            self.logger.debug("utag_data_unparseable", url=snapshot.url)
            return None

        products = data.get("prod")
        if not isinstance(products, list) or not products or not isinstance(products[0], dict):
            return None

        entry = products[0]
        price = PriceNormalizer.parse_price(entry.get("price"))
        if price is None:
            return None

        return ExtractionResult(
            price=price,
            availability=_stock_count(entry.get("stock")) > 0,
            strategy=self.name,
        )
