"""JSON-LD (schema.org Product) extraction.

This is the most reliable source when a vendor ships it: the price and the
availability enum come straight from the shop's own product feed. Some
vendors inject the block after the initial load, which is why the chain
gives this strategy several snapshots.
"""

import json
from typing import Any, Iterator, Optional

from pricewatch.scrapers.base import ExtractionResult, ExtractionStrategy, PageSnapshot
from pricewatch.scrapers.utils.normalizer import PriceNormalizer, is_in_stock

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'


def load_json(raw: Optional[str]) -> Optional[Any]:
    """Parse a JSON document, returning None for empty or malformed input."""
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def iter_nodes(data: Any) -> Iterator[dict]:
    """Yield every JSON-LD node, descending into top-level arrays and @graph."""
    if isinstance(data, list):
        for item in data:
            yield from iter_nodes(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from iter_nodes(graph)


def is_product(node: dict) -> bool:
    """True when @type names a product (case-insensitive substring match)."""
    declared = node.get("@type")
    if isinstance(declared, str):
        declared = [declared]
    if not isinstance(declared, list):
        return False
    return any(isinstance(t, str) and "product" in t.lower() for t in declared)


def first_offer(node: dict) -> Optional[dict]:
    """Return the offer object, taking the first element of an offer list."""
    offers = node.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    return offers if isinstance(offers, dict) else None


class StructuredDataStrategy(ExtractionStrategy):
    """Reads price and availability from schema.org Product JSON-LD."""

    name = "structured_data"
    attempts = 3

    def __init__(self, attempts: int = 3):
        super().__init__()
        self.attempts = attempts

    def extract(self, snapshot: PageSnapshot) -> Optional[ExtractionResult]:
        for script in snapshot.soup.select(JSON_LD_SELECTOR):
            data = load_json(script.string)
            if data is None:
                self.logger.debug("json_ld_block_skipped", url=snapshot.url)
                continue

            for node in iter_nodes(data):
                if not is_product(node):
                    continue
                result = self._from_offer(first_offer(node))
                if result is not None:
                    return result
        return None

    def _from_offer(self, offer: Optional[dict]) -> Optional[ExtractionResult]:
        """Build a result from an Offer (or AggregateOffer) object."""
        if offer is None:
            return None

        price = PriceNormalizer.parse_price(offer.get("price"))
        if price is None:
            price = PriceNormalizer.parse_price(offer.get("lowPrice"))
        if price is None:
            return None

        return ExtractionResult(
            price=price,
            availability=is_in_stock(offer.get("availability")),
            strategy=self.name,
        )
