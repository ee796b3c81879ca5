"""Extraction strategies, in the order the chain tries them."""

from typing import List

from pricewatch.scrapers.base import ExtractionStrategy
from .structured_data import StructuredDataStrategy
from .css_selectors import SelectorStrategy
from .galaxus import GalaxusMetaStrategy
from .brack import BrackUtagStrategy


def default_strategies(structured_data_attempts: int = 3) -> List[ExtractionStrategy]:
    """Build the standard strategy list.

    Structured data first, then the generic selectors, then the
    vendor-specific fallbacks (which only apply on their own domains).
    """
    return [
        StructuredDataStrategy(attempts=structured_data_attempts),
        SelectorStrategy(),
        GalaxusMetaStrategy(),
        BrackUtagStrategy(),
    ]


__all__ = [
    "BrackUtagStrategy",
    "GalaxusMetaStrategy",
    "SelectorStrategy",
    "StructuredDataStrategy",
    "default_strategies",
]
