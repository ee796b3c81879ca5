"""Base extraction interface.

Every extraction strategy inherits from ExtractionStrategy and turns a
PageSnapshot into an ExtractionResult, or None when the page does not carry
the data that strategy knows how to read.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import cached_property
from typing import Optional
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup


@dataclass(frozen=True)
class ExtractionResult:
    """Normalized price/availability pair returned by all strategies."""

    price: Decimal
    availability: bool
    strategy: str = ""  # Name of the strategy that produced it

    def __post_init__(self):
        """Validate data after initialization."""
        if self.price is None or self.price < 0:
            raise ValueError("price must be a non-negative Decimal")


@dataclass
class PageSnapshot:
    """Rendered HTML of a page at one point in time."""

    url: str
    html: str

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")


class ScrapeStatus(str, Enum):
    SUCCESS = "success"
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ScrapeOutcome:
    """Terminal state of one vendor scrape task."""

    status: ScrapeStatus
    result: Optional[ExtractionResult] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, result: ExtractionResult) -> "ScrapeOutcome":
        return cls(ScrapeStatus.SUCCESS, result=result)

    @classmethod
    def blocked(cls) -> "ScrapeOutcome":
        return cls(ScrapeStatus.BLOCKED)

    @classmethod
    def not_found(cls) -> "ScrapeOutcome":
        return cls(ScrapeStatus.NOT_FOUND)

    @classmethod
    def failed(cls, cause: BaseException) -> "ScrapeOutcome":
        return cls(ScrapeStatus.ERROR, error=f"{type(cause).__name__}: {cause}")

    @property
    def ok(self) -> bool:
        return self.status is ScrapeStatus.SUCCESS


class ExtractionStrategy(ABC):
    """Abstract base class for all extraction strategies.

    Subclasses set ``name``, optionally ``domains`` (restricting the strategy
    to pages served from those hosts) and ``attempts`` (how many fresh
    snapshots the chain may feed it before giving up).
    """

    name: str = ""  # Must be overridden in subclass (e.g., "structured_data")
    domains: tuple = ()  # Empty means every page
    attempts: int = 1

    def __init__(self):
        """Initialize the strategy with a bound logger."""
        self.logger = structlog.get_logger(__name__).bind(strategy=self.name)

    def matches(self, url: str) -> bool:
        """Check whether this strategy applies to a page URL.

        Args:
            url: Page URL after navigation

        Returns:
            True if the host equals, or is a subdomain of, one of ``domains``
        """
        if not self.domains:
            return True
        host = (urlparse(url).hostname or "").lower()
        return any(host == d or host.endswith("." + d) for d in self.domains)

    @abstractmethod
    def extract(self, snapshot: PageSnapshot) -> Optional[ExtractionResult]:
        """Read price and availability from a page snapshot.

        Args:
            snapshot: Rendered page HTML and URL

        Returns:
            ExtractionResult, or None when this strategy finds nothing usable.
            Malformed page data must yield None, never an exception.
        """
        pass
