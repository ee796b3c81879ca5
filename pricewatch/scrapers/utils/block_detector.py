"""Bot-block interstitial detection."""

from typing import Iterable

# Phrases that only appear on anti-bot interstitials, never on product pages
BLOCK_SIGNALS = (
    "you have been blocked",
)


def is_blocked(text: str, signals: Iterable[str] = BLOCK_SIGNALS) -> bool:
    """Check the visible text of a rendered page for bot-blocking signals.

    Args:
        text: Page body inner text
        signals: Lower-case phrases to look for

    Returns:
        True if any signal phrase occurs (case-insensitive)
    """
    if not text:
        return False
    lowered = text.lower()
    return any(signal in lowered for signal in signals)
