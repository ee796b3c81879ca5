"""Request interception that keeps product pages light.

Prices and stock flags live in the DOM and inline scripts, so anything
that only affects how the page looks can be dropped.
"""

import structlog

logger = structlog.get_logger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})


def should_abort(resource_type: str) -> bool:
    """Return True if a request of this Playwright resource type should be aborted."""
    return resource_type in BLOCKED_RESOURCE_TYPES


async def handle_route(route) -> None:
    """Playwright route handler: abort visual resources, continue the rest."""
    if should_abort(route.request.resource_type):
        await route.abort()
    else:
        await route.continue_()
