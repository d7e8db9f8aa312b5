"""Network collaborators consumed by the engine.

- HttpWebAccessor: requests session (cookies, redirects), run off the event loop
- PlaywrightWebAccessor: headless Chromium via async Playwright (requires ``[browser]`` extra)
"""

from __future__ import annotations

from netinteract.accessors.base import ResponseInfo, WebAccessor, status_name
from netinteract.accessors.http import HttpWebAccessor
from netinteract.config import NetInteractConfig, NetInteractConfigError

# PlaywrightWebAccessor is imported lazily by create_web_accessor() so the
# plain HTTP path works without the browser extra installed.


def create_web_accessor(config: NetInteractConfig) -> WebAccessor:
    """Build the collaborator selected by ``config.accessor``."""
    if config.accessor == "http":
        return HttpWebAccessor(user_agent=config.user_agent, timeout=config.timeout)
    if config.accessor == "playwright":
        try:
            import playwright.async_api  # noqa: F401
        except ImportError as exc:
            raise NetInteractConfigError(
                "Playwright is not installed.\n\n"
                "Install with: pip install 'netinteract[browser]' && playwright install chromium"
            ) from exc
        from netinteract.accessors.browser import PlaywrightWebAccessor

        return PlaywrightWebAccessor(
            headless=config.headless,
            user_agent=config.user_agent,
            navigation_timeout_ms=config.timeout * 1000,
        )
    raise NetInteractConfigError(f"Unknown accessor: {config.accessor}")


__all__ = [
    "HttpWebAccessor",
    "ResponseInfo",
    "WebAccessor",
    "create_web_accessor",
    "status_name",
]
