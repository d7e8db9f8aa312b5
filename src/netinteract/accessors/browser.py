"""Real-browser collaborator backed by async Playwright.

Pages are rendered by Chromium, so content produced by scripts is visible to
extraction. One browser context is kept for the accessor's lifetime; cookies
therefore persist across fetches and submits. Each request gets its own page,
closed once its content has been captured.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from netinteract.accessors.base import ResponseInfo
from netinteract.models import DEFAULT_NAVIGATION_TIMEOUT_MS, DEFAULT_USER_AGENT

logger = logging.getLogger("netinteract.accessors.browser")

# Option read from an action's options: extra milliseconds to wait for a
# follow-up navigation (client-side redirects, meta refresh) after load.
LOAD_DELAY_OPTION = "load_delay"


def _load_delay_ms(options: Mapping[str, str] | None) -> int | None:
    if not options:
        return None
    raw = options.get(LOAD_DELAY_OPTION, options.get("loadDelay"))
    if raw is None:
        return None
    try:
        delay = int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer %s option: %r", LOAD_DELAY_OPTION, raw)
        return None
    return delay if delay > 0 else None


class FormPostRoute:
    """Route handler that sends a page's first navigation as the form POST.

    The browser normalises the navigation URL (trailing slash, percent
    encoding), so the request is recognised by being the first navigation
    rather than by its URL. Every other request continues unchanged.
    """

    def __init__(self, body: str) -> None:
        self.body = body
        self.applied = False

    async def __call__(self, route: Any) -> None:
        request = route.request
        if self.applied or request.method != "GET" or not request.is_navigation_request():
            await route.continue_()
            return
        self.applied = True
        headers = {**request.headers, "content-type": "application/x-www-form-urlencoded"}
        await route.continue_(method="POST", post_data=self.body, headers=headers)


class PlaywrightWebAccessor:
    """Fetches and submits pages through a headless Chromium."""

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    ) -> None:
        self._headless = headless
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout_ms

        # Managed browser lifecycle -- set lazily, cleared by aclose()
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._lock = asyncio.Lock()

    # -- Browser Lifecycle ---------------------------------------------------

    async def _ensure_context(self) -> Any:
        """Launch Playwright and Chromium on first use and return the shared context."""
        if self._context is not None:
            return self._context

        async with self._lock:
            if self._context is None:
                from playwright.async_api import async_playwright

                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=["--no-sandbox", "--disable-setuid-sandbox"],
                )
                self._context = await self._browser.new_context(user_agent=self._user_agent)
                self._context.set_default_navigation_timeout(self._navigation_timeout_ms)
                logger.info("Chromium launched (headless=%s)", self._headless)
        return self._context

    async def aclose(self) -> None:
        """Close the context, the browser and Playwright."""
        for resource, closer in (
            (self._context, "close"),
            (self._browser, "close"),
            (self._playwright, "stop"),
        ):
            if resource is None:
                continue
            try:
                await getattr(resource, closer)()
            except Exception as exc:
                logger.warning("Error while shutting down browser: %s", exc)
        self._context = None
        self._browser = None
        self._playwright = None

    async def __aenter__(self) -> PlaywrightWebAccessor:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- WebAccessor ---------------------------------------------------------

    async def fetch(self, url: str, options: Mapping[str, str] | None = None) -> ResponseInfo:
        context = await self._ensure_context()
        page = await context.new_page()
        try:
            response = await page.goto(url, wait_until="networkidle")
            delay = _load_delay_ms(options)
            if delay is not None:
                response = await self._wait_for_late_navigation(page, response, delay)
            return await self._to_response_info(page, response)
        finally:
            await page.close()

    async def submit(
        self,
        url: str,
        form_values: Mapping[str, str],
        options: Mapping[str, str] | None = None,
    ) -> ResponseInfo:
        context = await self._ensure_context()
        page = await context.new_page()
        post_route = FormPostRoute(urlencode(list(form_values.items())))
        try:
            await page.route("**/*", post_route)
            response = await page.goto(url, wait_until="networkidle")
            if not post_route.applied:
                logger.warning("Submit to %s was not intercepted; the browser sent a GET", url)
            delay = _load_delay_ms(options)
            if delay is not None:
                response = await self._wait_for_late_navigation(page, response, delay)
            return await self._to_response_info(page, response)
        finally:
            await page.close()

    async def _wait_for_late_navigation(self, page: Any, response: Any, delay_ms: int) -> Any:
        """Wait up to ``delay_ms`` for another navigation; return its response if one happens."""
        from playwright.async_api import Error as PlaywrightError

        try:
            async with page.expect_navigation(wait_until="networkidle", timeout=delay_ms) as navigation:
                pass
            late = await navigation.value
        except PlaywrightError:
            return response
        logger.debug("Late navigation to %s", page.url)
        return late if late is not None else response

    @staticmethod
    async def _to_response_info(page: Any, response: Any) -> ResponseInfo:
        html = await page.content()
        return ResponseInfo(
            status_code=response.status if response is not None else 0,
            url=response.url if response is not None else page.url,
            html=html,
            status_description=response.status_text if response is not None else None,
        )
