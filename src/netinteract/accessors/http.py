"""Plain HTTP collaborator backed by a ``requests.Session``.

The session keeps cookies across calls and follows redirects. Calls run in
a worker thread so the engine's event loop only suspends at the network
boundary. Error statuses are returned like any other response; only
transport failures raise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

import requests

from netinteract.accessors.base import ResponseInfo
from netinteract.models import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT

logger = logging.getLogger("netinteract.accessors.http")


class HttpWebAccessor:
    """Fetches and submits pages over HTTP with a persistent session."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """
        Args:
            user_agent: User-Agent header sent with every request.
            timeout: Per-request timeout in seconds.
            session: Existing session to reuse (shares its cookie jar).
        """
        self._session = session if session is not None else requests.Session()
        self._session.headers["User-Agent"] = user_agent
        self._timeout = timeout

    @property
    def cookies(self) -> dict[str, str]:
        """Return all cookies accumulated by the session."""
        return dict(self._session.cookies)

    async def fetch(self, url: str, options: Mapping[str, str] | None = None) -> ResponseInfo:
        return await asyncio.to_thread(self._request, "GET", url, None)

    async def submit(
        self,
        url: str,
        form_values: Mapping[str, str],
        options: Mapping[str, str] | None = None,
    ) -> ResponseInfo:
        return await asyncio.to_thread(self._request, "POST", url, dict(form_values))

    def _request(self, method: str, url: str, data: dict[str, str] | None) -> ResponseInfo:
        logger.debug("%s %s", method, url)
        response = self._session.request(
            method=method,
            url=url,
            data=data,
            allow_redirects=True,
            timeout=self._timeout,
        )
        logger.info(
            "%s %s -> %d (%s)%s",
            method,
            url,
            response.status_code,
            response.reason,
            f" redirected to {response.url}" if response.history else "",
        )
        return ResponseInfo(
            status_code=response.status_code,
            url=response.url,
            html=response.text,
            status_description=response.reason,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> HttpWebAccessor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
