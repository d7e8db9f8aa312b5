"""Network collaborator protocol.

The engine never talks to the network itself. It consumes any object
implementing ``WebAccessor``; the accessor follows redirects and keeps its
own session cookies across calls made through the same instance.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from http import HTTPStatus
from typing import Protocol, runtime_checkable


@dataclasses.dataclass
class ResponseInfo:
    """What an accessor returns for one fetch or submit."""

    status_code: int
    url: str  # final URL after redirects
    html: str
    status_description: str | None = None


def status_name(status_code: int) -> str:
    """Name a status code the way step failures report it, e.g. 404 -> ``NotFound``."""
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)
    return "".join(word[:1].upper() + word[1:] for word in phrase.replace("-", " ").split())


@runtime_checkable
class WebAccessor(Protocol):
    """GET/POST-like operations the Fetch and Submit actions call.

    ``options`` carries action-scoped free-form attributes (for example a
    ``load_delay`` in milliseconds) that an accessor may interpret or ignore.
    """

    async def fetch(self, url: str, options: Mapping[str, str] | None = None) -> ResponseInfo: ...

    async def submit(
        self,
        url: str,
        form_values: Mapping[str, str],
        options: Mapping[str, str] | None = None,
    ) -> ResponseInfo: ...
