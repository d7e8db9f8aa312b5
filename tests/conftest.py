"""Shared fixtures for netinteract unit tests."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Mapping
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Union
from urllib.parse import parse_qsl

import pytest

from netinteract.accessors.base import ResponseInfo
from netinteract.engine.context import ExecutionContext

BASE_URL = "http://shop.test"


def run_async(coro):
    """Run a coroutine synchronously in a new event loop."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Sample pages
# ---------------------------------------------------------------------------

TITLE_PAGE = """\
<html>
<head><title>Welcome to Test Shop</title></head>
<body>
  <h1 id="headline">Test <b>Shop</b></h1>
  <a class="nav" href="/products">Products</a>
  <a class="nav" href="/about">About</a>
  <p class="order">Order #1234 confirmed</p>
</body>
</html>
"""

VALUES_PAGE = """\
<html>
<body>
  <ul>
    <li class="v">alpha</li>
    <li class="v">beta</li>
    <li class="v">gamma</li>
  </ul>
  <span>code=AB1;</span><span>code=CD2;</span>
</body>
</html>
"""

FORM_PAGE = """\
<html>
<body>
  <form name="search" id="searchForm" action="/search">
    <input type="text" name="q" value="">
  </form>
  <form name="checkout" id="checkoutForm" action="confirm" method="post">
    <input type="hidden" name="token" value="tok-123">
    <input type="text" name="billing_name" value="">
    <input type="checkbox" name="newsletter" value="yes" checked>
    <input type="checkbox" name="gift" value="yes">
    <input type="radio" name="shipping" value="std" checked>
    <input type="radio" name="shipping" value="express">
    <textarea name="notes">Leave at door</textarea>
    <select name="size">
      <option value="s">Small</option>
      <option value="m" selected>Medium</option>
      <option value="l">Large</option>
    </select>
    <select name="color">
      <option value="r">Red</option>
      <option value="b">Blue</option>
    </select>
  </form>
</body>
</html>
"""

CONFIRM_PAGE = """\
<html>
<head><title>Order confirmed</title></head>
<body><p id="status">Thank you</p></body>
</html>
"""


# ---------------------------------------------------------------------------
# Fake network collaborator
# ---------------------------------------------------------------------------

Route = Union[ResponseInfo, Exception, Callable[[Mapping[str, str]], ResponseInfo]]


def page(url: str, html: str, status_code: int = 200) -> ResponseInfo:
    return ResponseInfo(status_code=status_code, url=url, html=html)


class FakeWebAccessor:
    """In-memory collaborator: serves canned responses and records every call.

    ``gets`` / ``posts`` map a URL to a ResponseInfo, an exception to raise,
    or (for posts) a callable receiving the submitted values. Unknown URLs
    answer 404.
    """

    def __init__(
        self,
        gets: dict[str, Route] | None = None,
        posts: dict[str, Route] | None = None,
    ) -> None:
        self.gets = dict(gets or {})
        self.posts = dict(posts or {})
        self.calls: list[tuple[str, str, dict[str, str] | None, dict[str, str] | None]] = []

    async def fetch(self, url: str, options: Mapping[str, str] | None = None) -> ResponseInfo:
        self.calls.append(("GET", url, None, dict(options) if options is not None else None))
        return self._answer(self.gets, url, {})

    async def submit(
        self,
        url: str,
        form_values: Mapping[str, str],
        options: Mapping[str, str] | None = None,
    ) -> ResponseInfo:
        self.calls.append(("POST", url, dict(form_values), dict(options) if options is not None else None))
        return self._answer(self.posts, url, form_values)

    @staticmethod
    def _answer(routes: dict[str, Route], url: str, values: Mapping[str, str]) -> ResponseInfo:
        route = routes.get(url)
        if route is None:
            return page(url, "<html><body>Not here</body></html>", status_code=404)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(values)
        return route

    @property
    def urls(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def fake_accessor() -> FakeWebAccessor:
    """Collaborator serving the shop's title, values and checkout pages."""
    return FakeWebAccessor(
        gets={
            f"{BASE_URL}/title-page": page(f"{BASE_URL}/title-page", TITLE_PAGE),
            f"{BASE_URL}/values": page(f"{BASE_URL}/values", VALUES_PAGE),
            f"{BASE_URL}/shop/checkout": page(f"{BASE_URL}/shop/checkout", FORM_PAGE),
        },
        posts={
            f"{BASE_URL}/shop/confirm": page(f"{BASE_URL}/shop/confirm", CONFIRM_PAGE),
        },
    )


@pytest.fixture
def make_context() -> Callable[..., ExecutionContext]:
    """Factory for a context with the given inputs/outputs and a fake accessor."""

    def _make(
        inputs: dict[str, str] | None = None,
        outputs: dict[str, str] | None = None,
        accessor: Any = None,
    ) -> ExecutionContext:
        return ExecutionContext(
            web_accessor=accessor if accessor is not None else FakeWebAccessor(),
            inputs=dict(inputs or {}),
            outputs=dict(outputs or {}),
        )

    return _make


# ---------------------------------------------------------------------------
# Fixture: sample script YAML string
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_script_yaml() -> str:
    """Return a valid script exercising every action kind."""
    return """\
script:
  default_target: Main
  targets:
    - name: Main
      actions:
        - fetch:
            url: "$(BaseUrl)/title-page"
            outputs:
              - {name: title, xpath: "//title"}
        - branch:
            property: "$(ShouldCheckout)"
            value: "true"
            action:
              jump: {target: Checkout}
    - name: Checkout
      actions:
        - fetch:
            url: "$(BaseUrl)/shop/checkout"
        - submit:
            form_name: checkout
            values:
              - {name: billing_name, value: "$(BillingName)"}
              - {name: color, text: Blue}
            outputs:
              - {name: status, xpath: "//p[@id='status']", expected_value: "thank you"}
"""


# ---------------------------------------------------------------------------
# Fixture: local HTTP site for the requests collaborator
# ---------------------------------------------------------------------------

class _ShopHandler(BaseHTTPRequestHandler):
    """Tiny site: title page, redirect, 404, cookie round-trip and a form echo."""

    def do_GET(self) -> None:
        path = self.path.split("?")[0]
        if path == "/title-page":
            self._send(200, TITLE_PAGE)
        elif path == "/redirect":
            self.send_response(302)
            self.send_header("Location", "/title-page")
            self.send_header("Content-Length", "0")
            self.end_headers()
        elif path == "/login":
            self.send_response(200)
            self.send_header("Set-Cookie", "session=abc123; Path=/")
            body = b"<html><body>logged in</body></html>"
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        elif path == "/whoami":
            cookie = self.headers.get("Cookie", "")
            self._send(200, f"<html><body><p id='cookie'>{cookie}</p></body></html>")
        elif path == "/agent":
            agent = self.headers.get("User-Agent", "")
            self._send(200, f"<html><body><p id='agent'>{agent}</p></body></html>")
        elif path == "/shop/checkout":
            self._send(200, FORM_PAGE)
        else:
            self._send(404, "<html><body>Not Found</body></html>")

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8") if length else ""
        fields = "".join(f"<li data-name='{k}'>{v}</li>" for k, v in parse_qsl(body, keep_blank_values=True))
        content_type = self.headers.get("Content-Type", "")
        self._send(
            200,
            f"<html><body><p id='type'>{content_type}</p><ul>{fields}</ul></body></html>",
        )

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass

    def _send(self, status: int, html: str) -> None:
        body = html.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


@pytest.fixture
def shop_server():
    """Serve ``_ShopHandler`` on an ephemeral port; yields the base URL."""
    httpd = HTTPServer(("127.0.0.1", 0), _ShopHandler)
    thread = threading.Thread(target=httpd.serve_forever, name="shop-server", daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        thread.join(timeout=5.0)
        httpd.server_close()


# ---------------------------------------------------------------------------
# Fixture: sample config YAML string
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_config_yaml() -> str:
    """Return a valid netinteract.yaml as a string."""
    return """\
accessor: http
user_agent: "netinteract-tests/1.0"
timeout: 10
headless: false
max_jump_depth: 8
inputs:
  BaseUrl: "http://shop.test"
  ShouldCheckout: true
  Empty:
"""
