"""Pytest configuration for the site audit engine."""
import os

import httpx


def pytest_configure():
    # External scanners register themselves from the environment; keep the
    # default scanner set deterministic.
    os.environ.pop("SCANNER_FUNCTIONS_URL", None)
    os.environ.pop("PAGESPEED_API_KEY", None)


def mock_client(routes, default_status=404):
    """
    AsyncClient whose transport answers from a {url: response} map.

    A value may be an httpx.Response, a callable(request) -> Response,
    or an exception instance to raise. Responses are single-use.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        action = routes.get(str(request.url))
        if action is None:
            return httpx.Response(default_status, text="")
        if isinstance(action, Exception):
            raise action
        if callable(action):
            return action(request)
        return action

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
