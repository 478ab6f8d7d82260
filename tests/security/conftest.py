"""Security test fixtures.

Responsibilities:
- Builds a FastAPI app per test with explicit settings (lifespan not entered)
- Replaces eFulfillment with an httpx.MockTransport partner
- Wraps the app in an unauthenticated TestClient (attacker perspective)
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from efulfillment_bridge.serve import create_app


class RecordingPartner:
    """Stand-in for eFulfillment that records every submitted order."""

    def __init__(self):
        self.status_code = 200
        self.text = "<OrderSubmitResponse>OK</OrderSubmitResponse>"
        self.exc: Exception | None = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, text=self.text)


@pytest.fixture
def partner() -> RecordingPartner:
    return RecordingPartner()


@pytest.fixture
def app(settings, partner):
    """App with settings and partner client installed on app.state."""
    app = create_app()
    app.state.settings = settings
    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(partner))
    return app


@pytest.fixture
def client(app):
    """Unauthenticated TestClient."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def malicious_payloads():
    """Collection of injection strings for fuzz testing."""
    return [
        # XML injection
        "</FirstName><MerchantToken>pwned</MerchantToken><FirstName>",
        "<![CDATA[x]]>",
        '<?xml version="1.0"?><!DOCTYPE x [<!ENTITY e SYSTEM "file:///etc/passwd">]>',
        "&e;",
        # XSS
        "<script>alert('xss')</script>",
        # Template injection
        "{{7*7}}",
        "${7*7}",
        # Null-ish and oversized
        "admin\u200b",  # Zero-width space
        "test\x00admin",
        "A" * 10000,
    ]
