"""Shared fixtures: an in-process fake Slide device."""

import json
import os
import tempfile

import httpx
import pytest

# Keep settings away from /data during tests
os.environ.setdefault("SLIDELOCAL_DATA_DIR", tempfile.mkdtemp())

CHALLENGE = 'Digest realm="slide", qop="auth", nonce="abc123", opaque="xyz"'


class FakeSlide:
    """Scriptable Slide device behind an httpx.MockTransport."""

    def __init__(self, info=None, require_auth=False, challenge=CHALLENGE):
        self.info = info if info is not None else {"pos": 0.25}
        self.require_auth = require_auth
        self.challenge = challenge
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def bodies(self) -> list:
        return [json.loads(r.content) for r in self.requests]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)

        if self.require_auth and "authorization" not in request.headers:
            headers = {"WWW-Authenticate": self.challenge} if self.challenge else {}
            return httpx.Response(401, headers=headers)

        if request.url.path == "/rpc/Slide.GetInfo":
            return httpx.Response(200, json=self.info)
        if request.url.path == "/rpc/Slide.SetPos":
            self.info = {**self.info, "pos": json.loads(request.content)["pos"]}
            return httpx.Response(200, content=b"")
        if request.url.path in ("/rpc/Slide.Stop", "/rpc/Slide.Calibrate"):
            return httpx.Response(200, content=b"")
        return httpx.Response(404)


@pytest.fixture
def slide():
    """Open Slide without auth."""
    return FakeSlide()


@pytest.fixture
def secured_slide():
    """Slide that challenges every unauthenticated request."""
    return FakeSlide(require_auth=True)
