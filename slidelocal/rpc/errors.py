"""Errors raised by the Slide RPC client."""

from typing import Optional


class SlideError(Exception):
    """Base error for Slide RPC operations."""
    pass


class TransportError(SlideError):
    """Request could not be delivered to the device."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Slide RPC {path} failed: {message}")
        self.path = path


class RpcTimeout(SlideError, TimeoutError):
    """Transport attempt exceeded the configured timeout."""

    def __init__(self, path: str):
        super().__init__(f"Slide RPC {path} timed out")
        self.path = path


class RpcFailed(SlideError):
    """Device answered the final attempt with a non-2xx status."""

    def __init__(self, path: str, status: int):
        super().__init__(f"Slide RPC {path} failed with status {status}")
        self.path = path
        self.status = status


class MissingChallenge(SlideError):
    """A 401 arrived without a usable WWW-Authenticate header."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MalformedResponse(SlideError):
    """Response body is present but is not valid JSON."""

    def __init__(self, path: str, body: str):
        super().__init__(f"Slide RPC {path} returned invalid JSON")
        self.path = path
        self.body = body
