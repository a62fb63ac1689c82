"""Slide local RPC protocol implementation."""

from .client import SlideClient
from .errors import (
    SlideError,
    TransportError,
    RpcTimeout,
    RpcFailed,
    MissingChallenge,
    MalformedResponse,
)

__all__ = [
    "SlideClient",
    "SlideError",
    "TransportError",
    "RpcTimeout",
    "RpcFailed",
    "MissingChallenge",
    "MalformedResponse",
]
