"""Async RPC client for the Slide local API."""

import json
import logging
import math
from typing import Any, Optional

import httpx

from .auth import Credentials, build_authorization_header, parse_www_authenticate
from .errors import MalformedResponse, MissingChallenge, RpcFailed
from .transport import DEFAULT_TIMEOUT_MS, Transport, TransportResponse

logger = logging.getLogger(__name__)

PATH_GET_INFO = "/rpc/Slide.GetInfo"
PATH_SET_POS = "/rpc/Slide.SetPos"
PATH_STOP = "/rpc/Slide.Stop"
PATH_CALIBRATE = "/rpc/Slide.Calibrate"


def clamp_position(pos: float) -> float:
    """Clamp a Slide position to 0 (open) .. 1 (closed)."""
    if math.isnan(pos):
        raise ValueError("Slide position must be a number, got NaN")
    return max(0, min(1, pos))


class SlideClient:
    """Client for one Slide device.

    Digest auth is negotiated on every call: the request is first sent
    without credentials, and only a 401 triggers exactly one authenticated
    retry. Nothing from the challenge is cached.
    """

    def __init__(
        self,
        host: str,
        timeout: int = DEFAULT_TIMEOUT_MS,
        username: Optional[str] = None,
        password: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host
        self.timeout = timeout or DEFAULT_TIMEOUT_MS
        self.credentials = Credentials.from_options(username, password)
        self._transport = Transport(host, timeout=self.timeout, transport=transport)

    @property
    def auth_enabled(self) -> bool:
        return self.credentials is not None

    def _decode(self, path: str, response: TransportResponse) -> Any:
        if not response.ok:
            raise RpcFailed(path, response.status)
        if not response.body:
            return None
        try:
            return json.loads(response.body)
        except ValueError as e:
            raise MalformedResponse(path, response.body) from e

    async def rpc(self, path: str, body: Any = None) -> Any:
        """
        Call an RPC path and return the decoded JSON result.

        Args:
            path: RPC route, e.g. "/rpc/Slide.GetInfo"
            body: JSON-serializable request body (``{}`` when None)

        Returns:
            Decoded JSON value, or None for an empty body
        """
        response = await self._transport.send(path, body)

        if self.credentials is None or response.status != 401:
            return self._decode(path, response)

        challenge_header = response.headers.get("www-authenticate")
        if not challenge_header:
            raise MissingChallenge(
                f"401 from Slide but no WWW-Authenticate header ({self.host}{path})",
                path=path,
            )

        challenge = parse_www_authenticate(challenge_header)
        logger.debug(f"Digest challenge from {self.host} (realm={challenge.realm})")
        authorization = build_authorization_header(
            self.credentials,
            challenge,
            method="POST",
            uri=path,
        )

        response = await self._transport.send(path, body, {"Authorization": authorization})
        return self._decode(path, response)

    async def get_info(self) -> Any:
        """Read device info; contains at least a numeric ``pos``."""
        return await self.rpc(PATH_GET_INFO, {})

    async def set_position(self, pos: float) -> Any:
        """Move to ``pos``: 0 = fully open, 1 = fully closed."""
        return await self.rpc(PATH_SET_POS, {"pos": clamp_position(pos)})

    async def stop(self) -> Any:
        return await self.rpc(PATH_STOP, {})

    async def calibrate(self) -> Any:
        return await self.rpc(PATH_CALIBRATE, {})
