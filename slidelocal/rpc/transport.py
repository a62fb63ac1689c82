"""Single-shot JSON POST transport."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from .errors import RpcTimeout, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and raw body of one HTTP exchange."""
    status: int
    headers: httpx.Headers
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def encode_body(body: Any) -> str:
    """Serialize request body as compact JSON, ``{}`` when absent."""
    return json.dumps({} if body is None else body, separators=(",", ":"))


class Transport:
    """Performs one timeout-bounded POST per call.

    A new connection pool is opened for every attempt and closed when the
    attempt finishes, so nothing is held between calls.
    """

    def __init__(
        self,
        host: str,
        timeout: int = DEFAULT_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"http://{self.host}"

    async def _post(
        self,
        url: str,
        payload: str,
        headers: dict[str, str],
        seconds: float,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=seconds,
            transport=self._transport,
            trust_env=False,
        ) as client:
            return await client.post(url, content=payload, headers=headers)

    async def send(
        self,
        path: str,
        body: Any = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """POST ``body`` as JSON to ``path`` and return the raw response."""
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        if extra_headers:
            headers.update(extra_headers)
        payload = encode_body(body)
        seconds = self.timeout / 1000

        logger.debug(f"POST {url} {payload}")
        try:
            response = await asyncio.wait_for(
                self._post(url, payload, headers, seconds),
                timeout=seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RpcTimeout(path) from e
        except httpx.RequestError as e:
            raise TransportError(path, str(e) or type(e).__name__) from e

        logger.debug(f"Received {response.status_code} from {url}")
        return TransportResponse(
            status=response.status_code,
            headers=response.headers,
            body=response.text,
        )
