"""HTTP Digest Authentication (RFC 2617, MD5, qop=auth).

Credentials are derived again for every challenge. No server nonce is kept
between calls, so the nonce count stays at 00000001.
"""

import hashlib
import re
import secrets
from dataclasses import dataclass, field
from typing import Optional

from .errors import MissingChallenge

NONCE_COUNT = "00000001"
DEFAULT_QOP = "auth"

_PARAM_RE = re.compile(r'(\w+)\s*=\s*(?:"([^"]*)"|([^,]*))')


@dataclass(frozen=True)
class Credentials:
    """Username and secret for digest auth."""
    username: str
    secret: str

    @classmethod
    def from_options(
        cls,
        username: Optional[str],
        secret: Optional[str],
    ) -> Optional["Credentials"]:
        """Return credentials only when both parts are given."""
        if not username or not secret:
            return None
        return cls(username=username, secret=secret)


@dataclass
class DigestChallenge:
    """Parsed WWW-Authenticate challenge."""
    realm: str
    nonce: str
    qop: str = DEFAULT_QOP
    opaque: Optional[str] = None
    algorithm: Optional[str] = None
    params: dict[str, str] = field(default_factory=dict)


def _select_qop(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_QOP
    options = [opt.strip() for opt in value.split(",") if opt.strip()]
    if DEFAULT_QOP in options:
        return DEFAULT_QOP
    return options[0] if options else DEFAULT_QOP


def parse_www_authenticate(header: Optional[str]) -> DigestChallenge:
    """Parse WWW-Authenticate header value.

    The ``Digest`` scheme token is optional. Quoted values lose their
    surrounding quotes only; unquoted values run up to the next comma.
    Unknown keys are kept in ``params``.
    """
    if not header or not header.strip():
        raise MissingChallenge("Missing WWW-Authenticate header")

    value = header.strip()
    if value[:7].lower() == "digest ":
        value = value[7:]

    params: dict[str, str] = {}
    for match in _PARAM_RE.finditer(value):
        quoted, bare = match.group(2), match.group(3)
        params[match.group(1).lower()] = quoted if quoted is not None else bare.strip()

    if not params.get("realm") or not params.get("nonce"):
        raise MissingChallenge(f"Incomplete digest challenge: {header}")

    return DigestChallenge(
        realm=params["realm"],
        nonce=params["nonce"],
        qop=_select_qop(params.get("qop")),
        opaque=params.get("opaque") or None,
        algorithm=params.get("algorithm"),
        params=params,
    )


def generate_cnonce() -> str:
    """Generate client nonce from a cryptographically strong source."""
    return secrets.token_hex(8)


def compute_digest_response(
    username: str,
    secret: str,
    realm: str,
    nonce: str,
    method: str,
    uri: str,
    cnonce: str,
    qop: str = DEFAULT_QOP,
    nc: str = NONCE_COUNT,
) -> str:
    """Compute digest authentication response hash."""
    def md5_hash(data: str) -> str:
        return hashlib.md5(data.encode('utf-8')).hexdigest()

    # HA1 = MD5(username:realm:secret)
    ha1 = md5_hash(f"{username}:{realm}:{secret}")

    # HA2 = MD5(method:uri)
    ha2 = md5_hash(f"{method}:{uri}")

    # Response = MD5(HA1:nonce:nc:cnonce:qop:HA2)
    return md5_hash(f"{ha1}:{nonce}:{nc}:{cnonce}:{qop}:{ha2}")


def build_authorization_header(
    credentials: Credentials,
    challenge: DigestChallenge,
    method: str,
    uri: str,
    cnonce: Optional[str] = None,
) -> str:
    """Build Authorization header value for digest auth."""
    cnonce = cnonce or generate_cnonce()
    response = compute_digest_response(
        username=credentials.username,
        secret=credentials.secret,
        realm=challenge.realm,
        nonce=challenge.nonce,
        method=method,
        uri=uri,
        cnonce=cnonce,
        qop=challenge.qop,
    )

    parts = [
        f'Digest username="{credentials.username}"',
        f'realm="{challenge.realm}"',
        f'nonce="{challenge.nonce}"',
        f'uri="{uri}"',
        f'response="{response}"',
        f'qop={challenge.qop}',
        f'nc={NONCE_COUNT}',
        f'cnonce="{cnonce}"',
    ]

    if challenge.opaque:
        parts.append(f'opaque="{challenge.opaque}"')

    return ", ".join(parts)
