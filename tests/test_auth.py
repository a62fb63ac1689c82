"""Tests for digest challenge parsing and response building."""

import re

import pytest

from slidelocal.rpc.auth import (
    NONCE_COUNT,
    Credentials,
    DigestChallenge,
    build_authorization_header,
    compute_digest_response,
    generate_cnonce,
    parse_www_authenticate,
)
from slidelocal.rpc.errors import MissingChallenge


def test_parse_challenge():
    """Test parsing a typical Slide challenge."""
    challenge = parse_www_authenticate(
        'Digest realm="slide", qop="auth", nonce="abc123", opaque="xyz"'
    )
    assert challenge.realm == "slide"
    assert challenge.qop == "auth"
    assert challenge.nonce == "abc123"
    assert challenge.opaque == "xyz"
    assert challenge.algorithm is None


def test_parse_challenge_without_scheme():
    """Test parsing succeeds without the Digest prefix."""
    challenge = parse_www_authenticate('realm="slide", nonce="abc123"')
    assert challenge.realm == "slide"
    assert challenge.nonce == "abc123"
    assert challenge.qop == "auth"  # default
    assert challenge.opaque is None


def test_parse_challenge_unquoted_values():
    """Test unquoted tokens end at the next comma."""
    challenge = parse_www_authenticate(
        'Digest realm="slide", nonce="n", algorithm=MD5, qop=auth'
    )
    assert challenge.algorithm == "MD5"
    assert challenge.qop == "auth"


def test_parse_challenge_keeps_unknown_keys():
    """Test unknown parameters are preserved."""
    challenge = parse_www_authenticate(
        'Digest realm="slide", nonce="n", stale=FALSE, domain="/rpc"'
    )
    assert challenge.params["stale"] == "FALSE"
    assert challenge.params["domain"] == "/rpc"


def test_parse_challenge_quoted_comma():
    """Test quoted values may contain commas."""
    challenge = parse_www_authenticate(
        'Digest realm="a, b", nonce="n", qop="auth,auth-int"'
    )
    assert challenge.realm == "a, b"
    assert challenge.qop == "auth"


def test_parse_challenge_no_unescaping():
    """Test only the surrounding quotes are removed."""
    challenge = parse_www_authenticate('Digest realm="sl\\ide", nonce="n"')
    assert challenge.realm == "sl\\ide"


@pytest.mark.parametrize("header", [
    None,
    "",
    "   ",
    "Digest",
    'Digest realm="slide"',
    'Digest nonce="abc"',
    "Basic realm=\"slide\"",
])
def test_parse_challenge_incomplete(header):
    """Test missing realm or nonce is an explicit failure."""
    with pytest.raises(MissingChallenge):
        parse_www_authenticate(header)


def test_credentials_require_both_parts():
    """Test credentials exist only with username and secret."""
    assert Credentials.from_options("user", "code") == Credentials("user", "code")
    assert Credentials.from_options("user", None) is None
    assert Credentials.from_options(None, "code") is None
    assert Credentials.from_options("", "code") is None


def test_compute_response_fixture():
    """Test response hash for the Slide regression fixture."""
    response = compute_digest_response(
        username="user",
        secret="rWU7G45S",
        realm="slide",
        nonce="N1",
        method="POST",
        uri="/rpc/Slide.GetInfo",
        cnonce="C1",
        qop="auth",
        nc="00000001",
    )
    assert response == "7d89503580b325f1b6b968b6c2a5e55c"


def test_compute_response_rfc2617_vector():
    """Test against the RFC 2617 section 3.5 example."""
    response = compute_digest_response(
        username="Mufasa",
        secret="Circle Of Life",
        realm="testrealm@host.com",
        nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093",
        method="GET",
        uri="/dir/index.html",
        cnonce="0a4f113b",
    )
    assert response == "6629fae49393a05397450978507c4ef1"


def test_build_header():
    """Test Authorization header layout with a fixed cnonce."""
    challenge = DigestChallenge(realm="slide", nonce="N1", qop="auth")
    header = build_authorization_header(
        Credentials("user", "rWU7G45S"),
        challenge,
        method="POST",
        uri="/rpc/Slide.GetInfo",
        cnonce="C1",
    )
    assert header == (
        'Digest username="user", realm="slide", nonce="N1", '
        'uri="/rpc/Slide.GetInfo", response="7d89503580b325f1b6b968b6c2a5e55c", '
        'qop=auth, nc=00000001, cnonce="C1"'
    )


def test_build_header_with_opaque():
    """Test opaque is appended only when present."""
    challenge = DigestChallenge(realm="slide", nonce="N1", opaque="xyz")
    header = build_authorization_header(
        Credentials("user", "secret"), challenge, method="POST", uri="/rpc/Slide.Stop"
    )
    assert header.endswith(', opaque="xyz"')
    assert f"nc={NONCE_COUNT}" in header


def test_build_header_fresh_cnonce():
    """Test every header gets a new random cnonce."""
    challenge = DigestChallenge(realm="slide", nonce="N1")
    creds = Credentials("user", "secret")
    first = build_authorization_header(creds, challenge, method="POST", uri="/rpc/Slide.Stop")
    second = build_authorization_header(creds, challenge, method="POST", uri="/rpc/Slide.Stop")

    cnonces = [re.search(r'cnonce="([0-9a-f]+)"', h).group(1) for h in (first, second)]
    assert cnonces[0] != cnonces[1]


def test_generate_cnonce():
    """Test cnonce is 8 random bytes hex encoded."""
    cnonce = generate_cnonce()
    assert re.fullmatch(r"[0-9a-f]{16}", cnonce)
