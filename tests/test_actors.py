"""Tests for minting, stringifying and verifying tokens."""

import logging
import re
import time
from datetime import timedelta

from tokenauth.auth.actors import Audience, Rejection
from tokenauth.auth.token import encode_segment, from_string
from tokenauth.errors import CannotParse
from tokenauth.schemas import Header


def _parts(token: str) -> list[str]:
    return token.split(".")


def _flip_char(segment: str, index: int) -> str:
    replacement = "A" if segment[index] != "A" else "B"
    return segment[:index] + replacement + segment[index + 1:]


def test_mint_token(issuer):
    before = int(time.time())
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))

    assert jwt.header == Header()
    assert jwt.signature == b""
    assert jwt.body.subject == "alice"
    assert jwt.body.audience == "chat"
    assert jwt.body.issuer == "auth"
    assert before + 300 <= int(jwt.body.expiration) <= int(time.time()) + 300
    assert re.fullmatch(r"[0-9A-F]{32}", jwt.body.jwt_id)


def test_mint_token_fresh_id(issuer):
    a = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    b = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    assert a.body.jwt_id != b.body.jwt_id


def test_round_trip(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    parsed = from_string(issuer.stringify_jwt(jwt))

    assert parsed.body == jwt.body
    assert audience.is_valid(parsed)
    assert audience.check(parsed) is None


def test_stringify_wire_format(issuer):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    header, body, sig = _parts(issuer.stringify_jwt(jwt))

    assert header == encode_segment(b'{"alg":"RS256","typ":"JWT"}')
    assert body == encode_segment(jwt.body.to_bytes())
    assert "=" not in sig
    assert jwt.signature == b""


def test_stringify_is_non_deterministic(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    first = issuer.stringify_jwt(jwt)
    second = issuer.stringify_jwt(jwt)

    assert _parts(first)[:2] == _parts(second)[:2]
    assert _parts(first)[2] != _parts(second)[2]
    assert audience.is_valid(from_string(first))
    assert audience.is_valid(from_string(second))


def test_expired_token_rejected(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(seconds=-1))
    parsed = from_string(issuer.stringify_jwt(jwt))

    assert not audience.is_valid(parsed)
    assert audience.check(parsed) is Rejection.EXPIRED


def test_audience_mismatch(issuer, private_key):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    parsed = from_string(issuer.stringify_jwt(jwt))
    other = Audience(private_key.public_key(), "billing")

    assert not other.is_valid(parsed)
    assert other.check(parsed) is Rejection.WRONG_AUDIENCE


def test_wrong_key(issuer, other_private_key):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    parsed = from_string(issuer.stringify_jwt(jwt))
    stranger = Audience(other_private_key.public_key(), "chat")

    assert stranger.check(parsed) is Rejection.BAD_SIGNATURE


def test_malformed_expiration_fails_closed(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    bad = jwt.model_copy(update={"body": jwt.body.model_copy(update={"expiration": "tomorrow"})})
    parsed = from_string(issuer.stringify_jwt(bad))

    assert not audience.is_valid(parsed)
    assert audience.check(parsed) is Rejection.MALFORMED_CLAIM


def test_signature_bit_flip(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    header, body, sig = _parts(issuer.stringify_jwt(jwt))
    raw = bytearray(from_string(".".join([header, body, sig])).signature)

    for index in (0, len(raw) // 2, len(raw) - 1):
        tampered = bytearray(raw)
        tampered[index] ^= 0x01
        parsed = from_string(".".join([header, body, encode_segment(bytes(tampered))]))
        assert audience.check(parsed) is Rejection.BAD_SIGNATURE


def test_body_tampering(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    header, body, sig = _parts(issuer.stringify_jwt(jwt))

    forged = jwt.body.model_copy(update={"subject": "mallory"})
    parsed = from_string(".".join([header, encode_segment(forged.to_bytes()), sig]))
    assert parsed.body.subject == "mallory"
    assert not audience.is_valid(parsed)

    for index in range(len(body)):
        try:
            parsed = from_string(".".join([header, _flip_char(body, index), sig]))
        except CannotParse:
            continue
        if parsed.body == jwt.body:
            # flipped only the unused low bits of the final character
            continue
        assert not audience.is_valid(parsed)


def test_forged_header_does_not_matter(issuer, audience):
    jwt = issuer.mint_token("alice", "chat", timedelta(minutes=5))
    _, body, sig = _parts(issuer.stringify_jwt(jwt))
    forged = encode_segment(b'{"alg":"none","typ":"JWT"}')

    parsed = from_string(".".join([forged, body, sig]))
    assert parsed.header == Header()
    assert audience.is_valid(parsed)


def test_oversized_expiration_fails_closed(audience):
    body = b'{"aud":"chat","exp":"' + b"9" * 5000 + b'"}'
    parsed = from_string(".".join(["h", encode_segment(body), encode_segment(b"sig")]))

    assert not audience.is_valid(parsed)
    assert audience.check(parsed) is Rejection.MALFORMED_CLAIM


def test_rejection_log_escapes_jwt_id(issuer, audience, caplog):
    jwt = issuer.mint_token("alice", "billing", timedelta(minutes=5))
    forged = jwt.model_copy(update={
        "body": jwt.body.model_copy(update={"jwt_id": "X\nINFO forged line"}),
    })

    with caplog.at_level(logging.WARNING, logger="tokenauth.auth.actors"):
        assert not audience.is_valid(from_string(issuer.stringify_jwt(forged)))

    message = caplog.records[-1].getMessage()
    assert "\n" not in message
    assert "'X\\nINFO forged line'" in message
