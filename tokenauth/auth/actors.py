"""Issuer (signs tokens) and Audience (verifies tokens addressed to it)."""

import enum
import logging
import time
from datetime import timedelta

from cryptography.hazmat.primitives.asymmetric import rsa

from tokenauth.auth.token import Jwt, encode_segment, new_jwt_id
from tokenauth.crypto import rs256
from tokenauth.errors import MalformedClaim
from tokenauth.schemas import Body, Header

logger = logging.getLogger(__name__)


class Rejection(enum.Enum):
    WRONG_AUDIENCE = "wrong_audience"
    EXPIRED = "expired"
    MALFORMED_CLAIM = "malformed_claim"
    BAD_SIGNATURE = "bad_signature"


class Issuer:
    def __init__(self, private_key: rsa.RSAPrivateKey, name: str) -> None:
        self._private_key = private_key
        self.name = name

    def public_key(self) -> rsa.RSAPublicKey:
        return self._private_key.public_key()

    def mint_token(self, sub: str, aud: str, duration: timedelta) -> Jwt:
        """Build an unsigned token for ``sub`` addressed to ``aud``."""
        exp = int(time.time() + duration.total_seconds())
        return Jwt(
            header=Header(),
            body=Body(
                subject=sub,
                audience=aud,
                issuer=self.name,
                expiration=str(exp),
                jwt_id=new_jwt_id(),
            ),
        )

    def stringify_jwt(self, jwt: Jwt) -> str:
        """Sign ``jwt`` and return ``header.body.signature``.

        Non-deterministic: PSS padding is randomized, so two calls on the same
        token give different signatures. Both verify.
        """
        h = jwt.header.to_bytes()
        b = jwt.body.to_bytes()
        sig = rs256.signature(h + b, self._private_key)
        return ".".join([encode_segment(h), encode_segment(b), encode_segment(sig)])


class Audience:
    def __init__(self, public_key: rsa.RSAPublicKey, name: str) -> None:
        self._public_key = public_key
        self.name = name

    def check(self, jwt: Jwt) -> Rejection | None:
        """Return why ``jwt`` is rejected, or None if it is valid.

        Checks run in order and stop at the first failure: audience claim,
        expiry, then signature.
        """
        if jwt.body.audience != self.name:
            return Rejection.WRONG_AUDIENCE

        try:
            if jwt.expired():
                return Rejection.EXPIRED
        except MalformedClaim:
            return Rejection.MALFORMED_CLAIM

        if not rs256.verify_signature(jwt.signed_bytes(), jwt.signature, self._public_key):
            return Rejection.BAD_SIGNATURE
        return None

    def is_valid(self, jwt: Jwt) -> bool:
        reason = self.check(jwt)
        if reason is not None:
            logger.warning(
                "Rejected token jti=%r for audience %s: %s",
                jwt.body.jwt_id, self.name, reason.value,
            )
        return reason is None
