"""Token model: parsing the three-part string, canonical bytes, expiry."""

import base64
import binascii
import re
import secrets
import time

from jwt.utils import base64url_decode, base64url_encode
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tokenauth.errors import CannotParse, MalformedClaim
from tokenauth.schemas import Body, Header, canonical_json

_B64URL = re.compile(r"[A-Za-z0-9_-]*")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


class Jwt(BaseModel):
    """Header, claims and raw signature bytes.

    Minted tokens carry an empty signature; the signature only exists in the
    string form produced by ``Issuer.stringify_jwt``.
    """

    model_config = ConfigDict(frozen=True)

    header: Header = Field(default_factory=Header)
    body: Body
    signature: bytes = b""

    def signed_bytes(self) -> bytes:
        """The exact bytes covered by the signature: header JSON + body JSON."""
        return self.header.to_bytes() + self.body.to_bytes()

    def to_bytes(self) -> bytes:
        return canonical_json({
            "Header": self.header.model_dump(),
            "Body": self.body.model_dump(by_alias=True),
            "Signature": base64.b64encode(self.signature).decode("ascii"),
        })

    def expires_at(self) -> int:
        """Return ``exp`` as Unix seconds.

        Raises MalformedClaim unless ``exp`` is a decimal integer that fits in
        a signed 64-bit value.
        """
        exp = self.body.expiration
        if not _INTEGER.fullmatch(exp):
            raise MalformedClaim("exp", exp)
        try:
            value = int(exp)
        except ValueError as e:
            # longer than the interpreter's int-string digit limit
            raise MalformedClaim("exp", exp) from e
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise MalformedClaim("exp", exp)
        return value

    def expired(self) -> bool:
        """True if the current time is strictly after ``exp``."""
        return time.time() > self.expires_at()

    @classmethod
    def from_string(cls, token: str) -> "Jwt":
        return from_string(token)


def _decode_segment(segment: str) -> bytes:
    # urlsafe_b64decode silently drops foreign characters, so check first
    if not _B64URL.fullmatch(segment):
        raise CannotParse("segment is not base64url")
    try:
        return base64url_decode(segment)
    except (binascii.Error, ValueError) as e:
        raise CannotParse("segment is not base64url") from e


def encode_segment(data: bytes) -> str:
    return base64url_encode(data).decode("ascii")


def from_string(token: str) -> Jwt:
    """Parse a token string. Does not verify it.

    The header segment is ignored: parsed tokens always get the one
    supported Header, so nothing on the wire can select the algorithm.
    Raises CannotParse on any structural problem.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise CannotParse(f"expected 3 segments, got {len(parts)}")

    raw_body = _decode_segment(parts[1])
    sig = _decode_segment(parts[2])

    try:
        body = Body.model_validate_json(raw_body)
    except ValidationError as e:
        raise CannotParse("body is not valid claim JSON") from e

    return Jwt(header=Header(), body=body, signature=sig)


def new_jwt_id() -> str:
    """16 random bytes as 32 uppercase hex characters."""
    return secrets.token_bytes(16).hex().upper()
