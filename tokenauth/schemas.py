"""Pydantic models for the token header and claims, and their canonical bytes."""

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ALG = "RS256"
TYP = "JWT"

# Characters escaped by HTML-safe JSON encoders. Escaping them keeps the
# canonical bytes identical to tokens minted by other implementations.
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def canonical_json(value: Any) -> bytes:
    """Compact, key-order-preserving UTF-8 JSON."""
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


class Header(BaseModel):
    model_config = ConfigDict(frozen=True)

    alg: Literal["RS256"] = ALG
    typ: Literal["JWT"] = TYP

    def to_bytes(self) -> bytes:
        return canonical_json(self.model_dump())


class Body(BaseModel):
    """Token claims. Field order is the wire order."""

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    subject: str = Field(default="", alias="sub")
    audience: str = Field(default="", alias="aud")
    issuer: str = Field(default="", alias="iss")
    expiration: str = Field(default="", alias="exp")  # Unix seconds
    jwt_id: str = Field(default="", alias="jti")

    def to_bytes(self) -> bytes:
        return canonical_json(self.model_dump(by_alias=True))
