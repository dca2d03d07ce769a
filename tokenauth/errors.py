"""Exception types raised by token parsing and key handling."""

from typing import Any


class TokenAuthError(Exception):
    """Base exception carrying a stable error code."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class CannotParse(TokenAuthError):
    """The token string is not three well-formed base64url parts with a JSON body."""

    def __init__(self, message: str = "invalid JWT string", details: dict[str, Any] | None = None):
        super().__init__("CANNOT_PARSE", message, details)


class MalformedClaim(TokenAuthError):
    """A claim holds a value that cannot be interpreted, e.g. a non-integer exp."""

    def __init__(self, claim: str, value: str):
        super().__init__(
            "MALFORMED_CLAIM",
            f"claim {claim!r} is malformed",
            {"claim": claim, "value": value},
        )


class KeyLoadError(TokenAuthError):
    def __init__(self, path: str, message: str = "cannot load key file"):
        super().__init__("KEY_LOAD_ERROR", f"{message}: {path}", {"path": path})


class KeyParseError(TokenAuthError):
    def __init__(self, message: str = "invalid PKCS#1 key bytes"):
        super().__init__("KEY_PARSE_ERROR", message)


class KeyFetchError(TokenAuthError):
    def __init__(self, url: str, message: str = "public key fetch failed"):
        super().__init__("KEY_FETCH_ERROR", f"{message}: {url}", {"url": url})
