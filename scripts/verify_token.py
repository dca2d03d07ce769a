"""Check a token as an audience would.

Usage:
    python scripts/verify_token.py <token> --audience <name> --key keys/jwt_private.der
    python scripts/verify_token.py <token> --audience <name> --url http://localhost:8000/jwtkeypub

With --key the public half of the issuer's private key is trusted; with
--url the public key is fetched from the issuer's key service.
Exit status is 0 for a valid token and 1 otherwise.
"""

import argparse
import sys
from pathlib import Path

from tokenauth.auth.actors import Audience
from tokenauth.auth.service import audience_from_url
from tokenauth.auth.token import from_string
from tokenauth.config import get_settings
from tokenauth.crypto.keys import KeyManager
from tokenauth.errors import TokenAuthError


def verify(token: str, audience: Audience) -> str:
    """Return "valid" or the rejection reason."""
    reason = audience.check(from_string(token))
    return "valid" if reason is None else reason.value


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Verify a signed token")
    parser.add_argument("token", help="Token string")
    parser.add_argument("--audience", "-a", default=settings.JWT_AUDIENCE_NAME,
                        help="This audience's name")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--key", help="Issuer private key path (trust its public half)")
    source.add_argument("--url", default=settings.JWT_PUBLIC_KEY_URL,
                        help="Issuer public key URL")
    args = parser.parse_args()

    if args.key and not Path(args.key).exists():
        print(f"[ERROR] Key file not found: {args.key}")
        sys.exit(1)

    try:
        if args.key:
            private_key = KeyManager().load_private_key(args.key)
            audience = Audience(private_key.public_key(), args.audience)
        else:
            audience = audience_from_url(args.url, args.audience, settings.JWT_FETCH_TIMEOUT)
        result = verify(args.token, audience)
    except TokenAuthError as e:
        print(f"[ERROR] {e.message}")
        sys.exit(1)

    print(result)
    sys.exit(0 if result == "valid" else 1)


if __name__ == "__main__":
    main()
