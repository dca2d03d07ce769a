"""Mint a signed token with the issuer key.

Usage:
    python scripts/mint_token.py <subject> <audience>
    python scripts/mint_token.py <subject> <audience> --minutes 30 --issuer auth

The key file is created on first use if it does not exist yet.
"""

import argparse
import sys
from datetime import timedelta

from tokenauth.auth.service import load_issuer
from tokenauth.config import get_settings
from tokenauth.crypto.keys import KeyManager
from tokenauth.errors import TokenAuthError


def mint(subject: str, audience: str, minutes: int, key_path: str, issuer_name: str) -> str:
    issuer = load_issuer(KeyManager(), key_path, issuer_name)
    jwt = issuer.mint_token(subject, audience, timedelta(minutes=minutes))
    return issuer.stringify_jwt(jwt)


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Mint a signed token")
    parser.add_argument("subject", help="Token subject (sub)")
    parser.add_argument("audience", help="Intended audience (aud)")
    parser.add_argument("--minutes", "-m", type=int, default=settings.TOKEN_EXPIRE_MINUTES,
                        help=f"Lifetime in minutes (default: {settings.TOKEN_EXPIRE_MINUTES})")
    parser.add_argument("--key", default=settings.JWT_KEY_PATH, help="Private key path")
    parser.add_argument("--issuer", default=settings.JWT_ISSUER_NAME, help="Issuer name (iss)")
    args = parser.parse_args()

    try:
        print(mint(args.subject, args.audience, args.minutes, args.key, args.issuer))
    except TokenAuthError as e:
        print(f"[ERROR] {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
