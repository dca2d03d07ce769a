"""Create the issuer's RSA signing key (if missing) and export its public key.

Usage:
    python generate_keys.py
    python generate_keys.py --key keys/jwt_private.der

The private key is DER-encoded PKCS#1 and is never overwritten. The public
key is written next to it as <name>.pub.der for distribution to audiences.
"""

import argparse
from pathlib import Path

from tokenauth.config import get_settings
from tokenauth.crypto.keys import KeyManager, marshal_public_key


def generate_keys(key_path: str) -> Path:
    private_key = KeyManager().load_private_key(key_path)

    public_path = Path(key_path).with_suffix(".pub.der")
    public_path.write_bytes(marshal_public_key(private_key.public_key()))

    print(f"Keys ready in {Path(key_path).resolve().parent}/")
    print(f"  - {Path(key_path).name} (keep secret, used by the issuer)")
    print(f"  - {public_path.name} (distribute to audiences)")
    return public_path


def main():
    parser = argparse.ArgumentParser(description="Create the issuer signing key")
    parser.add_argument("--key", default=get_settings().JWT_KEY_PATH, help="Private key path")
    args = parser.parse_args()
    generate_keys(args.key)


if __name__ == "__main__":
    main()
