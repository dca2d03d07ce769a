"""RSA key generation, PKCS#1 DER encoding, and load-or-create key files."""

import logging
import threading
from pathlib import Path

import httpx
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tokenauth.errors import KeyFetchError, KeyLoadError, KeyParseError

logger = logging.getLogger(__name__)

KEY_SIZE = 2048


def generate_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=KEY_SIZE,
    )


def marshal_private_key(key: rsa.RSAPrivateKey) -> bytes:
    # TraditionalOpenSSL + DER is the PKCS#1 RSAPrivateKey structure
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def marshal_public_key(key: rsa.RSAPublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.PKCS1,
    )


def parse_private_bytes(data: bytes) -> rsa.RSAPrivateKey:
    """Parse a DER RSA private key. Raises KeyParseError unless it is RSA.

    Key files are written as PKCS#1, but PKCS#8 input is accepted too.
    """
    try:
        key = serialization.load_der_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        raise KeyParseError(f"invalid private key: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyParseError("private key is not an RSA key")
    return key


def parse_public_bytes(data: bytes) -> rsa.RSAPublicKey:
    """Parse a DER RSA public key. Raises KeyParseError unless it is RSA.

    Served keys are PKCS#1, but SubjectPublicKeyInfo input is accepted too.
    """
    try:
        key = serialization.load_der_public_key(data)
    except (ValueError, TypeError) as e:
        raise KeyParseError(f"invalid public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyParseError("public key is not an RSA key")
    return key


def save_bytes(data: bytes, path: str | Path) -> None:
    """Write ``data`` to a new file at ``path``.

    The file is opened in exclusive-create mode, so an existing key file is
    never overwritten. Raises FileExistsError if one is already there.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "xb") as f:
        f.write(data)


def fetch_public_key(
    url: str,
    timeout: float = 5.0,
    client: httpx.Client | None = None,
) -> rsa.RSAPublicKey:
    """GET a DER PKCS#1 public key from ``url``.

    No caching and no retries. Where the key comes from is the caller's
    trust decision; this is a convenience accessor only.
    """
    try:
        if client is None:
            resp = httpx.get(url, timeout=timeout)
        else:
            resp = client.get(url, timeout=timeout)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Public key fetch from %s failed: %s", url, e)
        raise KeyFetchError(url, str(e)) from e
    return parse_public_bytes(resp.content)


class KeyManager:
    """Path-keyed cache of raw key bytes with load-or-create semantics.

    Each path is populated at most once per manager. Concurrent first loads
    of the same path are serialized by a per-path lock, so only one key is
    ever generated for it. Cached bytes are never invalidated.
    """

    def __init__(self) -> None:
        self._cache: dict[str, bytes] = {}
        self._path_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _cached(self, key: str) -> bytes | None:
        with self._lock:
            return self._cache.get(key)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._lock:
            return self._path_locks.setdefault(key, threading.Lock())

    def load_key_bytes(self, path: str | Path) -> bytes:
        """Return the raw private key bytes stored at ``path``.

        If no file exists, a new RSA key is generated and written there
        first. Raises KeyLoadError if the file cannot be created or read.
        """
        key = str(path)
        cached = self._cached(key)
        if cached is not None:
            return cached

        with self._lock_for(key):
            cached = self._cached(key)
            if cached is not None:
                return cached

            fp = Path(key)
            if not fp.exists():
                self._create(fp)

            try:
                data = fp.read_bytes()
            except OSError as e:
                raise KeyLoadError(key, str(e)) from e

            with self._lock:
                self._cache[key] = data
            logger.info("Loaded key file %s (%d bytes)", key, len(data))
            return data

    def _create(self, fp: Path) -> None:
        data = marshal_private_key(generate_private_key())
        try:
            save_bytes(data, fp)
        except OSError as e:
            if fp.is_file():
                # another process created it between the check and the write
                logger.info("Key file %s appeared concurrently, using it", fp)
                return
            logger.exception("Cannot persist generated key to %s", fp)
            raise KeyLoadError(str(fp), "cannot persist generated key") from e
        logger.info("Generated new %d-bit RSA key at %s", KEY_SIZE, fp)

    def load_private_key(self, path: str | Path) -> rsa.RSAPrivateKey:
        return parse_private_bytes(self.load_key_bytes(path))
