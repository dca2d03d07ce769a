"""RSA-PSS signatures over SHA-256 digests.

Every signature in this package is produced over the digest of
``header_bytes + body_bytes``. Signing uses the maximum salt length and
verification detects the salt length from the signature, so tokens signed
by other implementations with a different PSS salt still verify.
"""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

_SIGN_PADDING = padding.PSS(
    mgf=padding.MGF1(hashes.SHA256()),
    salt_length=padding.PSS.MAX_LENGTH,
)
_VERIFY_PADDING = padding.PSS(
    mgf=padding.MGF1(hashes.SHA256()),
    salt_length=padding.PSS.AUTO,
)


def hash_digest(data: bytes) -> bytes:
    """Return the 32-byte SHA-256 digest of ``data``."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data)
    return digest.finalize()


def signature(data: bytes, private_key: rsa.RSAPrivateKey) -> bytes:
    """Sign ``data`` with RSA-PSS. Randomized: repeated calls differ."""
    return private_key.sign(
        hash_digest(data),
        _SIGN_PADDING,
        utils.Prehashed(hashes.SHA256()),
    )


def verify_signature(data: bytes, sig: bytes, public_key: rsa.RSAPublicKey) -> bool:
    """Return True if ``sig`` is a valid signature of ``data``. Never raises."""
    try:
        public_key.verify(
            sig,
            hash_digest(data),
            _VERIFY_PADDING,
            utils.Prehashed(hashes.SHA256()),
        )
    except (InvalidSignature, ValueError, TypeError):
        return False
    return True
