"""
PBKDF2 key derivation for encrypted store files.
"""

from __future__ import annotations

import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


KEY_LENGTH = 32
SALT_LENGTH = 16
DEFAULT_ITERATIONS = 100_000
DEFAULT_DIGEST = "sha256"

_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
}

SUPPORTED_DIGESTS = tuple(_DIGESTS)


def resolve_digest(name: str) -> hashes.HashAlgorithm:
    """Return a hash instance for a digest name such as ``"sha256"``."""
    try:
        return _DIGESTS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unsupported digest {name!r}; expected one of {', '.join(SUPPORTED_DIGESTS)}"
        ) from None


def new_salt() -> bytes:
    """Return ``SALT_LENGTH`` fresh random bytes."""
    return os.urandom(SALT_LENGTH)


def derive_key(
    password: str,
    salt: bytes,
    iterations: int = DEFAULT_ITERATIONS,
    digest: str = DEFAULT_DIGEST,
) -> bytes:
    """Derive a ``KEY_LENGTH``-byte key from *password* and *salt*.

    Args:
        password: Password text, UTF-8 encoded before stretching
        salt: Salt bytes as stored alongside the ciphertext
        iterations: PBKDF2 iteration count
        digest: HMAC digest name

    Returns:
        The derived key; identical inputs always give the same key.
    """
    if iterations <= 0:
        raise ValueError("iterations must be a positive integer")
    kdf = PBKDF2HMAC(
        algorithm=resolve_digest(digest),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))
