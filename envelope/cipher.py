"""
Authenticated encryption for store payloads.

Both supported algorithms are AEAD constructions from ``cryptography``. The
library appends the 16-byte tag to the ciphertext; this module keeps the tag
as a separate field because the file format stores it separately.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .errors import AuthenticationError


IV_LENGTH = 12
TAG_LENGTH = 16
DEFAULT_ALGORITHM = "aes-256-gcm"

_ALGORITHMS = {
    "aes-256-gcm": AESGCM,
    "chacha20-poly1305": ChaCha20Poly1305,
}

SUPPORTED_ALGORITHMS = tuple(_ALGORITHMS)


@dataclass(frozen=True)
class Sealed:
    """Output of a single encryption call."""

    iv: bytes
    tag: bytes
    ciphertext: bytes


class AuthenticatedCipher:
    """Encrypt and decrypt byte payloads under a 32-byte key."""

    algorithm: str

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        name = algorithm.lower()
        if name not in _ALGORITHMS:
            raise ValueError(
                f"Unsupported algorithm {algorithm!r}; "
                f"expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
            )
        self.algorithm = name

    def encrypt(self, plaintext: bytes, key: bytes) -> Sealed:
        iv = os.urandom(IV_LENGTH)
        aead = _ALGORITHMS[self.algorithm](key)
        sealed = aead.encrypt(iv, plaintext, None)
        return Sealed(
            iv=iv,
            tag=sealed[-TAG_LENGTH:],
            ciphertext=sealed[:-TAG_LENGTH],
        )

    def decrypt(self, iv: bytes, tag: bytes, ciphertext: bytes, key: bytes) -> bytes:
        """Return the plaintext, or raise :class:`AuthenticationError`.

        A wrong key, a modified tag or ciphertext, a truncated tag and an IV of
        unusable length all fail the same way.
        """
        if len(tag) != TAG_LENGTH:
            raise AuthenticationError("Authentication failed: wrong password or corrupted data")
        try:
            aead = _ALGORITHMS[self.algorithm](key)
            return aead.decrypt(iv, ciphertext + tag, None)
        except (InvalidTag, ValueError) as exc:
            raise AuthenticationError(
                "Authentication failed: wrong password or corrupted data"
            ) from exc
