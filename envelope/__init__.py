"""
Envelope Module

On-disk envelope for the document store.

This module provides:
- PBKDF2 key derivation with per-write salts
- AEAD encryption (AES-256-GCM, ChaCha20-Poly1305)
- Encoding/decoding of plain and encrypted store files
- Typed error taxonomy for format and authentication failures
"""

__version__ = "0.1.0"

from .errors import AuthenticationError, ErrorKind, FormatError, NotFoundError, StoreError

__all__ = [
    "AuthenticationError",
    "ErrorKind",
    "FormatError",
    "NotFoundError",
    "StoreError",
]
