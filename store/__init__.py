"""
Store Module

Single-file JSON document store with optional encryption.

This module provides:
- Immutable store configuration (password, KDF and cipher settings)
- Insert/find/update/delete over JSON documents
- Atomic whole-file persistence
- All-or-nothing password rotation
"""

__version__ = "0.1.0"

from envelope.errors import AuthenticationError, ErrorKind, FormatError, NotFoundError, StoreError

from .repository import DocumentStore, open_store
from .rotation import change_password
from .schemas import Document, StoreConfig

__all__ = [
    "AuthenticationError",
    "Document",
    "DocumentStore",
    "ErrorKind",
    "FormatError",
    "NotFoundError",
    "StoreConfig",
    "StoreError",
    "change_password",
    "open_store",
]
