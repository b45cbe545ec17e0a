"""Error taxonomy for the document store."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    FORMAT = "format"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"


class StoreError(Exception):
    """Base class for every error raised by the store itself."""

    kind: ErrorKind


class FormatError(StoreError):
    """File content does not have the expected envelope shape."""

    kind = ErrorKind.FORMAT


class AuthenticationError(StoreError):
    """Authenticated decryption failed.

    Raised for a wrong password and for a tampered or corrupted file alike;
    the two cases are deliberately not told apart.
    """

    kind = ErrorKind.AUTHENTICATION


class NotFoundError(StoreError, KeyError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, document_id: object) -> None:
        super().__init__(f"No document with id {document_id!r}")
        self.document_id = document_id

    def __str__(self) -> str:
        return str(self.args[0])
