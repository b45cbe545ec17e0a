"""Password rotation for encrypted stores."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from envelope.errors import AuthenticationError, FormatError

if TYPE_CHECKING:
    from .repository import DocumentStore


logger = logging.getLogger(__name__)


def change_password(
    store: "DocumentStore",
    old_password: str | None,
    new_password: str,
) -> None:
    """Re-encrypt *store* under *new_password*, all or nothing.

    The file is first decoded with *old_password*. Only if that succeeds is
    the content re-encoded with a fresh salt and IV under *new_password* and
    written; the store's config switches to the new password after the write
    has landed. ``old_password=None`` reads a plain store, which is then
    encrypted.

    Raises:
        AuthenticationError: The file does not decode under *old_password*;
            neither the file nor the store's config is changed
        ValueError: *new_password* is empty
    """
    if not isinstance(new_password, str) or not new_password:
        raise ValueError("new_password must be a non-empty string")

    with store._lock:
        current = store.config
        try:
            documents = store._read(current.with_password(old_password))
        except (AuthenticationError, FormatError) as exc:
            logger.warning(f"Password change rejected for {store.path}: {exc.kind.value} error")
            raise AuthenticationError("Invalid old password. Password change aborted.") from exc

        rotated = current.with_password(new_password)
        store._write(documents, rotated)
        store.config = rotated

    logger.info(f"Re-encrypted {len(documents)} document(s) in {store.path} under a new password")
