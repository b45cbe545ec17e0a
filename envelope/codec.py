"""
Encoding and decoding of the store file.

Plain files hold the JSON array of documents. Encrypted files hold a single
line ``<saltHex>:<ivHex>:<authTagHex>:<ciphertextHex>`` whose ciphertext
decrypts to that same JSON array.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Protocol

from .cipher import AuthenticatedCipher
from .errors import AuthenticationError, FormatError
from .kdf import derive_key, new_salt


SEPARATOR = ":"
_HEX = re.compile(r"(?:[0-9a-fA-F]{2})*")

Document = dict[str, Any]


class EnvelopeSettings(Protocol):
    """Settings the codec reads; satisfied by ``store.schemas.StoreConfig``."""

    @property
    def password(self) -> str | None: ...

    @property
    def iterations(self) -> int: ...

    @property
    def digest(self) -> str: ...

    @property
    def algorithm(self) -> str: ...


def _salt_material(salt_hex: str) -> bytes:
    # The key is stretched from the hex text of the salt, as written in the file.
    return salt_hex.encode("ascii")


def _parse_documents(text: str) -> list[Document]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Store content is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise FormatError("Store content must be a JSON array of documents")
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise FormatError(f"Store entry {index} is not a JSON object")
    return data


def _as_text(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError("Store file is not valid UTF-8") from exc


def _unhex(component: str, name: str) -> bytes:
    if _HEX.fullmatch(component) is None:
        raise AuthenticationError(f"Authentication failed: {name} component is corrupted")
    return bytes.fromhex(component)


def serialize(documents: Sequence[Document]) -> str:
    """JSON text for a list of documents, 2-space indented."""
    return json.dumps(list(documents), indent=2, ensure_ascii=False)


def decode(data: bytes | str, settings: EnvelopeSettings) -> list[Document]:
    """Decode file content into the list of stored documents.

    Raises:
        FormatError: Content is not a valid envelope or JSON document array
        AuthenticationError: Wrong password, or ciphertext/tag was modified
    """
    text = _as_text(data)
    if settings.password is None:
        return _parse_documents(text)

    text = text.strip()
    salt_hex, separator, encrypted_part = text.partition(SEPARATOR)
    if not separator:
        raise FormatError("Invalid file format: missing salt separator")
    parts = encrypted_part.split(SEPARATOR)
    if len(parts) != 3:
        raise FormatError("Invalid encrypted text format: expected iv:authTag:ciphertext")
    _unhex(salt_hex, "salt")
    iv = _unhex(parts[0], "iv")
    tag = _unhex(parts[1], "authTag")
    ciphertext = _unhex(parts[2], "ciphertext")

    key = derive_key(
        settings.password,
        _salt_material(salt_hex),
        iterations=settings.iterations,
        digest=settings.digest,
    )
    plaintext = AuthenticatedCipher(settings.algorithm).decrypt(iv, tag, ciphertext, key)
    try:
        return _parse_documents(plaintext.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise FormatError("Decrypted payload is not valid UTF-8") from exc


def encode(documents: Sequence[Document], settings: EnvelopeSettings) -> bytes:
    """Encode documents into file content.

    Each encrypted encode uses a fresh salt and IV, so writing the same
    documents twice never yields the same bytes.
    """
    payload = serialize(documents)
    if settings.password is None:
        return payload.encode("utf-8")

    salt_hex = new_salt().hex()
    key = derive_key(
        settings.password,
        _salt_material(salt_hex),
        iterations=settings.iterations,
        digest=settings.digest,
    )
    sealed = AuthenticatedCipher(settings.algorithm).encrypt(payload.encode("utf-8"), key)
    envelope = SEPARATOR.join(
        [salt_hex, sealed.iv.hex(), sealed.tag.hex(), sealed.ciphertext.hex()]
    )
    return envelope.encode("ascii")
