"""
Hash & ID Primitives
====================
Opaque helpers used by the chain model.

Exports:
    Digest: Type of a digest function (str -> hex str).
    digest: SHA-256 hex digest of a UTF-8 string.
    new_id: Globally unique identifier (UUID4 string).
"""
import hashlib
import uuid
from typing import Callable

Digest = Callable[[str], str]


def digest(text: str) -> str:
    """Return the hex SHA-256 digest of the given text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def new_id() -> str:
    return str(uuid.uuid4())
