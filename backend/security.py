"""
Symmetric token encryption.

Used for the per-user `x-token` the agent platform sends on tool calls and
for agent API keys stored in the users table.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from backend.config import settings


def _fernet(secret: str | None = None) -> Fernet:
    # Fernet needs 32 url-safe base64 bytes; derive them from the passphrase
    digest = hashlib.sha256((secret or settings.encryption_key).encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt(text: str, secret: str | None = None) -> str:
    """Encrypt text into an opaque url-safe token."""
    return _fernet(secret).encrypt(text.encode("utf-8")).decode("ascii")


def decrypt(token: str, secret: str | None = None) -> str:
    """
    Decrypt a token produced by `encrypt`.

    Raises:
        ValueError: token is malformed or was encrypted with another key
    """
    try:
        return _fernet(secret).decrypt(token.encode("ascii")).decode("utf-8")
    except (InvalidToken, UnicodeError) as e:
        raise ValueError("Invalid token") from e
