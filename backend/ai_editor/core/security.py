"""
Security utilities: API key encryption and credential resolution.
"""

import base64
import os
from typing import Mapping, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Default salt for key derivation (in production, this should be stored securely)
DEFAULT_SALT = b"ai_editor_salt_2024"

ENCRYPTED_PREFIX = "enc:"


def get_encryption_key(password: Optional[str] = None) -> bytes:
    """
    Generate an encryption key from a password or environment variable.

    Args:
        password: Optional password to derive key from. If None, uses environment variable.

    Returns:
        Encryption key bytes.
    """
    if password is None:
        password = os.environ.get("AI_EDITOR_ENCRYPTION_KEY", "default_key_for_local_use")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=DEFAULT_SALT,
        iterations=480000,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode()))


def encrypt_api_key(api_key: str, password: Optional[str] = None) -> str:
    """
    Encrypt an API key for storage in config.yaml.

    Args:
        api_key: The API key to encrypt.
        password: Optional password for encryption.

    Returns:
        Encrypted API key as a base64-encoded string (without the "enc:" prefix).
    """
    fernet = Fernet(get_encryption_key(password))
    encrypted = fernet.encrypt(api_key.encode())
    return base64.urlsafe_b64encode(encrypted).decode()


def decrypt_api_key(encrypted_key: str, password: Optional[str] = None) -> str:
    """
    Decrypt an encrypted API key.

    Args:
        encrypted_key: The encrypted API key (base64-encoded).
        password: Optional password for decryption.

    Returns:
        Decrypted API key.
    """
    fernet = Fernet(get_encryption_key(password))
    encrypted_bytes = base64.urlsafe_b64decode(encrypted_key.encode())
    return fernet.decrypt(encrypted_bytes).decode()


class CredentialSource:
    """
    Resolves a credential reference to a secret.

    Lookup order: explicit ``credentials`` mapping (from config.yaml), then the
    environment. Values starting with "enc:" are decrypted. An unresolvable or
    undecryptable reference yields None; it never raises.
    """

    def __init__(
        self,
        credentials: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        password: Optional[str] = None,
    ):
        self._credentials = dict(credentials or {})
        self._environ = environ if environ is not None else os.environ
        self._password = password

    def resolve(self, ref: Optional[str]) -> Optional[str]:
        if not ref:
            return None
        raw = self._credentials.get(ref) or self._environ.get(ref) or ""
        raw = raw.strip()
        if raw.startswith(ENCRYPTED_PREFIX):
            try:
                raw = decrypt_api_key(raw[len(ENCRYPTED_PREFIX):], self._password).strip()
            except (InvalidToken, ValueError):
                return None
        return raw or None


def key_fingerprint(secret: str) -> str:
    """Short, non-reversible fingerprint of a secret, safe for cache keys."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(secret.encode())
    return digest.finalize().hex()[:16]
