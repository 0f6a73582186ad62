"""At-rest encryption for config values flagged ``encrypted``.

LLM API keys, the Plex token, *arr API keys and the tool gateway token are
stored as Fernet tokens. The key is SHA-256 of ``APP_SECRET_KEY``, so
rotating that setting makes previously stored secrets unreadable.
"""

import base64
import hashlib
from functools import lru_cache

import structlog
from cryptography.fernet import Fernet, InvalidToken

from thinkarr.config import get_settings

logger = structlog.get_logger(__name__)

_INSECURE_DEFAULT_KEYS = frozenset(
    {"", "change-me-in-production", "change-this-to-a-random-secret-key"}
)


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    secret = get_settings().app_secret_key
    if secret in _INSECURE_DEFAULT_KEYS:
        raise ValueError(
            "APP_SECRET_KEY must be set to a random value before secrets can be stored"
        )
    return Fernet(base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest()))


def encrypt_secret(plaintext: str) -> str:
    """Encrypt a credential for the config table. Empty stays empty."""
    return _get_fernet().encrypt(plaintext.encode()).decode() if plaintext else ""


def decrypt_secret(ciphertext: str) -> str:
    """Reverse :func:`encrypt_secret`.

    Raises:
        ValueError: The token is corrupt or was made with another secret key.
    """
    if not ciphertext:
        return ""
    try:
        return _get_fernet().decrypt(ciphertext.encode()).decode()
    except InvalidToken as e:
        logger.error("secret_decrypt_failed")
        raise ValueError("Decryption failed - APP_SECRET_KEY may have changed") from e
