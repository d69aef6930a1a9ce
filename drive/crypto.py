import base64
import hashlib
import json
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from core.config import settings

_KDF_SALT = b"classfolio-drive-tokens-v1"
_KDF_ITERATIONS = 200_000


@lru_cache(maxsize=4)
def _fernet(secret: str) -> Fernet:
    key_material = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), _KDF_SALT, _KDF_ITERATIONS, dklen=32)
    return Fernet(base64.urlsafe_b64encode(key_material))


def encrypt_tokens(access_token: str, refresh_token: Optional[str] = None, secret: Optional[str] = None) -> str:
    payload = json.dumps({"access_token": access_token, "refresh_token": refresh_token})
    return _fernet(secret or settings.TOKEN_ENCRYPTION_KEY).encrypt(payload.encode("utf-8")).decode("ascii")


def decrypt_tokens(blob: str, secret: Optional[str] = None) -> dict:
    """Inverse of encrypt_tokens. Raises ValueError when the blob was sealed with another key."""
    try:
        raw = _fernet(secret or settings.TOKEN_ENCRYPTION_KEY).decrypt(blob.encode("ascii"))
    except InvalidToken as e:
        raise ValueError("Stored drive tokens cannot be decrypted with the configured key") from e
    return json.loads(raw)
