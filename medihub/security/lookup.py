import base64
import binascii
import hmac
import os
from hashlib import sha256

from dotenv import load_dotenv

load_dotenv()

_raw_key = os.getenv("HMAC_KEY")
if not _raw_key:
    raise ValueError("HMAC_KEY is missing from the environment. Add it to your .env file.")

try:
    HMAC_KEY = base64.urlsafe_b64decode(_raw_key)
except (binascii.Error, ValueError):
    HMAC_KEY = _raw_key.encode()


def normalize_identity(value: str | None) -> str:
    return (value or '').strip().lower()


def hash_identity(value: str | None) -> str | None:
    """Deterministic HMAC of a normalized email or mobile, used for equality search."""
    normalized = normalize_identity(value)
    if not normalized:
        return None
    return hmac.new(HMAC_KEY, normalized.encode(), sha256).hexdigest()
