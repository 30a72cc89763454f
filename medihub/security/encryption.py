"""Fernet encryption for the personal details kept on account rows."""
import os

from cryptography.fernet import Fernet, InvalidToken
from dotenv import load_dotenv

load_dotenv()

# Account columns stored as Fernet tokens.
PII_COLUMNS = ('name', 'email', 'mobile', 'address')

_aes_key = os.getenv("AES_KEY")
if not _aes_key:
    raise ValueError("AES_KEY is missing from the environment. Run medihub-generate-keys and add it to .env.")

fernet = Fernet(_aes_key)


def encrypt_data(plaintext: str | None) -> str | None:
    if plaintext is None:
        return None
    return fernet.encrypt(str(plaintext).encode()).decode()


def decrypt_data(ciphertext: str | None) -> str | None:
    """Decrypt a stored value; rows written before encryption come back as-is."""
    if ciphertext is None:
        return None
    try:
        return fernet.decrypt(ciphertext.encode()).decode()
    except InvalidToken:
        return ciphertext


def seal(principal, values):
    for column in PII_COLUMNS:
        setattr(principal, column, encrypt_data(values[column]))


def reveal(principal, column) -> str:
    if column not in PII_COLUMNS:
        raise ValueError(f'{column} is not an encrypted column')
    return (decrypt_data(getattr(principal, column)) or '').strip()
