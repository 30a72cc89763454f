import hmac
import re

from werkzeug.security import generate_password_hash, check_password_hash

PASSWORD_POLICY_MESSAGE = 'Password must be at least 8 characters long, include one uppercase letter, and one special character.'
PASSWORD_POLICY_REGEX = re.compile(r'^(?=.*[A-Z])(?=.*[^A-Za-z0-9]).{8,}$')
HASH_PREFIXES = ('pbkdf2:', 'scrypt:')


def is_strong_password(password: str | None) -> bool:
    if not isinstance(password, str) or not password:
        return False
    return bool(PASSWORD_POLICY_REGEX.match(password.strip()))


def derive_storage_password(password: str) -> str:
    return generate_password_hash(password.strip(), method='pbkdf2:sha256')


def is_hashed(stored: str | None) -> bool:
    return (stored or '').startswith(HASH_PREFIXES)


def password_matches(user, submitted_password: str | None) -> bool:
    """Check a login attempt against the stored hash.

    Accounts migrated from the old plaintext store still hold the raw
    password; those are compared in constant time and re-hashed on a match.
    The caller commits the upgraded hash together with the login stamp.
    """
    if user is None or not isinstance(submitted_password, str) or not submitted_password:
        return False

    submitted = submitted_password.strip()
    stored = (user.password_hash or '').strip()

    if is_hashed(stored):
        return check_password_hash(stored, submitted)

    if stored and hmac.compare_digest(stored.encode(), submitted.encode()):
        user.password_hash = derive_storage_password(submitted)
        return True

    return False
