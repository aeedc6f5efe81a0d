"""Security Helpers — password hashing and random record ids.

Invariants:
    - Passwords are stored only as HMAC-SHA256 hex digests keyed by the hash secret
    - Hash comparison is constant-time
    - Generated ids use the secrets module over [a-z0-9]
"""

import hashlib
import hmac
import secrets
import string

ID_ALPHABET = string.ascii_lowercase + string.digits


def hash_password(password: str, secret: str) -> str:
    if not password:
        raise ValueError("password must be a non-empty string")
    return hmac.new(
        secret.encode(), password.encode(), hashlib.sha256,
    ).hexdigest()


def verify_password(password: str, hashed: str, secret: str) -> bool:
    if not password or not hashed:
        return False
    return hmac.compare_digest(hash_password(password, secret), hashed)


def create_random_id(length: int) -> str:
    if length <= 0:
        raise ValueError("id length must be positive")
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
