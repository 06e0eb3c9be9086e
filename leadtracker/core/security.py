"""
Credential primitives: bcrypt password hashes, signed access tokens and API key tokens.
"""
import hmac
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from leadtracker.config import settings


ACCESS_TOKEN_TYPE = "access"
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


# Passwords

def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash
        return False


def is_password_hash(value: str) -> bool:
    """False for rows still holding a plaintext password."""
    return bool(value) and value.startswith(BCRYPT_PREFIXES)


def verify_legacy_password(plain_password: str, stored_value: str) -> bool:
    return hmac.compare_digest(plain_password.encode("utf-8"), stored_value.encode("utf-8"))


# Access tokens

def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign `claims` as an access token.

    Args:
        claims: identity claims (user_id, role, name)
        expires_delta: lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = {
        **claims,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> Optional[dict]:
    """Payload of a well-signed, unexpired access token; None for anything else."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return payload


# API keys

def generate_api_key() -> str:
    return settings.API_KEY_PREFIX + secrets.token_urlsafe(32)


def mask_api_key(key: str, visible: int = 8) -> str:
    return f"{key[:visible]}..."
