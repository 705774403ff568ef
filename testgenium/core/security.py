# testgenium/core/security.py
"""
Password hashing and JWT session tokens
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from testgenium.core.config import Settings
from testgenium.core.errors import TokenExpired, TokenInvalid, TokenMissing

# Salted one-way hashing; verify() compares digests in constant time
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        # Burn the same hashing time as a real check so unknown emails are not distinguishable
        pwd_context.dummy_verify()
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    tenant_id: str,
    settings: Settings,
    email: Optional[str] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create a bearer token that expires ACCESS_TOKEN_EXPIRE_HOURS after issuance"""
    issued_at = issued_at or datetime.now(timezone.utc)
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)
    expire = issued_at + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    to_encode: Dict[str, Any] = {
        "sub": str(tenant_id),
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
        "type": "access",
    }
    if email:
        to_encode["email"] = email

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: Optional[str], settings: Settings) -> Dict[str, Any]:
    """Decode and validate a bearer token, raising the matching AuthError"""
    if not token:
        raise TokenMissing()

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise TokenInvalid()

    if payload.get("type") != "access" or not payload.get("sub"):
        raise TokenInvalid()

    return payload
