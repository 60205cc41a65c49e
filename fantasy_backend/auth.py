"""
Minimal auth: hashed passwords and JWT.
No OAuth. Passwords never stored in plain text.
Tokens carry a role claim; only the service identity's claim is trusted as is
(it has no users row). User roles are re-read from the database per request.
"""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import JWTError, jwt

# pbkdf2_sha256: no bcrypt backend required
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "fantasy-dev-secret-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days
SERVICE_SUBJECT = "service"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(subject: str, role: str = "user") -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "role": role, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_service_token() -> str:
    """Token for batch jobs running as the service identity."""
    return create_access_token(SERVICE_SUBJECT, role="service")


def decode_token(token: str) -> dict | None:
    """Return {'sub', 'role'} claims, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    return {"sub": sub, "role": payload.get("role", "user")}
