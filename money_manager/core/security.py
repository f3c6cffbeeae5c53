"""
Security: password hashing and the bearer-token side of the identity resolver.
Tokens carry the user id as ``sub``; nothing else about the user is trusted from them.
"""

from datetime import datetime, timezone, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from money_manager.config import get_settings

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: int, expires_in: timedelta | None = None) -> str:
    """Issue a signed token for ``user_id``."""
    expire = datetime.now(timezone.utc) + (expires_in or timedelta(minutes=settings.jwt_expire_minutes))
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def resolve_user_id(token: str) -> int | None:
    """User id from a token, or None when the token is invalid, expired or malformed."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
