import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt, ExpiredSignatureError
from passlib.context import CryptContext

from filemanager.core.config import settings
from filemanager.core.errors import AuthError

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a password against its stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> bool:
    """Spend the same effort as a real verify when there is no hash to check."""
    return pwd_context.dummy_verify()


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash password with a fresh salt; ``rounds`` overrides the work factor."""
    if rounds is None:
        return pwd_context.hash(password)
    return pwd_context.handler("bcrypt").using(rounds=rounds).hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT for the given claims.

    - Ensure `sub` is a string for portability
    - Use numeric UNIX timestamps for `iat`/`exp` to avoid datetime encoding issues
    """
    to_encode = data.copy()
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire_dt = issued_at + expires_delta

    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    to_encode.update({"iat": int(issued_at.timestamp()), "exp": int(expire_dt.timestamp())})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry, returning the claims or raising AuthError."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": True, "leeway": settings.JWT_LEEWAY_SECONDS},
        )
    except ExpiredSignatureError:
        try:
            exp = jwt.get_unverified_claims(token).get("exp")
        except JWTError:
            exp = None
        logger.warning(
            "Token expired. exp=%s, now=%s", exp, int(datetime.now(timezone.utc).timestamp())
        )
        raise AuthError("Token expired")
    except JWTError:
        logger.warning("Token invalid or signature mismatch")
        raise AuthError("Invalid token")
