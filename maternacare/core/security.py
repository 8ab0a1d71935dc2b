"""Security utilities for session tokens, password hashing and signed file URLs."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from maternacare.config import settings


# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# JWT settings
ALGORITHM = "HS256"
SESSION_TOKEN_TYPE = "session"
SIGNED_URL_TOKEN_TYPE = "object"


def get_password_hash(password: str) -> str:
    """Hash a password using PBKDF2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Return False if the hash scheme is unsupported
        return False


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Create a session token.
    
    Args:
        data: Session claims (e.g., {'sub': 'admin:1', 'is_admin': True})
        expires_delta: Custom expiration time. If None, uses ACCESS_TOKEN_EXPIRE_DAYS
    
    Returns:
        Encoded JWT token
    
    Raises:
        ValueError: If SECRET_KEY is not configured
    """
    if not settings.SECRET_KEY:
        raise ValueError("SECRET_KEY environment variable is not set")
    
    to_encode = data.copy()
    
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    
    to_encode.update({"exp": expire, "typ": SESSION_TOKEN_TYPE})
    
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str, expected_type: str = SESSION_TOKEN_TYPE) -> Dict[str, Any]:
    """Decode and verify a JWT token.
    
    Args:
        token: JWT token string
        expected_type: Value the `typ` claim must carry
    
    Returns:
        Token payload dictionary
    
    Raises:
        HTTPException: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    if payload.get("typ") != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def create_object_token(bucket: str, key: str, expires_in: Optional[int] = None) -> Tuple[str, datetime]:
    """Create a token granting read access to one stored object.

    Returns:
        (token, expires_at)
    """
    seconds = expires_in if expires_in is not None else settings.SIGNED_URL_EXPIRES_SECONDS
    expires_at = datetime.utcnow() + timedelta(seconds=seconds)
    claims = {"bucket": bucket, "key": key, "exp": expires_at, "typ": SIGNED_URL_TOKEN_TYPE}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM), expires_at


def decode_object_token(token: str) -> Tuple[str, str]:
    """Verify an object token and return its (bucket, key)."""
    payload = decode_token(token, expected_type=SIGNED_URL_TOKEN_TYPE)
    return payload["bucket"], payload["key"]
