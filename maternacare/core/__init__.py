"""Core module exports."""

from .security import (
    create_access_token,
    create_object_token,
    decode_object_token,
    decode_token,
    get_password_hash,
    verify_password,
    ALGORITHM,
)

__all__ = [
    "create_access_token",
    "create_object_token",
    "decode_object_token",
    "decode_token",
    "get_password_hash",
    "verify_password",
    "ALGORITHM",
]
