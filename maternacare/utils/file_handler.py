"""Local-disk object storage for laboratory files and profile pictures.

Objects live in bucket subdirectories of ``UPLOAD_DIR`` and are handed out
through signed URLs rather than public paths.
"""
import os
import uuid
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Set
from fastapi import UploadFile, HTTPException, status
from maternacare.config import settings
from maternacare.core.exceptions import StorageError
from maternacare.core.security import create_object_token

# Setup logging
logger = logging.getLogger(__name__)

# ============================================
# FILE TYPE DEFINITIONS WITH MIME VALIDATION
# ============================================

# Magic bytes signatures for file type validation
MAGIC_BYTES = {
    # PDF: %PDF
    "pdf": [b"%PDF"],
    # JPEG: FFD8FF
    "jpeg": [b"\xff\xd8\xff"],
    # PNG: 89504E47
    "png": [b"\x89PNG\r\n\x1a\n"],
}

# Extension to magic type mapping
EXTENSION_TO_TYPE = {
    ".pdf": "pdf",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
}

EXTENSION_TO_MEDIA_TYPE = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}

LABORATORY_BUCKET = "laboratory-files"
PROFILE_PICTURE_BUCKET = "profile-pictures"

# Bucket to allowed extensions mapping
BUCKET_ALLOWED_EXTENSIONS = {
    LABORATORY_BUCKET: {".pdf", ".jpg", ".jpeg", ".png"},
    PROFILE_PICTURE_BUCKET: {".jpg", ".jpeg", ".png"},
}


# ============================================
# SECURITY VALIDATION FUNCTIONS
# ============================================

def validate_magic_bytes(file_content: bytes, expected_type: str) -> bool:
    """
    Validate file content by checking magic bytes (file signature).

    Args:
        file_content: First few bytes of the file
        expected_type: Expected file type (pdf, jpeg, png)

    Returns:
        True if magic bytes match expected type
    """
    if expected_type not in MAGIC_BYTES:
        return False

    return any(file_content.startswith(signature) for signature in MAGIC_BYTES[expected_type])


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal and other attacks.

    Returns:
        Sanitized filename (only alphanumeric, dash, underscore, and dot)
    """
    if not filename:
        return "unnamed"

    # Get only the basename (remove any path components)
    basename = Path(filename.replace("\\", "/")).name

    safe_chars = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.")
    sanitized = "".join(c if c in safe_chars else "_" for c in basename)

    # No hidden files
    sanitized = sanitized.lstrip(".")

    return sanitized if sanitized else "unnamed"


def validate_path_safety(key: str) -> bool:
    """Reject object keys that could escape their bucket."""
    if not key:
        return False

    dangerous_patterns = ["..", "~", "//", "\\"]
    for pattern in dangerous_patterns:
        if pattern in key:
            logger.warning(f"Path traversal attempt detected: {key}")
            return False

    if key.startswith("/"):
        logger.warning(f"Absolute object key rejected: {key}")
        return False

    return True


def get_file_extension(filename: str) -> str:
    """Safely get file extension in lowercase."""
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def get_media_type(key: str) -> str:
    return EXTENSION_TO_MEDIA_TYPE.get(get_file_extension(key), "application/octet-stream")


# ============================================
# MAIN VALIDATION FUNCTION
# ============================================

def validate_upload_file(
    upload_file: UploadFile,
    bucket: str,
    max_size_bytes: Optional[int] = None
) -> Tuple[bytes, str]:
    """
    Validate an upload against its bucket's rules.

    Args:
        upload_file: FastAPI UploadFile object
        bucket: Target bucket ('laboratory-files' or 'profile-pictures')
        max_size_bytes: Optional custom max size, defaults to MAX_UPLOAD_SIZE

    Returns:
        Tuple of (file_content, file_extension)

    Raises:
        HTTPException: If validation fails
    """
    if not upload_file or not upload_file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file was provided"
        )

    allowed_extensions = BUCKET_ALLOWED_EXTENSIONS.get(bucket)
    if not allowed_extensions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown storage bucket: {bucket}"
        )

    original_filename = sanitize_filename(upload_file.filename)
    file_ext = get_file_extension(original_filename)

    if file_ext not in allowed_extensions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File type not allowed. Accepted formats: {', '.join(sorted(allowed_extensions))}"
        )

    upload_file.file.seek(0)
    file_content = upload_file.file.read()
    upload_file.file.seek(0)

    max_size = max_size_bytes or settings.MAX_UPLOAD_SIZE
    if len(file_content) > max_size:
        size_mb = max_size / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is too large. Maximum: {size_mb:.1f}MB"
        )

    if len(file_content) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty files are not allowed"
        )

    expected_type = EXTENSION_TO_TYPE.get(file_ext)
    if expected_type and not validate_magic_bytes(file_content, expected_type):
        logger.warning(
            f"Magic bytes mismatch - filename: {original_filename}, "
            f"expected_type: {expected_type}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File content does not match its extension"
        )

    logger.info(f"File validated successfully: bucket={bucket}, size={len(file_content)} bytes")

    return file_content, file_ext


# ============================================
# OBJECT STORAGE FUNCTIONS
# ============================================

def ensure_bucket(bucket: str) -> Path:
    """Ensure the bucket directory exists and return the path."""
    if bucket not in BUCKET_ALLOWED_EXTENSIONS:
        raise StorageError(f"Unknown storage bucket: {bucket}")
    dir_path = Path(settings.UPLOAD_DIR) / bucket
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def resolve_object_path(bucket: str, key: str) -> Path:
    """Map (bucket, key) onto a path inside UPLOAD_DIR.

    Raises:
        StorageError: If the key is unsafe or resolves outside the bucket
    """
    if bucket not in BUCKET_ALLOWED_EXTENSIONS:
        raise StorageError(f"Unknown storage bucket: {bucket}")
    if not validate_path_safety(key):
        raise StorageError(f"Unsafe object key: {key}")

    bucket_dir = (Path(settings.UPLOAD_DIR) / bucket).resolve()
    resolved_path = (bucket_dir / key).resolve()

    if os.path.commonpath([str(bucket_dir), str(resolved_path)]) != str(bucket_dir):
        logger.warning(f"Path traversal blocked: {key} -> {resolved_path}")
        raise StorageError(f"Unsafe object key: {key}")

    return resolved_path


def save_object(bucket: str, file_content: bytes, file_ext: str, prefix: Optional[str] = None) -> str:
    """
    Write bytes into a bucket under a random name.

    Args:
        bucket: Target bucket
        file_content: Validated file bytes
        file_ext: Extension including the dot, e.g. '.pdf'
        prefix: Optional sub-folder, e.g. the patient id

    Returns:
        Object key relative to the bucket (e.g. '12/3f0c...e1.pdf')
    """
    ensure_bucket(bucket)

    unique_filename = f"{uuid.uuid4()}{file_ext}"
    key = f"{prefix}/{unique_filename}" if prefix else unique_filename
    file_path = resolve_object_path(bucket, key)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(file_path, "wb") as f:
            f.write(file_content)
    except OSError as e:
        logger.error(f"Failed to save file: {e}")
        raise StorageError("Failed to save file") from e

    logger.info(f"File saved: {bucket}/{key}")
    return key


def save_upload_file(upload_file: UploadFile, bucket: str, prefix: Optional[str] = None) -> str:
    """Validate an upload and store it; returns the object key."""
    file_content, file_ext = validate_upload_file(upload_file, bucket)
    return save_object(bucket, file_content, file_ext, prefix=prefix)


def read_object(bucket: str, key: str) -> Path:
    """Return the on-disk path of an existing object.

    Raises:
        StorageError: If the key is unsafe or the object does not exist
    """
    file_path = resolve_object_path(bucket, key)
    if not file_path.is_file():
        raise StorageError(f"Object not found: {bucket}/{key}")
    return file_path


def delete_object(bucket: str, key: str) -> bool:
    """
    Delete an object from its bucket.

    Returns:
        True if file was deleted, False if it was missing or the key was unsafe
    """
    if not key:
        return False

    try:
        file_path = resolve_object_path(bucket, key)
    except StorageError:
        return False

    if not file_path.is_file():
        return False

    try:
        file_path.unlink()
    except OSError as e:
        logger.error(f"Error deleting file {bucket}/{key}: {e}")
        return False

    logger.info(f"File deleted: {bucket}/{key}")
    return True


def create_signed_url(bucket: str, key: str, expires_in: Optional[int] = None) -> Tuple[str, datetime]:
    """
    Create a time-limited download URL for an object.

    Args:
        bucket: Bucket the object lives in
        key: Object key
        expires_in: Lifetime in seconds, defaults to SIGNED_URL_EXPIRES_SECONDS

    Returns:
        (url, expires_at)
    """
    resolve_object_path(bucket, key)
    token, expires_at = create_object_token(bucket, key, expires_in=expires_in)
    return f"{settings.BASE_URL.rstrip('/')}/api/v1/files/{token}", expires_at
