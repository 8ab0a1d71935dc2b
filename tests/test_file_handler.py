"""
Tests for local object storage and signed URLs.

Tests:
- Upload validation (extension, magic bytes, size)
- Key safety and bucket confinement
- Save, read and delete round trip
- Signed URL tokens
"""

import io
from urllib.parse import urlparse

import pytest
from fastapi import HTTPException, UploadFile

from maternacare.core.exceptions import StorageError
from maternacare.core.security import create_access_token, decode_object_token
from maternacare.utils.file_handler import (
    LABORATORY_BUCKET,
    PROFILE_PICTURE_BUCKET,
    create_signed_url,
    delete_object,
    get_media_type,
    read_object,
    sanitize_filename,
    save_object,
    validate_magic_bytes,
    validate_path_safety,
    validate_upload_file,
)


PDF_BYTES = b"%PDF-1.4\n% lab result\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _upload(filename, content):
    return UploadFile(file=io.BytesIO(content), filename=filename)


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """Tests for upload validation helpers."""

    def test_magic_bytes(self):
        assert validate_magic_bytes(PDF_BYTES, "pdf")
        assert validate_magic_bytes(PNG_BYTES, "png")
        assert not validate_magic_bytes(PNG_BYTES, "pdf")
        assert not validate_magic_bytes(PDF_BYTES, "gif")

    def test_sanitize_filename(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("C:\\temp\\lab result.pdf") == "lab_result.pdf"
        assert sanitize_filename(".hidden") == "hidden"
        assert sanitize_filename("") == "unnamed"

    @pytest.mark.parametrize("key", ["../secret.pdf", "a/../../b.pdf", "/etc/passwd", "a//b.pdf", "~/x.pdf", ""])
    def test_unsafe_keys(self, key):
        assert validate_path_safety(key) is False

    def test_safe_key(self):
        assert validate_path_safety("12/3f0c.pdf") is True

    def test_accepts_pdf_for_laboratory(self):
        content, ext = validate_upload_file(_upload("cbc.pdf", PDF_BYTES), LABORATORY_BUCKET)

        assert content == PDF_BYTES
        assert ext == ".pdf"

    def test_rejects_pdf_for_profile_picture(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload_file(_upload("cbc.pdf", PDF_BYTES), PROFILE_PICTURE_BUCKET)

        assert exc_info.value.status_code == 400

    def test_rejects_mismatched_content(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload_file(_upload("scan.png", PDF_BYTES), LABORATORY_BUCKET)

        assert exc_info.value.status_code == 400

    def test_rejects_oversized_file(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload_file(_upload("cbc.pdf", PDF_BYTES), LABORATORY_BUCKET, max_size_bytes=8)

        assert exc_info.value.status_code == 413

    def test_media_type(self):
        assert get_media_type("1/abc.PNG") == "image/png"
        assert get_media_type("1/abc.bin") == "application/octet-stream"


# =============================================================================
# Storage
# =============================================================================

class TestStorage:
    """Tests for save/read/delete against a temporary UPLOAD_DIR."""

    def test_round_trip(self, upload_dir):
        key = save_object(LABORATORY_BUCKET, PDF_BYTES, ".pdf", prefix="7")

        assert key.startswith("7/") and key.endswith(".pdf")
        path = read_object(LABORATORY_BUCKET, key)
        assert path.read_bytes() == PDF_BYTES
        assert str(path).startswith(str(upload_dir.resolve()))

        assert delete_object(LABORATORY_BUCKET, key) is True
        assert delete_object(LABORATORY_BUCKET, key) is False
        with pytest.raises(StorageError):
            read_object(LABORATORY_BUCKET, key)

    def test_unknown_bucket(self, upload_dir):
        with pytest.raises(StorageError):
            save_object("public", PDF_BYTES, ".pdf")

    def test_traversal_key_rejected(self, upload_dir):
        with pytest.raises(StorageError):
            read_object(LABORATORY_BUCKET, "../profile-pictures/x.png")

        assert delete_object(LABORATORY_BUCKET, "../../outside.txt") is False


# =============================================================================
# Signed URLs
# =============================================================================

class TestSignedUrls:
    """Tests for signed download URLs."""

    def test_token_carries_bucket_and_key(self, upload_dir):
        key = save_object(LABORATORY_BUCKET, PDF_BYTES, ".pdf", prefix="7")

        url, expires_at = create_signed_url(LABORATORY_BUCKET, key)
        token = urlparse(url).path.rsplit("/", 1)[-1]

        assert urlparse(url).path.startswith("/api/v1/files/")
        assert decode_object_token(token) == (LABORATORY_BUCKET, key)
        assert expires_at is not None

    def test_expired_token_rejected(self, upload_dir):
        key = save_object(LABORATORY_BUCKET, PDF_BYTES, ".pdf")

        url, _ = create_signed_url(LABORATORY_BUCKET, key, expires_in=-10)
        token = url.rsplit("/", 1)[-1]

        with pytest.raises(HTTPException) as exc_info:
            decode_object_token(token)
        assert exc_info.value.status_code == 401

    def test_session_token_is_not_a_file_token(self):
        token = create_access_token({"sub": "admin:1"})

        with pytest.raises(HTTPException):
            decode_object_token(token)

    def test_unsafe_key_is_not_signed(self, upload_dir):
        with pytest.raises(StorageError):
            create_signed_url(LABORATORY_BUCKET, "../x.pdf")
