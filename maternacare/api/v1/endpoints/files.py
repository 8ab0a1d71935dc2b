"""Signed file download endpoint."""

from fastapi import APIRouter, Path
from fastapi.responses import FileResponse

from maternacare.core.exceptions import NotFoundException, StorageError
from maternacare.core.security import decode_object_token
from maternacare.utils.file_handler import get_media_type, read_object

router = APIRouter(
    prefix="/files",
    tags=["Files"],
)


@router.get(
    "/{token}",
    response_class=FileResponse,
    summary="Download a stored file through a signed URL",
    description="The token carries the bucket, the object key and an expiry. Expired or altered tokens get 401.",
)
def download_file(token: str = Path(..., description="Signed URL token")) -> FileResponse:
    bucket, key = decode_object_token(token)
    try:
        file_path = read_object(bucket, key)
    except StorageError as e:
        raise NotFoundException(str(e))
    return FileResponse(file_path, media_type=get_media_type(key), filename=file_path.name)
