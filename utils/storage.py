import uuid
from io import BytesIO

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from core.config import settings
from utils.image_tools import compress_image_bytes, guess_mime_type

# ==== MinIO client ====
_s3 = Minio(
    settings.S3_ENDPOINT,
    access_key=settings.S3_ACCESS_KEY,
    secret_key=settings.S3_SECRET_KEY,
    region=settings.S3_REGION,
    secure=settings.S3_SECURE,
)


class PictureUnavailable(Exception):
    """The stored picture cannot be read (missing object or storage error)."""


def upload_picture(data: bytes, user_id: str, bucket_name: str = settings.S3_BUCKET_NAME) -> str:
    """
    Compress the image via compress_image_bytes and put it into S3.
    Raises ValueError if the data is not an image, MinioException on storage problems.
    """
    compressed_data, ext = compress_image_bytes(data)
    s3_key = f"profiles/{user_id}_{uuid.uuid4().hex}.{ext}"

    _s3.put_object(
        bucket_name,
        s3_key,
        BytesIO(compressed_data),
        length=len(compressed_data),
        content_type=guess_mime_type(s3_key),
    )
    return s3_key


def read_picture(s3_key: str, bucket_name: str = settings.S3_BUCKET_NAME) -> tuple[bytes, str]:
    """Return (picture bytes, MIME type) for a stored profile picture."""
    response = None
    try:
        response = _s3.get_object(bucket_name, s3_key)
        data = response.read()
    except (MinioException, HTTPError) as e:
        raise PictureUnavailable(f"Cannot read {s3_key}: {e}") from e
    finally:
        if response is not None:
            response.close()
            response.release_conn()
    return data, guess_mime_type(s3_key)


def delete_picture(s3_key: str, bucket_name: str = settings.S3_BUCKET_NAME) -> None:
    _s3.remove_object(bucket_name, s3_key)
