# utils/image_tools.py
import base64
import mimetypes
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

# not in the default table on older Pythons
mimetypes.add_type("image/webp", ".webp")


def compress_image_bytes(
    data: bytes,
    quality: int = 80
) -> tuple[bytes, str]:
    """
    Compress an uploaded profile picture in memory:
    - opens any format Pillow supports;
    - applies the EXIF orientation and drops EXIF metadata;
    - converts to RGB to remove the alpha channel;
    - keeps WebP as WebP, stores everything else as progressive JPEG.

    Returns (compressed_bytes, ext), where ext is "webp" or "jpg".
    Raises ValueError if the data is not an image.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ValueError("Unsupported file: not an image")

    orig_fmt = (img.format or 'JPEG').upper()

    img = ImageOps.exif_transpose(img)
    img.info.pop('exif', None)

    if img.mode not in ('RGB', 'L'):
        img = img.convert('RGB')

    buf = BytesIO()

    if orig_fmt == 'WEBP':
        img.save(buf, 'WEBP', quality=quality)
        ext = 'webp'
    else:
        img.save(buf, 'JPEG', quality=quality, optimize=True, progressive=True)
        ext = 'jpg'

    return buf.getvalue(), ext


def guess_mime_type(path: str) -> str:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or "application/octet-stream"


def encode_picture(data: bytes) -> str:
    """Base64 text form of the picture bytes, safe for JSON transport."""
    return base64.b64encode(data).decode("ascii")
