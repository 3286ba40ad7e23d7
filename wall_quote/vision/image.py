from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from wall_quote.core.errors import InvalidArgumentError

DEFAULT_MIME_TYPE = "image/jpeg"


@dataclass
class ImageUpload:
    data: bytes
    mime_type: str
    format: Optional[str] = None


def sniff_format(data: bytes) -> str:
    # Image.open only reads the header; pixels are never decoded
    with Image.open(BytesIO(data)) as im:
        return im.format


def inspect_upload(data: bytes, declared_type: Optional[str] = None) -> ImageUpload:
    if not data:
        raise InvalidArgumentError("No image uploaded")

    try:
        fmt = sniff_format(data)
    except UnidentifiedImageError:
        raise InvalidArgumentError("Could not decode image. The file may be corrupted.")

    if declared_type and declared_type.startswith("image/"):
        mime_type = declared_type
    else:
        mime_type = Image.MIME.get(fmt or "", DEFAULT_MIME_TYPE)
    return ImageUpload(data=data, mime_type=mime_type, format=fmt)
