"""
Image encoding service

Detects image media types and converts source images to the inline
base64 form the Gemini API accepts, plus the data-URI form used for
display and download.
"""

import base64
import binascii
import mimetypes
import os
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from megapost.models.schemas import InlineImage, SourceImage
from .errors import UnsupportedMediaType

EXTENSION_TO_MIME = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'webp': 'image/webp',
    'gif': 'image/gif',
}

FORMAT_TO_MIME = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'GIF': 'image/gif',
    'BMP': 'image/bmp',
    'WEBP': 'image/webp',
}

DATA_URI_PATTERN = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$', re.DOTALL)


def get_mime_type(filename: str) -> Optional[str]:
    """
    Map a filename extension to a supported media type.

    Returns:
        MIME type string, or None when the extension is not supported
    """
    _, ext = os.path.splitext(filename or '')
    return EXTENSION_TO_MIME.get(ext.lstrip('.').lower())


def detect_image_type(data: bytes, filename: str) -> str:
    """
    Detect the media type of an image.

    Args:
        data: Raw image bytes
        filename: Original filename

    Returns:
        MIME type string (e.g., 'image/jpeg')
    """
    # Try mimetypes first
    mime_type, _ = mimetypes.guess_type(filename or '')

    # If mimetypes fails, sniff the bytes with PIL
    if not mime_type:
        try:
            with Image.open(BytesIO(data)) as img:
                mime_type = FORMAT_TO_MIME.get(img.format)
        except (UnidentifiedImageError, OSError):
            mime_type = None

    return mime_type or 'application/octet-stream'


def encode_image(data: bytes, filename: str) -> InlineImage:
    """
    Encode image bytes as an inline base64 payload.

    Args:
        data: Raw image bytes
        filename: Original filename, used to pick the media type

    Returns:
        InlineImage with media type and base64 payload

    Raises:
        UnsupportedMediaType: If the extension is not png, jpg, jpeg, webp or gif
    """
    mime_type = get_mime_type(filename)
    if mime_type is None:
        raise UnsupportedMediaType(f"Unsupported image type: {filename}")

    return InlineImage(
        mime_type=mime_type,
        data=base64.b64encode(data).decode('ascii'),
    )


def encode_source_image(source: SourceImage) -> InlineImage:
    return encode_image(source.data, source.filename)


def to_data_uri(mime_type: str, data) -> str:
    """Build a data URI from raw bytes or an already base64-encoded string"""
    if isinstance(data, (bytes, bytearray)):
        data = base64.b64encode(data).decode('ascii')
    return f"data:{mime_type};base64,{data}"


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into its media type and raw bytes.

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    match = DATA_URI_PATTERN.match(data_uri or '')
    if not match:
        raise ValueError("Not a base64 data URI")

    try:
        payload = base64.b64decode(match.group('data'), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload in data URI: {e}")

    return match.group('mime'), payload
