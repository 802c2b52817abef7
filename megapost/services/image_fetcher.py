"""
Source image ingestion

Builds a SourceImage from a local file, uploaded bytes or an image URL.
"""

import logging
import mimetypes
import os
from urllib.parse import unquote, urlparse

import requests
from werkzeug.utils import secure_filename

from megapost.models.schemas import SourceImage
from .errors import FetchFailed, InvalidSourceUrl
from .image_converter import detect_image_type, get_mime_type
from .utils import read_local_image

logger = logging.getLogger(__name__)

DEFAULT_URL_FILENAME = "image.jpg"


def add_image_extension(filename: str, mime_type: str = None) -> str:
    """Append the extension of mime_type when filename has no supported one"""
    if get_mime_type(filename) is None and mime_type:
        extension = mimetypes.guess_extension(mime_type)
        if extension and get_mime_type(f"x{extension}"):
            filename += extension
    return filename


def upload_filename(raw_filename: str) -> str:
    """
    Sanitize an uploaded filename, keeping its original extension.

    secure_filename() drops non-ASCII characters, which can eat the whole
    stem and leave the extension without its dot.
    """
    stem, extension = os.path.splitext(raw_filename or "")
    stem = secure_filename(stem) or "image"
    extension = secure_filename(extension)
    return f"{stem}.{extension}" if extension else stem


def image_from_bytes(data: bytes, filename: str) -> SourceImage:
    """Wrap uploaded bytes (file picker or drag-and-drop) as a SourceImage"""
    mime_type = detect_image_type(data, filename)
    return SourceImage(
        data=data,
        filename=add_image_extension(filename, mime_type),
        mime_type=mime_type,
    )


def load_image_file(image_path) -> SourceImage:
    """
    Load a local image file.

    Raises:
        FileNotFoundError: If the image doesn't exist
    """
    data = read_local_image(image_path)
    return image_from_bytes(data, os.path.basename(image_path))


def validate_image_url(url: str) -> str:
    """
    Check that a URL is an absolute http(s) URL.

    Raises:
        InvalidSourceUrl: If it is not
    """
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidSourceUrl(f"Invalid image URL: {url or '(empty)'}")
    return url


def filename_from_url(url: str, content_type: str = None) -> str:
    """
    Derive a filename from the last path segment of a URL.

    When the name has no supported image extension, one is added based
    on the response Content-Type.
    """
    filename = unquote(urlparse(url).path.rsplit("/", 1)[-1]) or DEFAULT_URL_FILENAME
    return add_image_extension(filename, content_type)


def fetch_image_from_url(url: str, timeout: float = 10) -> SourceImage:
    """
    Download an image by URL.

    Args:
        url: Absolute http(s) URL of the image
        timeout: Request timeout in seconds

    Returns:
        SourceImage with the downloaded bytes

    Raises:
        InvalidSourceUrl: If the URL is malformed
        FetchFailed: If the request fails, returns an error status or is not an image
    """
    url = validate_image_url(url)

    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Error fetching image from %s: %s", url, e)
        raise FetchFailed(f"Could not load the image. It may be a network problem: {e}") from e

    if not response.ok:
        raise FetchFailed(f"Failed to fetch the image. Status: {response.status_code}")

    content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    if not content_type.startswith("image/"):
        raise FetchFailed("The URL does not point to a valid image type.")

    filename = filename_from_url(url, content_type)
    logger.info("Fetched %s (%s, %d bytes)", filename, content_type, len(response.content))

    return SourceImage(data=response.content, filename=filename, mime_type=content_type)
