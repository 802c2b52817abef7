"""
Download helpers for generated images

Bulk downloads are named megapost_<title>.png after the category title;
a single card download is named <category>_image.png.
"""

import io
import logging
import os
import re
import zipfile
from typing import Dict, List, Optional

from megapost.models.schemas import ALL_CATEGORIES, CATEGORY_TITLES, Category
from .image_converter import decode_data_uri
from .utils import save_binary_file

logger = logging.getLogger(__name__)


def download_filename(category) -> str:
    category = Category(category)
    title = CATEGORY_TITLES.get(category, category.value)
    name = re.sub(r'\s+', '_', title)
    return f"megapost_{name}.png"


def card_download_filename(category) -> str:
    return f"{Category(category).value}_image.png"


def _downloadable(images: Dict[Category, Optional[str]]):
    for category in ALL_CATEGORIES:
        image_url = images.get(category)
        if image_url:
            yield category, image_url


def save_all_images(images: Dict[Category, Optional[str]], output_dir="output") -> List[str]:
    """
    Write every generated image to output_dir.

    Args:
        images: Data URI per category; None entries are skipped
        output_dir: Directory to save images in

    Returns:
        list[str]: Paths of the written files
    """
    os.makedirs(output_dir, exist_ok=True)

    saved = []
    for category, image_url in _downloadable(images):
        _, data = decode_data_uri(image_url)
        path = save_binary_file(os.path.join(output_dir, download_filename(category)), data)
        logger.info("Saved %s image to %s", category.value, path)
        saved.append(path)
    return saved


def build_zip(images: Dict[Category, Optional[str]]) -> bytes:
    """Bundle every generated image into an in-memory ZIP archive"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for category, image_url in _downloadable(images):
            _, data = decode_data_uri(image_url)
            zf.writestr(download_filename(category), data)
    return buffer.getvalue()
