"""
Utility functions for image file handling
"""

import os


def read_local_image(image_path):
    """
    Reads a local image file and returns its bytes.

    Args:
        image_path: Path to the image file

    Returns:
        bytes: The file contents

    Raises:
        FileNotFoundError: If the image doesn't exist
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Could not find image at: {image_path}")

    with open(image_path, "rb") as f:
        return f.read()


def save_binary_file(file_name, data):
    """
    Saves binary data to a file.

    Args:
        file_name: Path where the file should be saved
        data: Binary data to write

    Returns:
        str: The file path where data was saved
    """
    with open(file_name, "wb") as f:
        f.write(data)
    return file_name
