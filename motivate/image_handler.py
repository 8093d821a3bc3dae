"""
Image Handler

Utilities for checking and saving image bytes. motivate never decodes images for display; the
surfaces that show an image do that themselves. What we do need is a cheap way to refuse files
that aren't images before they go into the offline cache, and a way to write acquired bytes to
disk with a sensible extension.
"""

import io
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError


class InvalidImageError(Exception):
    """
    Raised when provided input is not an image. Wrapper around the PIL UnidentifiedImageError for
    better identification of errors and custom error messaging.
    """

    pass


def validate_image(input: Union[bytes, str, Path]) -> str:
    """
    Determine whether input is a valid image and return its format (e.g. 'JPEG'). Accepts raw
    bytes or a file path. PIL reads only the header to identify the file type; the pixel data is
    not loaded, so this is safe to use as a validation method.
    """

    source = io.BytesIO(input) if isinstance(input, (bytes, bytearray)) else input
    label = f"{len(input)} bytes" if isinstance(input, (bytes, bytearray)) else str(input)

    try:
        with Image.open(source) as image:

            return image.format

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {label} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {label} could not be found.")

    except IsADirectoryError:
        raise InvalidImageError(f"Input {label} is a directory, not an image.")


def extension_for(data: bytes) -> str:
    """Best-effort file extension for image bytes; '.img' when the format isn't recognised."""

    try:
        image_format = validate_image(data)
    except InvalidImageError:
        return ".img"

    return {"JPEG": ".jpg"}.get(image_format, f".{image_format.lower()}")


def save_image(data: bytes, file_path: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Write image bytes to file_path, creating parent directories as needed. A missing suffix is
    filled in from the image format. Unless overwrite is set an existing file is left alone and
    FileExistsError is raised.
    """

    destination_path = Path(file_path).expanduser().resolve()

    if destination_path.suffix == "":
        destination_path = destination_path.with_suffix(extension_for(data))

    if destination_path.is_dir():
        raise IsADirectoryError(f"Destination file {destination_path} is a directory.")

    if destination_path.exists() and not overwrite:
        raise FileExistsError(f"File already exists at {destination_path}.")

    destination_path.parent.mkdir(parents=True, exist_ok=True)
    destination_path.write_bytes(data)

    return destination_path
