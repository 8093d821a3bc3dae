"""
Tests for image_handler.py

*** Fixtures ***
- test_image, test_image_bytes (defined in conftest.py)
"""

import pytest

from motivate.conftest import make_image_bytes

# following entities are tested in this module:
from motivate.image_handler import InvalidImageError
from motivate.image_handler import extension_for
from motivate.image_handler import save_image
from motivate.image_handler import validate_image


def test_validate_image_bytes(test_image_bytes):

    assert validate_image(test_image_bytes) == "PNG"


def test_validate_image_path(test_image):

    assert validate_image(test_image) == "PNG"
    assert validate_image(str(test_image)) == "PNG"


def test_validate_not_an_image(tmp_path):

    bogus = tmp_path / "file.txt"
    bogus.write_text("hello")

    with pytest.raises(InvalidImageError):
        validate_image(bogus)

    with pytest.raises(InvalidImageError):
        validate_image(b"hello there")


def test_validate_missing_file(tmp_path):

    with pytest.raises(InvalidImageError):
        validate_image(tmp_path / "missing.png")


@pytest.mark.parametrize(
    "data, extension",
    [
        (make_image_bytes(image_format="PNG"), ".png"),
        (make_image_bytes(image_format="JPEG"), ".jpg"),
        (make_image_bytes(image_format="GIF"), ".gif"),
        (b"not an image", ".img"),
    ],
)
def test_extension_for(data, extension):

    assert extension_for(data) == extension


def test_save_image_adds_extension(tmp_path, test_image_bytes):

    saved = save_image(test_image_bytes, tmp_path / "nested" / "motivate-7")

    assert saved == (tmp_path / "nested" / "motivate-7.png").resolve()
    assert saved.read_bytes() == test_image_bytes


def test_save_image_keeps_given_suffix(tmp_path, test_image_bytes):

    saved = save_image(test_image_bytes, tmp_path / "picture.jpeg")

    assert saved.name == "picture.jpeg"


def test_save_image_existing_file(tmp_path, test_image_bytes):

    target = tmp_path / "picture.png"
    target.write_bytes(b"old")

    with pytest.raises(FileExistsError):
        save_image(test_image_bytes, target)

    assert target.read_bytes() == b"old"

    save_image(test_image_bytes, target, overwrite=True)

    assert target.read_bytes() == test_image_bytes


def test_save_image_to_directory(tmp_path, test_image_bytes):

    (tmp_path / "folder.png").mkdir()

    with pytest.raises(IsADirectoryError):
        save_image(test_image_bytes, tmp_path / "folder.png")
