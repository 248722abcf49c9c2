import os

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def write_map():
    """Saves a uint8 array as an image file and returns its path."""

    def _write(path, pixels, **save_kwargs):
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.ndim == 3 and pixels.shape[-1] == 1:
            pixels = pixels[..., 0]
        Image.fromarray(pixels).save(str(path), **save_kwargs)
        return str(path)

    return _write


@pytest.fixture
def gradient():
    """Deterministic grayscale test pattern of the given (height, width)."""

    def _gradient(height, width, offset=0):
        values = (np.arange(height * width, dtype=np.uint32) * 7 + offset) % 256
        return values.astype(np.uint8).reshape(height, width)

    return _gradient


@pytest.fixture
def read_map():
    """Returns (mode, size, pixels) of an image file."""

    def _read(path):
        with Image.open(path) as image:
            return image.mode, image.size, np.array(image)

    return _read


@pytest.fixture
def texture_dir(tmp_path):
    directory = tmp_path / "Rock_2K"
    os.makedirs(directory)
    return directory
