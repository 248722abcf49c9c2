""" Texture utilities shared by the ORM pipeline and its file backend. """

import importlib.util
from functools import lru_cache
from typing import Any, Iterable, Optional, Set

import numpy as np

from backend.image_lib import close_image
from backend.texture_classes import SourceImage


LOG_TYPES: list[str] = ["info", "warn", "error", "skip", "complete"]
# Defines log types; all of them print to stdout.

def log(message: str, message_kind: LOG_TYPES = "info") -> None:
# Maps different log types.

    if message == "":
        print("")
        return

    if message_kind not in LOG_TYPES:
        message_kind = "info"

    if message_kind == "info":
        print(f"   {message}")
    elif message_kind == "warn":
        print(f"⚠️ {message}")
    elif message_kind == "error":
        print(f"⛔ {message}")
    elif message_kind == "skip":
        print(f"❌ {message}")
    elif message_kind == "complete":
        print(f"✅ {message}")
    else:
        print(message)  # fallback

    # Print styles:
    # info: 3 whitespaces + message
    # warn: ⚠️ + message
    # error: ⛔ + message
    # skip: ❌ + message
    # complete: ✅ + message


@lru_cache(maxsize=1)
def check_exr_libraries() -> bool:
# Checks if OpenEXR is installed for reading the .exr files.

    try:
        return importlib.util.find_spec("OpenEXR") is not None
    except (ImportError, ValueError):
        return False


def close_image_files(images: Iterable[Optional[object]]) -> None:
# Safely closes all opened images even if there is an error during image processing.

    processed_ids: Set[int] = set()
    for image in images:
        if image is None:
            continue
        image_id = id(image)
        if image_id in processed_ids:
            continue
        processed_ids.add(image_id)
        try:
            close_image(image) # Function from image_lib
        except (OSError, ValueError):
            pass


def release_source_images(images: Iterable[SourceImage]) -> None:
# Drops every decoded pixel buffer; called once the pipeline is done with them, on success and on errors.
    for image in images:
        if image is not None:
            image.release()


def bytes_to_megabytes(size_in_bytes: int) -> int:
# Whole megabytes, rounded down.
    return size_in_bytes // 1024 // 1024


def read_exr_as_array(source_exr_path: str, *, srgb_transform: bool = False) -> np.ndarray:
# Converts 32bit float .exr image to 8bit int array (H, W, C) using OpenEXR and Numpy.
# RGB(A) files keep their channels, anything else is read as a single channel. Raises on unreadable files.

    import OpenEXR
    import Imath

    from numpy.typing import NDArray

# Preparing the image:
    file: OpenEXR.InputFile = OpenEXR.InputFile(source_exr_path)
    try:
        hdr: dict[str, Any] = file.header()
        data_window: Imath.Box2i = hdr['dataWindow']
        width: int = data_window.max.x - data_window.min.x + 1
        height: int = data_window.max.y - data_window.min.y + 1
        float_pixel_data: Imath.PixelType = Imath.PixelType(Imath.PixelType.FLOAT) # Setting pixel data type to float.

        channels_list: list[str] = list(hdr['channels'].keys())
        channel_names: dict[str, str] = {channel.lower(): channel for channel in channels_list}
        # Gets names of all available channels.

        def read_channel(channel_name: str) -> NDArray[np.float32]:
        # Reads chanel as a 32b float and restructure its pixels into 2D array W*H.
            return np.frombuffer(file.channel(channel_name, float_pixel_data), dtype=np.float32).reshape(height, width)

        if all(k in channel_names for k in ("r", "g", "b")):
            names = ["r", "g", "b"] + (["a"] if "a" in channel_names else [])
            data = np.stack([read_channel(channel_names[k]) for k in names], axis=-1)
        else:
            data = read_channel(channels_list[0])[..., None]
        # In case the full RGB is missing, it extracts the first available channel.
    finally:
        file.close()

    if srgb_transform:
        color = _linear_to_srgb(data[..., :3])
        data = np.concatenate([color, data[..., 3:]], axis=-1) if data.shape[-1] == 4 else color
    # Alpha stays linear.

    return np.rint(np.clip(data, 0, 1) * 255.0).astype(np.uint8) # Converting to 8bit int.


def _linear_to_srgb(linear_values: np.ndarray) -> np.ndarray:
# Applies sRGB gamma.
    linear_values = np.clip(linear_values, 0.0, 1.0).astype(np.float32)
    srgb_a = 0.055
    return np.where(linear_values <= 0.0031308, linear_values * 12.92, (1 + srgb_a) * np.power(linear_values, 1 / 2.4) - srgb_a)
