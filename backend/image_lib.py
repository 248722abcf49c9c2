""" Image processing backend. Currently implemented using Pillow (PIL) and NumPy. Reads and writes 8bit images only."""



#                                           === Backend ===

from typing import Any, Tuple, TypeAlias

import numpy as np
from PIL import Image as _PIL
from PIL.Image import Image as PILImage

ImageObject: TypeAlias = PILImage

IMAGE_READ_ERRORS: Tuple[type, ...] = (OSError, ValueError, _PIL.DecompressionBombError)
# Pillow errors for missing, unidentified, truncated or oversized files (UnidentifiedImageError is an OSError).


_PASS_THROUGH_MODES: Tuple[str, ...] = ("L", "LA", "RGB", "RGBA")
_CONVERTED_MODES: dict[str, str] = {"1": "L", "La": "LA", "PA": "RGBA", "RGBa": "RGBA", "F": "L"}
_HIGH_BIT_DEPTH_MODES: Tuple[str, ...] = ("I", "I;16", "I;16L", "I;16B", "I;16N")


def close_image(image: object) -> None:
    close = getattr(image, "close", None)
    if callable(close):
        close()


def from_array_u8(data: Any) -> ImageObject:
# Creates an image from a uint8 numpy array; (H, W) becomes "L", (H, W, 3) becomes "RGB".
    return _PIL.fromarray(np.ascontiguousarray(data, dtype=np.uint8))


def get_image_mode(image: Any) -> str:
# Return the Pillow image mode: "RGB", "RGBA", "L"
    return image.mode


def open_image(path: str) -> ImageObject:
# Opens and fully decodes the file, so corrupted data raises here instead of on first pixel access.
    image = _PIL.open(path)
    try:
        image.load()
    except Exception:
        close_image(image)
        raise
    return image


def save_image(image: Any, path: str, file_format: str, **save_kwargs: Any) -> None:
    image.save(path, format=file_format, **save_kwargs)




#                                           === Utils ===



def to_array_u8(image: ImageObject) -> np.ndarray:
# Returns the pixels as a uint8 array of shape (height, width, channels).
# Channel layout follows the usual 8bit loaders: L > 1, LA > 2, RGB > 3, RGBA > 4, palette expanded to RGB or RGBA.

    mode = get_image_mode(image)

    if mode in _HIGH_BIT_DEPTH_MODES:
        pixels = _16_to_8bit(image)
    else:
        if mode == "P":
            target_mode = "RGBA" if "transparency" in image.info else "RGB"
        elif mode in _PASS_THROUGH_MODES:
            target_mode = mode
        else:
            target_mode = _CONVERTED_MODES.get(mode, "RGB")
        # CMYK, YCbCr, LAB and similar fall back to RGB.

        converted = image if target_mode == mode else image.convert(target_mode)
        try:
            pixels = np.array(converted, dtype=np.uint8)
        finally:
            if converted is not image:
                close_image(converted)

    if pixels.ndim == 2:
        pixels = pixels[:, :, np.newaxis]
    return pixels


def _16_to_8bit(image: ImageObject) -> np.ndarray:
# Scales down 16bit range to a 8bit, so values are properly maintained instead of being clipped.
# Keeps the high byte of every sample.

    data16 = np.asarray(image)
    if data16.dtype.kind == "i":
        data16 = np.clip(data16, 0, 0xFFFF)
    # "I" mode stores 16bit PNG samples in int32.
    return (data16.astype(np.uint32) >> 8).astype(np.uint8)
