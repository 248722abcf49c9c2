""" File system backend: derives sibling map paths, decodes source maps and writes the packed ORM map. """

import os
from typing import Dict, Optional

import numpy as np

from backend.errors import DecodeError, EncodeError
from backend.image_lib import (IMAGE_READ_ERRORS, ImageObject, from_array_u8, open_image, save_image, to_array_u8)
from backend.texture_classes import SiblingPaths, SourceImage

from settings import (BASE_MAP_TOKEN, EXR_SRGB_CURVE, JPEG_QUALITY, ORM_MAP_TOKEN, PNG_COMPRESS_LEVEL, TEXTURE_CONFIG)
from utils import (check_exr_libraries, close_image_files, log, read_exr_as_array)


RAW_SOURCE_TYPES: tuple[str] = (".exr",)  # Float source maps decoded through OpenEXR instead of Pillow.
SAVE_FORMATS: Dict[str, str] = {"jpg": "JPEG", "png": "PNG"} # Output format token > Pillow format name.




#                                     === ORM pipeline interface ===


def derive_sibling_paths(base_path: str, output_format: str) -> SiblingPaths:
# Swaps the first "_Color" in the filename for each map token; the directory and source extension are kept.
# The ORM output gets the extension of the chosen output format.
# Without "_Color" in the filename the swap does nothing and every sibling equals the base file.

    directory, filename = os.path.split(base_path)

    def sibling(token: str) -> str:
        return os.path.join(directory, filename.replace(BASE_MAP_TOKEN, token, 1))

    orm_stem, _ = os.path.splitext(filename.replace(BASE_MAP_TOKEN, ORM_MAP_TOKEN, 1))
    return SiblingPaths(
        ambient_occlusion=sibling(TEXTURE_CONFIG["AmbientOcclusion"]["token"]),
        roughness=sibling(TEXTURE_CONFIG["Roughness"]["token"]),
        metallicity=sibling(TEXTURE_CONFIG["Metallicity"]["token"]),
        output=os.path.join(directory, f"{orm_stem}.{output_format}"),
    )


def load_source_image(path: str, role: str, *, srgb_transform: bool = EXR_SRGB_CURVE) -> Optional[SourceImage]:
# Returns None if the file doesn't exist; the role then stays zero in the ORM map.
# A file that exists but cannot be decoded is reported and treated the same way.

    if not os.path.isfile(path):
        return None

    try:
        pixels = _decode_pixels(path, srgb_transform)
    except DecodeError as error:
        log(f"Could not read image: {path}, reason: {error}", "warn")
        return None

    height, width, channel_count = pixels.shape
    return SourceImage(width=width, height=height, channel_count=channel_count,
                       pixel_data=pixels, origin_path=path, role=role)


def _decode_pixels(path: str, srgb_transform: bool) -> np.ndarray:
# Decodes a file into a uint8 array (H, W, C), raising DecodeError for anything unreadable.

    if os.path.splitext(path)[1].lower() in RAW_SOURCE_TYPES:
        if not check_exr_libraries():
            raise DecodeError("EXR runtime missing (OpenEXR)")
        try:
            return read_exr_as_array(path, srgb_transform=srgb_transform)
        except Exception as error:
            raise DecodeError(str(error)) from error
    # Pre-processing the .exr files.

    image: Optional[ImageObject] = None
    try:
        image = open_image(path)
        return to_array_u8(image)
    except IMAGE_READ_ERRORS as error:
        raise DecodeError(str(error)) from error
    finally:
        close_image_files([image])


def write_packed_texture(orm_buffer: np.ndarray, output_path: str, output_format: str, *,
                         jpeg_quality: int = JPEG_QUALITY, png_compress_level: int = PNG_COMPRESS_LEVEL) -> int:
# Encodes the (H, W, 3) buffer and returns the written file size in bytes.
# A partially written file is removed if the encoder fails.

    file_format = SAVE_FORMATS.get(output_format)
    if file_format is None:
        raise EncodeError(f"unsupported output format '{output_format}'")

    save_kwargs: dict[str, object] = {}
    if file_format == "JPEG":
        save_kwargs["quality"] = jpeg_quality
        save_kwargs["subsampling"] = 0
        # Full resolution chroma, packed channels are independent data.
    else:
        save_kwargs["compress_level"] = png_compress_level

    image = from_array_u8(orm_buffer)
    try:
        save_image(image, output_path, file_format, **save_kwargs)
    except (OSError, ValueError) as error:
        _remove_partial_file(output_path)
        raise EncodeError(f"failed writing ORM image to {output_path}, {error}") from error
    finally:
        close_image_files([image])

    return os.path.getsize(output_path)


def _remove_partial_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as error:
        log(f"Failed to remove partial file '{path}': {error}", "warn")
