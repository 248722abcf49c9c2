""" Generates a packed ORM texture (R: ambient occlusion, G: roughness, B: metalness) from the maps next to a *_Color texture. """

import os
import sys
import time
from typing import List, Optional, Tuple

import numpy as np

from backend.errors import (AllocationError, ArgumentError, ChannelRangeError, DimensionMismatchError,
                            FormatError, NoInputError, ORMPackerError)
from backend.io_backend import derive_sibling_paths, load_source_image, write_packed_texture
from backend.texture_classes import SiblingPaths, SourceImage

from settings import ALLOWED_OUTPUT_FORMATS, BASE_MAP_TOKEN, SHOW_DETAILS, TEXTURE_CONFIG
from utils import bytes_to_megabytes, log, release_source_images


# Naming convention for a texture set in one folder:
#   Rock_2K_Color.jpg             - base path passed on the CLI, not read
#   Rock_2K_AmbientOcclusion.jpg  > R
#   Rock_2K_Roughness.jpg         > G
#   Rock_2K_Metalness.jpg         > B
#   Rock_2K_ORM.png               - generated
# Missing maps leave their channel at 0.


#                                           === Pipeline ===


def orm_packer(base_path: str, output_format: str) -> str:
# Runs the whole pipeline for one texture set and returns the path of the written ORM map.
# Raises an ORMPackerError subclass on any terminal failure; nothing is written in that case.

    start_time = time.time()
    output_format = _validate_output_format(output_format)
    sibling_paths: SiblingPaths = derive_sibling_paths(base_path, output_format)

    if BASE_MAP_TOKEN not in os.path.basename(base_path):
        log(f"Warning: '{os.path.basename(base_path)}' has no '{BASE_MAP_TOKEN}' in its name, source maps resolve to the file itself.", "warn")
        # Prints warning.
        if os.path.abspath(sibling_paths.output) == os.path.abspath(base_path):
            log(f"Warning: output '{sibling_paths.output}' is the input file itself and will be overwritten.", "warn")
        # Same extension as the output format, e.g., Plain.png + png.

    log(f"Processing: {base_path}", "info")


# Loading, validating and packing the source maps:
    source_images: List[SourceImage] = []
    try:
        source_images = _load_source_images(sibling_paths)
        width, height = _validate_source_images(source_images)
        orm_buffer: np.ndarray = _pack_channels(source_images, width, height)
    finally:
        release_source_images(source_images)
    # Source buffers are dropped before encoding, also when validation aborts.


# Saving the file:
    file_size: int = write_packed_texture(orm_buffer, sibling_paths.output, output_format)
    del orm_buffer

    log(f"wrote {width}x{height} ORM file with size: {bytes_to_megabytes(file_size)} MB to: {sibling_paths.output}", "complete")
    if SHOW_DETAILS:
        log(f"File size: {file_size} bytes", "info")
        elapsed_time = time.time() - start_time
        log(f"Execution time: {elapsed_time:.2f} seconds", "info")
        # Prints info.
    return sibling_paths.output




#                                       === Validation & Setup ===

def _validate_output_format(output_format: str) -> str:
# Returns the normalized format token ("jpg"/"png"), without the dot.

    typed_format: str = (output_format or "").strip().lower().lstrip(".")
    if typed_format not in ALLOWED_OUTPUT_FORMATS:
        raise FormatError(f"output format must be either {' or '.join(ALLOWED_OUTPUT_FORMATS)}, got '{output_format}'")
    return typed_format


def _load_source_images(sibling_paths: SiblingPaths) -> List[SourceImage]:
# Loads every sibling map that exists, in TEXTURE_CONFIG order. Missing and unreadable maps are skipped.

    source_images: List[SourceImage] = []
    for role, path in sibling_paths.by_role().items():
        source_image: Optional[SourceImage] = load_source_image(path, role)
        if source_image is None:
            if SHOW_DETAILS:
                log(f"{role}: not used ({path})", "skip")
            continue

        source_images.append(source_image)
        if SHOW_DETAILS:
            log(f"{role}: {os.path.basename(path)} ({source_image.width}x{source_image.height}, {source_image.channel_count} ch)", "info")
    return source_images


def _validate_source_images(source_images: List[SourceImage]) -> Tuple[int, int]:
# Checks that all maps share the first map's width, height and channel count; returns (width, height).
# Every mismatch is printed before aborting.

    if not source_images:
        names = ", ".join(config["token"].lstrip("_") for config in TEXTURE_CONFIG.values())
        raise NoInputError(f"no images: none of the {names} maps could be loaded")

    first_image = source_images[0]
    width, height, channel_count = first_image.width, first_image.height, first_image.channel_count

    if channel_count < 1 or channel_count > 3:
        raise ChannelRangeError(f"image channels must be 1, 2, or 3. Got: {channel_count} ({first_image.origin_path})")

    mismatches: List[str] = []
    for source_image in source_images[1:]:
        if source_image.width != width:
            mismatches.append(f"image {source_image.origin_path} has wrong width: {source_image.width} vs {width}")
        if source_image.height != height:
            mismatches.append(f"image {source_image.origin_path} has wrong height: {source_image.height} vs {height}")
        if source_image.channel_count != channel_count:
            mismatches.append(f"image {source_image.origin_path} has wrong channel count: {source_image.channel_count} vs {channel_count}")

    if mismatches:
        for mismatch in mismatches:
            log(mismatch, "error")
        raise DimensionMismatchError(f"source maps don't match {os.path.basename(first_image.origin_path)} ({len(mismatches)} mismatches)", mismatches)
    return width, height




#                                              === Generation ===

def _pack_channels(source_images: List[SourceImage], width: int, height: int) -> np.ndarray:
# Copies the leading channel of each map into its ORM channel; channels without a map stay 0.
# Columns are read with a stride of the source channel count, so multi-channel maps fill every n-th column only.

    try:
        orm_buffer = np.zeros((height, width, 3), dtype=np.uint8)
    except (MemoryError, ValueError) as error:
        raise AllocationError(f"could not allocate memory for a {width}x{height} ORM map") from error

    for source_image in source_images:
        channel_index: int = TEXTURE_CONFIG[source_image.role]["channel"]
        step: int = source_image.channel_count
        orm_buffer[:, ::step, channel_index] = source_image.pixel_data[:, ::step, 0]
    return orm_buffer




#                                         === CLI entry point ===

USAGE: List[str] = [
    "Usage: orm-packer path/to/filename_Color.ext format",
    "where:",
    "filename_Color.ext is the base texture; its AmbientOcclusion, Roughness and Metalness siblings are packed",
    f"format is the output ORM texture file format, and must be either {' or '.join(ALLOWED_OUTPUT_FORMATS)}",
]


def _parse_arguments(arguments: List[str]) -> Tuple[str, str]:
    if len(arguments) != 2:
        raise ArgumentError(f"Invalid argument count: expected 2, got {len(arguments)}.")
    base_path, output_format = arguments
    return base_path, output_format


def main(argv: Optional[List[str]] = None) -> None:
    arguments: List[str] = list(sys.argv[1:] if argv is None else argv)

    try:
        base_path, output_format = _parse_arguments(arguments)
    except ArgumentError as error:
        log(str(error), "error")
        for line in USAGE:
            log(line, "info")
        sys.exit(1)

    try:
        orm_packer(base_path, output_format)
    except ORMPackerError as error:
        log(f"Aborted: {error}", "error")
        # Prints error.
        sys.exit(1)

if __name__ == "__main__":
    main()
