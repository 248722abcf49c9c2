""" ORM Packer settings. """

import json
import os
from typing import Tuple

from backend.texture_classes import TextureRoleConfig


def _as_bool(v) -> bool:
# Converts .json input (bool/int/str/None) to a real bool;
# Avoids the case where a non-empty string like "False" is treated as True.

    if isinstance(v, bool): return v
    if isinstance(v, str):
        input_str = v.strip().lower()
        if input_str == "": return False
        return input_str in ("1","true","yes","on")
    return bool(v)


def _as_int(v, default: int, low: int, high: int) -> int:
# Converts .json input to an int clamped to [low, high]; falls back to default if it's not a number.

    try:
        value = int(v)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, value))



#                                           === Loading JSON file ===

_config_path = os.path.join(os.path.dirname(__file__), "config.json")
_config_data: dict = {}
if os.path.isfile(_config_path):
    with open(_config_path, "r", encoding="utf-8") as f:
        _config_data = json.load(f)


# Assigning config values:
JPEG_QUALITY: int = _as_int(_config_data.get("JPEG_QUALITY", 99), 99, 1, 100) # Quality of generated .jpg ORM maps.
PNG_COMPRESS_LEVEL: int = _as_int(_config_data.get("PNG_COMPRESS_LEVEL", 6), 6, 0, 9) # zlib level of generated .png ORM maps; lossless at any level.
EXR_SRGB_CURVE: bool = _as_bool(_config_data.get("EXR_SRGB_CURVE", True)) # If true, applies sRGB gamma transform when reading .exr source maps.

SHOW_DETAILS: bool = _as_bool(_config_data.get("SHOW_DETAILS", False)) # Shows details like exact file size and execution time when printing logs.




#                                           === Constants ===

ALLOWED_OUTPUT_FORMATS: Tuple[str, ...] = ("jpg", "png")
BASE_MAP_TOKEN: str = "_Color" # Token in the input filename that is swapped to find sibling maps.
ORM_MAP_TOKEN: str = "_ORM"

TEXTURE_CONFIG: dict[str, TextureRoleConfig] = {
    "AmbientOcclusion": {"token": "_AmbientOcclusion", "channel": 0},
    "Roughness": {"token": "_Roughness", "channel": 1},
    "Metallicity": {"token": "_Metalness", "channel": 2}}
# Dict order is the load order; channel is the destination index in the packed ORM map.
