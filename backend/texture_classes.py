from typing import Dict, Optional, TypedDict
from dataclasses import dataclass

import numpy as np


class TextureRoleConfig(TypedDict):
    token: str # Filename token that replaces "_Color" for this map type, e.g., "_Roughness".
    channel: int # Destination channel in the packed ORM map: 0 = R, 1 = G, 2 = B.


@dataclass
class SourceImage:
    width: int # Texture width read from the file.
    height: int # Texture height read from the file.
    channel_count: int # Number of interleaved 8bit channels, e.g., 1 for grayscale.
    pixel_data: Optional[np.ndarray] # Owned uint8 array of shape (height, width, channel_count); None once released.
    origin_path: str # File path the image was decoded from.
    role: str # TEXTURE_CONFIG key, e.g., "AmbientOcclusion".

    def release(self) -> None:
    # Drops the pixel buffer. Safe to call more than once.
        self.pixel_data = None


@dataclass
class SiblingPaths:
    ambient_occlusion: str # Path of the AO map, e.g., dir/Mat_AmbientOcclusion.jpg
    roughness: str # Path of the roughness map.
    metallicity: str # Path of the metalness map.
    output: str # Path of the generated ORM map, e.g., dir/Mat_ORM.png

    def by_role(self) -> Dict[str, str]:
    # Maps TEXTURE_CONFIG keys to their source paths, in load order.
        return {
            "AmbientOcclusion": self.ambient_occlusion,
            "Roughness": self.roughness,
            "Metallicity": self.metallicity,
        }
