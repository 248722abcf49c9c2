import numpy as np
import pytest

import utils
from backend.texture_classes import SourceImage
from utils import bytes_to_megabytes, close_image_files, log, release_source_images


@pytest.mark.parametrize("kind, prefix", [("info", "   "), ("warn", "⚠️ "), ("error", "⛔ "), ("skip", "❌ "), ("complete", "✅ ")])
def test_log_prefixes(kind, prefix, capsys):
    log("message", kind)

    assert capsys.readouterr().out == f"{prefix}message\n"


def test_log_unknown_kind_falls_back_to_info(capsys):
    log("message", "debug")

    assert capsys.readouterr().out == "   message\n"


def test_release_source_images_is_repeatable():
    image = SourceImage(width=1, height=1, channel_count=1, pixel_data=np.zeros((1, 1, 1), dtype=np.uint8),
                        origin_path="Mat_Roughness.png", role="Roughness")

    release_source_images([image, None])
    release_source_images([image])

    assert image.pixel_data is None


def test_close_image_files_closes_each_handle_once():
    class Handle:
        closed = 0

        def close(self):
            self.closed += 1

    handle = Handle()
    close_image_files([handle, None, handle])

    assert handle.closed == 1


@pytest.mark.parametrize("size, expected", [(0, 0), (1024 * 1024 - 1, 0), (3 * 1024 * 1024 + 5, 3)])
def test_bytes_to_megabytes(size, expected):
    assert bytes_to_megabytes(size) == expected


def test_linear_to_srgb_endpoints():
    converted = utils._linear_to_srgb(np.array([0.0, 0.0031308, 1.0, 2.0], dtype=np.float32))

    np.testing.assert_allclose(converted, [0.0, 0.0031308 * 12.92, 1.0, 1.0], rtol=1e-5)
