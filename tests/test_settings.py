import pytest

import settings
from settings import _as_bool, _as_int


@pytest.mark.parametrize("value, expected", [
    (True, True), (False, False), ("true", True), ("False", False), (" on ", True),
    ("", False), (1, True), (0, False), (None, False),
])
def test_as_bool(value, expected):
    assert _as_bool(value) is expected


@pytest.mark.parametrize("value, expected", [(90, 90), ("75", 75), (0, 1), (150, 100), ("high", 99), (None, 99)])
def test_as_int_clamps_jpeg_quality(value, expected):
    assert _as_int(value, 99, 1, 100) == expected


def test_defaults_from_config():
    assert settings.JPEG_QUALITY == 99
    assert settings.ALLOWED_OUTPUT_FORMATS == ("jpg", "png")
    assert [config["channel"] for config in settings.TEXTURE_CONFIG.values()] == [0, 1, 2]
