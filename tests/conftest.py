import pytest

from image_helpers import png_bytes


@pytest.fixture
def subject_png() -> bytes:
    return png_bytes((400, 300), (20, 60, 200, 255))
