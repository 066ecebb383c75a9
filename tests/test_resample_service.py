from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from icoforge.models.image_model import ICON_SIZES, SourceImage
from icoforge.services.image_service import ImageService
from icoforge.services.resample_service import ResampleService, fit_box, unpremultiply


def _as_array(rendered) -> np.ndarray:
    return np.frombuffer(rendered.pixels, dtype=np.uint8).reshape(rendered.height, rendered.width, 4)


def _premultiply(rgba):
    r, g, b, a = rgba
    return tuple(int(round(c * a / 255)) for c in (r, g, b)) + (a,)


@pytest.fixture
def service() -> ResampleService:
    return ResampleService()


@pytest.mark.parametrize("size", ICON_SIZES)
def test_rendered_image_is_exactly_target_size(service, make_source, size):
    rendered = service.resample(make_source(100, 50), size)

    assert (rendered.width, rendered.height) == (size, size)
    assert len(rendered.pixels) == size * size * 4


@pytest.mark.parametrize("width,height", [(100, 50), (50, 100), (3, 1), (1, 7), (333, 217), (20, 20), (1, 1)])
@pytest.mark.parametrize("size", ICON_SIZES)
def test_fit_box_preserves_aspect_and_centers(width, height, size):
    offset_x, offset_y, draw_w, draw_h = fit_box(width, height, size)

    assert max(draw_w, draw_h) == size
    # drawn height vs. the exact height for the drawn width: under one pixel apart
    assert abs(draw_h - draw_w * height / width) < 1 or abs(draw_w - draw_h * width / height) < 1
    # opposite paddings differ by at most one pixel
    assert abs(offset_x - (size - draw_w - offset_x)) <= 1
    assert abs(offset_y - (size - draw_h - offset_y)) <= 1


def test_fit_box_landscape_example():
    assert fit_box(100, 50, 16) == (0, 4, 16, 8)
    assert fit_box(50, 100, 16) == (4, 0, 8, 16)


def test_padding_is_fully_transparent(service, make_source):
    arr = _as_array(service.resample(make_source(100, 50), 16))

    assert not arr[:4].any()
    assert not arr[12:].any()
    assert (arr[4:12, :, 3] > 0).all()
    assert (arr[4:12, :, 0] > 250).all()


def test_same_size_source_is_copied_exactly(service):
    pixels = bytes(range(256)) * 4  # 16x16 straight RGBA
    source = SourceImage(width=16, height=16, pixels=pixels)

    rendered = service.resample(source, 16)

    assert rendered.pixels == pixels


def test_premultiplied_source_is_restored_to_straight_alpha(service, make_source):
    straight = (200, 100, 50, 128)
    source = make_source(8, 8, rgba=_premultiply(straight), premultiplied=True)

    arr = _as_array(service.resample(source, 32))
    center = arr[16, 16]

    for got, want in zip(center, straight):
        assert abs(int(got) - want) <= 1


def test_straight_source_keeps_straight_alpha(service, make_source):
    straight = (200, 100, 50, 128)

    arr = _as_array(service.resample(make_source(64, 64, rgba=straight), 16))

    for got, want in zip(arr[8, 8], straight):
        assert abs(int(got) - want) <= 2


def test_downsampling_blends_neighbouring_pixels(service):
    # left half black, right half white; the seam must pick up intermediate values
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 255))
    img.paste((255, 255, 255, 255), (32, 0, 64, 64))
    source = ImageService().from_pil(img)

    arr = _as_array(service.resample(source, 16))
    row = arr[8, :, 0].astype(int)

    assert row[0] < 10 and row[-1] > 245
    assert any(10 < v < 245 for v in row)


def test_source_is_not_mutated(service, make_source):
    source = make_source(10, 10, rgba=(10, 20, 30, 40), premultiplied=True)
    before = source.pixels

    service.resample(source, 16)

    assert source.pixels == before


def test_non_positive_size_is_rejected(service, make_source):
    with pytest.raises(ValueError):
        service.resample(make_source(4, 4), 0)


def test_unpremultiply_partial_alpha():
    arr = np.array([[[64, 32, 16, 128]]], dtype=np.uint8)

    assert unpremultiply(arr)[0, 0].tolist() == [128, 64, 32, 128]


def test_unpremultiply_clamps_to_255():
    arr = np.array([[[200, 0, 0, 100]]], dtype=np.uint8)

    assert unpremultiply(arr)[0, 0].tolist() == [255, 0, 0, 100]


@pytest.mark.parametrize("pixel", [[10, 20, 30, 0], [10, 20, 30, 255]])
def test_unpremultiply_passes_through_extreme_alpha(pixel):
    arr = np.array([[pixel]], dtype=np.uint8)

    assert unpremultiply(arr)[0, 0].tolist() == pixel


def test_unpremultiply_returns_new_array():
    arr = np.array([[[64, 32, 16, 128]]], dtype=np.uint8)

    out = unpremultiply(arr)

    assert arr[0, 0].tolist() == [64, 32, 16, 128]
    assert out is not arr
