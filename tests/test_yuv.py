import numpy as np
import pytest

from adaskit.yuv import (
    PixelFormat,
    convert_frame,
    frame_sizes,
    nv12_to_rgb,
    uyvy_to_rgb,
    yuv_to_rgb_pixel,
    yuyv_to_rgb,
)


def _as_tuple(pixel):
    return tuple(int(x) for x in pixel)


@pytest.mark.parametrize(
    "code,expected",
    [
        (b"YUYV", (4 * 2 * 3, 4 * 2 * 2)),
        (b"UYVY", (4 * 2 * 3, 4 * 2 * 2)),
        (b"NV12", (4 * 2 * 3, 4 * 2 * 2)),
        (b"GREY", (4 * 2, 4 * 2)),
    ],
)
def test_fourcc_values(code, expected):
    assert frame_sizes(int.from_bytes(code, "little"), 4, 2) == expected


def test_neutral_grey_pixel():
    assert yuv_to_rgb_pixel(128, 128, 128) == (110, 110, 110)


def test_black_pixel():
    assert yuv_to_rgb_pixel(0, 128, 128) == (0, 0, 0)


def test_white_pixel():
    assert yuv_to_rgb_pixel(255, 128, 128) == (219, 219, 219)


def test_clipping_matches_saturated_value():
    saturated = yuv_to_rgb_pixel(255, 128, 128)[0]
    assert yuv_to_rgb_pixel(255, 128, 255)[0] == saturated
    assert yuv_to_rgb_pixel(0, 128, 0)[0] == yuv_to_rgb_pixel(0, 128, 128)[0]


@pytest.mark.parametrize("y,u,v", [(0, 0, 0), (255, 255, 255), (16, 240, 10), (200, 30, 220)])
def test_pixel_channels_stay_below_scaled_maximum(y, u, v):
    assert all(0 <= channel <= 220 for channel in yuv_to_rgb_pixel(y, u, v))


def test_yuyv_pixels_match_scalar_conversion():
    y0, u, y1, v = 50, 90, 180, 200
    out = yuyv_to_rgb(bytes([y0, u, y1, v]), 2, 1)
    assert out.shape == (1, 2, 3)
    assert _as_tuple(out[0, 0]) == yuv_to_rgb_pixel(y0, u, v)
    assert _as_tuple(out[0, 1]) == yuv_to_rgb_pixel(y1, u, v)


def test_uyvy_pixels_match_scalar_conversion():
    u, y0, v, y1 = 70, 30, 160, 240
    out = uyvy_to_rgb(bytes([u, y0, v, y1]), 2, 1)
    assert _as_tuple(out[0, 0]) == yuv_to_rgb_pixel(y0, u, v)
    assert _as_tuple(out[0, 1]) == yuv_to_rgb_pixel(y1, u, v)


def test_yuyv_and_uyvy_agree_on_reordered_bytes():
    rng = np.random.default_rng(1)
    yuyv = rng.integers(0, 256, 4 * 3 * 2, dtype=np.uint8)
    groups = yuyv.reshape(-1, 4)
    uyvy = groups[:, [1, 0, 3, 2]].ravel()
    assert np.array_equal(yuyv_to_rgb(yuyv.tobytes(), 4, 3), uyvy_to_rgb(uyvy.tobytes(), 4, 3))


def test_nv12_groups_share_chroma_pairs():
    luma = [10, 60, 120, 250, 5, 100, 150, 200]
    chroma = [40, 210, 190, 20]
    out = nv12_to_rgb(bytes(luma + chroma), 4, 2)
    assert out.shape == (2, 4, 3)
    flat = out.reshape(-1, 3)
    for index, y in enumerate(luma):
        u, v = chroma[(index // 4) * 2], chroma[(index // 4) * 2 + 1]
        assert _as_tuple(flat[index]) == yuv_to_rgb_pixel(y, u, v)


def test_numpy_input_is_accepted():
    data = np.array([128, 128, 128, 128], dtype=np.uint8)
    assert np.array_equal(yuyv_to_rgb(data, 2, 1), yuyv_to_rgb(data.tobytes(), 2, 1))


def test_short_frame_is_rejected():
    with pytest.raises(ValueError):
        yuyv_to_rgb(bytes(7), 2, 2)
    with pytest.raises(ValueError):
        nv12_to_rgb(bytes(5), 4, 1)


def test_incomplete_pixel_groups_are_rejected():
    with pytest.raises(ValueError):
        yuyv_to_rgb(bytes(2), 1, 1)
    with pytest.raises(ValueError):
        nv12_to_rgb(bytes(6), 2, 1)


def test_frame_sizes_follow_format():
    assert frame_sizes(PixelFormat.GREY, 4, 2) == (4 * 2, 4 * 2)
    for fmt in (PixelFormat.YUYV, PixelFormat.UYVY, PixelFormat.NV12):
        assert frame_sizes(fmt, 4, 2) == (4 * 2 * 3, 4 * 2 * 2)


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        frame_sizes(12345, 4, 2)
    with pytest.raises(ValueError):
        convert_frame(bytes(16), 12345, 4, 2)


def test_convert_grey_frame_keeps_bytes():
    data = bytes(range(6))
    out = convert_frame(data, PixelFormat.GREY, 3, 2)
    assert out.shape == (2, 3)
    assert out.tobytes() == data


@pytest.mark.parametrize(
    "fmt,converter",
    [(PixelFormat.YUYV, yuyv_to_rgb), (PixelFormat.UYVY, uyvy_to_rgb), (PixelFormat.NV12, nv12_to_rgb)],
)
def test_convert_frame_dispatches_by_format(fmt, converter):
    rng = np.random.default_rng(3)
    data = rng.integers(0, 256, 4 * 2 * 2, dtype=np.uint8).tobytes()
    assert np.array_equal(convert_frame(data, int(fmt), 4, 2), converter(data, 4, 2))