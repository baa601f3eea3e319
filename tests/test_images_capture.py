import math

import numpy as np
import pytest
from PIL import Image

from adaskit.images_capture import (
    DirReader,
    ImreadWrapper,
    InvalidInput,
    OpenError,
    open_images_capture,
)

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def _save(path, color, size=(3, 2)):
    Image.new("RGB", size, color).save(path)
    return path


def _bgr(color):
    return list(reversed(color))


@pytest.fixture
def image_dir(tmp_path):
    _save(tmp_path / "a.png", RED)
    _save(tmp_path / "b.png", GREEN)
    (tmp_path / "c.txt").write_text("not an image")
    _save(tmp_path / "d.png", BLUE)
    return tmp_path


def test_imread_returns_bgr_frame_once(tmp_path):
    path = _save(tmp_path / "red.png", RED, size=(4, 2))
    capture = ImreadWrapper(str(path), loop=False)
    frame = capture.read()
    assert frame.shape == (2, 4, 3)
    assert frame.dtype == np.uint8
    assert frame[0, 0].tolist() == _bgr(RED)
    assert capture.read() is None


def test_imread_loop_keeps_returning_copies(tmp_path):
    path = _save(tmp_path / "red.png", RED)
    capture = ImreadWrapper(str(path), loop=True)
    first = capture.read()
    first[...] = 0
    second = capture.read()
    assert second[0, 0].tolist() == _bgr(RED)
    assert capture.read() is not None and capture.read()[1, 2].tolist() == _bgr(RED)


def test_imread_type_fps_and_metrics(tmp_path):
    path = _save(tmp_path / "red.png", RED)
    capture = ImreadWrapper(str(path), loop=False)
    assert capture.type_name() == "IMAGE"
    assert capture.fps() == 1.0
    assert not math.isnan(capture.metrics().get_total().latency)


def test_imread_missing_file(tmp_path):
    with pytest.raises(InvalidInput, match="Can't find the image by"):
        ImreadWrapper(str(tmp_path / "missing.png"), loop=False)


def test_imread_undecodable_file(tmp_path):
    path = tmp_path / "junk.png"
    path.write_text("junk")
    with pytest.raises(OpenError, match="Can't open the image from"):
        ImreadWrapper(str(path), loop=False)


def test_dir_reader_reads_sorted_images_skipping_junk(image_dir):
    reader = DirReader(str(image_dir), loop=False)
    colors = [frame[0, 0].tolist() for frame in reader]
    assert colors == [_bgr(RED), _bgr(GREEN), _bgr(BLUE)]
    assert reader.read() is None
    assert reader.type_name() == "DIR"
    assert reader.fps() == 1.0


def test_dir_reader_initial_image(image_dir):
    reader = DirReader(str(image_dir), loop=False, initial_image_id=1)
    colors = [frame[0, 0].tolist() for frame in reader]
    assert colors == [_bgr(GREEN), _bgr(BLUE)]


def test_dir_reader_length_limit(image_dir):
    reader = DirReader(str(image_dir), loop=False, read_length_limit=2)
    assert len(list(reader)) == 2


def test_dir_reader_loop_restarts_at_initial_image(image_dir):
    reader = DirReader(str(image_dir), loop=True, initial_image_id=1, read_length_limit=1)
    colors = [reader.read()[0, 0].tolist() for _ in range(3)]
    assert colors == [_bgr(GREEN)] * 3


def test_dir_reader_loop_wraps_around(image_dir):
    reader = DirReader(str(image_dir), loop=True)
    colors = [reader.read()[0, 0].tolist() for _ in range(4)]
    assert colors[3] == colors[0]
    assert colors[:3] == [_bgr(RED), _bgr(GREEN), _bgr(BLUE)]


def test_dir_reader_missing_dir(tmp_path):
    with pytest.raises(InvalidInput, match="Can't find the dir by"):
        DirReader(str(tmp_path / "nope"), loop=False)


def test_dir_reader_empty_dir(tmp_path):
    with pytest.raises(OpenError, match="is empty"):
        DirReader(str(tmp_path), loop=False)


def test_dir_reader_no_images(tmp_path):
    (tmp_path / "x.txt").write_text("x")
    with pytest.raises(OpenError, match="Can't read the first image from"):
        DirReader(str(tmp_path), loop=False)


def test_dir_reader_initial_beyond_images(image_dir):
    with pytest.raises(OpenError):
        DirReader(str(image_dir), loop=False, initial_image_id=3)


def test_open_images_capture_picks_kind(tmp_path, image_dir):
    path = _save(tmp_path / "single.png", RED)
    assert open_images_capture(str(path), loop=False).type_name() == "IMAGE"
    assert open_images_capture(str(image_dir), loop=False).type_name() == "DIR"


def test_open_images_capture_reports_invalid_inputs(tmp_path):
    missing = str(tmp_path / "missing")
    with pytest.raises(RuntimeError) as excinfo:
        open_images_capture(missing, loop=False)
    message = str(excinfo.value)
    assert "Can't find the image by " + missing in message
    assert "Can't find the dir by " + missing in message


def test_open_images_capture_prefers_open_errors(tmp_path):
    (tmp_path / "x.txt").write_text("x")
    with pytest.raises(RuntimeError) as excinfo:
        open_images_capture(str(tmp_path), loop=False)
    message = str(excinfo.value)
    assert "Can't read the first image from" in message
    assert "Can't find" not in message


def test_open_images_capture_rejects_zero_limit(tmp_path):
    path = _save(tmp_path / "single.png", RED)
    with pytest.raises(ValueError, match="Read length limit must be positive"):
        open_images_capture(str(path), loop=False, read_length_limit=0)