# adaskit

Building blocks for multi-camera driver-assistance pipelines, written with
NumPy and Pillow.

## What is in it

- `adaskit.yuv` – conversion of raw camera frames to arrays: `yuyv_to_rgb`,
  `uyvy_to_rgb`, `nv12_to_rgb`, `yuv_to_rgb_pixel`, and `convert_frame`, which
  dispatches on a `PixelFormat` (`GREY`, `YUYV`, `UYVY`, `NV12`, valued by
  their four-character codes). `frame_sizes` gives the display and raw byte
  sizes of a frame. RGB output is scaled by 220/256.
- `adaskit.images_capture` – frame sources for a single image file
  (`ImreadWrapper`) or a directory of images read in name order
  (`DirReader`), both with optional looping. `open_images_capture` tries each
  in turn. Frames are BGR `uint8` arrays; `read()` returns `None` when the
  source is exhausted, and sources can be iterated.
- `adaskit.input_wrappers` – `InputChannel` readers sharing one
  `InputSource`: `ImageSource` for a still image and `VideoCaptureSource` for
  any capture object offering `read()`, `set()` and `get()` with the
  `CAP_PROP_*` ids defined in the module.
- `adaskit.nms` – `Anchor` boxes and `nms`, non-maximum suppression.
- `adaskit.kuhn_munkres` – `KuhnMunkres`, an assignment-problem solver with an
  optional greedy mode.
- `adaskit.image_utils` – `resize_image_ext` with `ResizeMode.FILL`,
  `KEEP_ASPECT` and `KEEP_ASPECT_LETTERBOX`; it returns the image and the
  region that holds the picture.
- `adaskit.grid_mat` – `GridMat`, a mosaic laying several sources out in a
  grid, and `fill_roi_color` for blending a colour into a region.
- `adaskit.ocv_common` – `InputTransform` (mean/scale/channel reversal),
  `OutputTransform` (scaling images, points and rectangles to an output
  resolution), `mat_to_tensor`, `get_layout_from_shape` and small helpers.
- `adaskit.performance_metrics` – `PerformanceMetrics`, latency and FPS over
  a moving time window and in total, and `log_latency_per_stage`.
- `adaskit.threads` – `Worker`, a thread pool running `Task`s by priority,
  `try_push`, `VideoFrame` and the lock-guarded `ConcurrentContainer`.
- `adaskit.slog` – `LogStream` and the `info`, `debug`, `warn` and `err`
  streams that prefix every line with `[ PREFIX ] `.
- `adaskit.args` – parsing of device lists, per-device values, `WxH` sizes,
  layout strings and `-i` input arguments.
- `adaskit.config_factory` – `ModelConfig` and `get_user_config`,
  `get_min_latency_config`, `get_common_config`, building device property
  dictionaries from command-line flag values.
- `adaskit.common` – `clamp`, `file_name_no_ext`, `Color` and
  `CITYSCAPES_COLORS`.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Examples

Convert a packed YUYV frame to an RGB array of shape `(height, width, 3)`:

```python
from adaskit.yuv import PixelFormat, convert_frame

rgb = convert_frame(raw_bytes, PixelFormat.YUYV, 1920, 1080)
```

Suppress overlapping detections (here the second box is dropped):

```python
from adaskit.nms import Anchor, nms

boxes = [Anchor(0, 0, 10, 10), Anchor(1, 1, 11, 11), Anchor(50, 50, 60, 60)]
keep = nms(boxes, [0.9, 0.8, 0.7], 0.5, False)   # [0, 2]
```

Match rows to columns by cost:

```python
import numpy as np
from adaskit.kuhn_munkres import KuhnMunkres

cost = np.array([[4, 1, 3], [2, 0, 5], [3, 2, 2]], dtype=np.float32)
assignment = KuhnMunkres(False).solve(cost)   # one column index per row, -1 if none
```

Parse device and size arguments:

```python
from adaskit.args import parse_devices, string_to_size

parse_devices("MULTI:CPU,GPU")   # ["CPU", "GPU"]
string_to_size("1280x720")       # (1280, 720)
```

Read frames from a directory of images, looping forever:

```python
from adaskit.images_capture import open_images_capture

capture = open_images_capture("frames/", True)
frame = capture.read()
```

## What it does not do

- It does not talk to cameras or video devices, and `open_images_capture`
  opens only image files and directories, not video files or camera ids. A
  video source can be used through `VideoCaptureSource` with a capture object
  you supply.
- It has no window or display: frames are returned as NumPy arrays.
- It runs no inference. `adaskit.config_factory` only builds property
  dictionaries; loading and running models is left to the caller.
- There is no command-line program.