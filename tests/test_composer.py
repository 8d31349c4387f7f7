from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from conftest import gradient_image, make_image, png_bytes
from gridspot.errors import DecodeError, InvalidInputError
from gridspot.grid.composer import GridStyle, compose_grid
from gridspot.grid.geometry import GridSpec


PNG_STYLE = GridStyle(format="PNG")


def test_small_image_is_not_upscaled():
    grid = compose_grid(make_image(300, 200), GridSpec(rows=4, cols=6, margin=48, max_side=1400))
    g = grid.geometry

    assert (g.resampled_w, g.resampled_h) == (300, 200)
    assert (g.original_w, g.original_h) == (300, 200)
    assert grid.image.size == (396, 296)
    assert (g.output_w, g.output_h) == (396, 296)
    assert grid.mime_type == "image/jpeg"
    assert grid.data[:3] == b"\xff\xd8\xff"


def test_large_image_fits_max_side(wide_png):
    spec = GridSpec(rows=12, cols=12, margin=48, max_side=1400)
    g = compose_grid(wide_png, spec).geometry

    assert max(g.resampled_w, g.resampled_h) <= spec.max_side
    assert (g.resampled_w, g.resampled_h) == (1400, 700)
    assert (g.original_w, g.original_h) == (2800, 1400)
    assert g.cell_w * g.cols == pytest.approx(g.resampled_w)
    assert g.cell_h * g.rows == pytest.approx(g.resampled_h)
    assert g.scale_x == pytest.approx(2.0)


def test_margin_is_white_and_lines_are_translucent():
    grid = compose_grid(make_image(240, 240, (255, 255, 255)), GridSpec(rows=2, cols=2, margin=20), style=PNG_STYLE)
    arr = np.array(grid.image)

    assert grid.mime_type == "image/png"
    assert tuple(arr[5, 5]) == (255, 255, 255)
    assert tuple(arr[grid.image.height - 3, grid.image.width - 3]) == (255, 255, 255)

    # vertical line at the left edge of the image region, away from labels
    line_px = arr[25, 20]
    assert 0 < int(line_px[0]) < 255


def test_closing_lines_stay_inside_the_image():
    spec = GridSpec(rows=2, cols=2, margin=0)
    grid = compose_grid(make_image(240, 240, (255, 255, 255)), spec, style=PNG_STYLE)
    arr = np.array(grid.image)

    assert grid.image.size == (240, 240)
    assert int(arr[10, 239][0]) < 255
    assert int(arr[239, 10][0]) < 255

    framed_grid = compose_grid(make_image(240, 240, (255, 255, 255)), GridSpec(rows=2, cols=2, margin=20), style=PNG_STYLE)
    framed = np.array(framed_grid.image)
    assert int(framed[25, 259][0]) < 255
    assert tuple(framed[25, 260]) == (255, 255, 255)


def test_cell_labels_are_drawn_at_cell_centers():
    grid = compose_grid(make_image(240, 240, (128, 128, 128)), GridSpec(rows=2, cols=2, margin=0), style=PNG_STYLE)
    arr = np.array(grid.image).astype(int)

    center = arr[50:70, 50:70]
    corner = arr[20:40, 20:40]
    assert (np.abs(center - 128) > 60).any()
    assert (np.abs(corner - 128) <= 2).all()


def test_data_round_trips_as_image():
    grid = compose_grid(png_bytes(gradient_image(100, 80)), GridSpec(rows=3, cols=3, margin=10), style=PNG_STYLE)
    decoded = Image.open(io.BytesIO(grid.data))
    assert decoded.size == (120, 100)
    assert grid.to_data_url().startswith("data:image/png;base64,")


def test_source_image_is_not_mutated():
    src = make_image(50, 40, (10, 20, 30))
    before = np.array(src).copy()
    compose_grid(src, GridSpec(rows=2, cols=2, margin=5))
    assert np.array_equal(np.array(src), before)


def test_undecodable_source_raises():
    with pytest.raises(DecodeError):
        compose_grid(b"definitely not an image")


@pytest.mark.parametrize(
    "kwargs",
    [{"rows": 0}, {"cols": -1}, {"margin": -1}, {"max_side": 0}],
)
def test_grid_spec_validation(kwargs):
    with pytest.raises(InvalidInputError):
        GridSpec(**kwargs)


def test_resampled_size_rounds_and_never_upscales():
    spec = GridSpec(max_side=100)
    assert spec.resampled_size(50, 40) == (50, 40)
    assert spec.resampled_size(1000, 333) == (100, 33)
    assert spec.resampled_size(1000, 1) == (100, 1)


def test_style_from_config_reads_grid_section():
    style = GridStyle.from_config({"line_color": [1, 2, 3, 4], "label_size": 20, "format": "PNG"})
    assert style.line_color == (1, 2, 3, 4)
    assert style.label_size == 20
    assert style.format == "PNG"
    assert style.jpeg_quality == 92
