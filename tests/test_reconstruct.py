from __future__ import annotations

import pytest

from gridspot.grid.geometry import GridGeometry, Rect
from gridspot.grid.reconstruct import apply_padding, cells_to_rect, is_contiguous, parse_cells


def _geometry(w=1200, h=1200, rows=12, cols=12, ow=None, oh=None):
    return GridGeometry(
        resampled_w=w,
        resampled_h=h,
        original_w=ow or w,
        original_h=oh or h,
        margin=48,
        rows=rows,
        cols=cols,
    )


def test_cells_to_rect_encloses_cells():
    rect = cells_to_rect(["B3", "B4", "C4"], _geometry())
    assert rect == Rect(x=100, y=200, w=200, h=200)


def test_cells_to_rect_non_contiguous_uses_enclosing_rect():
    rect = cells_to_rect(["A1", "C3"], _geometry())
    assert rect == Rect(x=0, y=0, w=300, h=300)


def test_cells_to_rect_drops_invalid_labels():
    rect = cells_to_rect(["B3", "Z99", "nope", 5], _geometry())
    assert rect == Rect(x=100, y=200, w=100, h=100)


def test_cells_to_rect_none_without_valid_cells():
    assert cells_to_rect([], _geometry()) is None
    assert cells_to_rect(["M1", "A13"], _geometry()) is None


def test_cells_to_rect_fractional_cells():
    g = _geometry(w=1400, h=700)
    rect = cells_to_rect(["L12"], g)
    assert rect.x == pytest.approx(11 * 1400 / 12)
    assert rect.right == pytest.approx(1400)
    assert rect.bottom == pytest.approx(700)


def test_to_original_scales_grid_space():
    g = _geometry(w=1400, h=700, ow=2800, oh=1400)
    rect = g.to_original(cells_to_rect(["A1"], g))
    assert rect.w == pytest.approx(2800 / 12)
    assert rect.h == pytest.approx(1400 / 12)


def test_apply_padding_clamps_to_bounds():
    rect = apply_padding(Rect(0, 0, 100, 100), 0.5, 120, 120)
    assert rect.x == 0 and rect.y == 0
    assert rect.w <= 120 and rect.h <= 120
    assert rect.w == pytest.approx(120)


def test_apply_padding_grows_evenly_inside_bounds():
    rect = apply_padding(Rect(100, 100, 100, 50), 0.1, 1000, 1000)
    assert rect.x == pytest.approx(90)
    assert rect.y == pytest.approx(95)
    assert rect.w == pytest.approx(120)
    assert rect.h == pytest.approx(60)


def test_apply_padding_cuts_instead_of_shifting():
    rect = apply_padding(Rect(900, 900, 100, 100), 0.2, 1000, 1000)
    assert rect.x == pytest.approx(880)
    assert rect.right == pytest.approx(1000)
    assert rect.bottom == pytest.approx(1000)


def test_apply_padding_zero_ratio_is_identity():
    assert apply_padding(Rect(10, 20, 30, 40), 0.0, 100, 100) == Rect(10, 20, 30, 40)


def test_apply_padding_rejects_negative_ratio():
    with pytest.raises(ValueError):
        apply_padding(Rect(0, 0, 10, 10), -0.1, 100, 100)


def test_is_contiguous():
    assert is_contiguous(["B3", "B4", "C4"], 12, 12)
    assert not is_contiguous(["A1", "C3"], 12, 12)
    assert not is_contiguous(["A1", "B2"], 12, 12)
    assert is_contiguous(["A1", "Z99"], 12, 12)
    assert is_contiguous([], 12, 12)


def test_parse_cells_keeps_order():
    assert parse_cells(["C1", "A1", "bad"], 3, 3) == [(0, 2), (0, 0)]
