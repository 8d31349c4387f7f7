from __future__ import annotations

import asyncio
import json

import numpy as np
import pytest
from PIL import Image

from conftest import StubProvider, gradient_image, png_bytes
from gridspot.engine import AnalysisOptions, AnalysisResult, DisplayMode, analyze_with_grid
from gridspot.errors import DecodeError, GridspotError, InvalidInputError, ProviderError, UnparsableResponseError
from gridspot.providers.base import ImagePart, TextPart
from gridspot.visualization.surface import Surface


FIVE_AREAS = json.dumps({
    "areas": [
        {"cells": ["A1"], "label": "first", "score": 0.9},
        {"cells": ["B2", "B3"], "label": "second", "score": 0.8},
        {"cells": ["C3"], "label": "third", "score": 0.7},
        {"cells": ["D4"], "label": "fourth", "score": 0.6},
        {"cells": ["E5"], "label": "fifth", "score": 0.5},
    ],
    "no_detections": False,
})


def run(coro):
    return asyncio.run(coro)


def test_truncates_to_max_areas(white_png):
    provider = StubProvider(FIVE_AREAS)
    result = run(analyze_with_grid(provider, white_png, options=AnalysisOptions(max_areas=2)))

    assert result.ok
    assert [a.label for a in result.areas] == ["first", "second"]
    assert [b.label for b in result.boxes] == ["first", "second"]
    assert result.cells == ["A1", "B2", "B3"]
    assert result.provider == "stub"


def test_sends_prompt_and_grid_image(white_png):
    provider = StubProvider(FIVE_AREAS)
    run(analyze_with_grid(provider, white_png, options=AnalysisOptions(objects="  red   cars ", cols=12)))

    assert len(provider.calls) == 1
    text, image = provider.calls[0]
    assert isinstance(text, TextPart)
    assert isinstance(image, ImagePart)
    assert '"red cars"' in text.value
    assert "columns A..L" in text.value
    assert image.mime_type == "image/jpeg"
    assert image.data[:3] == b"\xff\xd8\xff"


def test_boxes_are_in_original_image_space(wide_png):
    answer = json.dumps({"areas": [{"cells": ["A1"], "label": "x"}, {"cells": ["L12"], "label": "y"}]})
    result = run(analyze_with_grid(StubProvider(answer), wide_png, options=AnalysisOptions(pad_ratio=0.0)))

    g = result.geometry
    assert (g.resampled_w, g.resampled_h) == (1400, 700)
    first, last = result.boxes
    assert first.rect.x == pytest.approx(0)
    assert first.rect.w == pytest.approx(2800 / 12)
    assert first.rect.h == pytest.approx(1400 / 12)
    assert last.rect.right == pytest.approx(2800)
    assert last.rect.bottom == pytest.approx(1400)


def test_padding_is_bounded_by_original_image(white_png):
    answer = json.dumps({"areas": [{"cells": ["A1", "L12"], "label": "all"}]})
    result = run(analyze_with_grid(StubProvider(answer), white_png, options=AnalysisOptions(pad_ratio=0.5)))

    box = result.boxes[0]
    assert box.rect.x == 0 and box.rect.y == 0
    assert box.rect.w == pytest.approx(1200)
    assert box.contiguous is False


def test_areas_without_valid_cells_produce_no_box(white_png):
    answer = json.dumps({"areas": [{"cells": ["Z99"], "label": "ghost"}, {"cells": ["B2"], "label": "real"}]})
    result = run(analyze_with_grid(StubProvider(answer), white_png))

    assert len(result.areas) == 2
    assert [b.label for b in result.boxes] == ["real"]


def test_unparsable_response(white_png):
    result = run(analyze_with_grid(StubProvider("no idea"), white_png))

    assert result.unparsable is True
    assert result.ok is False
    assert result.raw == "no idea"
    assert result.areas == [] and result.boxes == []
    with pytest.raises(UnparsableResponseError):
        result.raise_for_error()


def test_no_detections_short_circuits(white_png):
    answer = '{"areas": [{"cells": ["A1"]}], "no_detections": true, "reason": "too dark"}'
    surface = Surface(5, 5)
    result = run(analyze_with_grid(StubProvider(answer), white_png, surface=surface))

    assert result.ok
    assert result.no_detections is True
    assert result.reason == "too dark"
    assert result.areas == [] and result.boxes == [] and result.cells == []
    assert surface.size == (5, 5)
    assert result.raise_for_error() is result


def test_provider_error_is_captured(white_png):
    provider = StubProvider(error=ProviderError("quota exceeded", provider="stub", status_code=429))
    result = run(analyze_with_grid(provider, white_png))

    assert result.ok is False
    assert "quota exceeded" in result.error
    assert result.raw is None
    with pytest.raises(ProviderError):
        result.raise_for_error()


def test_unexpected_provider_exception_is_captured(white_png):
    result = run(analyze_with_grid(StubProvider(error=RuntimeError("boom")), white_png))
    assert result.error == "boom"


def test_decode_error_is_captured_before_model_call():
    provider = StubProvider(FIVE_AREAS)
    result = run(analyze_with_grid(provider, b"garbage bytes"))

    assert result.error is not None
    assert result.geometry is None
    assert provider.calls == []
    with pytest.raises(GridspotError):
        result.raise_for_error()


def test_oversized_image_is_captured_before_model_call():
    provider = StubProvider(FIVE_AREAS)
    result = run(analyze_with_grid(provider, Image.new("RGB", (16385, 2))))

    assert not result.ok
    assert "too large" in result.error
    assert isinstance(result.exception, InvalidInputError)
    assert provider.calls == []


def test_unreadable_array_is_captured_before_model_call():
    provider = StubProvider(FIVE_AREAS)
    result = run(analyze_with_grid(provider, np.array([[["x", "y", "z"]]], dtype=object)))

    assert result.error is not None
    assert isinstance(result.exception, DecodeError)
    assert provider.calls == []


@pytest.mark.parametrize(
    "provider,source,options",
    [
        (None, b"x", AnalysisOptions()),
        (object(), b"x", AnalysisOptions()),
        (StubProvider(), None, AnalysisOptions()),
        (StubProvider(), b"", AnalysisOptions()),
        (StubProvider(), b"x", AnalysisOptions(rows=0)),
        (StubProvider(), b"x", AnalysisOptions(margin=-1)),
        (StubProvider(), b"x", AnalysisOptions(pad_ratio=-0.1)),
        (StubProvider(), b"x", AnalysisOptions(max_areas=0)),
        (StubProvider(), b"x", AnalysisOptions(objects="   ")),
    ],
)
def test_invalid_input_raises(provider, source, options):
    with pytest.raises(InvalidInputError):
        run(analyze_with_grid(provider, source, options=options))


def test_renders_boxes_at_original_size(wide_png):
    answer = json.dumps({"areas": [{"cells": ["B2"], "label": "thing", "score": 0.5}]})
    surface = Surface()
    result = run(analyze_with_grid(StubProvider(answer), wide_png, surface=surface))

    assert result.ok
    assert surface.size == (2800, 1400)


def test_renders_cells_mode():
    image = gradient_image(240, 240)
    answer = json.dumps({"areas": [{"cells": ["A1"], "label": "corner"}]})
    surface = Surface()
    options = AnalysisOptions(rows=2, cols=2, display_mode=DisplayMode.CELLS)
    result = run(analyze_with_grid(StubProvider(answer), png_bytes(image), options=options, surface=surface))

    assert result.cells == ["A1"]
    arr = surface.to_array()
    assert not np.array_equal(arr[:120, :120], np.array(image)[:120, :120])
    assert np.array_equal(arr[130:, 130:], np.array(image)[130:, 130:])


def test_grid_preview_and_to_dict(white_png):
    result = run(analyze_with_grid(StubProvider(FIVE_AREAS), white_png, options=AnalysisOptions(grid_preview=True)))
    payload = result.to_dict()

    assert payload["ok"] is True
    assert payload["display_mode"] == "bbox"
    assert payload["grid_preview"].startswith("data:image/jpeg;base64,")
    assert payload["geometry"]["rows"] == 12
    assert len(payload["boxes"]) == 2
    json.dumps(payload)


def test_without_grid_preview_no_image_is_kept(white_png):
    result = run(analyze_with_grid(StubProvider(FIVE_AREAS), white_png))
    assert result.grid is None
    assert result.to_dict()["grid_preview"] is None


def test_concurrent_analyses_with_separate_surfaces(white_png, wide_png):
    async def both():
        a, b = Surface(), Surface()
        results = await asyncio.gather(
            analyze_with_grid(StubProvider(FIVE_AREAS), white_png, surface=a),
            analyze_with_grid(StubProvider(FIVE_AREAS), wide_png, surface=b),
        )
        return results, a, b

    (ra, rb), a, b = run(both())
    assert ra.ok and rb.ok
    assert a.size == (1200, 1200)
    assert b.size == (2800, 1400)


def test_options_from_config_with_overrides():
    cfg = {
        "grid": {"rows": 8, "cols": 10},
        "analysis": {"objects": "cracks", "display_mode": "CELLS", "max_areas": 4},
    }
    options = AnalysisOptions.from_config(cfg, max_areas=None, language="it")

    assert (options.rows, options.cols) == (8, 10)
    assert options.objects == "cracks"
    assert options.display_mode is DisplayMode.CELLS
    assert options.max_areas == 4
    assert options.language == "it"
    assert options.margin == 48


def test_invalid_display_mode():
    with pytest.raises(InvalidInputError):
        AnalysisOptions.from_config({"analysis": {"display_mode": "heatmap"}})


def test_result_defaults():
    result = AnalysisResult(provider="p")
    assert result.ok
    assert result.to_dict()["geometry"] is None
