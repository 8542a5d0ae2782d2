"""Tests for glyph rasterisation and re-composition into indexed frames."""

import numpy as np
import pytest

from gifascii import ascii_recorder
from gifascii.ascii_recorder import (
    MISSING_CHAR,
    AsciiRecorder,
    GlyphAtlas,
    can_render,
    check_canvas_size,
    load_font,
    placeholder_glyph,
    render_indexed_cpu,
    render_indexed_numba,
)
from gifascii.charsets import CharacterSet
from gifascii.config import ConversionConfig, GifOutputOptions, RunConfig
from gifascii.errors import GlyphRenderError, InvalidFontSizeError, RenderError
from gifascii.models import AsciiFrame, ConversionResult
from gifascii.pipeline import convert_animation, render_raster


def _result(frames, charset, colored=False):
    rows, cols = frames[0].chars.shape
    return ConversionResult(
        frames=frames, delays=[100] * len(frames), loop_count=0,
        cols=cols, rows=rows, charset=charset, colored=colored,
    )


class TestGifOutputOptions:

    def test_glyph_size(self):
        assert GifOutputOptions(font_size=14.0).glyph_size == (8, 17)
        assert GifOutputOptions(font_size=0.1).glyph_size == (1, 1)

    @pytest.mark.parametrize("size", [0.05, 100.5])
    def test_font_size_range(self, size):
        with pytest.raises(InvalidFontSizeError):
            GifOutputOptions(font_size=size)


class TestGlyphAtlas:

    def test_masks(self, simple_charset):
        atlas = GlyphAtlas(simple_charset, (8, 17))
        assert atlas.masks.shape == (len(simple_charset), 17, 8)
        assert not atlas.masks[0].any()
        assert atlas.masks[1:].reshape(len(simple_charset) - 1, -1).any(axis=1).all()
        assert atlas.inked.tolist() == [False] + [True] * (len(simple_charset) - 1)

    def test_tiny_cells_still_draw(self, simple_charset):
        atlas = GlyphAtlas(simple_charset, (1, 1))
        assert atlas.masks.shape == (len(simple_charset), 1, 1)
        assert atlas.masks[-1].all()

    def test_can_render(self):
        class BlankFont:
            def getbbox(self, char):
                return (0, 0, 0, 0)

        assert can_render(BlankFont(), " ")
        assert not can_render(BlankFont(), "@")

    def test_can_render_rejects_placeholder(self, monkeypatch):
        box = np.ones((4, 3), dtype=np.uint8)

        class BoxFont:
            def getbbox(self, char):
                return (0, 0, 3, 4)

        monkeypatch.setattr(
            ascii_recorder, "glyph_image",
            lambda font, char: ((0, 0, 3, 4), box if char == "?" else np.eye(4, 3, dtype=np.uint8)),
        )
        placeholder = ((0, 0, 3, 4), box)
        assert not can_render(BoxFont(), "?", placeholder)
        assert can_render(BoxFont(), "@", placeholder)
        assert can_render(BoxFont(), "?")

    def test_placeholder_differs_from_real_glyphs(self):
        font = load_font(32)
        placeholder = placeholder_glyph(font)
        assert can_render(font, "@", placeholder)
        assert can_render(font, ".", placeholder)
        if placeholder is not None:
            assert not can_render(font, MISSING_CHAR, placeholder)

    @pytest.mark.parametrize("missing", ["\U0001F600", MISSING_CHAR])
    def test_missing_glyph_raises(self, missing):
        with pytest.raises(GlyphRenderError):
            GlyphAtlas(CharacterSet(" @" + missing), (8, 17))

    def test_missing_glyph_stops_raster_output(self, gray_animation):
        config = RunConfig(conversion=ConversionConfig(charset=CharacterSet(" .\U0001F600"), width=8))
        result = convert_animation(gray_animation, config)
        with pytest.raises(GlyphRenderError):
            render_raster(result, GifOutputOptions(font_size=14.0))


class TestRenderKernels:

    def test_numba_matches_numpy(self):
        rng = np.random.default_rng(3)
        masks = rng.random((5, 6, 4)) > 0.5
        chars = rng.integers(0, 5, size=(7, 9), dtype=np.uint8)
        colors = rng.integers(0, 200, size=(7, 9), dtype=np.uint8)
        fast = render_indexed_numba(chars, colors, masks, 201)
        slow = render_indexed_cpu(chars, colors, masks, 201)
        assert fast.shape == (42, 36)
        assert np.array_equal(fast, slow)

    def test_canvas_limit(self):
        assert check_canvas_size(10, 5, (8, 17)) == (80, 85)
        with pytest.raises(RenderError):
            check_canvas_size(10000, 1, (8, 17))


class TestAsciiRecorder:

    def test_frame_shape_and_colors(self, simple_charset):
        chars = np.arange(10, dtype=np.uint8).reshape(2, 5)
        result = _result([AsciiFrame(chars=chars)], simple_charset)
        rendered = AsciiRecorder(simple_charset, GifOutputOptions(font_size=14.0)).record(result)
        frame = rendered.frames[0]
        assert frame.shape == (2 * 17, 5 * 8)
        assert rendered.size == (40, 34)
        assert len(rendered.palette) == 2
        assert set(np.unique(frame).tolist()) == {0, 1}

    def test_blank_frame_is_background(self, simple_charset):
        options = GifOutputOptions(font_size=10.0, bg_color=(10, 20, 30))
        result = _result([AsciiFrame(chars=np.zeros((3, 4), dtype=np.uint8))], simple_charset)
        rendered = AsciiRecorder(simple_charset, options).record(result)
        bg_index = rendered.palette.index_of((10, 20, 30))
        assert np.all(rendered.frames[0] == bg_index)

    def test_colored_cells_use_nearest_palette_entry(self, simple_charset):
        chars = np.full((1, 2), 9, dtype=np.uint8)
        colors = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)
        result = _result([AsciiFrame(chars=chars, colors=colors)], simple_charset, colored=True)
        rendered = AsciiRecorder(simple_charset, GifOutputOptions(font_size=10.0)).record(result)
        palette = rendered.palette
        frame = rendered.frames[0]
        width = GifOutputOptions(font_size=10.0).glyph_size[0]
        left = set(np.unique(frame[:, :width]).tolist())
        right = set(np.unique(frame[:, width:]).tolist())
        assert palette.index_of((255, 0, 0)) in left
        assert palette.index_of((0, 0, 255)) in right

    def test_empty_result(self, simple_charset):
        result = ConversionResult(frames=[], delays=[], loop_count=None, cols=1, rows=1, charset=simple_charset)
        with pytest.raises(RenderError):
            AsciiRecorder(simple_charset, GifOutputOptions()).record(result)

    @pytest.mark.parametrize("font_size", [1.0, 4.0, 10.0])
    def test_colored_palette_bounded(self, random_animation, simple_charset, font_size):
        config = RunConfig(conversion=ConversionConfig(charset=simple_charset, width=30, colored=True), threads=4)
        result = convert_animation(random_animation, config)
        rendered = render_raster(result, GifOutputOptions(font_size=font_size), workers=4)
        assert len(rendered.palette) <= 256
        assert len(rendered.frames) == len(random_animation)
        assert max(int(f.max()) for f in rendered.frames) < len(rendered.palette)

    @pytest.mark.parametrize("colored", [False, True])
    def test_same_frames_for_any_worker_count(self, random_animation, simple_charset, colored):
        conversion = ConversionConfig(charset=simple_charset, width=24, colored=colored)
        outputs = []
        for workers in (1, 4, 64):
            result = convert_animation(random_animation, RunConfig(conversion=conversion, threads=workers))
            outputs.append(render_raster(result, GifOutputOptions(font_size=6.0), workers=workers))
        baseline = outputs[0]
        for other in outputs[1:]:
            assert np.array_equal(baseline.palette.colors, other.palette.colors)
            assert [f.tobytes() for f in baseline.frames] == [f.tobytes() for f in other.frames]
