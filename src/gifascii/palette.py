"""
Adaptive palette for indexed raster output.

The number of levels per channel depends on the glyph size: tiny glyphs are
mostly edge pixels and keep 32 levels, mid sizes get 16 and large glyphs 8.
Only colours that will actually be drawn go into the palette, and the
palette never holds more than 256 entries.
"""

import logging
from typing import NamedTuple

import numpy as np

from gifascii.errors import PaletteOverflowError, RenderError
from gifascii.parallel import parallel_map

logger = logging.getLogger(__name__)

MAX_PALETTE_SIZE = 256
DISTANCE_WEIGHTS = np.array([0.3, 0.59, 0.11])
SMALL_FONT_LIMIT = 2.0
LARGE_FONT_LIMIT = 6.0
_NEAREST_CHUNK = 4096


def channel_levels(steps):
    """``steps`` evenly spaced values covering 0..255, ends included."""
    return np.floor(np.arange(steps) * 255.0 / (steps - 1) + 0.5).astype(np.uint8)


def _nearest_level_indices(values, steps):
    # 2 * value * (steps - 1) is even, so no value sits exactly halfway between levels
    return (2 * values * (steps - 1) + 255) // 510


class QuantizationTier(NamedTuple):
    name: str
    steps: int
    lut: np.ndarray

    def quantize(self, colors):
        colors = np.asarray(colors, dtype=np.uint8)
        return self.lut[colors]


def _make_tier(name, steps):
    values = np.arange(256, dtype=np.int64)
    lut = channel_levels(steps)[_nearest_level_indices(values, steps)]
    return QuantizationTier(name, steps, lut)


PRECISION_TIER = _make_tier('precision', 32)
BALANCED_TIER = _make_tier('balanced', 16)
COARSE_TIER = _make_tier('coarse', 8)


def tier_for_font_size(font_size):
    if font_size < SMALL_FONT_LIMIT:
        return PRECISION_TIER
    if font_size <= LARGE_FONT_LIMIT:
        return BALANCED_TIER
    return COARSE_TIER


class Palette:
    """Up to 256 RGB entries with exact and nearest-colour lookup."""

    def __init__(self, colors):
        colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
        if len(colors) == 0:
            raise RenderError("Palette must contain at least one color")
        if len(colors) > MAX_PALETTE_SIZE:
            raise PaletteOverflowError(len(colors))
        self._colors = colors
        self._colors.setflags(write=False)
        self._index = {}
        for i, rgb in enumerate(colors.tolist()):
            self._index.setdefault(tuple(rgb), i)

    @property
    def colors(self):
        return self._colors

    def __len__(self):
        return len(self._colors)

    def __contains__(self, rgb):
        return tuple(int(c) for c in rgb) in self._index

    def index_of(self, rgb):
        return self._index.get(tuple(int(c) for c in rgb))

    def nearest(self, rgb):
        exact = self.index_of(rgb)
        if exact is not None:
            return exact
        return int(self.nearest_many(np.asarray([rgb]))[0])

    def nearest_many(self, colors):
        """Palette index of the closest entry for every row of ``colors``.

        Distance is the squared channel difference weighted 0.3/0.59/0.11;
        equal distances resolve to the lower index.
        """
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
        palette = self._colors.astype(np.float64)
        result = np.empty(len(colors), dtype=np.int64)
        for start in range(0, len(colors), _NEAREST_CHUNK):
            chunk = colors[start:start + _NEAREST_CHUNK]
            diff = chunk[:, None, :] - palette[None, :, :]
            distances = (diff * diff) @ DISTANCE_WEIGHTS
            result[start:start + len(chunk)] = np.argmin(distances, axis=1)
        return result

    def flat(self):
        """768 ints in the layout Pillow's ``putpalette`` expects."""
        flat = self._colors.reshape(-1).tolist()
        return flat + [0] * (MAX_PALETTE_SIZE * 3 - len(flat))

    def __repr__(self):
        return f"Palette({len(self)} colors)"


class _SamplingError(RenderError):
    def __init__(self, frame_index, cause):
        self.frame_index = frame_index
        super().__init__(f"Failed to sample colors of frame {frame_index}: {cause}")


def _frame_colors(frame, inked=None):
    if frame.colors is None:
        return np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)
    colors = frame.colors.reshape(-1, 3)
    if inked is not None:
        colors = colors[inked[frame.chars.reshape(-1)]]
    if len(colors) == 0:
        return np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)
    unique, counts = np.unique(colors, axis=0, return_counts=True)
    return unique, counts


def collect_colors(frames, workers, inked=None):
    """Unique cell colours across all frames with their cell counts.

    Each frame is sampled independently (read-only), then merged. ``inked``
    optionally flags which charset indices draw any pixels; cells holding a
    blank glyph contribute nothing.
    """
    sample = lambda frame: _frame_colors(frame, inked)
    per_frame = parallel_map(sample, frames, workers, _SamplingError)
    colors = [c for c, _ in per_frame if len(c)]
    if not colors:
        return np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)
    counts = np.concatenate([n for _, n in per_frame if len(n)])
    unique, inverse = np.unique(np.concatenate(colors), axis=0, return_inverse=True)
    totals = np.bincount(inverse.reshape(-1), weights=counts, minlength=len(unique))
    return unique, totals.astype(np.int64)


def build_palette(colors, counts, font_size, reserved=()):
    """Quantize the requested colours and reduce them to at most 256 entries.

    ``reserved`` colours (background, text) are kept exactly and come first.
    When the quantized colours do not fit next to them, the most frequent
    ones are kept, ties broken by colour value.
    """
    tier = tier_for_font_size(font_size)
    entries = []
    for rgb in reserved:
        rgb = tuple(int(c) for c in rgb)
        if rgb not in entries:
            entries.append(rgb)
    if len(entries) > MAX_PALETTE_SIZE:
        raise PaletteOverflowError(len(entries))

    colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
    counts = np.asarray(counts, dtype=np.int64).reshape(-1)
    if len(colors):
        quantized = tier.quantize(colors)
        unique, inverse = np.unique(quantized, axis=0, return_inverse=True)
        weights = np.bincount(inverse.reshape(-1), weights=counts, minlength=len(unique))
        if entries:
            taken = np.array(entries, dtype=np.uint8)
            fresh = ~(unique[:, None, :] == taken[None, :, :]).all(axis=2).any(axis=1)
            unique, weights = unique[fresh], weights[fresh]
        capacity = MAX_PALETTE_SIZE - len(entries)
        if len(unique) > capacity:
            logger.info(
                "%d quantized colors exceed the %d free palette slots, keeping the most frequent",
                len(unique), capacity,
            )
            order = np.lexsort((unique[:, 2], unique[:, 1], unique[:, 0], -weights))
            unique = unique[np.sort(order[:capacity])]
        entries.extend(tuple(int(c) for c in rgb) for rgb in unique)

    if len(entries) > MAX_PALETTE_SIZE:
        raise PaletteOverflowError(len(entries))
    logger.debug("Built %s-tier palette (%d levels/channel) with %d colors", tier.name, tier.steps, len(entries))
    return Palette(entries)
