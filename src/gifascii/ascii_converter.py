"""Pixel block to character mapping and per-frame conversion."""

import logging
from functools import partial

import cv2
import numpy as np

from gifascii.errors import FrameConversionError
from gifascii.models import AsciiCell, AsciiFrame
from gifascii.parallel import parallel_map

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def composite_over_black(pixels):
    """RGB(A) uint8 array -> RGB uint8 array, transparent pixels go dark."""
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"expected an RGB or RGBA pixel array, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError(f"empty frame ({pixels.shape[1]}x{pixels.shape[0]})")
    if pixels.shape[2] == 3:
        return np.ascontiguousarray(pixels, dtype=np.uint8)
    rgb = pixels[:, :, :3].astype(np.uint32)
    alpha = pixels[:, :, 3:4].astype(np.uint32)
    return ((rgb * alpha + 127) // 255).astype(np.uint8)


def luminance_to_index(luminance, charset_length, invert=False):
    indices = np.floor(np.asarray(luminance) / 256.0 * charset_length).astype(np.int32)
    indices = np.clip(indices, 0, charset_length - 1)
    if invert:
        indices = charset_length - 1 - indices
    return indices


def map_block(block, charset, invert=False, colored=False):
    """Map one pixel block to the AsciiCell for its mean luminance."""
    rgb = composite_over_black(block).astype(np.float64)
    mean = rgb.reshape(-1, 3).sum(axis=0) / (rgb.shape[0] * rgb.shape[1])
    index = int(luminance_to_index(mean @ LUMA_WEIGHTS, len(charset), invert))
    color = None
    if colored:
        color = tuple(int(c) for c in np.floor(mean + 0.5))
    return AsciiCell(index, color)


def _cell_edges(size, count):
    edges = (np.arange(count + 1, dtype=np.int64) * size) // count
    start = np.minimum(edges[:-1], size - 1)
    end = np.maximum(edges[1:], start + 1)
    return start, end


def block_means(pixels, cols, rows):
    """Mean RGB of each of the ``rows x cols`` blocks, as float64 (rows, cols, 3).

    Blocks are averaged exactly through a summed-area table; when the grid is
    finer than the image a block shrinks to its nearest single pixel.
    """
    rgb = composite_over_black(pixels)
    height, width = rgb.shape[:2]
    sums = cv2.integral(rgb, sdepth=cv2.CV_64F)
    if sums.ndim == 2:
        sums = sums[:, :, None]
    y0, y1 = _cell_edges(height, rows)
    x0, x1 = _cell_edges(width, cols)
    total = (
        sums[np.ix_(y1, x1)] - sums[np.ix_(y0, x1)]
        - sums[np.ix_(y1, x0)] + sums[np.ix_(y0, x0)]
    )
    area = ((y1 - y0)[:, None] * (x1 - x0)[None, :]).astype(np.float64)
    return total / area[:, :, None]


def image_to_ascii(pixels, cols, rows, charset, invert=False, colored=False, source_index=0):
    means = block_means(pixels, cols, rows)
    indices = luminance_to_index(means @ LUMA_WEIGHTS, len(charset), invert)
    colors = None
    if colored:
        colors = np.floor(means + 0.5).astype(np.uint8)
    return AsciiFrame(chars=indices.astype(np.uint8), colors=colors, source_index=source_index)


def _convert_indexed(indexed_frame, cols, rows, config):
    index, frame = indexed_frame
    return image_to_ascii(
        frame.pixels, cols, rows, config.charset,
        invert=config.invert, colored=config.colored, source_index=index,
    )


def convert_frames(frames, cols, rows, config, workers):
    """Convert every SourceFrame to an AsciiFrame, preserving order.

    Raises FrameConversionError with the index of the first frame that could
    not be converted.
    """
    convert = partial(_convert_indexed, cols=cols, rows=rows, config=config)
    ascii_frames = parallel_map(convert, enumerate(frames), workers, FrameConversionError)
    logger.info("Converted %d frames to %dx%d character grids", len(ascii_frames), cols, rows)
    return ascii_frames
