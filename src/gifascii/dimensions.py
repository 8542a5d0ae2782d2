"""Character grid size from source pixel size and conversion settings."""

import logging

from gifascii.config import MAX_DIMENSION, MIN_DIMENSION
from gifascii.errors import InvalidDimensionsError
from gifascii.models import round_half_up

logger = logging.getLogger(__name__)


def rows_for_width(width, source_width, source_height, char_aspect):
    return round_half_up(width * (source_height / source_width) * char_aspect)


def cols_for_height(height, source_width, source_height, char_aspect):
    return round_half_up(height * (source_width / source_height) / char_aspect)


def compute_dimensions(source_width, source_height, config, terminal_columns=None):
    """Return ``(cols, rows)`` for a frame of ``source_width x source_height``.

    Rules are tried in order and the first match wins: explicit width and
    height, width only, height only, scale factor, terminal width (only when
    ``terminal_columns`` is given), then the source size itself.
    """
    if source_width <= 0 or source_height <= 0:
        raise InvalidDimensionsError(
            source_width, source_height,
            f"Invalid source size: {source_width}x{source_height}",
        )
    aspect = config.char_aspect
    width, height = config.width, config.height

    if width is not None and height is not None:
        cols = width
        if config.preserve_aspect:
            rows = rows_for_width(width, source_width, source_height, aspect)
        else:
            rows = height
        rule = 'explicit'
    elif width is not None:
        cols = width
        rows = rows_for_width(width, source_width, source_height, aspect)
        rule = 'width'
    elif height is not None:
        cols = cols_for_height(height, source_width, source_height, aspect)
        rows = height
        rule = 'height'
    elif config.scale is not None:
        cols = round_half_up(source_width * config.scale * aspect)
        rows = round_half_up(source_height * config.scale)
        rule = 'scale'
    elif terminal_columns is not None:
        cols = terminal_columns
        rows = rows_for_width(cols, source_width, source_height, aspect)
        rule = 'terminal'
    else:
        cols = round_half_up(source_width * aspect)
        rows = source_height
        rule = 'source'

    if not (MIN_DIMENSION <= cols <= MAX_DIMENSION and MIN_DIMENSION <= rows <= MAX_DIMENSION):
        raise InvalidDimensionsError(cols, rows)
    logger.debug("Grid %dx%d from %dx%d source (rule: %s)", cols, rows, source_width, source_height, rule)
    return cols, rows
