"""
Conversion pipeline.

``convert_animation`` turns decoded frames into character grids with
adjusted delays; ``render_raster`` turns those grids back into indexed
frames for a GIF encoder. Neither does any file, network or terminal I/O.
"""

import logging

from gifascii.ascii_converter import convert_frames
from gifascii.ascii_recorder import AsciiRecorder
from gifascii.config import RunConfig, check_thread_count
from gifascii.dimensions import compute_dimensions
from gifascii.errors import FrameConversionError
from gifascii.models import ConversionResult
from gifascii.timing import adjust_delays

logger = logging.getLogger(__name__)


def convert_animation(animation, run_config=None, terminal_columns=None):
    run_config = run_config or RunConfig()
    if not animation.frames:
        raise FrameConversionError(0, "animation has no frames")
    config = run_config.conversion
    if not run_config.fit_to_terminal:
        terminal_columns = None
    cols, rows = compute_dimensions(animation.width, animation.height, config, terminal_columns)
    frames = convert_frames(animation.frames, cols, rows, config, run_config.threads)
    delays = adjust_delays(animation.delays, run_config.timing)
    logger.debug(
        "Timing %s: %d ms -> %d ms total",
        run_config.timing.mode, sum(animation.delays), sum(delays),
    )
    return ConversionResult(
        frames=frames,
        delays=delays,
        loop_count=animation.loop_count,
        cols=cols,
        rows=rows,
        charset=config.charset,
        colored=config.colored,
    )


def render_raster(result, gif_options, workers=1):
    check_thread_count(workers)
    recorder = AsciiRecorder(result.charset, gif_options, workers)
    return recorder.record(result)
