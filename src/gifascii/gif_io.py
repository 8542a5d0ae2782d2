"""Reading animations and writing the converted results to disk."""

import logging

import numpy as np
from PIL import Image, ImageSequence

from gifascii.errors import DecodeError
from gifascii.models import Animation, SourceFrame, round_half_up

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 80
# GIF delays are stored in hundredths of a second
DELAY_UNIT_MS = 10


def decode_animation(path):
    """Decode a GIF (or any still image Pillow reads) into an Animation."""
    try:
        with Image.open(path) as im:
            width, height = im.size
            loop_count = im.info.get('loop')
            frames = []
            for frame in ImageSequence.Iterator(im):
                rgba = np.array(frame.convert('RGBA'), dtype=np.uint8)
                frames.append(SourceFrame(
                    pixels=rgba,
                    delay_ms=int(frame.info.get('duration', 0) or 0),
                    disposal=int(getattr(frame, 'disposal_method', 0) or 0),
                ))
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to decode {path}: {e}") from e
    if not frames:
        raise DecodeError(f"No frames found in {path}")
    logger.info("Decoded %s: %d frames, %dx%d, loop=%s", path, len(frames), width, height, loop_count)
    return Animation(frames=tuple(frames), width=width, height=height, loop_count=loop_count)


def centisecond_delays(delays):
    """Round delays to the GIF time unit, carrying the error so the total stays put."""
    stored = []
    elapsed = written = 0
    for delay in delays:
        elapsed += delay
        target = round_half_up(elapsed / DELAY_UNIT_MS) * DELAY_UNIT_MS
        stored.append(max(DELAY_UNIT_MS, target - written))
        written += stored[-1]
    return stored


def write_gif(rendered, output_path):
    """Encode a RenderedAnimation as a GIF, frames and delays in order."""
    palette = rendered.palette.flat()
    images = []
    for frame in rendered.frames:
        image = Image.fromarray(np.ascontiguousarray(frame, dtype=np.uint8))
        image.putpalette(palette)
        images.append(image)
    options = {
        'format': 'GIF',
        'save_all': True,
        'append_images': images[1:],
        'duration': centisecond_delays(rendered.delays),
        'optimize': False,
    }
    if rendered.loop_count is not None:
        options['loop'] = rendered.loop_count
    images[0].save(output_path, **options)
    logger.info("Wrote %d frames to %s", len(images), output_path)


def format_text(frames, charset):
    batch_output = []
    for i, frame in enumerate(frames):
        batch_output.append(f"{SEPARATOR}\nFrame {i + 1}\n{SEPARATOR}\n")
        for line in frame.to_lines(charset):
            batch_output.append(line)
            batch_output.append("\n")
        batch_output.append("\n")
    return ''.join(batch_output)


def write_text(frames, charset, output_path):
    with open(output_path, "w", encoding='utf-8') as f:
        f.write(format_text(frames, charset))
    logger.info("Wrote %d text frames to %s", len(frames), output_path)
