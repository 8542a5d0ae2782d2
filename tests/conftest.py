"""
Test Configuration
==================

Shared fixtures for gifascii tests. Frames are synthetic numpy arrays; no
test touches the network or a real terminal.
"""

import numpy as np
import pytest

from gifascii.charsets import CharacterSet
from gifascii.models import Animation, SourceFrame


def solid_frame(rgb, width=32, height=24, alpha=255, delay_ms=100):
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :, :3] = rgb
    pixels[:, :, 3] = alpha
    return SourceFrame(pixels=pixels, delay_ms=delay_ms)


@pytest.fixture
def simple_charset():
    return CharacterSet(" .:-=+*#%@", name="simple")


@pytest.fixture
def gradient_frame():
    """256x4 frame whose gray level equals the column index."""
    row = np.arange(256, dtype=np.uint8)
    pixels = np.empty((4, 256, 4), dtype=np.uint8)
    pixels[:, :, 0] = row
    pixels[:, :, 1] = row
    pixels[:, :, 2] = row
    pixels[:, :, 3] = 255
    return SourceFrame(pixels=pixels, delay_ms=50)


@pytest.fixture
def random_frames():
    rng = np.random.default_rng(1234)
    frames = []
    for i in range(12):
        pixels = rng.integers(0, 256, size=(40, 60, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255
        frames.append(SourceFrame(pixels=pixels, delay_ms=20 * (i + 1)))
    return frames


@pytest.fixture
def random_animation(random_frames):
    return Animation(frames=tuple(random_frames), width=60, height=40, loop_count=0)


@pytest.fixture
def gray_animation():
    """Three frames: black, gray and white."""
    frames = tuple(
        solid_frame((level, level, level), width=40, height=20, delay_ms=delay)
        for level, delay in ((0, 100), (140, 200), (255, 300))
    )
    return Animation(frames=frames, width=40, height=20, loop_count=0)
