"""
Frame data model shared by every stage.

SourceFrame and Animation come from a decoder; AsciiFrame is what the
converter produces. Arrays are never written after construction.
"""

import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

import numpy as np


def round_half_up(value):
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SourceFrame:
    """One decoded RGBA frame (H x W x 4, uint8) and its timing hints."""

    pixels: np.ndarray
    delay_ms: int = 0
    disposal: int = 0

    @property
    def width(self):
        return self.pixels.shape[1] if self.pixels.ndim >= 2 else 0

    @property
    def height(self):
        return self.pixels.shape[0] if self.pixels.ndim >= 1 else 0

    def __repr__(self):
        return (
            f"SourceFrame(size={self.width}x{self.height}, "
            f"delay_ms={self.delay_ms}, disposal={self.disposal})"
        )


@dataclass(frozen=True)
class Animation:
    frames: Tuple[SourceFrame, ...]
    width: int
    height: int
    # None plays once, 0 loops forever
    loop_count: Optional[int] = None

    @property
    def delays(self):
        return [frame.delay_ms for frame in self.frames]

    def __len__(self):
        return len(self.frames)


class AsciiCell(NamedTuple):
    char_index: int
    color: Optional[Tuple[int, int, int]] = None


@dataclass(frozen=True)
class AsciiFrame:
    chars: np.ndarray
    colors: Optional[np.ndarray] = None
    source_index: int = 0

    @property
    def rows(self):
        return self.chars.shape[0]

    @property
    def cols(self):
        return self.chars.shape[1]

    def cell(self, row, col):
        color = None
        if self.colors is not None:
            color = tuple(int(c) for c in self.colors[row, col])
        return AsciiCell(int(self.chars[row, col]), color)

    def to_lines(self, charset):
        lookup = np.array(list(charset.chars))
        return [''.join(row) for row in lookup[self.chars]]

    def to_ansi_lines(self, charset):
        if self.colors is None:
            return self.to_lines(charset)
        lines = []
        for y in range(self.rows):
            parts = []
            for x in range(self.cols):
                r, g, b = self.colors[y, x]
                parts.append(f"\x1b[38;2;{r};{g};{b}m{charset[self.chars[y, x]]}")
            parts.append("\x1b[0m")
            lines.append(''.join(parts))
        return lines

    def to_text(self, charset):
        return '\n'.join(self.to_lines(charset))


@dataclass(frozen=True)
class ConversionResult:
    frames: List[AsciiFrame]
    delays: List[int]
    loop_count: Optional[int]
    cols: int
    rows: int
    charset: object = None
    colored: bool = False

    def triples(self):
        """(frame, colors-or-None, delay) in playback order."""
        return [(frame, frame.colors, delay) for frame, delay in zip(self.frames, self.delays)]


@dataclass(frozen=True)
class RenderedAnimation:
    frames: List[np.ndarray]
    palette: object
    delays: List[int]
    loop_count: Optional[int] = None
    size: Tuple[int, int] = field(default=(0, 0))
