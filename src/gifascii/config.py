"""
Run configuration.

Every stage receives one immutable value built here. Construction validates
ranges and combinations, so a bad value is reported before any frame is
touched.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from gifascii.charsets import CharacterSet, get_char_set
from gifascii.errors import (
    InvalidColorError,
    InvalidDimensionsError,
    InvalidFontSizeError,
    InvalidScaleError,
    InvalidThreadCountError,
    OutputModeConflictError,
    ValidationError,
)
from gifascii.timing import TimingPolicy

MIN_DIMENSION = 1
MAX_DIMENSION = 10000
MIN_FONT_SIZE = 0.1
MAX_FONT_SIZE = 100.0
MIN_SCALE = 0.1
MAX_SCALE = 10.0
MIN_THREADS = 1
MAX_THREADS = 1000
DEFAULT_CHAR_ASPECT = 0.5

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{6})$')


def parse_color(value):
    """Parse ``R,G,B`` or ``#RRGGBB`` into an RGB tuple."""
    if isinstance(value, (tuple, list)):
        parts = list(value)
    else:
        text = str(value).strip()
        match = _HEX_COLOR.match(text)
        if match:
            digits = match.group(1)
            return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))
        parts = text.split(',')
    if len(parts) != 3:
        raise InvalidColorError(value)
    try:
        rgb = tuple(int(str(p).strip()) for p in parts)
    except ValueError:
        raise InvalidColorError(value) from None
    if any(c < 0 or c > 255 for c in rgb):
        raise InvalidColorError(value)
    return rgb


def _check_dimension(width, height):
    for value in (width, height):
        if value is not None and not MIN_DIMENSION <= value <= MAX_DIMENSION:
            raise InvalidDimensionsError(width, height)


@dataclass(frozen=True)
class ConversionConfig:
    charset: CharacterSet = field(default_factory=get_char_set)
    width: Optional[int] = None
    height: Optional[int] = None
    scale: Optional[float] = None
    char_aspect: float = DEFAULT_CHAR_ASPECT
    invert: bool = False
    colored: bool = False
    preserve_aspect: bool = False

    def __post_init__(self):
        if not isinstance(self.charset, CharacterSet):
            object.__setattr__(self, 'charset', CharacterSet(self.charset))
        _check_dimension(self.width, self.height)
        if self.scale is not None and not MIN_SCALE <= self.scale <= MAX_SCALE:
            raise InvalidScaleError(self.scale)
        if not self.char_aspect > 0:
            raise ValidationError("char_aspect", self.char_aspect)


@dataclass(frozen=True)
class GifOutputOptions:
    font_size: float = 14.0
    bg_color: Tuple[int, int, int] = BLACK
    text_color: Tuple[int, int, int] = WHITE
    line_height_multiplier: float = 1.2
    font_path: Optional[str] = None

    def __post_init__(self):
        if not MIN_FONT_SIZE <= self.font_size <= MAX_FONT_SIZE:
            raise InvalidFontSizeError(self.font_size)
        if not self.line_height_multiplier > 0:
            raise ValidationError("line_height_multiplier", self.line_height_multiplier)
        object.__setattr__(self, 'bg_color', parse_color(self.bg_color))
        object.__setattr__(self, 'text_color', parse_color(self.text_color))

    @property
    def glyph_size(self):
        """(width, height) in pixels of one character cell."""
        width = max(1, int(self.font_size * 0.6 + 0.5))
        height = max(1, int(self.font_size * self.line_height_multiplier + 0.5))
        return width, height


@dataclass(frozen=True)
class TerminalOutput:
    fit_to_terminal: bool = False
    repeat: bool = False


@dataclass(frozen=True)
class TextFileOutput:
    path: str


@dataclass(frozen=True)
class RasterFileOutput:
    path: str
    gif_options: GifOutputOptions = field(default_factory=GifOutputOptions)


OutputMode = Union[TerminalOutput, TextFileOutput, RasterFileOutput]


class OutputModeBuilder:
    """Collects output flags and turns them into exactly one output mode."""

    def __init__(self):
        self.terminal = False
        self.text_path = None
        self.raster_path = None
        self.fit_to_terminal = False
        self.repeat = False
        self.font_size = None
        self.bg_color = None
        self.text_color = None
        self.font_path = None

    def to_terminal(self, fit_to_terminal=False, repeat=False):
        self.terminal = True
        self.fit_to_terminal = fit_to_terminal
        self.repeat = repeat
        return self

    def to_text_file(self, path):
        self.text_path = path
        return self

    def to_raster_file(self, path):
        self.raster_path = path
        return self

    def with_fit_to_terminal(self, enabled=True):
        self.fit_to_terminal = enabled
        return self

    def with_gif_style(self, font_size=None, bg_color=None, text_color=None, font_path=None):
        self.font_size = font_size
        self.bg_color = bg_color
        self.text_color = text_color
        self.font_path = font_path
        return self

    def build(self):
        selected = [
            name for name, chosen in (
                ('terminal', self.terminal),
                ('text-file', self.text_path is not None),
                ('raster-file', self.raster_path is not None),
            ) if chosen
        ]
        if len(selected) != 1:
            raise OutputModeConflictError(
                "output", selected,
                f"Exactly one output mode is required, got {selected or 'none'}",
            )
        mode = selected[0]
        if self.fit_to_terminal and mode != 'terminal':
            raise OutputModeConflictError(
                "fit_to_terminal", mode,
                f"Fit-to-terminal cannot be combined with {mode} output",
            )
        styled = [
            name for name, value in (
                ('bg_color', self.bg_color),
                ('text_color', self.text_color),
                ('font_size', self.font_size),
            ) if value is not None
        ]
        if styled and mode != 'raster-file':
            raise OutputModeConflictError(
                styled[0], mode,
                f"{', '.join(styled)} only apply to raster-file output, not {mode}",
            )

        if mode == 'terminal':
            return TerminalOutput(fit_to_terminal=self.fit_to_terminal, repeat=self.repeat)
        if mode == 'text-file':
            return TextFileOutput(path=self.text_path)
        options = {}
        if self.font_size is not None:
            options['font_size'] = self.font_size
        if self.bg_color is not None:
            options['bg_color'] = self.bg_color
        if self.text_color is not None:
            options['text_color'] = self.text_color
        if self.font_path is not None:
            options['font_path'] = self.font_path
        return RasterFileOutput(path=self.raster_path, gif_options=GifOutputOptions(**options))


def default_thread_count():
    return max(MIN_THREADS, min(os.cpu_count() or 1, MAX_THREADS))


def check_thread_count(threads):
    if isinstance(threads, bool) or not isinstance(threads, int) or not MIN_THREADS <= threads <= MAX_THREADS:
        raise InvalidThreadCountError(threads)
    return threads


@dataclass(frozen=True)
class RunConfig:
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    timing: TimingPolicy = field(default_factory=TimingPolicy)
    output: OutputMode = field(default_factory=TerminalOutput)
    threads: int = field(default_factory=default_thread_count)

    def __post_init__(self):
        check_thread_count(self.threads)
        if not isinstance(self.output, (TerminalOutput, TextFileOutput, RasterFileOutput)):
            raise OutputModeConflictError("output", self.output, f"Unknown output mode: {self.output!r}")

    @property
    def fit_to_terminal(self):
        return isinstance(self.output, TerminalOutput) and self.output.fit_to_terminal
