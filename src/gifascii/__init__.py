"""Convert GIF animations to ASCII art and back to GIF."""

from gifascii.ascii_converter import convert_frames, image_to_ascii, map_block
from gifascii.ascii_recorder import AsciiRecorder, GlyphAtlas
from gifascii.charsets import CHAR_SETS, CharacterSet
from gifascii.config import (
    ConversionConfig,
    GifOutputOptions,
    OutputModeBuilder,
    RasterFileOutput,
    RunConfig,
    TerminalOutput,
    TextFileOutput,
)
from gifascii.dimensions import compute_dimensions
from gifascii.models import AsciiCell, AsciiFrame, Animation, ConversionResult, RenderedAnimation, SourceFrame
from gifascii.palette import Palette, build_palette, tier_for_font_size
from gifascii.pipeline import convert_animation, render_raster
from gifascii.timing import TimingPolicy, adjust_delays

__version__ = "0.1.0"

__all__ = [
    "AsciiCell",
    "AsciiFrame",
    "AsciiRecorder",
    "Animation",
    "CHAR_SETS",
    "CharacterSet",
    "ConversionConfig",
    "ConversionResult",
    "GifOutputOptions",
    "GlyphAtlas",
    "OutputModeBuilder",
    "Palette",
    "RasterFileOutput",
    "RenderedAnimation",
    "RunConfig",
    "SourceFrame",
    "TerminalOutput",
    "TextFileOutput",
    "TimingPolicy",
    "adjust_delays",
    "build_palette",
    "compute_dimensions",
    "convert_animation",
    "convert_frames",
    "image_to_ascii",
    "map_block",
    "render_raster",
    "tier_for_font_size",
]
