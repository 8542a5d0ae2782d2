"""Re-compose character grids into indexed-colour raster frames."""

import logging
import os
from functools import partial

import cv2
import numpy as np
from numba import jit
from PIL import Image, ImageDraw, ImageFont

from gifascii.errors import FrameRenderError, GlyphRenderError, RenderError
from gifascii.models import RenderedAnimation
from gifascii.palette import build_palette, collect_colors
from gifascii.parallel import parallel_map

logger = logging.getLogger(__name__)

MAX_CANVAS_SIDE = 65535
# glyphs are drawn at least this large, then area-averaged down to the cell
REFERENCE_FONT_SIZE = 32
INK_THRESHOLD = 0.5
# a noncharacter, so fonts draw their missing-glyph box for it
MISSING_CHAR = "\U0010FFFF"
FONT_CANDIDATES = (
    "DejaVuSansMono.ttf",
    "CascadiaCode.ttf",
    "LiberationMono-Regular.ttf",
    "Menlo.ttc",
    "consola.ttf",
)


@jit(nopython=True, nogil=True)
def render_indexed_numba(char_indices, color_indices, glyph_masks, bg_index):
    height_chars, width_chars = char_indices.shape
    char_height = glyph_masks.shape[1]
    char_width = glyph_masks.shape[2]
    img = np.empty((height_chars * char_height, width_chars * char_width), dtype=np.uint8)
    img[:, :] = bg_index
    for y in range(height_chars):
        for x in range(width_chars):
            char_idx = char_indices[y, x]
            color_idx = color_indices[y, x]
            y_start = y * char_height
            x_start = x * char_width
            for dy in range(char_height):
                for dx in range(char_width):
                    if glyph_masks[char_idx, dy, dx]:
                        img[y_start + dy, x_start + dx] = color_idx
    return img


def render_indexed_cpu(char_indices, color_indices, glyph_masks, bg_index):
    height_chars, width_chars = char_indices.shape
    char_height, char_width = glyph_masks.shape[1:]
    masks = glyph_masks[char_indices]
    colors = color_indices.astype(np.uint8)[:, :, None, None]
    cells = np.where(masks, colors, np.uint8(bg_index))
    return cells.transpose(0, 2, 1, 3).reshape(height_chars * char_height, width_chars * char_width)


def load_font(size, font_path=None):
    candidates = [font_path] if font_path else []
    candidates.extend(FONT_CANDIDATES)
    script_dir = os.path.dirname(os.path.abspath(__file__))
    for path in candidates:
        for candidate in (path, os.path.join(script_dir, path)):
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
    if font_path:
        logger.warning("Could not load font %s, using the default font", font_path)
    return ImageFont.load_default(size=size)


def glyph_image(font, char):
    bbox = font.getbbox(char)
    image = Image.new("L", (max(1, bbox[2]), max(1, bbox[3])), 0)
    ImageDraw.Draw(image).text((0, 0), char, font=font, fill=255)
    return bbox, np.asarray(image)


def placeholder_glyph(font):
    """The box a font draws for code points it has no glyph for, or None if blank."""
    try:
        bbox, pixels = glyph_image(font, MISSING_CHAR)
    except (OSError, ValueError, UnicodeError):
        return None
    if not pixels.any():
        return None
    return bbox, pixels


def can_render(font, char, placeholder=None):
    if char.isspace():
        return True
    try:
        bbox = font.getbbox(char)
    except (OSError, ValueError, UnicodeError):
        return False
    if bbox[2] - bbox[0] <= 0 or bbox[3] - bbox[1] <= 0:
        return False
    if placeholder is not None:
        drawn_bbox, pixels = glyph_image(font, char)
        if tuple(drawn_bbox) == tuple(placeholder[0]) and np.array_equal(pixels, placeholder[1]):
            return False
    return True


class GlyphAtlas:
    """Boolean pixel masks for every character of a charset at one cell size."""

    def __init__(self, charset, glyph_size, line_height_multiplier=1.2, font_path=None):
        self.charset = charset
        self.char_width_px, self.char_height_px = glyph_size
        self.masks = self._create_masks(line_height_multiplier, font_path)
        self.masks.setflags(write=False)
        self.inked = self.masks.reshape(len(charset), -1).any(axis=1)

    def _create_masks(self, line_height_multiplier, font_path):
        ref_size = max(REFERENCE_FONT_SIZE, self.char_height_px)
        font = load_font(ref_size, font_path)
        placeholder = placeholder_glyph(font)
        ref_width = max(1, int(ref_size * 0.6 + 0.5))
        ref_height = max(1, int(ref_size * line_height_multiplier + 0.5))
        ref_box = font.getbbox("Mg")
        y_offset = (ref_height - (ref_box[3] - ref_box[1])) // 2 - ref_box[1]

        masks = np.zeros((len(self.charset), self.char_height_px, self.char_width_px), dtype=np.bool_)
        for idx, char in enumerate(self.charset):
            if char.isspace():
                continue
            if not can_render(font, char, placeholder):
                raise GlyphRenderError(char)
            pil_image = Image.new("L", (ref_width, ref_height), 0)
            draw = ImageDraw.Draw(pil_image)
            bbox = font.getbbox(char)
            x_offset = (ref_width - (bbox[2] - bbox[0])) // 2 - bbox[0]
            draw.text((x_offset, y_offset), char, font=font, fill=255)
            reference = np.asarray(pil_image, dtype=np.float32) / 255.0
            if not reference.any():
                raise GlyphRenderError(char)
            coverage = cv2.resize(
                reference, (self.char_width_px, self.char_height_px), interpolation=cv2.INTER_AREA
            )
            mask = coverage >= INK_THRESHOLD
            if not mask.any():
                # thin strokes vanish at small sizes, keep their densest pixels
                mask = coverage >= coverage.max() * INK_THRESHOLD
            masks[idx] = mask
        return masks


def check_canvas_size(cols, rows, glyph_size):
    width = cols * glyph_size[0]
    height = rows * glyph_size[1]
    if width > MAX_CANVAS_SIDE or height > MAX_CANVAS_SIDE:
        raise RenderError(
            f"Output image {width}x{height} exceeds the {MAX_CANVAS_SIDE}px raster limit"
        )
    return width, height


class AsciiRecorder:
    """Turns converted frames into palette-indexed images ready for a GIF encoder."""

    def __init__(self, charset, gif_options, workers=1):
        self.charset = charset
        self.options = gif_options
        self.workers = workers
        self.atlas = GlyphAtlas(
            charset,
            gif_options.glyph_size,
            gif_options.line_height_multiplier,
            gif_options.font_path,
        )

    def build_palette(self, frames, colored):
        reserved = [self.options.bg_color]
        if not colored:
            reserved.append(self.options.text_color)
            colors, counts = np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)
        else:
            colors, counts = collect_colors(frames, self.workers, inked=self.atlas.inked)
        return build_palette(colors, counts, self.options.font_size, reserved=reserved)

    def color_indices(self, frame, palette, text_index):
        if frame.colors is None:
            return np.full(frame.chars.shape, text_index, dtype=np.uint8)
        flat = frame.colors.reshape(-1, 3)
        unique, inverse = np.unique(flat, axis=0, return_inverse=True)
        nearest = palette.nearest_many(unique).astype(np.uint8)
        return nearest[inverse.reshape(-1)].reshape(frame.chars.shape)

    def render_frame(self, frame, palette, bg_index, text_index):
        color_indices = self.color_indices(frame, palette, text_index)
        char_indices = np.ascontiguousarray(frame.chars)
        if char_indices.size and int(char_indices.max()) >= len(self.charset):
            raise RenderError(f"Character index {int(char_indices.max())} outside the charset")
        try:
            return render_indexed_numba(char_indices, color_indices, self.atlas.masks, bg_index)
        except Exception as e:
            logger.warning("Numba rendering failed, falling back to numpy: %s", e)
            return render_indexed_cpu(char_indices, color_indices, self.atlas.masks, bg_index)

    def record(self, result):
        """Render a ConversionResult into a RenderedAnimation sharing one palette."""
        frames = result.frames
        if not frames:
            raise RenderError("No frames to render")
        size = check_canvas_size(result.cols, result.rows, self.options.glyph_size)
        palette = self.build_palette(frames, result.colored)
        bg_index = palette.nearest(self.options.bg_color)
        text_index = palette.nearest(self.options.text_color)
        logger.info("Rendering %d frames at %dx%d px with %d palette colors", len(frames), size[0], size[1], len(palette))

        render = partial(self.render_frame, palette=palette, bg_index=bg_index, text_index=text_index)
        images = parallel_map(render, frames, self.workers, FrameRenderError)
        return RenderedAnimation(
            frames=images,
            palette=palette,
            delays=list(result.delays),
            loop_count=result.loop_count,
            size=size,
        )
