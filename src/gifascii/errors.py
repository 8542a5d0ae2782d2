"""Exceptions raised by gifascii."""


class GifAsciiError(Exception):
    pass


class ValidationError(GifAsciiError):
    def __init__(self, field, value, message=None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field}: {value!r}")


class InvalidDimensionsError(ValidationError):
    def __init__(self, width, height, message=None):
        self.width = width
        self.height = height
        super().__init__(
            "dimensions", (width, height),
            message or f"Invalid dimensions: width={width}, height={height} (allowed 1-10000)",
        )


class InvalidFontSizeError(ValidationError):
    def __init__(self, size):
        super().__init__("font_size", size, f"Invalid font size: {size} (allowed 0.1-100.0)")


class InvalidScaleError(ValidationError):
    def __init__(self, scale):
        super().__init__("scale", scale, f"Invalid scale: {scale} (allowed 0.1-10.0)")


class InvalidThreadCountError(ValidationError):
    def __init__(self, threads):
        super().__init__("threads", threads, f"Invalid thread count: {threads} (allowed 1-1000)")


class InvalidTimingError(ValidationError):
    pass


class TimingConflictError(ValidationError):
    def __init__(self, speed, fps):
        super().__init__(
            "timing", (speed, fps),
            f"Speed ({speed}) and fps ({fps}) cannot be used together",
        )


class CharsetError(ValidationError):
    def __init__(self, chars, reason):
        self.reason = reason
        super().__init__("charset", chars, f"Invalid character set {chars!r}: {reason}")


class OutputModeConflictError(ValidationError):
    pass


class InvalidColorError(ValidationError):
    def __init__(self, value):
        super().__init__("color", value, f"Invalid color: {value!r} (expected R,G,B or #RRGGBB)")


class FrameConversionError(GifAsciiError):
    def __init__(self, frame_index, cause):
        self.frame_index = frame_index
        self.cause = cause
        super().__init__(f"Failed to convert frame {frame_index}: {cause}")


class RenderError(GifAsciiError):
    pass


class FrameRenderError(RenderError):
    def __init__(self, frame_index, cause):
        self.frame_index = frame_index
        self.cause = cause
        super().__init__(f"Failed to render frame {frame_index}: {cause}")


class PaletteOverflowError(RenderError):
    def __init__(self, size):
        self.size = size
        super().__init__(f"Palette has {size} colors, indexed output allows at most 256")


class GlyphRenderError(RenderError):
    def __init__(self, char):
        self.char = char
        super().__init__(f"Could not render glyph for character {char!r}")


class DecodeError(GifAsciiError):
    pass


class FetchError(GifAsciiError):
    pass
