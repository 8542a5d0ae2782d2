import argparse
import logging
import os
import sys

from gifascii.ascii_player import play, terminal_columns
from gifascii.charsets import CHAR_SETS, SIMPLE_CHAR_SET, CharacterSet, get_char_set
from gifascii.config import (
    BLACK,
    WHITE,
    ConversionConfig,
    OutputModeBuilder,
    RasterFileOutput,
    RunConfig,
    TerminalOutput,
    TextFileOutput,
    default_thread_count,
    parse_color,
)
from gifascii.errors import CharsetError, GifAsciiError
from gifascii.fetch import download, is_url
from gifascii.gif_io import decode_animation, write_gif, write_text
from gifascii.pipeline import convert_animation, render_raster
from gifascii.timing import TimingPolicy


def configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def default_output_path(input_path, suffix):
    if is_url(input_path):
        stem = input_path.rstrip('/').rsplit('/', 1)[-1].split('?', 1)[0] or 'download'
    else:
        stem = os.path.basename(input_path)
    return os.path.splitext(stem)[0] + suffix


def load_charset(args):
    if args.chars:
        return CharacterSet(args.chars, name='inline')
    if args.charset_file:
        try:
            with open(args.charset_file, "r", encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CharsetError(args.charset_file, f"cannot read file ({e})") from e
        return CharacterSet.from_file_content(content, name=args.charset_file)
    if args.charset:
        return get_char_set(args.charset)
    if args.simple:
        return get_char_set(SIMPLE_CHAR_SET)
    return get_char_set()


def build_run_config(args):
    conversion = ConversionConfig(
        charset=load_charset(args),
        width=args.width,
        height=args.height,
        scale=args.scale,
        char_aspect=args.char_aspect,
        invert=args.invert,
        colored=args.colored,
        preserve_aspect=args.preserve_aspect,
    )
    timing = TimingPolicy(speed=args.speed, fps=args.fps)

    builder = OutputModeBuilder()
    if args.gif_output:
        builder.to_raster_file(args.output or default_output_path(args.input, "_ascii.gif"))
    if args.save or (args.output and not args.gif_output):
        builder.to_text_file(
            args.output if args.output and not args.gif_output
            else default_output_path(args.input, "_ascii.txt")
        )
    if not (args.gif_output or args.save or args.output):
        sized = any(v is not None for v in (args.width, args.height, args.scale))
        builder.to_terminal(fit_to_terminal=not sized, repeat=args.repeat)
    if args.fit_terminal:
        builder.with_fit_to_terminal()

    bg_color, text_color = args.bg_color, args.text_color
    if args.black_on_white:
        bg_color, text_color = bg_color or WHITE, text_color or BLACK
    elif args.white_on_black:
        bg_color, text_color = bg_color or BLACK, text_color or WHITE
    builder.with_gif_style(
        font_size=args.font_size,
        bg_color=parse_color(bg_color) if bg_color is not None else None,
        text_color=parse_color(text_color) if text_color is not None else None,
        font_path=args.font,
    )

    threads = args.threads if args.threads is not None else default_thread_count()
    return RunConfig(conversion=conversion, timing=timing, output=builder.build(), threads=threads)


def frame_lines(result):
    charset = result.charset
    if result.colored:
        return [frame.to_ansi_lines(charset) for frame in result.frames]
    return [frame.to_lines(charset) for frame in result.frames]


def run(args):
    run_config = build_run_config(args)

    input_path = args.input
    downloaded = None
    if is_url(input_path):
        print(f"Downloading GIF from: {input_path}")
        downloaded = input_path = download(input_path)
    elif not os.path.exists(input_path):
        print(f"Error: File '{input_path}' not found")
        return 1

    try:
        print(f"Loading GIF: {input_path}")
        animation = decode_animation(input_path)
    finally:
        if downloaded:
            os.remove(downloaded)
    loop = "infinite" if animation.loop_count == 0 else (animation.loop_count or "none")
    print(f"Loaded GIF: {len(animation)} frames, {animation.width}x{animation.height}, loop count: {loop}")

    columns = terminal_columns() if run_config.fit_to_terminal else None
    print("Converting frames to ASCII...")
    result = convert_animation(animation, run_config, columns)
    output = run_config.output

    if isinstance(output, RasterFileOutput):
        print(f"Generating ASCII GIF animation to: {output.path}")
        rendered = render_raster(result, output.gif_options, run_config.threads)
        write_gif(rendered, output.path)
        print("Done!")
    elif isinstance(output, TextFileOutput):
        print(f"Saving ASCII animation to: {output.path}")
        write_text(result.frames, result.charset, output.path)
        print("Done!")
    elif isinstance(output, TerminalOutput):
        on_resize = None
        if output.fit_to_terminal:
            on_resize = lambda cols: frame_lines(convert_animation(animation, run_config, cols))
        print("Press 'q' or 'Esc' to exit the animation...")
        play(frame_lines(result), result.delays, result.loop_count, output.repeat, on_resize)
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Convert GIF images to ASCII art animations')
    parser.add_argument('-i', '--input', required=True, help='GIF file path or http(s) URL')
    parser.add_argument('-o', '--output', help='Output file (text unless --gif-output is set)')
    parser.add_argument('-w', '--width', type=int, help='Width in characters')
    parser.add_argument('--height', type=int, help='Height in characters')
    parser.add_argument('--scale', type=float, help='Scale factor applied to the source size (0.1-10.0)')
    parser.add_argument('--char-aspect', type=float, default=0.5, help='Character cell aspect correction (default: 0.5)')
    parser.add_argument('--preserve-aspect', action='store_true', help='Derive height from width even when both are given')
    parser.add_argument('--fit-terminal', action='store_true', help='Use the terminal width (terminal output only)')
    parser.add_argument('-c', '--colored', action='store_true', help='Keep source colors')
    parser.add_argument('-v', '--invert', action='store_true', help='Invert brightness')
    parser.add_argument('-p', '--simple', action='store_true', help='Use the simple character set')
    parser.add_argument('--charset', choices=CHAR_SETS.keys(), help='Named character set (default: detailed)')
    parser.add_argument('--chars', help='Inline character set, darkest to lightest')
    parser.add_argument('--charset-file', help='File holding the character set')
    parser.add_argument('-s', '--save', action='store_true', help='Save frames to a text file')
    parser.add_argument('-g', '--gif-output', action='store_true', help='Render the ASCII frames to a GIF')
    parser.add_argument('--font-size', type=float, help='Font size for GIF output (default: 14.0)')
    parser.add_argument('--font', help='TrueType font for GIF output')
    parser.add_argument('--bg-color', help='GIF background color, R,G,B or #RRGGBB')
    parser.add_argument('--text-color', help='GIF text color, R,G,B or #RRGGBB')
    parser.add_argument('--white-on-black', action='store_true', help='White text on black background')
    parser.add_argument('--black-on-white', action='store_true', help='Black text on white background')
    parser.add_argument('--speed', type=float, help='Playback speed multiplier (0.1-10.0)')
    parser.add_argument('--fps', type=float, help='Fixed frame rate (1-120)')
    parser.add_argument('--threads', type=int, help='Worker threads (default: CPU count)')
    parser.add_argument('--repeat', action='store_true', help='Loop terminal playback endlessly')
    parser.add_argument('--log-level', default='WARNING', help='Logging level (default: WARNING)')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        return run(args)
    except GifAsciiError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
