"""Terminal playback of converted frames."""

import logging
import select
import shutil
import sys
import time

try:
    import msvcrt
except ImportError:
    msvcrt = None
try:
    import termios
    import tty
except ImportError:
    termios = None

logger = logging.getLogger(__name__)

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR_SCREEN = "\033[2J\033[H"
HOME = "\033[H"
EXIT_KEYS = ('q', 'Q', '\x1b', '\x03')
DEFAULT_DELAY_MS = 100


def terminal_columns():
    return shutil.get_terminal_size().columns


class AsciiPlayer:
    """Plays pre-rendered frame lines with their delays.

    ``on_resize`` is called with the new column count when the terminal width
    changes and must return replacement frames (same count); it is only set
    when the output should follow the terminal size.
    """

    def __init__(self, frames, delays, loop_count=None, repeat=False, on_resize=None, stream=None):
        self.frames = frames
        self.delays = delays
        self.loop_count = loop_count
        self.repeat = repeat
        self.on_resize = on_resize
        self.stream = stream or sys.stdout
        self.last_columns = None

    def iterations(self):
        if self.repeat or self.loop_count == 0:
            return None
        return max(1, self.loop_count or 1)

    def frame_delay(self, index):
        if index < len(self.delays):
            return self.delays[index]
        if self.delays:
            return self.delays[0]
        return DEFAULT_DELAY_MS

    def check_for_keypress(self):
        try:
            if select.select([sys.stdin], [], [], 0) == ([sys.stdin], [], []):
                return sys.stdin.read(1)
        except (OSError, ValueError):
            pass
        if msvcrt and msvcrt.kbhit():
            try:
                return msvcrt.getch().decode('utf-8')
            except UnicodeDecodeError:
                pass
        return None

    def check_resize(self):
        if self.on_resize is None:
            return
        columns = terminal_columns()
        if self.last_columns is not None and columns != self.last_columns:
            logger.debug("Terminal resized: %d -> %d columns", self.last_columns, columns)
            self.frames = self.on_resize(columns)
            self.stream.write(CLEAR_SCREEN)
        self.last_columns = columns

    def draw(self, lines):
        self.stream.write(HOME + '\n'.join(lines))
        self.stream.flush()

    def play(self):
        remaining = self.iterations()
        self.stream.write(HIDE_CURSOR + CLEAR_SCREEN)
        try:
            while remaining is None or remaining > 0:
                for index in range(len(self.frames)):
                    self.check_resize()
                    started = time.monotonic()
                    self.draw(self.frames[index])
                    key = self.check_for_keypress()
                    if key is not None and key in EXIT_KEYS:
                        return
                    sleep_time = self.frame_delay(index) / 1000.0 - (time.monotonic() - started)
                    if sleep_time > 0:
                        time.sleep(sleep_time)
                if remaining is not None:
                    remaining -= 1
        except KeyboardInterrupt:
            pass
        finally:
            self.stream.write(SHOW_CURSOR + CLEAR_SCREEN)
            self.stream.flush()


def play(frames, delays, loop_count=None, repeat=False, on_resize=None):
    old_settings = None
    if termios and sys.stdin.isatty():
        old_settings = termios.tcgetattr(sys.stdin)
        tty.setcbreak(sys.stdin.fileno())
    try:
        AsciiPlayer(frames, delays, loop_count, repeat, on_resize).play()
    finally:
        if old_settings:
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
