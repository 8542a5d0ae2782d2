"""Frame delay remapping by speed multiplier or target frame rate."""

from dataclasses import dataclass
from typing import Optional

from gifascii.errors import InvalidTimingError, TimingConflictError
from gifascii.models import round_half_up

MIN_SPEED = 0.1
MAX_SPEED = 10.0
MIN_FPS = 1
MAX_FPS = 120
# GIF delays are stored in hundredths of a second, 20 ms is the smallest
# value browsers honour, so zero-delay frames are treated as 20 ms.
DEFAULT_ZERO_DELAY_MS = 20
MIN_DELAY_MS = 10


@dataclass(frozen=True)
class TimingPolicy:
    speed: Optional[float] = None
    fps: Optional[float] = None

    def __post_init__(self):
        if self.speed is not None and self.fps is not None:
            raise TimingConflictError(self.speed, self.fps)
        if self.speed is not None and not MIN_SPEED <= self.speed <= MAX_SPEED:
            raise InvalidTimingError(
                "speed", self.speed, f"Invalid speed: {self.speed} (allowed {MIN_SPEED}-{MAX_SPEED})"
            )
        if self.fps is not None and not MIN_FPS <= self.fps <= MAX_FPS:
            raise InvalidTimingError(
                "fps", self.fps, f"Invalid fps: {self.fps} (allowed {MIN_FPS}-{MAX_FPS})"
            )

    @property
    def mode(self):
        return 'fps' if self.fps is not None else 'speed'

    @property
    def effective_speed(self):
        return 1.0 if self.speed is None else self.speed


def scale_delay(delay_ms, speed):
    if delay_ms <= 0:
        delay_ms = DEFAULT_ZERO_DELAY_MS
    return max(MIN_DELAY_MS, round_half_up(delay_ms / speed))


def fps_delay(fps):
    return round_half_up(1000 / fps)


def adjust_delays(delays, policy):
    if policy.fps is not None:
        delay = fps_delay(policy.fps)
        return [delay] * len(delays)
    speed = policy.effective_speed
    return [scale_delay(d, speed) for d in delays]


def total_duration(delays):
    return sum(delays)
