"""
Configuration for learning and spelling sessions.

Defaults reproduce the timings of the mobile app the sessions were modelled
on: one poll per second while learning, a one second confirmation hold
before advancing, and slower, stricter polling in spelling mode.
"""
import argparse
import math
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_MAX_DELAY = 10.0


@dataclass
class RetryPolicy:
    """
    How the poller reacts when the frame source has no frame.

    With the defaults the poller keeps retrying at the normal interval forever,
    logging a warning every `warn_every` consecutive misses. Set `max_misses`
    to give up (the session is stopped) and `backoff` > 1 to slow down retries.
    A growing delay is always capped: `max_delay` defaults to
    `DEFAULT_MAX_DELAY` seconds when `backoff` > 1.
    """
    backoff: float = 1.0
    max_delay: Optional[float] = None
    max_misses: Optional[int] = None
    warn_every: int = 10

    def __post_init__(self):
        if self.backoff < 1.0:
            raise ValueError(f"backoff must be >= 1.0, got {self.backoff}")
        if self.max_delay is None and self.backoff > 1.0:
            self.max_delay = DEFAULT_MAX_DELAY
        if self.max_delay is not None and self.max_delay <= 0:
            raise ValueError(f"max_delay must be > 0, got {self.max_delay}")
        if self.max_misses is not None and self.max_misses < 1:
            raise ValueError(f"max_misses must be positive, got {self.max_misses}")
        if self.warn_every < 1:
            raise ValueError(f"warn_every must be positive, got {self.warn_every}")

    def next_delay(self, interval: float, misses: int) -> float:
        """Delay before the next poll after `misses` consecutive misses."""
        if misses <= 0 or self.max_delay is None:
            return interval
        if self.backoff > 1.0:
            # Compared in log space: backoff ** misses overflows during long outages
            if misses * math.log(self.backoff) >= math.log(self.max_delay / interval):
                return self.max_delay
            return interval * self.backoff ** misses
        return min(interval, self.max_delay)

    def exhausted(self, misses: int) -> bool:
        return self.max_misses is not None and misses >= self.max_misses

    def should_warn(self, misses: int) -> bool:
        return misses > 0 and misses % self.warn_every == 0


@dataclass
class LearningConfig:
    """Timings and thresholds for a learning session."""
    match_threshold: float = 0.5
    confirmation_delay: float = 1.0
    poll_interval: float = 1.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self):
        if not 0.0 <= self.match_threshold <= 1.0:
            raise ValueError(f"match_threshold must be in [0, 1], got {self.match_threshold}")
        if self.confirmation_delay < 0:
            raise ValueError(f"confirmation_delay must be >= 0, got {self.confirmation_delay}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")


@dataclass
class SpellingConfig:
    """Settings for free spelling (continuous transcription) mode."""
    confidence_threshold: float = 0.8
    poll_interval: float = 2.0
    space_label: str = "space"
    delete_label: str = "del"
    nothing_label: str = "nothing"
    retry: RetryPolicy = field(default_factory=RetryPolicy)


def add_config_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the session tuning flags on `parser`."""
    parser.add_argument("--threshold", type=float, default=0.5,
                        help="Confidence needed to accept a matching sign (default: 0.5)")
    parser.add_argument("--confirm-delay", type=float, default=1.0,
                        help="Seconds to hold a correct sign before advancing (default: 1.0)")
    parser.add_argument("--poll-interval", type=float, default=1.0,
                        help="Seconds between classified frames while learning (default: 1.0)")
    parser.add_argument("--backoff", type=float, default=1.0,
                        help="Retry backoff factor when no frame is available (default: 1.0, fixed)")
    parser.add_argument("--max-delay", type=float, default=None,
                        help="Longest wait between retries when backing off "
                             f"(default: {DEFAULT_MAX_DELAY:g} when --backoff > 1)")
    parser.add_argument("--max-misses", type=int, default=None,
                        help="Stop the session after this many consecutive missing frames "
                             "(default: retry forever)")
    return parser


def configs_from_args(args: argparse.Namespace):
    """Build (LearningConfig, SpellingConfig) from parsed command line flags."""
    retry = RetryPolicy(backoff=args.backoff, max_delay=args.max_delay,
                        max_misses=args.max_misses)
    learning = LearningConfig(
        match_threshold=args.threshold,
        confirmation_delay=args.confirm_delay,
        poll_interval=args.poll_interval,
        retry=retry,
    )
    spelling = SpellingConfig(retry=retry)
    return learning, spelling
