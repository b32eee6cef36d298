"""
Slide reader runtime models

Value types shared by the slide state machine, the lecture sync protocol
and the timeline recorder. Slides are immutable; per-slide layout caches
and timing history live in the components that own them.
"""

import math
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Slide:
    """
    One slide container of a compiled page

    Attributes:
        index: Zero-based position in the page
        time: Lecture timestamp (seconds) at which this slide appears,
              NaN when the page carries no timing for it
        title: Slide header text
    """
    index: int
    time: float = math.nan
    title: str = ""

    @property
    def timed(self) -> bool:
        return not math.isnan(self.time)


@dataclass(frozen=True)
class ReaderView:
    """
    Observable state of the reader after a transition

    Everything a page needs to redraw its controls: which slide is shown,
    which buttons are enabled, and the indicators.
    """
    index: int
    count: int
    prev_enabled: bool
    next_enabled: bool
    play_enabled: bool
    playing: bool = False
    stamp_visible: bool = False
    recording: bool = False
    complete: bool = False

    @property
    def counter(self) -> str:
        """Textual ``i/N`` counter, 1-based."""
        return f"{self.index + 1}/{self.count}"


class SyncPhase(Enum):
    """
    Lecture sync protocol phase

    A seek issued by the protocol itself moves it to AWAITING_SELF_SEEK;
    the next seek notification is then recognised as self-inflicted and
    returns it to IDLE without resynchronising.
    """
    IDLE = "idle"
    AWAITING_SELF_SEEK = "awaiting_self_seek"


@dataclass
class Media:
    """
    Playback state of the lecture video element

    The runtime drives it through play/pause/seek and receives its
    notifications through the LectureSync handlers.
    """
    current_time: float = 0.0
    paused: bool = True
    seeking: bool = False
    visible: bool = False
    duration: float = math.nan

    def play(self) -> None:
        self.paused = False

    def pause(self) -> None:
        self.paused = True

    def seek(self, time: float) -> None:
        self.current_time = time


@dataclass
class Take:
    """Dwell durations of one recording session; negative entries are retreats."""
    dwells: List[float] = field(default_factory=list)


@dataclass
class Timeline:
    """Ordered takes of one authoring pass."""
    takes: List[Take] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.takes)

    def lists_get(self) -> List[List[float]]:
        return [list(take.dwells) for take in self.takes]


def time_parse(token: str) -> float:
    """Parse one timing token; anything unparseable is NaN."""
    try:
        return float(token)
    except ValueError:
        return math.nan


def time_dump(time: float) -> Optional[float]:
    """JSON-safe timestamp: NaN becomes null."""
    return None if math.isnan(time) else time
