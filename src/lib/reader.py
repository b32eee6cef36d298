"""
Slide reader state machine

Tracks which slide of a compiled page is shown and what the reader
controls look like. The only persistent state is the current index; every
transition either succeeds (index moved, view changed) or is rejected and
leaves everything as it was.

Layout is owned by the host page: it reports the measured size of the
visible slide through scale_update() and applies the scale returned.
"""

import dataclasses
import math
from typing import Any, Dict, List, Optional, Sequence

from ..config import appsettings
from ..models.reader import ReaderView, Slide
from .log import LOG


def scale_decide(
    previous_width: Optional[float],
    width: float,
    height: float,
    slide_width: Optional[float] = None,
    slide_height: Optional[float] = None,
    epsilon: Optional[float] = None,
) -> Optional[float]:
    """
    Decide how a slide must be rescaled after a measurement

    Args:
        previous_width: Width measured last time, None if never measured
        width: Current measured width
        height: Current measured height
        slide_width: Authored slide width (default: settings)
        slide_height: Authored slide height (default: settings)
        epsilon: Smallest scale worth applying (default: settings)

    Returns:
        Scale factor to apply, or None when the width did not change or the
        slide is (nearly) collapsed
    """
    if previous_width == width:
        return None

    slide_width = slide_width or appsettings.slide_width
    slide_height = slide_height or appsettings.slide_height
    epsilon = appsettings.sync_epsilon if epsilon is None else epsilon

    scale = min(width / slide_width, height / slide_height)
    return scale if scale > epsilon else None


def slides_retime(slides: Sequence[Slide], times: Sequence[float]) -> List[Slide]:
    """
    Slides with appearance times taken from recorded step times

    Entry i of ``times`` is the moment slide i gave way to slide i+1, as
    recorded by the timeline recorder: slide 0 appears at 0 and slide i+1
    at ``times[i]``. Slides past the data stay untimed.
    """
    if not times:
        return list(slides)

    appearances = [0.0] + list(times)
    return [
        dataclasses.replace(slide, time=appearances[i]) if i < len(appearances) else slide
        for i, slide in enumerate(slides)
    ]


def lectureEnd_get(times: Sequence[float], count: int) -> float:
    """Moment the last of ``count`` slides ends, NaN when not recorded"""
    return times[count - 1] if 0 < count <= len(times) else math.nan


class SlideReader:
    """
    Navigation over the slides of one page

    Slides are immutable values; measured widths live in a cache keyed by
    slide index so a slide is only rescaled when its width changed.
    """

    def __init__(self, slides: Sequence[Slide], index: int = 0) -> None:
        """
        Args:
            slides: Slides of the page, in document order
            index: Initially visible slide

        Raises:
            ValueError: on an empty slide list or an out-of-range index
        """
        if not slides:
            raise ValueError("A reader needs at least one slide")
        if not 0 <= index < len(slides):
            raise ValueError(f"Initial slide {index} out of range 0..{len(slides) - 1}")

        self.slides: List[Slide] = list(slides)
        self.index = index
        self.widths: Dict[int, float] = {}

    @property
    def count(self) -> int:
        return len(self.slides)

    @property
    def current(self) -> Slide:
        return self.slides[self.index]

    @property
    def last(self) -> bool:
        return self.index == self.count - 1

    def advance_toIndex(self, index: int) -> bool:
        """
        Show slide ``index``

        Returns:
            False (and no change) when ``index`` is out of range
        """
        if not 0 <= index < self.count:
            LOG(f"Rejected jump to slide {index + 1} of {self.count}", level=3)
            return False

        if index != self.index:
            LOG(f"Slide {self.index + 1} -> {index + 1}", level=3)
        self.index = index
        return True

    def advance_toNext(self) -> bool:
        if self.last:
            return False
        return self.advance_toIndex(self.index + 1)

    def advance_toPrevious(self) -> bool:
        if self.index == 0:
            return False
        return self.advance_toIndex(self.index - 1)

    def scale_update(self, width: float, height: float) -> Optional[float]:
        """
        Record the measured size of the visible slide

        Returns:
            Scale factor the host must apply, None when nothing changes
        """
        scale = scale_decide(self.widths.get(self.index), width, height)
        self.widths[self.index] = width
        return scale

    def view_get(self, **overrides: Any) -> ReaderView:
        """
        Snapshot of the reader controls

        Args:
            **overrides: ReaderView fields set by the lecture sync or the
                         recorder (play state, stamp, indicators)
        """
        view = ReaderView(
            index=self.index,
            count=self.count,
            prev_enabled=self.index > 0,
            next_enabled=not self.last,
            play_enabled=False,
        )
        return dataclasses.replace(view, **overrides)


class AnimationStepper:
    """Frame stepper of one animation figure (left/right buttons and an i/N counter)."""

    def __init__(self, count: int) -> None:
        if count < 1:
            raise ValueError("An animation needs at least one frame")
        self.count = count
        self.index = 0

    def advance_toNext(self) -> bool:
        if self.index >= self.count - 1:
            return False
        self.index += 1
        return True

    def advance_toPrevious(self) -> bool:
        if self.index == 0:
            return False
        self.index -= 1
        return True

    @property
    def left_enabled(self) -> bool:
        return self.index > 0

    @property
    def right_enabled(self) -> bool:
        return self.index < self.count - 1

    @property
    def counter(self) -> str:
        return f"{self.index + 1}/{self.count}"
