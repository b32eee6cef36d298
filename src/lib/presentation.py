"""
Presentation runtime bootstrap

Initialises the reader of a compiled page: slides from ``div.slide``,
timestamps from the ``pre.times`` strip, lecture mode when the page holds
a ``video.reader-lecture``, and the initial slide from the ``slide`` query
parameter. Key presses are routed to the lecture sync (lecture pages) or
to the timeline recorder (authoring pages).
"""

import math
import re
import time
from typing import Callable, List, Optional, Sequence
from urllib.parse import parse_qs

from bs4 import BeautifulSoup

from ..models.reader import Media, ReaderView, Slide, time_parse
from .lecture import LectureSync
from .log import LOG
from .reader import AnimationStepper, SlideReader, lectureEnd_get, slides_retime
from .timeline import ExportSink, TimelineRecorder


INTEGER_RE = re.compile(r'^\s*([+-]?\d+)')


def initialIndex_parse(query: str, count: int) -> int:
    """
    Initial slide from a query string

    ``slide`` is 1-based and read like parseInt (leading integer, the rest
    ignored). Missing, unparseable or out-of-range values select slide 0.
    """
    values = parse_qs(query.lstrip('?')).get('slide')
    if not values:
        return 0

    match = INTEGER_RE.match(values[0])
    if not match:
        return 0

    value = int(match.group(1))
    return value - 1 if 0 < value <= count else 0


def slides_extract(soup: BeautifulSoup) -> List[Slide]:
    slides: List[Slide] = []
    for i, element in enumerate(soup.select('div.slide')):
        header = element.select_one('div.slide-header')
        slides.append(Slide(index=i, title=header.get_text().strip() if header else ''))
    return slides


def times_extract(soup: BeautifulSoup) -> List[float]:
    """Whitespace-separated timestamps of the timing strip; unparseable tokens are NaN"""
    strip = soup.select_one('pre.times')
    if strip is None:
        return []
    return [time_parse(token) for token in strip.get_text().split()]


def alerts_relocate(soup: BeautifulSoup) -> int:
    """
    Move alert paragraphs to the top of the page

    They go right before ``main`` (inside the page container), or to the
    start of the body when the page has no ``main``.

    Returns:
        Number of alerts moved
    """
    alerts = soup.select('p.alert')
    main = soup.find('main')
    body = soup.body or soup

    for i, alert in enumerate(alerts):
        alert.extract()
        if main is not None:
            main.insert_before(alert)
        else:
            body.insert(i, alert)
    return len(alerts)


class Presentation:
    """
    Runtime of one compiled page

    Attributes:
        reader: Slide reader, None on pages without slides
        lecture: Lecture sync, on pages with a lecture video
        recorder: Timeline recorder, on pages without one
        animations: One frame stepper per animation figure
        soup: Page tree after alert relocation (pages built with fromHTML)
    """

    def __init__(
        self,
        slides: Sequence[Slide],
        media: Optional[Media] = None,
        initial: int = 0,
        end: float = math.nan,
        clock: Callable[[], float] = time.monotonic,
        sink: Optional[ExportSink] = None,
    ) -> None:
        self.reader: Optional[SlideReader] = SlideReader(slides, initial) if slides else None
        self.lecture: Optional[LectureSync] = None
        self.recorder: Optional[TimelineRecorder] = None
        self.animations: List[AnimationStepper] = []
        self.soup: Optional[BeautifulSoup] = None

        if self.reader is not None:
            if media is not None:
                self.lecture = LectureSync(self.reader, media, end=end)
            else:
                self.recorder = TimelineRecorder(self.reader, clock=clock, sink=sink)

    @classmethod
    def fromHTML(
        cls,
        html: str,
        query: str = '',
        clock: Callable[[], float] = time.monotonic,
        sink: Optional[ExportSink] = None,
    ) -> "Presentation":
        """
        Initialise the runtime from compiled page markup

        Args:
            html: Compiled page
            query: Page query string (``slide=N`` selects the initial slide)
            clock: Clock for the timeline recorder
            sink: Export sink for the timeline recorder
        """
        soup = BeautifulSoup(html, 'html.parser')
        moved = alerts_relocate(soup)

        slides = slides_extract(soup)
        times = times_extract(soup)
        media = Media() if soup.select_one('video.reader-lecture') else None

        presentation = cls(
            slides_retime(slides, times),
            media=media,
            initial=initialIndex_parse(query, len(slides)),
            end=lectureEnd_get(times, len(slides)),
            clock=clock,
            sink=sink,
        )
        for animation in soup.select('div.animation'):
            frames = animation.select('img.frame')
            if frames:
                presentation.animations.append(AnimationStepper(len(frames)))

        presentation.soup = soup
        LOG(
            f"Presentation: {len(slides)} slide(s), {moved} alert(s), "
            f"{len(presentation.animations)} animation(s), "
            f"{'lecture' if media is not None else 'authoring'} mode",
            level=2,
        )
        return presentation

    @property
    def label(self) -> str:
        """Summary text of the reader panel"""
        return 'VideoSlides' if self.lecture is not None else 'Slides'

    def key_press(self, key: str) -> bool:
        """
        Route a key press

        ArrowLeft / ArrowRight navigate everywhere; R toggles recording on
        authoring pages.

        Returns:
            True when the key changed anything
        """
        if self.reader is None:
            return False

        if self.lecture is not None:
            if key == 'ArrowLeft':
                return self.lecture.advance_toPrevious()
            if key == 'ArrowRight':
                return self.lecture.advance_toNext()
            return False

        if key == 'ArrowLeft':
            return self.recorder.advance_toPrevious()
        if key == 'ArrowRight':
            return self.recorder.advance_toNext()
        if key == 'R':
            self.recorder.record_toggle()
            return True
        return False

    def resize(self, width: float, height: float) -> Optional[float]:
        """Viewport resized or reader panel toggled; returns the scale to apply, if any"""
        if self.reader is None:
            return None
        return self.reader.scale_update(width, height)

    def view_get(self) -> Optional[ReaderView]:
        if self.lecture is not None:
            return self.lecture.view_get()
        if self.recorder is not None:
            return self.recorder.view_get()
        return None
