"""
Timeline recorder

Authoring mode of the reader (pages without a lecture video): while the
author rehearses, each forward step records how long the previous slide
was shown, building the per-slide timestamps a lecture page needs.

    times     cumulative appearance time of each slide recorded so far
    timeline  one Take per recording session (R pressed to R pressed),
              holding the signed dwell of every step: forward steps record
              the time spent, backward steps the negated time spent

Export is all-or-nothing: the data is only produced once every slide has
a timestamp and at least one take has been closed.
"""

import json
import math
import time
from typing import Any, Callable, Dict, List, Optional

from ..config import appsettings
from ..models.reader import ReaderView, Take, Timeline, time_dump
from .log import LOG
from .reader import SlideReader


ExportSink = Callable[[str, str], None]


class TimelineRecorder:
    """
    Records navigation timing over a SlideReader

    Args:
        reader: Reader whose navigation is timed
        clock: Monotonic clock in seconds
        sink: Receives (filename, json_text) each time complete data is exported
    """

    def __init__(
        self,
        reader: SlideReader,
        clock: Callable[[], float] = time.monotonic,
        sink: Optional[ExportSink] = None,
    ) -> None:
        self.reader = reader
        self.clock = clock
        self.sink = sink

        self.times: List[float] = []
        self.shift = 0.0
        self.start: Optional[float] = None
        self.take: Optional[Take] = None
        self.timeline = Timeline()

    @property
    def recording(self) -> bool:
        return self.start is not None

    @property
    def complete(self) -> bool:
        """Every slide has a recorded timestamp"""
        return len(self.times) == self.reader.count

    def lap(self) -> float:
        """Seconds since the last step (or since recording started); restarts the lap"""
        now = self.clock()
        elapsed = now - self.start
        self.start = now
        return elapsed

    def advance_toNext(self) -> bool:
        """
        Forward step

        Records the next timestamp when some slide still lacks one: the
        running total while recording, NaN (and an export attempt) otherwise.
        """
        if len(self.times) < self.reader.count:
            if self.recording:
                dwell = self.lap()
                self.shift += dwell
                self.times.append(self.shift)
                self.take.dwells.append(dwell)
                if self.complete:
                    LOG("Every slide has a timestamp", level=2)
            else:
                self.times.append(math.nan)
                self.timeline_flush()
        return self.reader.advance_toNext()

    def advance_toPrevious(self) -> bool:
        """
        Backward step

        Records the negated dwell while recording, then drops the latest
        timestamp; the running total falls back to the nearest earlier
        defined timestamp.
        """
        if self.recording:
            self.take.dwells.append(-self.lap())

        if self.times:
            dropped = self.times.pop()
            if not math.isnan(dropped):
                self.shift = next((t for t in reversed(self.times) if not math.isnan(t)), 0.0)
        return self.reader.advance_toPrevious()

    def record_toggle(self) -> bool:
        """
        Start a new take, or close the running one and export

        Returns:
            True when recording after the toggle
        """
        if self.recording:
            self.timeline.takes.append(self.take)
            LOG(f"Closed take {len(self.timeline)} ({len(self.take.dwells)} steps)", level=2)
            self.take = None
            self.start = None
            self.timeline_flush()
        else:
            self.take = Take()
            self.start = self.clock()
            LOG("Recording", level=2)
        return self.recording

    def timeline_export(self) -> Optional[Dict[str, Any]]:
        """``{"times": [...], "timeline": [[...], ...]}``, or None while incomplete"""
        if len(self.timeline) == 0 or not self.complete:
            return None
        return {
            'times': [time_dump(t) for t in self.times],
            'timeline': self.timeline.lists_get(),
        }

    def timelineJSON_export(self) -> Optional[str]:
        data = self.timeline_export()
        if data is None:
            return None
        return json.dumps(data, indent=4, allow_nan=False)

    def timeline_flush(self) -> Optional[str]:
        """Export and hand the result to the sink, when there is something to export"""
        text = self.timelineJSON_export()
        if text is not None and self.sink is not None:
            self.sink(appsettings.export_filename, text)
            LOG(f"Exported {appsettings.export_filename}", level=2)
        return text

    def view_get(self) -> ReaderView:
        return self.reader.view_get(recording=self.recording, complete=self.complete)
