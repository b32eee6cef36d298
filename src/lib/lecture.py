"""
Lecture sync protocol

Keeps the slide reader and the lecture video consistent. Slide timestamps
are the positions at which slides appear; while slide k is shown the
video plays until the timestamp of slide k+1, then the reader advances.

Two kinds of seeks reach the protocol. Seeks it issues itself (after
navigation, on wrap-around, on catch-up) move it to AWAITING_SELF_SEEK so
the following seek notification is consumed without resynchronising.
Any other seek notification comes from the user scrubbing the video and
moves the reader to the slide showing at the new position.

The host page forwards media events to the handlers:

    timeupdate -> position_update()     seeked -> seeked()
    play       -> played()              pause  -> paused()
    ended      -> ended()
"""

import math
from typing import Optional

from ..config import appsettings
from ..models.reader import Media, ReaderView, SyncPhase
from .log import LOG
from .reader import SlideReader


class LectureSync:
    """
    Binds a SlideReader to a lecture Media element

    Slides without a timestamp never fail the page: where the protocol
    cannot know when to advance it pauses and shows the catch-up stamp,
    leaving the reader to manual navigation.
    """

    def __init__(
        self,
        reader: SlideReader,
        media: Media,
        end: float = math.nan,
        epsilon: Optional[float] = None,
    ) -> None:
        """
        Args:
            reader: Reader of the page
            media: Lecture video
            end: Position at which the last slide ends (default: end of media)
            epsilon: Timestamp comparison tolerance (default: settings)
        """
        self.reader = reader
        self.media = media
        self.end = end
        self.epsilon = appsettings.sync_epsilon if epsilon is None else epsilon
        self.phase = SyncPhase.IDLE
        self.stamp_visible = False

        self.seek_request(self.anchor(reader.index))
        self.stamp_refresh()

    def seek_request(self, time: float) -> None:
        """Move the media to ``time``, marking the seek as self-inflicted"""
        self.phase = SyncPhase.AWAITING_SELF_SEEK
        self.media.seek(time)

    def anchor(self, index: int) -> float:
        """Position slide ``index`` starts at: its own timestamp, else the nearest earlier one, else 0"""
        for slide in reversed(self.reader.slides[:index + 1]):
            if slide.timed:
                return slide.time
        return 0.0

    def syncable(self) -> bool:
        """True when playback on the current slide knows where to advance"""
        if self.reader.last:
            return True
        return self.reader.slides[self.reader.index + 1].timed

    def stamp_refresh(self) -> bool:
        """Pause and show the catch-up stamp when the current slide cannot auto-advance"""
        self.stamp_visible = not self.syncable()
        if self.stamp_visible:
            self.media.pause()
        return self.stamp_visible

    def position_update(self) -> bool:
        """
        Playback position changed (not a seek)

        Returns:
            True when the reader advanced
        """
        if self.media.seeking:
            return False

        position = self.media.current_time
        if self.reader.last:
            end = self.media.duration if math.isnan(self.end) else self.end
            if position > end - self.epsilon:
                return self.ended()
            return False

        upcoming = self.reader.slides[self.reader.index + 1]
        if not upcoming.timed:
            # Next slide untimed: hold at the start of the current one
            self.media.pause()
            self.stamp_visible = True
            self.seek_request(self.anchor(self.reader.index))
            return False

        if position > upcoming.time - self.epsilon:
            self.reader.advance_toNext()
            self.stamp_refresh()
            LOG(f"Lecture at {position:.2f}s: slide {self.reader.index + 1}", level=3)
            return True
        return False

    def ended(self) -> bool:
        """Media reached its end: pause, rewind and wrap to the first slide"""
        self.media.pause()
        self.seek_request(0.0)
        self.reader.advance_toIndex(0)
        self.stamp_refresh()
        return True

    def seeked(self) -> bool:
        """
        A seek completed

        Returns:
            True when the reader was resynchronised to a user seek
        """
        if self.phase is SyncPhase.AWAITING_SELF_SEEK:
            self.phase = SyncPhase.IDLE
            return False
        if self.media.seeking:
            return False

        position = self.media.current_time
        for i, slide in enumerate(self.reader.slides):
            if slide.timed and slide.time > position + self.epsilon:
                self.reader.advance_toIndex(max(i - 1, 0))
                break
        else:
            # Past every timestamp
            self.media.pause()
            self.reader.advance_toIndex(self.reader.count - 1)

        self.stamp_refresh()
        LOG(f"User seek to {position:.2f}s: slide {self.reader.index + 1}", level=3)
        return True

    def played(self) -> None:
        self.media.visible = True

    def paused(self) -> None:
        self.media.visible = False

    def play(self) -> bool:
        """Play button; refused while the stamp is shown"""
        if not self.syncable():
            return False
        self.media.play()
        return True

    def pause(self) -> bool:
        self.media.pause()
        return True

    def navigated(self) -> None:
        """Bring the media to the start of the slide the reader moved to"""
        self.seek_request(self.anchor(self.reader.index))
        self.stamp_refresh()

    def advance_toNext(self) -> bool:
        if not self.reader.advance_toNext():
            return False
        self.navigated()
        return True

    def advance_toPrevious(self) -> bool:
        if not self.reader.advance_toPrevious():
            return False
        self.navigated()
        return True

    def advance_toIndex(self, index: int) -> bool:
        if not self.reader.advance_toIndex(index):
            return False
        self.navigated()
        return True

    def view_get(self) -> ReaderView:
        return self.reader.view_get(
            play_enabled=self.syncable(),
            playing=not self.media.paused,
            stamp_visible=self.stamp_visible,
        )
