"""
Slide reader tests

Tests navigation, scaling, slide retiming and animation steppers.
"""

import math

import pytest

from orfalius.lib.reader import AnimationStepper, SlideReader, lectureEnd_get, scale_decide, slides_retime
from orfalius.models.reader import Slide


def slides_make(count):
    return [Slide(index=i) for i in range(count)]


class TestScale:
    """Test scale decisions"""

    def test_first_measurement(self):
        assert scale_decide(None, 704, 396) == 1.0
        assert scale_decide(None, 352, 396) == 0.5

    def test_height_bound(self):
        assert scale_decide(None, 1408, 198) == 0.5

    def test_unchanged_width(self):
        assert scale_decide(704, 704, 100) is None

    def test_collapsed(self):
        """Hidden slides measure zero and are never rescaled"""
        assert scale_decide(None, 0, 396) is None
        assert scale_decide(704, 0, 0) is None


class TestNavigation:
    """Test the reader state machine"""

    def test_initial_state(self):
        reader = SlideReader(slides_make(3))
        view = reader.view_get()
        assert reader.index == 0
        assert not view.prev_enabled
        assert view.next_enabled
        assert not view.play_enabled
        assert view.counter == "1/3"

    def test_next_and_previous(self):
        reader = SlideReader(slides_make(3))
        assert reader.advance_toNext()
        assert reader.advance_toNext()
        assert reader.index == 2
        assert reader.last
        assert not reader.advance_toNext()
        assert reader.index == 2

        view = reader.view_get()
        assert view.prev_enabled
        assert not view.next_enabled

        assert reader.advance_toPrevious()
        assert reader.index == 1

    def test_previous_at_first(self):
        reader = SlideReader(slides_make(2))
        assert not reader.advance_toPrevious()
        assert reader.index == 0

    def test_jump(self):
        reader = SlideReader(slides_make(4))
        assert reader.advance_toIndex(3)
        assert not reader.advance_toIndex(4)
        assert not reader.advance_toIndex(-1)
        assert reader.index == 3

    def test_single_slide(self):
        view = SlideReader(slides_make(1)).view_get()
        assert not view.prev_enabled
        assert not view.next_enabled

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            SlideReader([])
        with pytest.raises(ValueError):
            SlideReader(slides_make(2), index=2)

    def test_view_overrides(self):
        view = SlideReader(slides_make(2)).view_get(recording=True, play_enabled=True)
        assert view.recording
        assert view.play_enabled


class TestScaleCache:
    """Test the per-slide width cache"""

    def test_rescale_only_on_change(self):
        reader = SlideReader(slides_make(2))
        assert reader.scale_update(704, 396) == 1.0
        assert reader.scale_update(704, 396) is None
        assert reader.scale_update(352, 396) == 0.5

    def test_cache_per_slide(self):
        reader = SlideReader(slides_make(2))
        reader.scale_update(704, 396)
        reader.advance_toNext()
        assert reader.scale_update(704, 396) == 1.0
        reader.advance_toPrevious()
        assert reader.scale_update(704, 396) is None


class TestRetime:
    """Test conversion of recorded step times to appearance times"""

    def test_full_data(self):
        slides = slides_retime(slides_make(3), [4.0, 9.0, 12.0])
        assert [slide.time for slide in slides] == [0.0, 4.0, 9.0]
        assert [slide.index for slide in slides] == [0, 1, 2]

    def test_partial_data(self):
        slides = slides_retime(slides_make(3), [4.0])
        assert slides[0].time == 0.0
        assert slides[1].time == 4.0
        assert not slides[2].timed

    def test_no_data(self):
        slides = slides_retime(slides_make(2), [])
        assert not any(slide.timed for slide in slides)

    def test_undefined_steps(self):
        slides = slides_retime(slides_make(3), [math.nan, 7.0, 9.0])
        assert slides[0].time == 0.0
        assert not slides[1].timed
        assert slides[2].time == 7.0

    def test_lecture_end(self):
        assert lectureEnd_get([4.0, 9.0, 12.0], 3) == 12.0
        assert math.isnan(lectureEnd_get([4.0], 3))
        assert math.isnan(lectureEnd_get([], 0))


class TestAnimationStepper:
    """Test animation frame stepping"""

    def test_stepping(self):
        stepper = AnimationStepper(3)
        assert stepper.counter == "1/3"
        assert not stepper.left_enabled
        assert stepper.right_enabled

        assert stepper.advance_toNext()
        assert stepper.advance_toNext()
        assert not stepper.advance_toNext()
        assert stepper.counter == "3/3"
        assert stepper.left_enabled
        assert not stepper.right_enabled

        assert stepper.advance_toPrevious()
        assert stepper.counter == "2/3"

    def test_single_frame(self):
        stepper = AnimationStepper(1)
        assert not stepper.left_enabled
        assert not stepper.right_enabled
        assert not stepper.advance_toPrevious()

    def test_no_frames(self):
        with pytest.raises(ValueError):
            AnimationStepper(0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
