"""Tests for timed scene playback."""
import asyncio

import pytest

from education.content_manager import Animation, Scene
from education.errors import ContentValidationError, EmptyContentError, InvalidStateError
from education.scene_sequencer import SceneSequencer, SequencerState
from education.timers import AsyncioScheduler

from conftest import make_animation


class Recorder:
    def __init__(self):
        self.scenes = []
        self.completions = 0

    def on_scene_change(self, index):
        self.scenes.append(index)

    def on_complete(self):
        self.completions += 1


@pytest.fixture
def recorder():
    return Recorder()


def make_sequencer(scheduler, recorder, *durations):
    return SceneSequencer(
        make_animation(*durations),
        scheduler=scheduler,
        on_scene_change=recorder.on_scene_change,
        on_complete=recorder.on_complete,
    )


class TestPlayback:
    """Auto-advance through scenes."""

    def test_starts_idle(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 4000, 3000)
        assert seq.state == SequencerState.IDLE
        assert seq.current_index == 0
        assert not seq.is_playing
        assert not seq.has_started
        assert scheduler.pending == []

    def test_two_scene_walkthrough(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 4000, 3000)

        assert seq.start()
        assert seq.state == SequencerState.PLAYING
        assert seq.current_index == 0
        assert seq.has_started

        scheduler.advance_ms(4000)
        assert seq.state == SequencerState.PLAYING
        assert seq.current_index == 1

        scheduler.advance_ms(3000)
        assert seq.state == SequencerState.COMPLETED
        assert recorder.completions == 1
        assert recorder.scenes == [0, 1]
        assert scheduler.pending == []

    def test_does_not_advance_early(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 4000, 3000)
        seq.start()
        scheduler.advance_ms(3999)
        assert seq.current_index == 0

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_n_scenes_complete_after_all_durations(self, scheduler, recorder, count):
        seq = make_sequencer(scheduler, recorder, *([1000] * count))
        seq.start()
        for expected in range(1, count):
            scheduler.advance_ms(1000)
            assert seq.current_index == expected
        assert recorder.completions == 0

        scheduler.advance_ms(1000)
        assert seq.is_completed
        assert recorder.completions == 1

        scheduler.advance_ms(60000)
        assert recorder.completions == 1

    def test_uses_each_scenes_own_duration(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 5000, 2000)
        seq.start()
        scheduler.advance_ms(1000)
        assert seq.current_index == 1
        scheduler.advance_ms(4000)
        assert seq.current_index == 1
        scheduler.advance_ms(1000)
        assert seq.current_index == 2

    def test_only_one_timer_pending(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000, 1000)
        seq.start()
        for _ in range(2):
            assert len(scheduler.pending) == 1
            scheduler.advance_ms(1000)
        assert len(scheduler.pending) == 1

    def test_start_twice_rejected(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        seq.start()
        assert not seq.start()
        assert isinstance(seq.last_error, InvalidStateError)
        assert len(scheduler.pending) == 1

    def test_progress(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        seq.start()
        assert seq.progress == 0.5
        scheduler.advance_ms(1000)
        assert seq.progress == 1.0


class TestPauseResume:
    """Pausing holds the current scene."""

    def test_pause_holds_scene(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 4000, 3000)
        seq.start()
        scheduler.advance_ms(2000)

        assert seq.pause()
        assert seq.state == SequencerState.PAUSED
        assert not seq.is_playing
        assert scheduler.pending == []

        scheduler.advance_ms(60000)
        assert seq.current_index == 0
        assert recorder.completions == 0

    def test_resume_restarts_full_scene_duration(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 4000, 3000)
        seq.start()
        scheduler.advance_ms(3000)
        seq.pause()

        assert seq.resume()
        assert seq.state == SequencerState.PLAYING

        # 1000ms was left before the pause; the scene starts over instead
        scheduler.advance_ms(1000)
        assert seq.current_index == 0
        scheduler.advance_ms(3000)
        assert seq.current_index == 1

    def test_pause_resume_never_skips_a_scene(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000, 1000)
        seq.start()
        for _ in range(5):
            scheduler.advance_ms(500)
            seq.pause()
            seq.resume()
        assert seq.current_index == 0

        scheduler.advance_ms(1000)
        scheduler.advance_ms(1000)
        scheduler.advance_ms(1000)
        assert recorder.scenes == [0, 1, 2]
        assert recorder.completions == 1

    def test_pause_when_not_playing_rejected(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000)
        assert not seq.pause()
        assert isinstance(seq.last_error, InvalidStateError)
        assert seq.state == SequencerState.IDLE

    def test_resume_when_playing_rejected(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        seq.start()
        assert not seq.resume()
        assert len(scheduler.pending) == 1

    def test_toggle(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        assert seq.toggle()
        assert seq.is_playing
        assert seq.toggle()
        assert seq.state == SequencerState.PAUSED
        assert seq.toggle()
        assert seq.is_playing


class TestReset:
    """Reset returns to the first scene and plays."""

    def test_reset_mid_playback(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000, 1000)
        seq.start()
        scheduler.advance_ms(1000)
        assert seq.current_index == 1

        assert seq.reset()
        assert seq.current_index == 0
        assert seq.state == SequencerState.PLAYING
        assert len(scheduler.pending) == 1
        assert recorder.completions == 0

    def test_reset_after_completion_does_not_fire_complete(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000)
        seq.start()
        scheduler.advance_ms(1000)
        assert recorder.completions == 1

        seq.reset()
        assert recorder.completions == 1
        assert seq.current_index == 0
        assert seq.is_playing

        # A second playthrough completes again
        scheduler.advance_ms(1000)
        assert recorder.completions == 2

    def test_reset_from_paused_and_idle(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        assert seq.reset()
        assert seq.is_playing
        assert seq.has_started

        seq.pause()
        assert seq.reset()
        assert seq.is_playing
        assert seq.current_index == 0

    def test_stale_timer_ignored_after_reset(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        seq.start()
        old_timer = scheduler.pending[0]
        seq.reset()

        old_timer.callback()
        assert seq.current_index == 0


class TestEmptyAndClose:

    def test_empty_animation_completes_immediately(self, scheduler, recorder):
        seq = SceneSequencer(
            Animation("Empty", "No scenes"),
            scheduler=scheduler,
            on_complete=recorder.on_complete,
        )
        assert seq.start()
        assert seq.is_completed
        assert recorder.completions == 1
        assert scheduler.timers == []
        assert isinstance(seq.last_error, EmptyContentError)
        assert seq.current_scene is None

    def test_reset_empty_animation(self, scheduler, recorder):
        seq = SceneSequencer(
            Animation("Empty", "No scenes"),
            scheduler=scheduler,
            on_complete=recorder.on_complete,
        )
        seq.start()
        assert seq.reset()
        assert seq.is_completed
        assert recorder.completions == 1
        assert scheduler.timers == []

    def test_close_cancels_timer(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000, 1000)
        seq.start()
        timer = scheduler.pending[0]

        seq.close()
        assert timer.cancelled()
        assert not seq.has_pending_timer

        # Even a callback the loop already queued does nothing
        timer.callback()
        assert seq.current_index == 0
        assert recorder.completions == 0

    def test_operations_rejected_after_close(self, scheduler, recorder):
        seq = make_sequencer(scheduler, recorder, 1000)
        seq.close()
        assert not seq.start()
        assert not seq.reset()
        assert not seq.resume()
        assert scheduler.timers == []

    def test_rejects_non_positive_duration(self, scheduler):
        animation = Animation("Bad", "", scenes=(Scene("Zero", "", duration_ms=0),))
        with pytest.raises(ContentValidationError):
            SceneSequencer(animation, scheduler=scheduler)

    def test_callback_errors_do_not_stop_playback(self, scheduler):
        def boom(index):
            raise RuntimeError("listener failed")

        seq = SceneSequencer(make_animation(1000, 1000), scheduler=scheduler, on_scene_change=boom)
        seq.start()
        scheduler.advance_ms(1000)
        assert seq.current_index == 1


class TestAsyncioScheduler:
    """Playback on a real event loop."""

    def test_plays_through_on_event_loop(self):
        recorder = Recorder()

        async def run():
            seq = SceneSequencer(
                make_animation(10, 10),
                scheduler=AsyncioScheduler(),
                on_scene_change=recorder.on_scene_change,
                on_complete=recorder.on_complete,
            )
            seq.start()
            await asyncio.sleep(0.3)
            return seq

        seq = asyncio.run(run())
        assert seq.is_completed
        assert recorder.scenes == [0, 1]
        assert recorder.completions == 1

    def test_close_on_event_loop_prevents_advance(self):
        recorder = Recorder()

        async def run():
            seq = SceneSequencer(
                make_animation(20, 20),
                scheduler=AsyncioScheduler(),
                on_complete=recorder.on_complete,
            )
            seq.start()
            seq.close()
            await asyncio.sleep(0.1)
            return seq

        seq = asyncio.run(run())
        assert seq.current_index == 0
        assert recorder.completions == 0
