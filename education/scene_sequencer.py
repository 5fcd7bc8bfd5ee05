"""Timed scene playback for lesson animations."""
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Optional

from .content_manager import Animation, Scene, validate_scenes
from .errors import EmptyContentError, InvalidStateError, LessonError
from .timers import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class SequencerState(Enum):
    """Scene playback state."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass
class PlaybackState:
    """Snapshot of scene playback."""
    current_index: int
    is_playing: bool
    has_started: bool
    state: SequencerState
    scene_count: int
    scene_title: str = ""
    scene_description: str = ""

    def to_dict(self) -> dict:
        return {
            "current_index": self.current_index,
            "is_playing": self.is_playing,
            "has_started": self.has_started,
            "state": self.state.value,
            "scene_count": self.scene_count,
            "scene_title": self.scene_title,
            "scene_description": self.scene_description,
        }


class SceneSequencer:
    """Plays the scenes of an animation, one timed step at a time.

    At most one timer is pending at any moment. Every armed timer carries a
    token; a callback whose token no longer matches is ignored, so a timer
    that fires after pause, reset or close has no effect.

    Resuming restarts the current scene's timer from zero; elapsed time
    within a scene is not tracked.
    """

    def __init__(
        self,
        animation: Animation,
        scheduler: Optional[Scheduler] = None,
        on_scene_change: Optional[Callable[[int], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        validate_scenes(animation.scenes)

        self.animation = animation
        self._scheduler = scheduler or AsyncioScheduler()
        self._on_scene_change = on_scene_change
        self._on_complete = on_complete

        self._state = SequencerState.IDLE
        self._current_index = 0
        self._has_started = False
        self._closed = False
        self._completion_fired = False

        self._timer: Optional[TimerHandle] = None
        self._timer_token = 0
        self.last_error: Optional[LessonError] = None

    @property
    def state(self) -> SequencerState:
        """Get current state."""
        return self._state

    @property
    def current_index(self) -> int:
        """Index of the scene on screen."""
        return self._current_index

    @property
    def current_scene(self) -> Optional[Scene]:
        """Get current scene."""
        if 0 <= self._current_index < len(self.animation.scenes):
            return self.animation.scenes[self._current_index]
        return None

    @property
    def scene_count(self) -> int:
        return len(self.animation.scenes)

    @property
    def is_playing(self) -> bool:
        return self._state == SequencerState.PLAYING

    @property
    def has_started(self) -> bool:
        return self._has_started

    @property
    def is_completed(self) -> bool:
        return self._state == SequencerState.COMPLETED

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def has_pending_timer(self) -> bool:
        """True while an advance is scheduled."""
        return self._timer is not None

    @property
    def progress(self) -> float:
        """Fraction of scenes reached, counting the current one."""
        if not self.animation.scenes:
            return 1.0 if self.is_completed else 0.0
        if self.is_completed:
            return 1.0
        return (self._current_index + 1) / len(self.animation.scenes)

    @property
    def playback_state(self) -> PlaybackState:
        """Get a snapshot of playback."""
        scene = self.current_scene
        return PlaybackState(
            current_index=self._current_index,
            is_playing=self.is_playing,
            has_started=self._has_started,
            state=self._state,
            scene_count=self.scene_count,
            scene_title=scene.title if scene else "",
            scene_description=scene.description if scene else "",
        )

    def start(self) -> bool:
        """Start playback from the first scene.

        Returns:
            True if playback started (or an empty animation completed)
        """
        if self._closed:
            return self._reject(InvalidStateError("Sequencer is closed"))
        if self._state != SequencerState.IDLE:
            return self._reject(
                InvalidStateError(f"Cannot start while {self._state.value}")
            )

        self._has_started = True
        self._current_index = 0

        if not self.animation.scenes:
            self.last_error = EmptyContentError(
                f"Animation '{self.animation.title}' has no scenes"
            )
            logger.warning(f"{self.last_error.message}, completing immediately")
            self._complete()
            return True

        logger.info(f"Starting animation: {self.animation.title}")
        self._state = SequencerState.PLAYING
        self._notify_scene_change()
        self._arm_timer()
        return True

    def pause(self) -> bool:
        """Pause playback, keeping the current scene.

        Returns:
            True if paused
        """
        if self._closed or self._state != SequencerState.PLAYING:
            return self._reject(
                InvalidStateError(f"Cannot pause while {self._describe_state()}")
            )

        self._cancel_timer()
        self._state = SequencerState.PAUSED
        logger.debug(f"Paused at scene {self._current_index}")
        return True

    def resume(self) -> bool:
        """Resume playback; the current scene's timer starts over.

        Returns:
            True if resumed
        """
        if self._closed or self._state != SequencerState.PAUSED:
            return self._reject(
                InvalidStateError(f"Cannot resume while {self._describe_state()}")
            )

        self._state = SequencerState.PLAYING
        logger.debug(f"Resumed at scene {self._current_index}")
        self._arm_timer()
        return True

    def toggle(self) -> bool:
        """Play/pause button behaviour."""
        if self._state == SequencerState.PLAYING:
            return self.pause()
        if self._state == SequencerState.PAUSED:
            return self.resume()
        return self.start()

    def reset(self) -> bool:
        """Return to the first scene and play again from any state.

        Never fires the completion callback.

        Returns:
            True if reset
        """
        if self._closed:
            return self._reject(InvalidStateError("Sequencer is closed"))

        self._cancel_timer()
        self._current_index = 0
        self._has_started = True
        self._completion_fired = False

        if not self.animation.scenes:
            self._state = SequencerState.COMPLETED
            logger.debug("Reset on empty animation, staying completed")
            return True

        self._state = SequencerState.PLAYING
        logger.debug(f"Reset animation: {self.animation.title}")
        self._notify_scene_change()
        self._arm_timer()
        return True

    def close(self) -> None:
        """Cancel any pending timer and refuse further operations."""
        if self._closed:
            return
        self._cancel_timer()
        self._closed = True
        logger.debug(f"Closed sequencer for: {self.animation.title}")

    def _arm_timer(self) -> None:
        """Schedule the advance for the current scene."""
        self._cancel_timer()
        scene = self.animation.scenes[self._current_index]
        self._timer_token += 1
        self._timer = self._scheduler.call_later(
            scene.duration_ms / 1000,
            partial(self._on_timer, self._timer_token),
        )

    def _cancel_timer(self) -> None:
        # Bumping the token invalidates a callback already queued by the loop
        self._timer_token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, token: int) -> None:
        """Handle a scene timer firing."""
        if token != self._timer_token or self._closed:
            logger.debug("Ignoring stale scene timer")
            return
        if self._state != SequencerState.PLAYING:
            return

        self._timer = None
        last_index = len(self.animation.scenes) - 1

        if self._current_index < last_index:
            self._current_index += 1
            logger.debug(
                f"Scene {self._current_index + 1}/{len(self.animation.scenes)}: "
                f"{self.animation.scenes[self._current_index].title}"
            )
            self._notify_scene_change()
            self._arm_timer()
        else:
            self._complete()

    def _complete(self) -> None:
        self._state = SequencerState.COMPLETED
        if self._completion_fired:
            return
        self._completion_fired = True
        logger.info(f"Animation completed: {self.animation.title}")
        if self._on_complete:
            try:
                self._on_complete()
            except Exception as e:
                logger.error(f"Completion callback error: {e}")

    def _notify_scene_change(self) -> None:
        if self._on_scene_change:
            try:
                self._on_scene_change(self._current_index)
            except Exception as e:
                logger.error(f"Scene change callback error: {e}")

    def _describe_state(self) -> str:
        return "closed" if self._closed else self._state.value

    def _reject(self, error: LessonError) -> bool:
        self.last_error = error
        logger.warning(f"Playback operation rejected: {error.message}")
        return False
