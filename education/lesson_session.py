"""Lesson session: one scene sequencer and one quiz per opened lesson."""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .assessment_engine import AssessmentEngine, QuizState
from .content_manager import CodeExample, Lesson
from .errors import InvalidStateError, LessonError
from .scene_sequencer import PlaybackState, SceneSequencer
from .timers import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class SessionProgress:
    """Lesson session progress data."""
    session_id: str
    lesson_id: str
    lesson_title: str
    playback: PlaybackState
    quiz: QuizState
    total_questions: int
    animation_completed: bool
    quiz_score: Optional[int]
    closed: bool
    elapsed_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "lesson_id": self.lesson_id,
            "lesson_title": self.lesson_title,
            "playback": self.playback.to_dict(),
            "quiz": self.quiz.to_dict(),
            "total_questions": self.total_questions,
            "animation_completed": self.animation_completed,
            "quiz_score": self.quiz_score,
            "closed": self.closed,
            "elapsed_time": self.elapsed_time,
        }


class LessonSessionController:
    """Runs one opened lesson for one learner."""

    def __init__(
        self,
        lesson: Lesson,
        session_id: str,
        on_complete: Callable[[str, int], None],
        on_close: Callable[[], None],
        on_scene_change: Optional[Callable[[int], None]] = None,
        on_answer: Optional[Callable[[int, int, bool], None]] = None,
        on_animation_complete: Optional[Callable[[], None]] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            lesson: Immutable lesson content
            session_id: Identifier of this session
            on_complete: Host callback receiving (lesson_id, score)
            on_close: Host callback fired whenever the session is closed
            on_scene_change: Optional callback receiving the new scene index
            on_answer: Optional callback receiving (question, option, correct)
            on_animation_complete: Optional callback when the last scene ends
            scheduler: Timer source for scene playback
            clock: Monotonic seconds, used to track learner activity

        Raises:
            ContentValidationError: If the lesson's scenes or questions are malformed
        """
        self.lesson = lesson
        self.session_id = session_id
        self._on_complete = on_complete
        self._on_close = on_close
        self._on_scene_change = on_scene_change
        self._on_answer = on_answer
        self._on_animation_complete = on_animation_complete

        self.sequencer = SceneSequencer(
            lesson.animation,
            scheduler=scheduler,
            on_scene_change=self._handle_scene_change,
            on_complete=self._handle_animation_complete,
        )
        self.quiz = AssessmentEngine(
            lesson.questions,
            on_complete=self._handle_quiz_complete,
            on_answer=self._handle_answer,
        )

        self._animation_completed = False
        self._quiz_score: Optional[int] = None
        self._opened = False
        self._closed = False
        self._opened_at: Optional[datetime] = None
        self._in_operation = False
        self._last_error: Optional[LessonError] = None
        self._callbacks: list[Callable[[SessionProgress], None]] = []
        self._clock = clock
        self._last_activity = clock()

    @property
    def lesson_id(self) -> str:
        return self.lesson.lesson_id

    @property
    def introduction(self) -> str:
        return self.lesson.introduction

    @property
    def key_points(self) -> tuple[str, ...]:
        return self.lesson.key_points

    @property
    def code_example(self) -> Optional[CodeExample]:
        return self.lesson.code_example

    @property
    def animation_completed(self) -> bool:
        return self._animation_completed

    @property
    def quiz_score(self) -> Optional[int]:
        """Score of the last finished quiz attempt."""
        return self._quiz_score

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def idle_seconds(self) -> float:
        """Seconds since the learner last acted on this session."""
        return self._clock() - self._last_activity

    def touch(self) -> None:
        self._last_activity = self._clock()

    def open(self, autoplay: bool = True) -> None:
        """Begin the session.

        Args:
            autoplay: Start scene playback immediately
        """
        if self._opened:
            return
        self._opened = True
        self._opened_at = datetime.now()
        logger.info(f"Opened lesson {self.lesson_id} in session {self.session_id}")

        self._in_operation = True
        try:
            if autoplay:
                self.sequencer.start()

            # An empty quiz is finished from the start
            if self.quiz.completed and not self.quiz.questions:
                self._handle_quiz_complete(self.quiz.score)
        finally:
            self._in_operation = False

        self._notify_progress()

    # Playback
    def start(self) -> bool:
        return self._run(self.sequencer, self.sequencer.start)

    def pause(self) -> bool:
        return self._run(self.sequencer, self.sequencer.pause)

    def resume(self) -> bool:
        return self._run(self.sequencer, self.sequencer.resume)

    def reset(self) -> bool:
        return self._run(self.sequencer, self.sequencer.reset)

    def toggle_playback(self) -> bool:
        return self._run(self.sequencer, self.sequencer.toggle)

    # Quiz
    def select_answer(self, option_index: int) -> bool:
        return self._run(self.quiz, lambda: self.quiz.select_answer(option_index))

    def advance(self) -> bool:
        return self._run(self.quiz, self.quiz.advance)

    def retry(self) -> bool:
        return self._run(self.quiz, self.quiz.retry)

    def close(self) -> None:
        """Tear down playback and tell the host the session was dismissed.

        Neither engine is forced to finish; the host's close callback runs
        every time close is requested.
        """
        if not self._closed:
            self._closed = True
            self.sequencer.close()
            logger.info(f"Closed session {self.session_id} (lesson {self.lesson_id})")
        try:
            self._on_close()
        except Exception as e:
            logger.error(f"Close callback error: {e}")

    @property
    def last_error(self) -> Optional[LessonError]:
        """Most recent rejected operation."""
        return self._last_error

    def get_progress(self) -> SessionProgress:
        """Get current session progress."""
        elapsed = 0.0
        if self._opened_at:
            elapsed = (datetime.now() - self._opened_at).total_seconds()

        return SessionProgress(
            session_id=self.session_id,
            lesson_id=self.lesson_id,
            lesson_title=self.lesson.title,
            playback=self.sequencer.playback_state,
            quiz=self.quiz.quiz_state,
            total_questions=self.quiz.total_questions,
            animation_completed=self._animation_completed,
            quiz_score=self._quiz_score,
            closed=self._closed,
            elapsed_time=elapsed,
        )

    def add_callback(self, callback: Callable[[SessionProgress], None]) -> None:
        """Add progress callback."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[SessionProgress], None]) -> None:
        """Remove progress callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _run(self, engine, operation: Callable[[], bool]) -> bool:
        """Run an engine operation and report progress if it was accepted."""
        if self._closed:
            self._last_error = InvalidStateError(f"Session {self.session_id} is closed")
            logger.warning(f"Operation rejected: {self._last_error.message}")
            return False

        self.touch()
        self._in_operation = True
        try:
            accepted = operation()
        finally:
            self._in_operation = False

        if accepted:
            self._notify_progress()
        else:
            self._last_error = engine.last_error
        return accepted

    def _handle_scene_change(self, index: int) -> None:
        if self._on_scene_change:
            try:
                self._on_scene_change(index)
            except Exception as e:
                logger.error(f"Scene change callback error: {e}")
        # Timer-driven advances have no caller to report progress
        if not self._in_operation:
            self._notify_progress()

    def _handle_animation_complete(self) -> None:
        self._animation_completed = True
        if self._on_animation_complete:
            try:
                self._on_animation_complete()
            except Exception as e:
                logger.error(f"Animation completion callback error: {e}")
        if not self._in_operation:
            self._notify_progress()

    def _handle_answer(self, question_index: int, option_index: int, correct: bool) -> None:
        if self._on_answer:
            try:
                self._on_answer(question_index, option_index, correct)
            except Exception as e:
                logger.error(f"Answer callback error: {e}")

    def _handle_quiz_complete(self, score: int) -> None:
        self._quiz_score = score
        logger.info(f"Lesson {self.lesson_id} quiz complete: {score}/{self.quiz.total_questions}")
        try:
            self._on_complete(self.lesson_id, score)
        except Exception as e:
            logger.error(f"Lesson completion callback error: {e}")

    def _notify_progress(self) -> None:
        """Notify callbacks of progress update."""
        progress = self.get_progress()
        for callback in self._callbacks:
            try:
                callback(progress)
            except Exception as e:
                logger.error(f"Progress callback error: {e}")
