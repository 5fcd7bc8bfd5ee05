"""Open lesson sessions and in-memory completion results."""
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from config import AUTOPLAY_ON_OPEN, MAX_OPEN_SESSIONS, SESSION_IDLE_TIMEOUT_S

from .content_manager import ContentManager
from .errors import LessonNotFoundError, SessionLimitError, SessionNotFoundError
from .lesson_session import LessonSessionController, SessionProgress
from .timers import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, dict], None]


@dataclass
class LessonResult:
    """Quiz results for one lesson, kept for the life of the process."""
    lesson_id: str
    total_questions: int
    last_score: int
    best_score: int
    attempts: int
    completed_at: str

    def to_dict(self) -> dict:
        return {
            "lesson_id": self.lesson_id,
            "total_questions": self.total_questions,
            "last_score": self.last_score,
            "best_score": self.best_score,
            "attempts": self.attempts,
            "completed_at": self.completed_at,
        }


class SessionManager:
    """Hosts lesson sessions.

    Every session owns its own sequencer and quiz; nothing is shared
    between sessions. Listeners receive ``(event_type, payload)`` for
    scene changes, answers, completions and closes.

    Sessions the learner has not acted on for ``idle_timeout_s`` seconds
    are closed before a new session is opened.
    """

    def __init__(
        self,
        content_manager: ContentManager,
        scheduler: Optional[Scheduler] = None,
        max_sessions: int = MAX_OPEN_SESSIONS,
        autoplay: bool = AUTOPLAY_ON_OPEN,
        idle_timeout_s: Optional[float] = SESSION_IDLE_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.content_manager = content_manager
        self.scheduler = scheduler or AsyncioScheduler()
        self.max_sessions = max_sessions
        self.autoplay = autoplay
        self.idle_timeout_s = idle_timeout_s
        self._clock = clock

        self._sessions: dict[str, LessonSessionController] = {}
        self._results: dict[str, LessonResult] = {}
        self._listeners: list[SessionListener] = []

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def open_session(
        self,
        lesson_id: str,
        autoplay: Optional[bool] = None,
    ) -> LessonSessionController:
        """Open a new session for a lesson.

        Args:
            lesson_id: Lesson to open
            autoplay: Start scene playback now (None uses the manager default)

        Returns:
            The new session controller

        Raises:
            LessonNotFoundError: Unknown lesson
            SessionLimitError: Too many open sessions
            ContentValidationError: Lesson content is malformed
        """
        lesson = self.content_manager.get_lesson(lesson_id)
        if not lesson:
            raise LessonNotFoundError(f"Lesson not found: {lesson_id}")

        self.expire_idle_sessions()
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitError(f"Session limit reached ({self.max_sessions})")

        session_id = uuid.uuid4().hex

        controller = LessonSessionController(
            lesson,
            session_id,
            on_complete=self._handle_complete,
            on_close=lambda: self._handle_close(session_id),
            on_scene_change=lambda index: self._handle_scene_change(session_id, index),
            on_answer=lambda q, o, c: self._handle_answer(session_id, q, o, c),
            on_animation_complete=lambda: self._emit(
                "playback_completed", {"session_id": session_id, "lesson_id": lesson_id}
            ),
            scheduler=self.scheduler,
            clock=self._clock,
        )
        controller.add_callback(self._handle_progress)
        self._sessions[session_id] = controller

        controller.open(self.autoplay if autoplay is None else autoplay)
        return controller

    def get_session(self, session_id: str) -> LessonSessionController:
        """Look up an open session.

        Raises:
            SessionNotFoundError: No open session with that ID
        """
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        controller.touch()
        return controller

    def list_sessions(self) -> list[SessionProgress]:
        """Progress of every open session."""
        return [c.get_progress() for c in self._sessions.values()]

    def close_session(self, session_id: str) -> None:
        """Close an open session, cancelling its scene timer.

        Raises:
            SessionNotFoundError: No open session with that ID
        """
        self.get_session(session_id).close()

    def expire_idle_sessions(self) -> int:
        """Close sessions idle longer than the timeout.

        Returns:
            Number of sessions closed
        """
        if not self.idle_timeout_s:
            return 0

        expired = [c for c in self._sessions.values() if c.idle_seconds >= self.idle_timeout_s]
        for controller in expired:
            logger.info(f"Closing idle session {controller.session_id}")
            controller.close()
        return len(expired)

    def close_all(self) -> None:
        """Close every open session."""
        for controller in list(self._sessions.values()):
            controller.close()

    def get_result(self, lesson_id: str) -> Optional[LessonResult]:
        return self._results.get(lesson_id)

    def list_results(self) -> list[LessonResult]:
        return list(self._results.values())

    def add_listener(self, listener: SessionListener) -> None:
        """Add session event listener."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        """Remove session event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _handle_complete(self, lesson_id: str, score: int) -> None:
        lesson = self.content_manager.get_lesson(lesson_id)
        total = len(lesson.questions) if lesson else 0
        now = datetime.now().isoformat()

        result = self._results.get(lesson_id)
        if result:
            result.last_score = score
            result.best_score = max(result.best_score, score)
            result.attempts += 1
            result.completed_at = now
        else:
            result = LessonResult(
                lesson_id=lesson_id,
                total_questions=total,
                last_score=score,
                best_score=score,
                attempts=1,
                completed_at=now,
            )
            self._results[lesson_id] = result

        logger.info(f"Lesson completed: {lesson_id} ({score}/{total})")
        self._emit("lesson_completed", {"lesson_id": lesson_id, "score": score, "total": total})

    def _handle_close(self, session_id: str) -> None:
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            return
        controller.remove_callback(self._handle_progress)
        logger.info(f"Session closed: {session_id}, {self.session_count} open")
        self._emit("session_closed", {"session_id": session_id, "lesson_id": controller.lesson_id})

    def _handle_scene_change(self, session_id: str, index: int) -> None:
        self._emit("scene_changed", {"session_id": session_id, "index": index})

    def _handle_answer(self, session_id: str, question_index: int, option_index: int, correct: bool) -> None:
        self._emit("answer_submitted", {
            "session_id": session_id,
            "question_index": question_index,
            "option_index": option_index,
            "correct": correct,
        })

    def _handle_progress(self, progress: SessionProgress) -> None:
        self._emit("progress_update", progress.to_dict())

    def _emit(self, event_type: str, payload: dict) -> None:
        for listener in self._listeners:
            try:
                listener(event_type, payload)
            except Exception as e:
                logger.error(f"Session listener error: {e}")
