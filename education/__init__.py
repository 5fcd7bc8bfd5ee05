"""Education module for lesson playback and quizzes."""
from .assessment_engine import AssessmentEngine, get_score_message
from .content_manager import ContentManager, Lesson
from .lesson_session import LessonSessionController
from .scene_sequencer import SceneSequencer
from .session_manager import SessionManager

__all__ = [
    "AssessmentEngine",
    "ContentManager",
    "Lesson",
    "LessonSessionController",
    "SceneSequencer",
    "SessionManager",
    "get_score_message",
]
