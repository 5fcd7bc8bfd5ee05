"""FastAPI routes for the lesson catalog and lesson sessions."""
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import CORS_ALLOW_ORIGINS
from education.assessment_engine import get_score_message
from education.content_manager import Lesson
from education.errors import (
    ContentValidationError,
    LessonNotFoundError,
    SessionLimitError,
    SessionNotFoundError,
)

from .websocket import ws_manager

logger = logging.getLogger(__name__)


class PlaybackAction(str, Enum):
    """Scene playback controls."""
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"
    TOGGLE = "toggle"


# Request/Response models
class LessonSummary(BaseModel):
    """Catalog entry."""
    lesson_id: str
    title: str
    description: str
    category: str
    difficulty: str
    duration: str
    topics: list[str]
    scene_count: int
    question_count: int


class SceneModel(BaseModel):
    title: str
    description: str
    duration_ms: int


class AnimationModel(BaseModel):
    title: str
    description: str
    scenes: list[SceneModel]


class CodeExampleModel(BaseModel):
    title: str
    code: str
    explanation: str


class QuestionPrompt(BaseModel):
    """Question without its answer."""
    prompt: str
    options: list[str]


class LessonDetail(LessonSummary):
    """Full lesson for display; correct answers are withheld."""
    introduction: str
    key_points: list[str]
    animation: AnimationModel
    code_example: Optional[CodeExampleModel] = None
    questions: list[QuestionPrompt]


class LearningPhase(BaseModel):
    phase: int
    difficulty: str
    lessons: list[LessonSummary]


class OpenSessionRequest(BaseModel):
    """Open session request."""
    lesson_id: str
    autoplay: Optional[bool] = Field(None, description="Start playback now (default from config)")


class AnswerRequest(BaseModel):
    """Quiz answer request."""
    option_index: int


class ScoreMessageModel(BaseModel):
    message: str
    icon: str
    percentage: int


class QuestionView(BaseModel):
    """Current question, with feedback once answered."""
    index: int
    prompt: str
    options: list[str]
    selected_index: Optional[int] = None
    correct_index: Optional[int] = None
    is_correct: Optional[bool] = None
    explanation: Optional[str] = None


class SessionResponse(BaseModel):
    """Session state."""
    session_id: str
    lesson_id: str
    lesson_title: str
    playback: dict
    quiz: dict
    total_questions: int
    animation_completed: bool
    quiz_score: Optional[int] = None
    closed: bool
    elapsed_time: float
    current_question: Optional[QuestionView] = None
    score_message: Optional[ScoreMessageModel] = None


class OperationResponse(BaseModel):
    """Result of a session operation; rejected operations change nothing."""
    success: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    session: SessionResponse


class LessonResultModel(BaseModel):
    lesson_id: str
    total_questions: int
    last_score: int
    best_score: int
    attempts: int
    completed_at: str


# Global app state (set by main.py)
_app_state = {
    "content_manager": None,
    "session_manager": None,
}


def set_app_state(**kwargs) -> None:
    """Set application state components."""
    _app_state.update(kwargs)


def get_app_state():
    """Get application state."""
    return _app_state


def _summary(lesson: Lesson) -> LessonSummary:
    return LessonSummary(
        lesson_id=lesson.lesson_id,
        title=lesson.title,
        description=lesson.description,
        category=lesson.category,
        difficulty=lesson.difficulty,
        duration=lesson.duration,
        topics=list(lesson.topics),
        scene_count=len(lesson.animation.scenes),
        question_count=len(lesson.questions),
    )


def _detail(lesson: Lesson) -> LessonDetail:
    example = lesson.code_example
    return LessonDetail(
        **_summary(lesson).model_dump(),
        introduction=lesson.introduction,
        key_points=list(lesson.key_points),
        animation=AnimationModel(
            title=lesson.animation.title,
            description=lesson.animation.description,
            scenes=[
                SceneModel(title=s.title, description=s.description, duration_ms=s.duration_ms)
                for s in lesson.animation.scenes
            ],
        ),
        code_example=CodeExampleModel(
            title=example.title,
            code=example.code,
            explanation=example.explanation,
        ) if example else None,
        questions=[QuestionPrompt(prompt=q.prompt, options=list(q.options)) for q in lesson.questions],
    )


def _session_response(controller) -> SessionResponse:
    progress = controller.get_progress()
    quiz = controller.quiz

    current = None
    question = quiz.current_question
    if question is not None:
        current = QuestionView(
            index=quiz.current_question_index,
            prompt=question.prompt,
            options=list(question.options),
        )
        # Feedback is only revealed once the answer is locked in
        if quiz.explanation_visible:
            current.selected_index = quiz.selected_answer
            current.correct_index = question.correct_index
            current.is_correct = quiz.is_current_correct
            current.explanation = question.explanation

    score_message = None
    if quiz.completed:
        msg = get_score_message(quiz.score, quiz.total_questions)
        score_message = ScoreMessageModel(message=msg.message, icon=msg.icon, percentage=msg.percentage)

    return SessionResponse(
        **progress.to_dict(),
        current_question=current,
        score_message=score_message,
    )


def _operation_response(controller, success: bool) -> OperationResponse:
    error = None if success else controller.last_error
    return OperationResponse(
        success=success,
        reason=error.code if error else None,
        message=error.message if error else None,
        session=_session_response(controller),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("API server starting up")
    yield
    session_mgr = _app_state.get("session_manager")
    if session_mgr:
        session_mgr.close_all()
    logger.info("API server shutting down")


def create_app() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        title="Lesson Player API",
        description="Lesson catalog, scene playback and quizzes",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def content_manager():
        content_mgr = _app_state.get("content_manager")
        if not content_mgr:
            raise HTTPException(status_code=503, detail="Content manager not available")
        return content_mgr

    def session_manager():
        session_mgr = _app_state.get("session_manager")
        if not session_mgr:
            raise HTTPException(status_code=503, detail="Session manager not available")
        return session_mgr

    def find_session(session_id: str):
        try:
            return session_manager().get_session(session_id)
        except SessionNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)

    # Health check
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    # Lesson catalog
    @app.get("/api/lessons", response_model=list[LessonSummary])
    async def list_lessons(
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        q: Optional[str] = None,
    ):
        """List lessons, optionally filtered or searched."""
        content_mgr = content_manager()
        if q:
            lessons = content_mgr.search_lessons(q)
            if category:
                lessons = [l for l in lessons if l.category == category]
            if difficulty:
                lessons = [l for l in lessons if l.difficulty == difficulty]
        else:
            lessons = content_mgr.list_lessons(category=category, difficulty=difficulty)
        return [_summary(l) for l in lessons]

    @app.get("/api/lessons/phases", response_model=list[LearningPhase])
    async def learning_phases():
        """Lessons grouped by difficulty."""
        return [
            LearningPhase(
                phase=phase["phase"],
                difficulty=phase["difficulty"],
                lessons=[_summary(l) for l in phase["lessons"]],
            )
            for phase in content_manager().get_learning_phases()
        ]

    @app.get("/api/lessons/{lesson_id}", response_model=LessonDetail)
    async def get_lesson(lesson_id: str):
        """Get lesson content."""
        lesson = content_manager().get_lesson(lesson_id)
        if not lesson:
            raise HTTPException(status_code=404, detail=f"Lesson not found: {lesson_id}")
        return _detail(lesson)

    # Sessions
    @app.post("/api/sessions", response_model=SessionResponse, status_code=201)
    async def open_session(request: OpenSessionRequest):
        """Open a lesson session."""
        try:
            controller = session_manager().open_session(request.lesson_id, autoplay=request.autoplay)
        except LessonNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        except ContentValidationError as e:
            logger.error(f"Cannot open lesson {request.lesson_id}: {e.message}")
            raise HTTPException(status_code=422, detail=e.message)
        except SessionLimitError as e:
            raise HTTPException(status_code=429, detail=e.message)
        return _session_response(controller)

    @app.get("/api/sessions", response_model=list[SessionResponse])
    async def list_sessions():
        """List open sessions."""
        session_mgr = session_manager()
        return [
            _session_response(session_mgr.get_session(p.session_id))
            for p in session_mgr.list_sessions()
        ]

    @app.get("/api/sessions/{session_id}", response_model=SessionResponse)
    async def get_session(session_id: str):
        """Get session state."""
        return _session_response(find_session(session_id))

    @app.delete("/api/sessions/{session_id}")
    async def close_session(session_id: str):
        """Close a session; playback and quiz need not be finished."""
        controller = find_session(session_id)
        controller.close()
        return {"success": True, "message": "Session closed", "session_id": session_id}

    @app.post(
        "/api/sessions/{session_id}/playback/{action}",
        response_model=OperationResponse,
    )
    async def playback(
        session_id: str,
        action: PlaybackAction,
    ):
        """Control scene playback."""
        controller = find_session(session_id)
        operations = {
            PlaybackAction.START: controller.start,
            PlaybackAction.PAUSE: controller.pause,
            PlaybackAction.RESUME: controller.resume,
            PlaybackAction.RESET: controller.reset,
            PlaybackAction.TOGGLE: controller.toggle_playback,
        }
        return _operation_response(controller, operations[action]())

    @app.post("/api/sessions/{session_id}/quiz/answer", response_model=OperationResponse)
    async def answer(session_id: str, request: AnswerRequest):
        """Lock in an answer for the current question."""
        controller = find_session(session_id)
        return _operation_response(controller, controller.select_answer(request.option_index))

    @app.post("/api/sessions/{session_id}/quiz/advance", response_model=OperationResponse)
    async def advance(session_id: str):
        """Move to the next question or finish the quiz."""
        controller = find_session(session_id)
        return _operation_response(controller, controller.advance())

    @app.post("/api/sessions/{session_id}/quiz/retry", response_model=OperationResponse)
    async def retry(session_id: str):
        """Restart a finished quiz."""
        controller = find_session(session_id)
        return _operation_response(controller, controller.retry())

    # Results
    @app.get("/api/results", response_model=list[LessonResultModel])
    async def list_results():
        """Quiz results recorded since the server started."""
        return [LessonResultModel(**r.to_dict()) for r in session_manager().list_results()]

    # Session event stream
    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await ws_manager.handle_connection(websocket)

    return app
