"""Lesson content model and catalog."""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from config import DEFAULT_SCENE_DURATION_MS, DIFFICULTY_LEVELS

from .errors import ContentValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scene:
    """Single timed step of an animation."""
    title: str
    description: str
    duration_ms: int = DEFAULT_SCENE_DURATION_MS


@dataclass(frozen=True)
class Animation:
    """Ordered scenes played by the scene sequencer."""
    title: str
    description: str
    scenes: tuple[Scene, ...] = ()


@dataclass(frozen=True)
class Question:
    """Multiple-choice question."""
    prompt: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str = ""


@dataclass(frozen=True)
class CodeExample:
    """Static code sample shown alongside a lesson (e.g. a manifest)."""
    title: str
    code: str
    explanation: str = ""


@dataclass(frozen=True)
class Lesson:
    """Educational lesson content."""
    lesson_id: str
    title: str
    description: str
    category: str
    difficulty: str  # One of DIFFICULTY_LEVELS
    duration: str = ""  # Display string, e.g. "15 min"
    topics: tuple[str, ...] = ()
    introduction: str = ""
    key_points: tuple[str, ...] = ()
    animation: Animation = field(default_factory=lambda: Animation("", ""))
    code_example: Optional[CodeExample] = None
    questions: tuple[Question, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Lesson":
        """Create Lesson from dictionary.

        Raises:
            ContentValidationError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ContentValidationError(
                f"Lesson data must be an object, got {type(data).__name__}"
            )

        try:
            animation_data = _section(data, "animation") or {}
            scenes = tuple(
                Scene(
                    title=scene["title"],
                    description=scene.get("description", ""),
                    duration_ms=scene.get("duration_ms", DEFAULT_SCENE_DURATION_MS),
                )
                for scene in animation_data.get("scenes", [])
            )
            animation = Animation(
                title=animation_data.get("title", ""),
                description=animation_data.get("description", ""),
                scenes=scenes,
            )

            questions = tuple(
                Question(
                    prompt=q["prompt"],
                    options=tuple(q["options"]),
                    correct_index=q["correct_index"],
                    explanation=q.get("explanation", ""),
                )
                for q in data.get("questions", [])
            )

            example_data = _section(data, "code_example")
            code_example = None
            if example_data:
                code_example = CodeExample(
                    title=example_data.get("title", ""),
                    code=example_data["code"],
                    explanation=example_data.get("explanation", ""),
                )

            lesson = cls(
                lesson_id=str(data["lesson_id"]),
                title=data["title"],
                description=data.get("description", ""),
                category=data.get("category", "general"),
                difficulty=data.get("difficulty", DIFFICULTY_LEVELS[0]),
                duration=data.get("duration", ""),
                topics=tuple(data.get("topics", [])),
                introduction=data.get("introduction", ""),
                key_points=tuple(data.get("key_points", [])),
                animation=animation,
                code_example=code_example,
                questions=questions,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ContentValidationError(f"Malformed lesson data: {e!r}") from e

        validate_lesson(lesson)
        return lesson

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "lesson_id": self.lesson_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "difficulty": self.difficulty,
            "duration": self.duration,
            "topics": list(self.topics),
            "introduction": self.introduction,
            "key_points": list(self.key_points),
            "animation": {
                "title": self.animation.title,
                "description": self.animation.description,
                "scenes": [
                    {
                        "title": scene.title,
                        "description": scene.description,
                        "duration_ms": scene.duration_ms,
                    }
                    for scene in self.animation.scenes
                ],
            },
            "code_example": {
                "title": self.code_example.title,
                "code": self.code_example.code,
                "explanation": self.code_example.explanation,
            } if self.code_example else None,
            "questions": [
                {
                    "prompt": q.prompt,
                    "options": list(q.options),
                    "correct_index": q.correct_index,
                    "explanation": q.explanation,
                }
                for q in self.questions
            ],
        }


def _section(data: dict, key: str) -> Optional[dict]:
    """Return an optional nested object of lesson data."""
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise ContentValidationError(f"\"{key}\" must be an object, got {type(value).__name__}")
    return value


def validate_scenes(scenes: tuple[Scene, ...]) -> None:
    """Check every scene has a positive integer duration.

    Raises:
        ContentValidationError: On the first bad scene
    """
    for i, scene in enumerate(scenes):
        if isinstance(scene.duration_ms, bool) or not isinstance(scene.duration_ms, int):
            raise ContentValidationError(f"Scene {i} duration must be an integer")
        if scene.duration_ms <= 0:
            raise ContentValidationError(
                f"Scene {i} duration must be positive, got {scene.duration_ms}"
            )


def validate_questions(questions: tuple[Question, ...]) -> None:
    """Check options and correct answers of every question.

    Raises:
        ContentValidationError: On the first bad question
    """
    for i, question in enumerate(questions):
        if len(question.options) < 2:
            raise ContentValidationError(f"Question {i} needs at least 2 options")
        if isinstance(question.correct_index, bool) or not isinstance(question.correct_index, int):
            raise ContentValidationError(f"Question {i} correct_index must be an integer")
        if not 0 <= question.correct_index < len(question.options):
            raise ContentValidationError(
                f"Question {i} correct_index {question.correct_index} "
                f"outside 0..{len(question.options) - 1}"
            )


def validate_lesson(lesson: Lesson) -> None:
    """Validate all playable content of a lesson."""
    if lesson.difficulty not in DIFFICULTY_LEVELS:
        raise ContentValidationError(
            f"Unknown difficulty {lesson.difficulty!r} for lesson {lesson.lesson_id}"
        )
    validate_scenes(lesson.animation.scenes)
    validate_questions(lesson.questions)


class ContentManager:
    """Manages lesson content and the lesson catalog."""

    def __init__(self, content_dir: Optional[str] = None):
        self.content_dir = Path(content_dir) if content_dir else Path(__file__).parent / "assets"
        self._lessons: dict[str, Lesson] = {}
        self._loaded = False

    def load_content(self) -> bool:
        """Load all content from content directory.

        Returns:
            True if content loaded successfully
        """
        try:
            lessons_dir = self.content_dir / "lessons"
            if not lessons_dir.exists():
                logger.warning(f"Lessons directory not found: {lessons_dir}")
                lessons_dir.mkdir(parents=True, exist_ok=True)
                self._create_sample_lessons(lessons_dir)

            for lesson_file in sorted(lessons_dir.glob("*.json")):
                try:
                    with open(lesson_file, "r", encoding="utf-8") as f:
                        data = json.load(f)
                    lesson = Lesson.from_dict(data)
                    self._lessons[lesson.lesson_id] = lesson
                    logger.debug(f"Loaded lesson: {lesson.title}")
                except (OSError, UnicodeDecodeError, json.JSONDecodeError, ContentValidationError) as e:
                    logger.error(f"Failed to load lesson {lesson_file}: {e}")

            self._loaded = True
            logger.info(f"Loaded {len(self._lessons)} lessons")
            return True

        except OSError as e:
            logger.error(f"Failed to load content: {e}")
            return False

    def _create_sample_lessons(self, lessons_dir: Path) -> None:
        """Write the bundled sample lessons."""
        from .sample_lessons import SAMPLE_LESSONS

        for lesson_data in SAMPLE_LESSONS:
            lesson_file = lessons_dir / f"{lesson_data['lesson_id']}.json"
            with open(lesson_file, "w", encoding="utf-8") as f:
                json.dump(lesson_data, f, indent=2)
            logger.info(f"Created sample lesson: {lesson_data['title']}")

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load_content()

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        """Get lesson by ID."""
        self._ensure_loaded()
        return self._lessons.get(lesson_id)

    def list_lessons(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> list[Lesson]:
        """List available lessons.

        Args:
            category: Filter by category
            difficulty: Filter by difficulty level

        Returns:
            List of matching lessons
        """
        self._ensure_loaded()

        lessons = list(self._lessons.values())

        if category:
            lessons = [l for l in lessons if l.category == category]

        if difficulty:
            lessons = [l for l in lessons if l.difficulty == difficulty]

        return lessons

    def search_lessons(self, query: str) -> list[Lesson]:
        """Case-insensitive search over title, description and category.

        An empty query matches nothing.
        """
        self._ensure_loaded()
        if not query:
            return []

        needle = query.lower()
        return [
            l for l in self._lessons.values()
            if needle in l.title.lower()
            or needle in l.description.lower()
            or needle in l.category.lower()
        ]

    def get_learning_phases(self) -> list[dict]:
        """Group lessons by difficulty, easiest first.

        Returns:
            One entry per difficulty level: {"phase", "difficulty", "lessons"}
        """
        self._ensure_loaded()
        return [
            {
                "phase": number,
                "difficulty": level,
                "lessons": self.list_lessons(difficulty=level),
            }
            for number, level in enumerate(DIFFICULTY_LEVELS, start=1)
        ]

    def get_categories(self) -> list[str]:
        """Get list of available categories."""
        self._ensure_loaded()
        return sorted(set(l.category for l in self._lessons.values()))

    def get_difficulties(self) -> list[str]:
        """Get difficulty levels that have at least one lesson."""
        self._ensure_loaded()
        present = set(l.difficulty for l in self._lessons.values())
        return [level for level in DIFFICULTY_LEVELS if level in present]

    def add_lesson(self, lesson: Lesson) -> None:
        """Register a lesson in memory (not written to disk)."""
        validate_lesson(lesson)
        self._lessons[lesson.lesson_id] = lesson

    @property
    def is_loaded(self) -> bool:
        """Check if content is loaded."""
        return self._loaded

    @property
    def lesson_count(self) -> int:
        """Get number of loaded lessons."""
        return len(self._lessons)
