"""Shared fixtures for lesson player tests."""
import pytest

from education.content_manager import (
    Animation,
    CodeExample,
    ContentManager,
    Lesson,
    Question,
    Scene,
)


class ManualTimer:
    """Handle returned by ManualScheduler."""

    def __init__(self, when: float, callback):
        self.when = when
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Virtual clock: timers fire only when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled() and not t.fired]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = timer.when
            timer.fired = True
            timer.callback()
        self.now = target

    def advance_ms(self, ms: int) -> None:
        self.advance(ms / 1000)


def make_animation(*durations_ms: int) -> Animation:
    return Animation(
        title="Test Animation",
        description="Scenes for tests",
        scenes=tuple(
            Scene(title=f"Scene {i + 1}", description=f"Step {i + 1}", duration_ms=d)
            for i, d in enumerate(durations_ms)
        ),
    )


def make_question(correct_index: int, option_count: int = 4) -> Question:
    return Question(
        prompt=f"Which option is number {correct_index}?",
        options=tuple(f"Option {i}" for i in range(option_count)),
        correct_index=correct_index,
        explanation=f"Option {correct_index} is right.",
    )


def make_lesson(
    lesson_id: str = "test-lesson",
    durations_ms=(4000, 3000),
    correct_indices=(2, 2, 2),
    difficulty: str = "Beginner",
    category: str = "fundamentals",
    title: str = "Test Lesson",
) -> Lesson:
    return Lesson(
        lesson_id=lesson_id,
        title=title,
        description="A lesson used in tests",
        category=category,
        difficulty=difficulty,
        duration="5 min",
        topics=("testing",),
        introduction="Welcome to the test lesson.",
        key_points=("Point one", "Point two"),
        animation=make_animation(*durations_ms),
        code_example=CodeExample(title="Example", code="kind: Pod\n", explanation="A Pod."),
        questions=tuple(make_question(i) for i in correct_indices),
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def lesson():
    return make_lesson()


@pytest.fixture
def content_manager(tmp_path, lesson):
    """Content manager over an empty directory holding one in-memory lesson."""
    (tmp_path / "lessons").mkdir()
    manager = ContentManager(str(tmp_path))
    manager.load_content()
    manager.add_lesson(lesson)
    return manager
