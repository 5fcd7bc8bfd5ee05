"""Multiple-choice quiz flow for lessons."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from config import SCORE_MESSAGE_THRESHOLDS

from .content_manager import Question, validate_questions
from .errors import (
    EmptyContentError,
    InvalidArgumentError,
    InvalidStateError,
    LessonError,
)

logger = logging.getLogger(__name__)


class QuestionState(Enum):
    """State of the current question."""
    UNANSWERED = "unanswered"
    ANSWERED = "answered"
    FINISHED = "finished"


@dataclass
class QuizState:
    """Snapshot of quiz progress."""
    current_question_index: int
    answers: dict[int, int] = field(default_factory=dict)
    explanation_visible: bool = False
    score: int = 0
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "current_question_index": self.current_question_index,
            # JSON object keys are strings
            "answers": {str(k): v for k, v in self.answers.items()},
            "explanation_visible": self.explanation_visible,
            "score": self.score,
            "completed": self.completed,
        }


@dataclass(frozen=True)
class ScoreMessage:
    """Encouragement shown on the results screen."""
    message: str
    icon: str
    percentage: int


def get_score_message(score: int, total: int) -> ScoreMessage:
    """Map a final score to its encouragement message.

    Args:
        score: Correct answers
        total: Number of questions (0 counts as 0%)

    Returns:
        ScoreMessage for the first threshold the percentage reaches
    """
    percentage = (score / total) * 100 if total else 0.0
    for minimum, icon, message in SCORE_MESSAGE_THRESHOLDS:
        if percentage >= minimum:
            return ScoreMessage(message=message, icon=icon, percentage=round(percentage))
    _, icon, message = SCORE_MESSAGE_THRESHOLDS[-1]
    return ScoreMessage(message=message, icon=icon, percentage=round(percentage))


class AssessmentEngine:
    """Runs a quiz one question at a time.

    Each question accepts exactly one answer. The answer is locked, its
    explanation is revealed, and only then may the quiz advance. Misuse is
    rejected as a no-op: the method returns False and the reason is kept in
    ``last_error``.
    """

    def __init__(
        self,
        questions: tuple[Question, ...],
        on_complete: Optional[Callable[[int], None]] = None,
        on_answer: Optional[Callable[[int, int, bool], None]] = None,
    ):
        """
        Args:
            questions: Questions in the order they are asked
            on_complete: Called with the final score when the quiz finishes
            on_answer: Called with (question index, option index, correct)

        Raises:
            ContentValidationError: If any question is malformed
        """
        validate_questions(tuple(questions))

        self.questions = tuple(questions)
        self._on_complete = on_complete
        self._on_answer = on_answer
        self.last_error: Optional[LessonError] = None
        self._reset_state()

        if not self.questions:
            self._state = QuestionState.FINISHED
            self._completed = True
            self.last_error = EmptyContentError("Quiz has no questions")
            logger.warning("Quiz has no questions, treating as finished")

    def _reset_state(self) -> None:
        self._current_index = 0
        self._answers: dict[int, int] = {}
        self._explanation_visible = False
        self._score = 0
        self._completed = False
        self._state = QuestionState.UNANSWERED

    @property
    def state(self) -> QuestionState:
        return self._state

    @property
    def current_question_index(self) -> int:
        return self._current_index

    @property
    def current_question(self) -> Optional[Question]:
        """Question being asked, None once finished."""
        if self._state == QuestionState.FINISHED:
            return None
        return self.questions[self._current_index]

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answers(self) -> dict[int, int]:
        """Answered question index -> selected option index."""
        return dict(self._answers)

    @property
    def explanation_visible(self) -> bool:
        return self._explanation_visible

    @property
    def score(self) -> int:
        return self._score

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def percentage(self) -> int:
        """Score as a rounded percentage."""
        if not self.questions:
            return 0
        return round(self._score / len(self.questions) * 100)

    @property
    def selected_answer(self) -> Optional[int]:
        """Option chosen for the current question, if any."""
        return self._answers.get(self._current_index)

    @property
    def is_current_correct(self) -> Optional[bool]:
        """Whether the locked answer is right; None while unanswered."""
        question = self.current_question
        selected = self.selected_answer
        if question is None or selected is None:
            return None
        return selected == question.correct_index

    @property
    def quiz_state(self) -> QuizState:
        """Get a snapshot of the quiz."""
        return QuizState(
            current_question_index=self._current_index,
            answers=dict(self._answers),
            explanation_visible=self._explanation_visible,
            score=self._score,
            completed=self._completed,
        )

    def score_message(self) -> ScoreMessage:
        """Encouragement for the current score."""
        return get_score_message(self._score, len(self.questions))

    def select_answer(self, option_index: int) -> bool:
        """Lock in an answer for the current question.

        Args:
            option_index: Index into the current question's options

        Returns:
            True if the answer was recorded
        """
        if self._state == QuestionState.FINISHED:
            return self._reject(InvalidStateError("Quiz is finished"))
        if self._state == QuestionState.ANSWERED:
            return self._reject(
                InvalidStateError(f"Question {self._current_index} is already answered")
            )

        question = self.questions[self._current_index]
        if isinstance(option_index, bool) or not isinstance(option_index, int):
            return self._reject(
                InvalidArgumentError(f"Option index must be an integer, got {option_index!r}")
            )
        if not 0 <= option_index < len(question.options):
            return self._reject(
                InvalidArgumentError(
                    f"Option {option_index} outside 0..{len(question.options) - 1}"
                )
            )

        self._answers[self._current_index] = option_index
        self._state = QuestionState.ANSWERED
        self._explanation_visible = True

        correct = option_index == question.correct_index
        if correct:
            self._score += 1

        logger.debug(
            f"Question {self._current_index}: option {option_index} "
            f"({'correct' if correct else 'incorrect'}), score {self._score}"
        )

        if self._on_answer:
            try:
                self._on_answer(self._current_index, option_index, correct)
            except Exception as e:
                logger.error(f"Answer callback error: {e}")
        return True

    def advance(self) -> bool:
        """Move past the current question once its explanation is shown.

        Returns:
            True if moved to the next question or finished the quiz
        """
        if self._state != QuestionState.ANSWERED:
            return self._reject(
                InvalidStateError(f"Cannot advance while {self._state.value}")
            )

        if self._current_index < len(self.questions) - 1:
            self._current_index += 1
            self._state = QuestionState.UNANSWERED
            self._explanation_visible = False
            return True

        self._state = QuestionState.FINISHED
        self._completed = True
        logger.info(f"Quiz finished: {self._score}/{len(self.questions)}")

        if self._on_complete:
            try:
                self._on_complete(self._score)
            except Exception as e:
                logger.error(f"Quiz completion callback error: {e}")
        return True

    def retry(self) -> bool:
        """Start the quiz over after it has finished.

        Returns:
            True if the quiz was reset
        """
        if self._state != QuestionState.FINISHED:
            return self._reject(
                InvalidStateError(f"Cannot retry while {self._state.value}")
            )
        if not self.questions:
            return self._reject(EmptyContentError("Quiz has no questions"))

        self._reset_state()
        logger.info("Quiz restarted")
        return True

    def _reject(self, error: LessonError) -> bool:
        self.last_error = error
        logger.warning(f"Quiz operation rejected: {error.message}")
        return False
