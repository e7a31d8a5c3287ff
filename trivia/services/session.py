"""
Quiz session state machine.

Drives one respondent's playthrough of a trivia experience:

    NOT_STARTED --start()--> IN_PROGRESS(0)
    IN_PROGRESS(i) --select_answer()--> revealing answer i
        --advance()--> IN_PROGRESS(i + 1)
        (last question) --> COMPLETED

Sessions are transient. Nothing is persisted; an abandoned session is simply
lost and a reload starts over.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from django.utils import timezone

from trivia.exceptions import OutOfRange, ValidationError
from trivia.models import AnalyticsEvent
from trivia.services.questions import OPTION_COUNT, Question


logger = logging.getLogger(__name__)

# How long the correctness of an answer stays on screen before advancing
ADVANCE_DELAY_SECONDS = 1.0


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class AnswerRecord:
    selected_option_index: Optional[int] = None
    is_correct: Optional[bool] = None

    @property
    def answered(self) -> bool:
        return self.selected_option_index is not None


def _no_emit(event_type: str, question_index: Optional[int] = None, metadata: Optional[dict] = None) -> None:
    return None


class QuizSession:
    """
    One playthrough of a question set.

    Args:
        experience_id: Identifier of the experience being played.
        questions: The ordered question set.
        emit: Callable `(event_type, question_index=None, metadata=None)`
            used for analytics; usually an AnalyticsEmitter.
    """

    def __init__(
        self,
        experience_id,
        questions: List[Question],
        emit: Callable[..., object] = _no_emit,
    ):
        self.experience_id = experience_id
        self.questions = list(questions)
        self.emit = emit
        self.state = SessionState.NOT_STARTED
        self.current_question_index = 0
        self.answers: List[AnswerRecord] = [AnswerRecord() for _ in self.questions]
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def can_start(self) -> bool:
        return self.state == SessionState.NOT_STARTED and self.total > 0

    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    @property
    def current_question(self) -> Optional[Question]:
        if self.state != SessionState.IN_PROGRESS:
            return None
        return self.questions[self.current_question_index]

    @property
    def current_answer(self) -> Optional[AnswerRecord]:
        if self.state == SessionState.NOT_STARTED or not self.answers:
            return None
        return self.answers[self.current_question_index]

    @property
    def is_revealing(self) -> bool:
        """True while the current question's answer is shown and `advance()` is pending."""
        return (
            self.state == SessionState.IN_PROGRESS
            and self.answers[self.current_question_index].answered
        )

    @property
    def score(self) -> int:
        return sum(1 for record in self.answers if record.is_correct is True)

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.score / self.total * 100)

    @property
    def progress_percentage(self) -> int:
        """Share of the quiz reached so far, counting the current question."""
        if not self.total:
            return 0
        return round((self.current_question_index + 1) / self.total * 100)

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """
        Begin the quiz at the first question and emit `start`.

        Raises:
            ValidationError: If the question set is empty or the session
                was already started.
        """
        if self.total == 0:
            raise ValidationError("This trivia experience has no questions")
        if self.state != SessionState.NOT_STARTED:
            raise ValidationError("Quiz already started")

        self.state = SessionState.IN_PROGRESS
        self.current_question_index = 0
        self.started_at = timezone.now()
        logger.debug(f"Session started for experience {self.experience_id}")
        self.emit(AnalyticsEvent.START)

    def select_answer(self, option_index: int) -> AnswerRecord:
        """
        Record the answer for the current question.

        The first answer wins: calling this again for a question that already
        has an answer returns the existing record and emits nothing.

        Args:
            option_index: 0-based option position.

        Returns:
            The AnswerRecord for the current question.

        Raises:
            ValidationError: If the session is not in progress.
            OutOfRange: If option_index is not one of the option positions.
        """
        if self.state == SessionState.NOT_STARTED:
            raise ValidationError("Quiz is not in progress")

        index = self.current_question_index
        record = self.answers[index]
        # Also covers a repeat on the final question after completion
        if record.answered:
            logger.debug(f"Ignoring repeated answer for question {index}")
            return record
        if self.state != SessionState.IN_PROGRESS:
            raise ValidationError("Quiz is not in progress")

        if isinstance(option_index, bool) or not isinstance(option_index, int):
            raise OutOfRange(f"Option index must be an integer, got {option_index!r}")
        if not 0 <= option_index < OPTION_COUNT:
            raise OutOfRange(f"Option index {option_index} is out of range")

        question = self.questions[index]
        record.selected_option_index = option_index
        record.is_correct = question.is_correct(option_index)

        self.emit(
            AnalyticsEvent.QUESTION_ANSWER,
            question_index=index,
            metadata={"selected": option_index, "correct": record.is_correct},
        )

        if index == self.total - 1:
            self._complete()
        return record

    def advance(self) -> int:
        """
        Move past the revealed answer to the next question.

        Returns:
            The new current question index.

        Raises:
            ValidationError: If the current question has not been answered.
        """
        if not self.is_revealing:
            raise ValidationError("Answer the current question before continuing")

        self.current_question_index += 1
        return self.current_question_index

    def force_complete(self) -> None:
        """End the session now. Unanswered questions count as incorrect."""
        if self.state == SessionState.COMPLETED:
            return
        if self.state == SessionState.NOT_STARTED:
            raise ValidationError("Quiz has not started")
        self._complete()

    def _complete(self) -> None:
        self.state = SessionState.COMPLETED
        self.completed_at = timezone.now()
        logger.debug(
            f"Session completed for experience {self.experience_id}: {self.score}/{self.total}"
        )
        self.emit(
            AnalyticsEvent.QUIZ_COMPLETE,
            metadata={"score": self.score, "total": self.total},
        )
