"""
Trivia editor.

Edits happen on an in-memory working copy of an experience's title and
questions. Nothing reaches the database until `save()` (or `publish()`)
is called; there is no autosave.
"""

import logging
from typing import Any, Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from trivia.exceptions import OutOfRange, PersistenceError, ValidationError
from trivia.models import TriviaExperience
from trivia.services.questions import (
    OPTION_COUNT,
    Question,
    blank_options,
    questions_from_dicts,
    questions_to_dicts,
)


logger = logging.getLogger(__name__)

SAVEABLE_FIELDS = ("title", "questions")

# Wire name -> Question attribute
QUESTION_FIELDS = {
    "question": "question_text",
    "options": "options",
    "correct_answer": "correct_option_index",
}


def share_url(experience: TriviaExperience) -> str:
    """Public play URL of a published experience."""
    return f"{settings.TRIVIA_APP_URL}/play/{experience.share_slug or experience.pk}"


class TriviaEditor:
    """
    Working copy of one trivia experience.

    Args:
        experience: The experience to edit. Its stored questions are
            validated when loaded.
    """

    def __init__(self, experience: TriviaExperience):
        self.experience = experience
        self.title = experience.title
        self.questions: List[Question] = questions_from_dicts(experience.questions or [])

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise OutOfRange(f"Question index must be an integer, got {index!r}")
        if not 0 <= index < len(self.questions):
            raise OutOfRange(
                f"Question index {index} is out of range (0-{len(self.questions) - 1})"
                if self.questions else f"Question index {index} is out of range (no questions)"
            )

    # ─────────────────────────────────────────────────────────────────
    # Working-copy operations
    # ─────────────────────────────────────────────────────────────────

    def add_question(self) -> Question:
        """Append an empty question whose first option is marked correct."""
        question = Question(question_text="", options=blank_options(), correct_option_index=0)
        self.questions.append(question)
        return question

    def update_question_field(self, index: int, field: str, value: Any) -> Question:
        """
        Replace one field of the question at `index`.

        Args:
            index: 0-based question position.
            field: "question", "options" or "correct_answer".
            value: New value; options must be a list of 4 strings.

        Raises:
            OutOfRange: If index is not a valid position.
            ValidationError: If the field is unknown or the value malformed.
        """
        self._check_index(index)
        attribute = QUESTION_FIELDS.get(field)
        if attribute is None:
            raise ValidationError(f"Unknown question field: {field}")

        if attribute == "options":
            if not isinstance(value, (list, tuple)):
                raise ValidationError("options must be a list")
            value = list(value)

        question = self.questions[index]
        updated = Question(
            question_text=question.question_text,
            options=list(question.options),
            correct_option_index=question.correct_option_index,
        )
        setattr(updated, attribute, value)
        updated.validate()

        self.questions[index] = updated
        return updated

    def set_correct_option(self, index: int, option_index: int) -> Question:
        """
        Mark which option of the question at `index` is correct.

        The option text may be empty; text and correctness are edited
        independently.
        """
        self._check_index(index)
        if isinstance(option_index, bool) or not isinstance(option_index, int):
            raise OutOfRange(f"Option index must be an integer, got {option_index!r}")
        if not 0 <= option_index < OPTION_COUNT:
            raise OutOfRange(f"Option index {option_index} is out of range")

        self.questions[index].correct_option_index = option_index
        return self.questions[index]

    def delete_question(self, index: int) -> Question:
        """Remove the question at `index`; later questions shift down by one."""
        self._check_index(index)
        return self.questions.pop(index)

    def replace_questions(self, items: List[dict]) -> None:
        """Replace the whole working question list from wire dicts."""
        self.questions = questions_from_dicts(items)

    # ─────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────

    def save(self, fields: Optional[Iterable[str]] = None) -> TriviaExperience:
        """
        Persist the working copy.

        Args:
            fields: Subset of ("title", "questions") to write. Defaults to
                both. Fields that are written overwrite the stored value;
                there is no merge or concurrency check.

        Returns:
            The saved experience.

        Raises:
            ValidationError: If the title is blank or a field name is unknown.
            PersistenceError: If the database write fails.
        """
        fields = list(SAVEABLE_FIELDS if fields is None else fields)
        unknown = [name for name in fields if name not in SAVEABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Cannot save field(s): {', '.join(unknown)}")

        experience = self.experience
        if "title" in fields:
            if not isinstance(self.title, str) or not self.title.strip():
                raise ValidationError("Title cannot be blank")
            experience.title = self.title
        if "questions" in fields:
            for question in self.questions:
                question.validate()
            experience.questions = questions_to_dicts(self.questions)

        experience.updated_at = timezone.now()

        try:
            with transaction.atomic():
                experience.save(update_fields=fields + ["updated_at"])
        except DatabaseError as e:
            logger.error(f"Error updating trivia {experience.pk}: {e}")
            raise PersistenceError("Failed to update trivia experience") from e

        logger.info(f"Trivia {experience.pk} saved ({', '.join(fields) or 'timestamp only'})")
        return experience

    def publish(self) -> TriviaExperience:
        """
        Make the experience publicly playable.

        The share slug is the experience's own id. Publishing again keeps the
        slug and only refreshes `updated_at`.
        """
        experience = self.experience
        if not experience.share_slug:
            experience.share_slug = str(experience.pk)
        experience.updated_at = timezone.now()

        try:
            with transaction.atomic():
                experience.save(update_fields=["share_slug", "updated_at"])
        except DatabaseError as e:
            logger.error(f"Error generating URL for trivia {experience.pk}: {e}")
            raise PersistenceError("Failed to generate shareable URL") from e

        logger.info(f"Trivia {experience.pk} published at {share_url(experience)}")
        return experience
