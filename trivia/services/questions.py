"""
The trivia question record shared by the editor, the converter and the player.

On the wire and in the database a question is a plain dict:

    {"question": str, "options": [str, str, str, str], "correct_answer": int}
"""

from dataclasses import dataclass, field
from typing import Any, List

from trivia.exceptions import ValidationError


OPTION_COUNT = 4


def blank_options() -> List[str]:
    return [""] * OPTION_COUNT


@dataclass
class Question:
    """One multiple-choice question with exactly four options."""

    question_text: str = ""
    options: List[str] = field(default_factory=blank_options)
    correct_option_index: int = 0

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_option_index

    def validate(self) -> None:
        """
        Check the four-options and index-in-range invariants.

        Raises:
            ValidationError: If either invariant is broken.
        """
        if not isinstance(self.question_text, str):
            raise ValidationError("Question text must be a string")
        if not isinstance(self.options, list) or len(self.options) != OPTION_COUNT:
            raise ValidationError(f"A question needs exactly {OPTION_COUNT} options")
        if not all(isinstance(option, str) for option in self.options):
            raise ValidationError("Options must be strings")
        if isinstance(self.correct_option_index, bool) or not isinstance(self.correct_option_index, int):
            raise ValidationError("correct_answer must be an integer")
        if not 0 <= self.correct_option_index < OPTION_COUNT:
            raise ValidationError(
                f"correct_answer must be between 0 and {OPTION_COUNT - 1}"
            )

    def to_dict(self) -> dict:
        return {
            "question": self.question_text,
            "options": list(self.options),
            "correct_answer": self.correct_option_index,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Question":
        """
        Build a Question from its stored dict form and validate it.

        Raises:
            ValidationError: If `data` is not a well-formed question.
        """
        if not isinstance(data, dict):
            raise ValidationError("Each question must be an object")
        question = cls(
            question_text=data.get("question", ""),
            options=data.get("options", blank_options()),
            correct_option_index=data.get("correct_answer", 0),
        )
        question.validate()
        # Never share the caller's list
        question.options = list(question.options)
        return question


def questions_from_dicts(items: Any) -> List[Question]:
    if not isinstance(items, list):
        raise ValidationError("questions must be a list")
    return [Question.from_dict(item) for item in items]


def questions_to_dicts(questions: List[Question]) -> List[dict]:
    return [question.to_dict() for question in questions]
