"""
Document-to-trivia conversion with Google Gemini.

    Document text → Prompt → Gemini → Raw text → parse_question_set → Questions

The model is treated as an untrusted collaborator. Whatever it returns goes
through `parse_question_set`, which either yields a complete question set
or a failure; a partial set is never accepted.

Coercion policy applied to each returned item:
    - missing/empty question text  → "Question N" (1-based position)
    - non-list options             → [] and then padded with "" to 4
    - more than 4 options          → first 4 kept
    - non-numeric correct_answer   → int() of its text, 0 if that fails
    - correct_answer outside 0..3  → 0
"""

import functools
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import google.generativeai as genai
from django.conf import settings
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from trivia.exceptions import ConversionFailed
from trivia.services.extraction import clean_text
from trivia.services.questions import OPTION_COUNT, Question


logger = logging.getLogger(__name__)

MIN_QUESTIONS = 10
MAX_QUESTIONS = 20

LEADING_INT_RE = re.compile(r"\s*[-+]?\d+")

PROMPT_TEMPLATE = """Convert the following document into a quiz/trivia format. Extract key information and create {min_questions}-{max_questions} multiple choice questions. Each question should have:
- A clear, concise question
- Exactly {option_count} answer options
- The correct answer index (0-{last_index})

Format your response as a valid JSON array of objects with this exact structure:
[
  {{
    "question": "Question text here",
    "options": ["Option 1", "Option 2", "Option 3", "Option 4"],
    "correct_answer": 0
  }}
]

Document content:
{document_text}

Return only the JSON array, no additional text or markdown formatting."""

# Academic and business documents trip the default filters far too often
SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}


@dataclass
class ConversionResult:
    """Tagged outcome of parsing a model response."""

    ok: bool
    questions: List[Question] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, questions: List[Question]) -> "ConversionResult":
        return cls(ok=True, questions=questions)

    @classmethod
    def failure(cls, error: str) -> "ConversionResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> List[Question]:
        """Return the questions or raise ConversionFailed."""
        if not self.ok:
            raise ConversionFailed(f"Failed to convert document to trivia: {self.error}")
        return self.questions


@functools.lru_cache(maxsize=None)
def get_generative_model(model_name: Optional[str] = None):
    """
    Create the Gemini model handle once per model name.

    Args:
        model_name: Gemini model to use. Defaults to settings.TRIVIA_MODEL_NAME.

    Returns:
        A configured `genai.GenerativeModel`.

    Raises:
        ConversionFailed: If no API key is configured.
    """
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise ConversionFailed(
            "Missing Gemini API key (GEMINI_API_KEY, GOOGLE_API_KEY or "
            "GOOGLE_GENERATIVE_AI_API_KEY)"
        )

    genai.configure(api_key=api_key)
    name = model_name or settings.TRIVIA_MODEL_NAME
    logger.info(f"Gemini model configured: {name}")

    return genai.GenerativeModel(
        model_name=name,
        generation_config=genai.GenerationConfig(
            temperature=0.3,
            top_p=0.95,
            max_output_tokens=8192,
            response_mime_type="application/json",
        ),
        safety_settings=SAFETY_SETTINGS,
    )


def strip_code_fences(response_text: str) -> str:
    """
    Remove Markdown code fences the model sometimes wraps JSON in.

    Args:
        response_text: Raw model output.

    Returns:
        Text ready for JSON parsing.
    """
    if not response_text:
        return ""
    text = re.sub(r"```(?:json)?\s*", "", response_text)
    return text.strip()


def _coerce_question_text(value: Any, position: int) -> str:
    if isinstance(value, str) and value.strip():
        return value
    if value not in (None, "") and not isinstance(value, (list, dict)):
        return str(value)
    return f"Question {position}"


def _coerce_options(value: Any) -> List[str]:
    options = value if isinstance(value, list) else []
    options = ["" if option is None else str(option) for option in options[:OPTION_COUNT]]
    options.extend([""] * (OPTION_COUNT - len(options)))
    return options


def _coerce_correct_index(value: Any) -> int:
    """Read an option index leniently; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        if isinstance(value, (int, float)):
            index = int(value)
        else:
            # Leading integer only, so "2)" and "2 (C)" read as 2
            match = LEADING_INT_RE.match(str(value))
            index = int(match.group()) if match else 0
    except (TypeError, ValueError, OverflowError):
        return 0
    if not 0 <= index < OPTION_COUNT:
        return 0
    return index


def coerce_question(item: dict, position: int) -> Question:
    """Apply the coercion policy to one model item (position is 1-based)."""
    return Question(
        question_text=_coerce_question_text(item.get("question"), position),
        options=_coerce_options(item.get("options")),
        correct_option_index=_coerce_correct_index(item.get("correct_answer")),
    )


def parse_question_set(response_text: str) -> ConversionResult:
    """
    Parse and validate a raw model response.

    Args:
        response_text: Raw text returned by the model.

    Returns:
        ConversionResult.success with the coerced questions, or
        ConversionResult.failure describing why nothing was accepted.
    """
    cleaned = strip_code_fences(response_text)
    if not cleaned:
        return ConversionResult.failure("empty response from model")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"JSON Parse Error: {e}")
        logger.debug(f"Cleaned text (first 500 chars): {cleaned[:500]}")
        return ConversionResult.failure(f"response is not valid JSON ({e})")

    if not isinstance(data, list):
        return ConversionResult.failure(
            f"expected a JSON array, got {type(data).__name__}"
        )
    if not data:
        return ConversionResult.failure("model returned no questions")

    questions = []
    for position, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            return ConversionResult.failure(
                f"item {position} is not an object ({type(item).__name__})"
            )
        questions.append(coerce_question(item, position))

    if not MIN_QUESTIONS <= len(questions) <= MAX_QUESTIONS:
        logger.warning(
            f"Model returned {len(questions)} questions "
            f"(asked for {MIN_QUESTIONS}-{MAX_QUESTIONS})"
        )

    return ConversionResult.success(questions)


class GeminiConverter:
    """
    Converts document text into a question set using a Gemini model.

    The model handle is injected. When none is given the memoized
    `get_generative_model` factory provides it on first use.
    """

    def __init__(
        self,
        model=None,
        model_factory: Callable[[], Any] = get_generative_model,
        max_chars: Optional[int] = None,
    ):
        self._model = model
        self._model_factory = model_factory
        self.max_chars = max_chars or settings.TRIVIA_MAX_DOCUMENT_CHARS

    @property
    def model(self):
        if self._model is None:
            self._model = self._model_factory()
        return self._model

    def build_prompt(self, document_text: str) -> str:
        return PROMPT_TEMPLATE.format(
            min_questions=MIN_QUESTIONS,
            max_questions=MAX_QUESTIONS,
            option_count=OPTION_COUNT,
            last_index=OPTION_COUNT - 1,
            document_text=document_text,
        )

    def convert(self, document_text: str) -> List[Question]:
        """
        Turn document text into a list of questions.

        This is a single blocking call with no retry.

        Args:
            document_text: Raw text extracted from the document.

        Returns:
            List of Question objects (at least one).

        Raises:
            ConversionFailed: If the text is empty, the model call fails, or
                the response cannot be parsed.
        """
        text = clean_text(document_text or "")
        if not text:
            raise ConversionFailed("Document contains no text to convert")

        if len(text) > self.max_chars:
            logger.info(f"Truncating document text from {len(text)} to {self.max_chars} chars")
            text = text[:self.max_chars]

        model = self.model
        logger.info(f"Sending {len(text)} chars to Gemini for trivia conversion")

        try:
            response = model.generate_content(self.build_prompt(text))
            raw_text = response.text
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise ConversionFailed(f"Failed to convert document to trivia: {e}") from e

        questions = parse_question_set(raw_text).unwrap()
        logger.info(f"Converted document into {len(questions)} questions")
        return questions
