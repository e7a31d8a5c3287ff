"""
Play a published trivia experience in the terminal.

    python manage.py play_trivia 12
    python manage.py play_trivia 12 --answers 1,3,0 --delay 0

Each run is one page load: it records a `view`, then drives a QuizSession
and sends analytics to the database like the web player does.
"""

import time

from django.core.management.base import BaseCommand, CommandError

from trivia.exceptions import TriviaError
from trivia.models import TriviaExperience
from trivia.services import (
    ADVANCE_DELAY_SECONDS,
    AnalyticsEmitter,
    PlayPageTracker,
    QuizSession,
)
from trivia.services.questions import questions_from_dicts


OPTION_LABELS = "ABCD"


class Command(BaseCommand):
    help = "Play a published trivia experience in the terminal"

    def add_arguments(self, parser):
        parser.add_argument('experience_id', type=int)
        parser.add_argument(
            '--answers',
            help="Comma-separated option indexes (0-3) to answer with instead of prompting",
        )
        parser.add_argument(
            '--delay',
            type=float,
            default=ADVANCE_DELAY_SECONDS,
            help="Seconds to show each answer's result before moving on",
        )

    def handle(self, *args, **options):
        try:
            experience = TriviaExperience.objects.get(pk=options['experience_id'])
        except TriviaExperience.DoesNotExist:
            raise CommandError("Quiz not found")
        if not experience.is_published:
            raise CommandError("This quiz has not been published")

        scripted = self._parse_answers(options.get('answers'))
        delay = max(options['delay'], 0)

        emitter = AnalyticsEmitter(experience)
        PlayPageTracker(emitter).experience_loaded()

        try:
            session = QuizSession(experience.pk, questions_from_dicts(experience.questions), emit=emitter)
        except TriviaError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.MIGRATE_HEADING(experience.title))
        self.stdout.write(f"{session.total} questions\n")
        if not session.can_start:
            raise CommandError("This quiz has no questions")
        session.start()

        while not session.is_completed:
            index = session.current_question_index
            question = session.current_question
            self.stdout.write(
                f"\nQuestion {index + 1} of {session.total} ({session.progress_percentage}%)"
            )
            self.stdout.write(question.question_text)
            for option_index, option in enumerate(question.options):
                self.stdout.write(f"  {OPTION_LABELS[option_index]}) {option}")

            choice = scripted.pop(0) if scripted else self._prompt()
            record = session.select_answer(choice)

            if record.is_correct:
                self.stdout.write(self.style.SUCCESS("✓ Correct"))
            else:
                correct_label = OPTION_LABELS[question.correct_option_index]
                self.stdout.write(self.style.ERROR(f"✗ Wrong, the answer was {correct_label}"))

            if session.is_completed:
                break
            time.sleep(delay)
            session.advance()

        self.stdout.write(self.style.SUCCESS("\nQuiz Complete!"))
        self.stdout.write(f"Your Score: {session.score} / {session.total}")
        self.stdout.write(f"{session.percentage}% Correct")

    def _parse_answers(self, raw):
        if not raw:
            return []
        try:
            answers = [int(part) for part in raw.split(',') if part.strip()]
        except ValueError:
            raise CommandError("--answers must be comma-separated integers")
        if any(not 0 <= answer < len(OPTION_LABELS) for answer in answers):
            raise CommandError("--answers values must be between 0 and 3")
        return answers

    def _prompt(self) -> int:
        while True:
            raw = input("Your answer (A-D): ").strip().upper()
            if len(raw) == 1 and raw in OPTION_LABELS:
                return OPTION_LABELS.index(raw)
            self.stdout.write("Please answer A, B, C or D.")
