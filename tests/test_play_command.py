# =============================================================================
# TESTS - play_trivia management command
# =============================================================================

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from trivia.models import AnalyticsEvent


pytestmark = pytest.mark.django_db


def play(experience_id, **options):
    out = StringIO()
    call_command("play_trivia", experience_id, delay=0, stdout=out, **options)
    return out.getvalue()


class TestPlayTrivia:

    def test_scripted_playthrough(self, published_experience):
        output = play(published_experience.pk, answers="1,0")

        assert "Question 1 of 2 (50%)" in output
        assert "Question 2 of 2 (100%)" in output
        assert "✓ Correct" in output
        assert "✗ Wrong, the answer was D" in output
        assert "Your Score: 1 / 2" in output
        assert "50% Correct" in output

    def test_playthrough_records_events(self, published_experience):
        play(published_experience.pk, answers="1,3")

        types = list(
            AnalyticsEvent.objects.order_by("id").values_list("event_type", flat=True)
        )
        assert types == ["view", "start", "question_answer", "question_answer", "quiz_complete"]
        complete = AnalyticsEvent.objects.get(event_type="quiz_complete")
        assert complete.metadata == {"score": 2, "total": 2}

    def test_unpublished_quiz(self, experience):
        with pytest.raises(CommandError, match="not been published"):
            play(experience.pk, answers="1,3")
        assert AnalyticsEvent.objects.count() == 0

    def test_missing_quiz(self):
        with pytest.raises(CommandError, match="not found"):
            play(999999)

    def test_empty_quiz(self, published_experience):
        published_experience.questions = []
        published_experience.save()

        with pytest.raises(CommandError, match="no questions"):
            play(published_experience.pk)

    @pytest.mark.parametrize("answers", ["1,x", "1,4"])
    def test_bad_scripted_answers(self, published_experience, answers):
        with pytest.raises(CommandError):
            play(published_experience.pk, answers=answers)
