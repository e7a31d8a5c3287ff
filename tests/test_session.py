# =============================================================================
# TESTS - Quiz session state machine
# =============================================================================

import pytest

from trivia.exceptions import OutOfRange, ValidationError
from trivia.services.questions import Question, questions_from_dicts
from trivia.services.session import QuizSession, SessionState


class RecordingEmitter:
    """Collects emitted events instead of storing them."""

    def __init__(self):
        self.events = []

    def __call__(self, event_type, question_index=None, metadata=None):
        self.events.append((event_type, question_index, metadata))

    def of_type(self, event_type):
        return [event for event in self.events if event[0] == event_type]


def make_questions(correct_indexes):
    return [
        Question(question_text=f"Q{n}", options=["A", "B", "C", "D"], correct_option_index=correct)
        for n, correct in enumerate(correct_indexes)
    ]


def play(session, answers):
    session.start()
    for answer in answers:
        session.select_answer(answer)
        if not session.is_completed:
            session.advance()


class TestStart:
    """Tests for starting a session."""

    def test_new_session_is_not_started(self):
        session = QuizSession(1, make_questions([0]))

        assert session.state == SessionState.NOT_STARTED
        assert session.current_question is None
        assert [record.selected_option_index for record in session.answers] == [None]

    def test_start_moves_to_first_question_and_emits(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([0, 1]), emit=emitter)

        session.start()

        assert session.state == SessionState.IN_PROGRESS
        assert session.current_question_index == 0
        assert session.started_at is not None
        assert emitter.events == [("start", None, None)]

    def test_empty_question_set_cannot_start(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, [], emit=emitter)

        assert session.can_start is False
        with pytest.raises(ValidationError):
            session.start()
        assert emitter.events == []

    def test_cannot_start_twice(self):
        session = QuizSession(1, make_questions([0]))
        session.start()

        with pytest.raises(ValidationError):
            session.start()


class TestSelectAnswer:
    """Tests for answering questions."""

    def test_answer_is_recorded_and_emitted(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([2, 0]), emit=emitter)
        session.start()

        record = session.select_answer(2)

        assert record.selected_option_index == 2
        assert record.is_correct is True
        assert emitter.of_type("question_answer") == [
            ("question_answer", 0, {"selected": 2, "correct": True})
        ]

    def test_answer_is_revealed_before_advancing(self):
        session = QuizSession(1, make_questions([0, 0]))
        session.start()

        session.select_answer(1)

        assert session.is_revealing is True
        assert session.current_question_index == 0
        assert session.advance() == 1
        assert session.is_revealing is False

    def test_first_answer_wins(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([0, 0]), emit=emitter)
        session.start()

        session.select_answer(0)
        record = session.select_answer(3)

        assert record.selected_option_index == 0
        assert record.is_correct is True
        assert len(emitter.of_type("question_answer")) == 1

    def test_option_index_out_of_range(self):
        session = QuizSession(1, make_questions([0]))
        session.start()

        with pytest.raises(OutOfRange):
            session.select_answer(4)
        with pytest.raises(OutOfRange):
            session.select_answer(-1)
        assert session.answers[0].selected_option_index is None

    def test_cannot_answer_before_start(self):
        session = QuizSession(1, make_questions([0]))

        with pytest.raises(ValidationError):
            session.select_answer(0)

    def test_cannot_advance_unanswered_question(self):
        session = QuizSession(1, make_questions([0, 1]))
        session.start()

        with pytest.raises(ValidationError):
            session.advance()

    def test_index_never_decreases(self):
        session = QuizSession(1, make_questions([0, 1, 2]))
        session.start()
        seen = [session.current_question_index]

        for answer in (0, 1):
            session.select_answer(answer)
            seen.append(session.advance())

        assert seen == sorted(seen)
        assert seen[-1] == 2


class TestCompletion:
    """Tests for scoring and completion."""

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_full_playthrough_events(self, count):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([0] * count), emit=emitter)

        play(session, [1] * count)

        assert session.is_completed
        assert len(emitter.of_type("question_answer")) == count
        completes = emitter.of_type("quiz_complete")
        assert len(completes) == 1
        assert completes[0][2]["total"] == count

    def test_all_correct_scores_100(self):
        session = QuizSession(1, make_questions([3, 2, 1]))

        play(session, [3, 2, 1])

        assert session.score == session.total == 3
        assert session.percentage == 100

    def test_two_question_scenario_all_correct(self, two_questions):
        emitter = RecordingEmitter()
        session = QuizSession(1, questions_from_dicts(two_questions), emit=emitter)

        play(session, [1, 3])

        assert session.score == 2
        assert session.percentage == 100
        assert emitter.of_type("quiz_complete") == [
            ("quiz_complete", None, {"score": 2, "total": 2})
        ]

    def test_two_question_scenario_half_correct(self, two_questions):
        session = QuizSession(1, questions_from_dicts(two_questions))

        play(session, [0, 3])

        assert session.score == 1
        assert session.percentage == 50

    def test_score_matches_correct_selections(self):
        questions = make_questions([0, 1, 2, 3])
        answers = [0, 0, 2, 1]
        session = QuizSession(1, questions)

        play(session, answers)

        expected = sum(1 for q, a in zip(questions, answers) if a == q.correct_option_index)
        assert session.score == expected == 2
        assert session.percentage == 50

    def test_repeat_answer_on_last_question_is_ignored(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([1]), emit=emitter)
        session.start()
        first = session.select_answer(1)

        repeat = session.select_answer(2)

        assert repeat is first
        assert repeat.selected_option_index == 1
        assert session.score == 1
        assert len(emitter.of_type("question_answer")) == 1
        assert len(emitter.of_type("quiz_complete")) == 1

    def test_answer_after_force_complete_is_rejected(self):
        session = QuizSession(1, make_questions([0, 0]))
        session.start()
        session.force_complete()

        with pytest.raises(ValidationError):
            session.select_answer(1)

    def test_force_complete_counts_unanswered_as_wrong(self):
        emitter = RecordingEmitter()
        session = QuizSession(1, make_questions([0, 0, 0]), emit=emitter)
        session.start()
        session.select_answer(0)

        session.force_complete()
        session.force_complete()

        assert session.is_completed
        assert session.score == 1
        assert session.percentage == 33
        assert emitter.of_type("quiz_complete") == [
            ("quiz_complete", None, {"score": 1, "total": 3})
        ]
