# Trivia services package
from trivia.services.analytics import AnalyticsEmitter, PlayPageTracker, record_event, summarize_events
from trivia.services.conversion import ConversionResult, GeminiConverter, get_generative_model, parse_question_set
from trivia.services.editor import TriviaEditor, share_url
from trivia.services.extraction import extract_text
from trivia.services.questions import Question
from trivia.services.session import ADVANCE_DELAY_SECONDS, AnswerRecord, QuizSession, SessionState

__all__ = [
    'AnalyticsEmitter',
    'PlayPageTracker',
    'record_event',
    'summarize_events',
    'ConversionResult',
    'GeminiConverter',
    'get_generative_model',
    'parse_question_set',
    'TriviaEditor',
    'share_url',
    'extract_text',
    'Question',
    'ADVANCE_DELAY_SECONDS',
    'AnswerRecord',
    'QuizSession',
    'SessionState',
]
