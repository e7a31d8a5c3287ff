# =============================================================================
# CONFTEST - Shared fixtures
# =============================================================================
# Users, API clients, projects and trivia experiences used across the suite
# =============================================================================

from unittest.mock import MagicMock

import pytest
from rest_framework.test import APIClient


# =============================================================================
# USERS & CLIENTS
# =============================================================================


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="owner", password="secret-pass")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="intruder", password="secret-pass")


@pytest.fixture
def api_client():
    """Anonymous API client."""
    return APIClient()


@pytest.fixture
def auth_client(user):
    """API client authenticated as `user`."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


# =============================================================================
# DATA
# =============================================================================


@pytest.fixture
def two_questions():
    """Two questions with options A-D; correct answers are 1 and 3."""
    return [
        {"question": "First?", "options": ["A", "B", "C", "D"], "correct_answer": 1},
        {"question": "Second?", "options": ["A", "B", "C", "D"], "correct_answer": 3},
    ]


@pytest.fixture
def project(user):
    from trivia.models import Project

    return Project.objects.create(
        owner=user,
        business_name="Acme Coffee",
        contact_email="hello@acme.test",
    )


@pytest.fixture
def document(user, project):
    from trivia.models import Document

    return Document.objects.create(
        project=project,
        owner=user,
        file_name="beans.txt",
        file_content="Arabica beans grow at high altitude. Robusta has more caffeine.",
        file_size=64,
        mime_type="text/plain",
    )


@pytest.fixture
def experience(user, project, two_questions):
    from trivia.models import TriviaExperience

    return TriviaExperience.objects.create(
        project=project,
        owner=user,
        title="Coffee Trivia",
        questions=two_questions,
    )


@pytest.fixture
def published_experience(experience):
    from trivia.services import TriviaEditor

    return TriviaEditor(experience).publish()


# =============================================================================
# GEMINI
# =============================================================================


@pytest.fixture
def model_returning():
    """Build a fake Gemini model whose generate_content returns `text`."""

    def _build(text):
        model = MagicMock()
        model.generate_content.return_value = MagicMock(text=text)
        return model

    return _build
