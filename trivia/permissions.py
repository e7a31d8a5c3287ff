"""
Ownership checks.

Access is ownership-only: a row can be read or changed by the user who
created it. Published trivia experiences are additionally readable by
anyone.
"""

import logging

from trivia.exceptions import Forbidden, NotFound, Unauthorized
from trivia.models import Project, TriviaExperience


logger = logging.getLogger(__name__)


def require_user(user):
    if user is None or not user.is_authenticated:
        raise Unauthorized("Unauthorized")
    return user


def _get_or_404(model, pk, label: str):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} not found")


def require_owner(obj, user) -> None:
    require_user(user)
    if obj.owner_id != user.pk:
        logger.info(f"User {user.pk} denied access to {obj.__class__.__name__} {obj.pk}")
        raise Forbidden("Forbidden")


def get_owned_project(pk, user) -> Project:
    """Fetch a project owned by `user` (NotFound / Forbidden otherwise)."""
    require_user(user)
    project = _get_or_404(Project, pk, "Project")
    require_owner(project, user)
    return project


def get_owned_experience(pk, user) -> TriviaExperience:
    """Fetch a trivia experience owned by `user` (NotFound / Forbidden otherwise)."""
    require_user(user)
    experience = _get_or_404(TriviaExperience, pk, "Trivia experience")
    require_owner(experience, user)
    return experience


def get_playable_experience(pk, user) -> TriviaExperience:
    """
    Fetch a trivia experience for reading.

    Published experiences are public. Unpublished ones are visible only to
    their owner (Unauthorized when anonymous, Forbidden for other users).
    """
    experience = _get_or_404(TriviaExperience, pk, "Trivia experience")
    if experience.is_published:
        return experience
    require_owner(experience, user)
    return experience
