"""
Analytics recording and aggregation for trivia play sessions.

Events are append-only. The play surface fires them through
`AnalyticsEmitter`, which is best-effort: a failed write is logged and
dropped, never retried and never shown to the respondent.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from trivia.exceptions import NotFound, PersistenceError, ValidationError
from trivia.models import AnalyticsEvent, TriviaExperience


logger = logging.getLogger(__name__)

EVENT_TYPES = {choice for choice, _ in AnalyticsEvent.EVENT_TYPE_CHOICES}


def record_event(
    experience_id,
    project_id,
    event_type: str,
    user_id=None,
    question_index: Optional[int] = None,
    metadata: Optional[dict] = None,
) -> AnalyticsEvent:
    """
    Validate and store one analytics event.

    Args:
        experience_id: Trivia experience the event belongs to (required).
        project_id: Project of that experience (required).
        event_type: One of view, start, question_answer, quiz_complete.
        user_id: Owner the event is attributed to (optional).
        question_index: 0-based question position for question events.
        metadata: Free-form JSON object.

    Returns:
        The created AnalyticsEvent.

    Raises:
        ValidationError: If a required field is missing or malformed.
        NotFound: If the experience does not exist.
        PersistenceError: If the write fails.
    """
    if not experience_id or not project_id or not event_type:
        raise ValidationError("Missing required fields: experience_id, project_id and event_type")
    if event_type not in EVENT_TYPES:
        raise ValidationError(f"Unknown event_type: {event_type}")
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")
    if question_index is not None and (
        isinstance(question_index, bool) or not isinstance(question_index, int) or question_index < 0
    ):
        raise ValidationError("question_index must be a non-negative integer")

    try:
        experience = TriviaExperience.objects.get(pk=experience_id)
    except (TriviaExperience.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Trivia experience {experience_id} not found")

    if str(experience.project_id) != str(project_id):
        raise ValidationError(
            f"Experience {experience_id} does not belong to project {project_id}"
        )
    if user_id and not get_user_model().objects.filter(pk=user_id).exists():
        raise ValidationError(f"Unknown user_id: {user_id}")

    try:
        with transaction.atomic():
            return AnalyticsEvent.objects.create(
                experience=experience,
                project_id=experience.project_id,
                owner_id=user_id or None,
                event_type=event_type,
                question_index=question_index,
                metadata=metadata or {},
            )
    except DatabaseError as e:
        logger.error(f"Error creating analytics event: {e}")
        raise PersistenceError("Failed to create analytics event") from e


class AnalyticsEmitter:
    """
    Fire-and-forget event sender bound to one experience.

    `emit` never raises. Pass a different `recorder` to send events
    somewhere other than the local database.
    """

    def __init__(self, experience: TriviaExperience, recorder: Callable[..., Any] = record_event):
        self.experience = experience
        self.recorder = recorder

    def emit(
        self,
        event_type: str,
        question_index: Optional[int] = None,
        metadata: Optional[dict] = None,
    ) -> bool:
        """
        Record an event, swallowing any failure.

        Returns:
            True if the recorder accepted the event, False otherwise.
        """
        try:
            self.recorder(
                experience_id=self.experience.pk,
                project_id=self.experience.project_id,
                event_type=event_type,
                user_id=self.experience.owner_id,
                question_index=question_index,
                metadata=metadata,
            )
        except Exception as e:
            logger.warning(
                f"Error tracking {event_type} event for experience {self.experience.pk}: {e}"
            )
            return False
        return True

    def __call__(self, event_type: str, question_index: Optional[int] = None, metadata: Optional[dict] = None) -> bool:
        return self.emit(event_type, question_index, metadata)


class PlayPageTracker:
    """
    Emits the `view` event exactly once per page load.

    One tracker is created per load of the play page; fetching the
    experience again on the same page does not count as another view.
    """

    def __init__(self, emitter: AnalyticsEmitter):
        self.emitter = emitter
        self.view_recorded = False

    def experience_loaded(self) -> None:
        if self.view_recorded:
            return
        self.view_recorded = True
        self.emitter.emit(AnalyticsEvent.VIEW)


def summarize_events(events: Iterable[AnalyticsEvent]) -> dict:
    """
    Aggregate events into view/start/completion counts.

    Returns:
        {
            "views": int,
            "starts": int,
            "completions": int,
            "completion_rate": float,  # completions / starts * 100, 0 with no starts
        }
    """
    counts = {event_type: 0 for event_type in EVENT_TYPES}
    for event in events:
        if event.event_type in counts:
            counts[event.event_type] += 1

    starts = counts[AnalyticsEvent.START]
    completions = counts[AnalyticsEvent.QUIZ_COMPLETE]

    return {
        "views": counts[AnalyticsEvent.VIEW],
        "starts": starts,
        "completions": completions,
        "completion_rate": (completions / starts) * 100 if starts > 0 else 0,
    }
