"""
Data models for Doc2Trivia.

A Project groups the documents a client uploads and the trivia experiences
generated from them. Questions are stored inline on the experience as a JSON
list; analytics events are append-only rows keyed to an experience.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Project(models.Model):
    """
    A client project created through the intake form.

    Owns its documents and trivia experiences.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    business_name = models.CharField(max_length=255)
    contact_email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.business_name


class Document(models.Model):
    """
    An uploaded document.

    Only the extracted text is kept; the original file is discarded after
    extraction.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='documents',
        null=True,
        blank=True
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='documents'
    )
    file_name = models.CharField(max_length=255)
    file_content = models.TextField(
        blank=True,
        help_text="Text extracted from the uploaded file"
    )
    file_size = models.PositiveIntegerField(default=0)
    mime_type = models.CharField(max_length=255)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at']

    def __str__(self):
        return self.file_name


class TriviaExperience(models.Model):
    """
    A named, ordered set of multiple-choice questions.

    `questions` holds a list of objects shaped like:

        {"question": str, "options": [str, str, str, str], "correct_answer": int}

    The experience becomes publicly playable once `share_slug` is set.
    There is no way to unset it.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='trivia_experiences'
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='trivia_experiences'
    )
    title = models.CharField(max_length=255)
    questions = models.JSONField(default=list, blank=True)
    ai_generated = models.BooleanField(default=False)
    share_slug = models.CharField(max_length=64, null=True, blank=True, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_published(self) -> bool:
        return bool(self.share_slug)


class AnalyticsEvent(models.Model):
    """
    One telemetry event from a play session. Append-only.
    """

    VIEW = 'view'
    START = 'start'
    QUESTION_ANSWER = 'question_answer'
    QUIZ_COMPLETE = 'quiz_complete'

    EVENT_TYPE_CHOICES = [
        (VIEW, 'View'),
        (START, 'Start'),
        (QUESTION_ANSWER, 'Question answer'),
        (QUIZ_COMPLETE, 'Quiz complete'),
    ]

    experience = models.ForeignKey(
        TriviaExperience,
        on_delete=models.CASCADE,
        related_name='analytics_events'
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='analytics_events'
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='analytics_events',
        null=True,
        blank=True
    )
    event_type = models.CharField(max_length=32, choices=EVENT_TYPE_CHOICES)
    question_index = models.PositiveIntegerField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['experience', 'event_type']),
            models.Index(fields=['project', 'event_type']),
        ]

    def __str__(self):
        return f"{self.event_type} on experience {self.experience_id}"
