"""
Serializers for the trivia app.

Model serializers shape API responses; the request serializers validate
incoming bodies before any service is called.
"""

import io
import logging

from django.conf import settings
from rest_framework import serializers

from trivia.models import AnalyticsEvent, Document, Project, TriviaExperience


logger = logging.getLogger(__name__)


class ProjectSerializer(serializers.ModelSerializer):
    """Serializer for Project; also validates the intake form."""

    class Meta:
        model = Project
        fields = ['id', 'owner', 'business_name', 'contact_email', 'created_at', 'updated_at']
        read_only_fields = ['id', 'owner', 'created_at', 'updated_at']


class DocumentSerializer(serializers.ModelSerializer):

    class Meta:
        model = Document
        fields = [
            'id', 'project', 'owner', 'file_name', 'file_content',
            'file_size', 'mime_type', 'uploaded_at',
        ]
        read_only_fields = fields


class TriviaExperienceSerializer(serializers.ModelSerializer):
    """
    Serializer for TriviaExperience.

    `is_published` mirrors whether a share slug has been assigned.
    """

    is_published = serializers.BooleanField(read_only=True)

    class Meta:
        model = TriviaExperience
        fields = [
            'id', 'project', 'owner', 'title', 'questions', 'ai_generated',
            'share_slug', 'is_published', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AnalyticsEventSerializer(serializers.ModelSerializer):

    class Meta:
        model = AnalyticsEvent
        fields = [
            'id', 'experience', 'project', 'owner', 'event_type',
            'question_index', 'metadata', 'created_at',
        ]
        read_only_fields = fields


class UploadRequestSerializer(serializers.Serializer):
    """
    Validates a document upload.

    Enforces the configured size limit and, for PDF and PPTX files, the
    maximum page/slide count.
    """

    file = serializers.FileField()
    project_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_file(self, value):
        """
        Validate uploaded file size and page count.

        Raises:
            serializers.ValidationError: If the file is too big or has too
                many pages/slides.
        """
        max_bytes = settings.TRIVIA_MAX_UPLOAD_BYTES
        if value.size > max_bytes:
            raise serializers.ValidationError(
                f"File too large. Max {max_bytes} bytes allowed. (Got {value.size})"
            )

        max_pages = settings.TRIVIA_MAX_PAGES
        file_name_lower = value.name.lower()

        if file_name_lower.endswith('.pdf'):
            try:
                from pypdf import PdfReader

                value.seek(0)
                page_count = len(PdfReader(value).pages)
            except Exception as e:
                # Extraction reports corrupted files properly later
                logger.warning(f"PDF Validation Warning: Could not count pages - {e}")
                page_count = 0
            finally:
                value.seek(0)

            if page_count > max_pages:
                raise serializers.ValidationError(
                    f"PDF too large. Max {max_pages} pages allowed. (Got {page_count})"
                )

        elif file_name_lower.endswith('.pptx'):
            try:
                from pptx import Presentation

                value.seek(0)
                slide_count = len(Presentation(io.BytesIO(value.read())).slides)
            except Exception as e:
                logger.warning(f"PPTX Validation Warning: Could not count slides - {e}")
                slide_count = 0
            finally:
                value.seek(0)

            if slide_count > max_pages:
                raise serializers.ValidationError(
                    f"Presentation too large. Max {max_pages} slides allowed. (Got {slide_count})"
                )

        return value


class ProcessDocumentRequestSerializer(serializers.Serializer):
    document_id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)


class TriviaUpdateRequestSerializer(serializers.Serializer):
    """
    Validates a trivia save.

    Both fields are optional; whichever is present overwrites the stored
    value. Question shape is checked by the editor.
    """

    title = serializers.CharField(required=False, allow_blank=False, max_length=255)
    questions = serializers.ListField(child=serializers.DictField(), required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide 'title' and/or 'questions'.")
        return attrs


class AnalyticsEventRequestSerializer(serializers.Serializer):
    """Validates an analytics ingestion body."""

    experience_id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    event_type = serializers.ChoiceField(choices=AnalyticsEvent.EVENT_TYPE_CHOICES)
    user_id = serializers.IntegerField(required=False, allow_null=True)
    question_index = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    metadata = serializers.DictField(required=False, allow_null=True)
