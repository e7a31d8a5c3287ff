"""
REST API views for Doc2Trivia.

These views orchestrate the document-to-quiz lifecycle:
    1. Intake (project creation)
    2. Upload (text extraction)
    3. Conversion (Gemini)
    4. Editing and publishing
    5. Public play and analytics

Errors are raised as `trivia.exceptions.TriviaError` subclasses and rendered
by `trivia_exception_handler`.
"""

import logging

from django.db import DatabaseError, transaction
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from trivia.exceptions import Forbidden, NotFound, PersistenceError, ValidationError
from trivia.models import AnalyticsEvent, Document, Project, TriviaExperience
from trivia.permissions import (
    get_owned_experience,
    get_owned_project,
    get_playable_experience,
)
from trivia.serializers import (
    AnalyticsEventRequestSerializer,
    AnalyticsEventSerializer,
    DocumentSerializer,
    ProcessDocumentRequestSerializer,
    ProjectSerializer,
    TriviaExperienceSerializer,
    TriviaUpdateRequestSerializer,
    UploadRequestSerializer,
)
from trivia.services import (
    GeminiConverter,
    TriviaEditor,
    extract_text,
    record_event,
    share_url,
    summarize_events,
)
from trivia.services.questions import questions_to_dicts


logger = logging.getLogger(__name__)


class IntakeView(APIView):
    """
    Create a project from the intake form.

    POST /api/intake/

    Request Body:
        {"business_name": str, "contact_email": str}

    Response (201 Created):
        {"project": {...}}
    """

    def post(self, request):
        serializer = ProjectSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Business name and contact email are required")

        try:
            project = serializer.save(owner=request.user)
        except DatabaseError as e:
            logger.error(f"Error creating project: {e}")
            raise PersistenceError("Failed to create project") from e

        logger.info(f"Project created: {project.business_name} (ID: {project.id})")
        return Response({"project": ProjectSerializer(project).data}, status=status.HTTP_201_CREATED)


class ProjectListView(APIView):
    """
    List the current user's projects, newest first.

    GET /api/projects/
    """

    def get(self, request):
        projects = Project.objects.filter(owner=request.user).order_by('-created_at')
        return Response({"projects": ProjectSerializer(projects, many=True).data})


class ProjectDetailView(APIView):
    """
    A project with its documents and trivia experiences.

    GET /api/projects/<pk>/

    Response:
        {
            "project": {...},
            "documents": [...],          # newest first
            "trivia_experiences": [...]  # newest first
        }
    """

    def get(self, request, pk):
        project = get_owned_project(pk, request.user)

        documents = project.documents.order_by('-uploaded_at')
        experiences = project.trivia_experiences.order_by('-created_at')

        return Response({
            "project": ProjectSerializer(project).data,
            "documents": DocumentSerializer(documents, many=True).data,
            "trivia_experiences": TriviaExperienceSerializer(experiences, many=True).data,
        })


class DocumentUploadView(APIView):
    """
    Upload a document and extract its text.

    POST /api/upload/

    Request:
        Content-Type: multipart/form-data
        - file: PDF, DOCX, PPTX or plain-text file (required)
        - project_id: Project to attach the document to (optional)

    Response (201 Created):
        {"document": {...}}
    """

    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        if 'file' not in request.FILES:
            raise ValidationError("No file provided")

        serializer = UploadRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        uploaded_file = serializer.validated_data['file']
        project_id = serializer.validated_data.get('project_id')
        project = get_owned_project(project_id, request.user) if project_id else None

        text, mime_type = extract_text(uploaded_file)

        try:
            document = Document.objects.create(
                project=project,
                owner=request.user,
                file_name=uploaded_file.name,
                file_content=text,
                file_size=uploaded_file.size,
                mime_type=mime_type,
            )
        except DatabaseError as e:
            logger.error(f"Error storing document: {e}")
            raise PersistenceError("Failed to store document") from e

        logger.info(
            f"Document uploaded: {document.file_name} (ID: {document.id}, "
            f"{len(text)} chars extracted)"
        )
        return Response({"document": DocumentSerializer(document).data}, status=status.HTTP_201_CREATED)


class ProcessDocumentView(APIView):
    """
    Convert a stored document into an AI-generated trivia experience.

    POST /api/process-document/

    Request Body:
        {"document_id": int, "project_id": int, "title": str (optional)}

    Response (201 Created):
        {"trivia": {...}}

    This is a single blocking model call. If the model fails or returns
    something unparseable, no experience is created.
    """

    def get_converter(self) -> GeminiConverter:
        return GeminiConverter()

    def post(self, request):
        serializer = ProcessDocumentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Document ID and Project ID are required")

        data = serializer.validated_data
        project = get_owned_project(data['project_id'], request.user)

        try:
            document = Document.objects.get(pk=data['document_id'])
        except Document.DoesNotExist:
            raise NotFound("Document not found")
        if document.owner_id != request.user.pk:
            raise Forbidden("Forbidden")

        logger.info(f"Converting document {document.id} ({document.file_name}) to trivia")
        questions = self.get_converter().convert(document.file_content)

        title = (data.get('title') or '').strip() or f"Trivia from {document.file_name}"

        try:
            with transaction.atomic():
                trivia = TriviaExperience.objects.create(
                    project=project,
                    owner=request.user,
                    title=title,
                    questions=questions_to_dicts(questions),
                    ai_generated=True,
                )
        except DatabaseError as e:
            logger.error(f"Error creating trivia: {e}")
            raise PersistenceError("Failed to create trivia experience") from e

        logger.info(f"Trivia {trivia.id} created with {len(questions)} questions")
        return Response({"trivia": TriviaExperienceSerializer(trivia).data}, status=status.HTTP_201_CREATED)


class TriviaDetailView(APIView):
    """
    Read or save a trivia experience.

    GET /api/trivia/<pk>/
        Public once published; otherwise owner only.

    PUT /api/trivia/<pk>/
        Owner only. Body: {"title": str?, "questions": [...]?}
        Sent fields overwrite the stored value (last write wins).
    """

    permission_classes = [AllowAny]
    parser_classes = [JSONParser]

    def get(self, request, pk):
        trivia = get_playable_experience(pk, request.user)
        return Response({"trivia": TriviaExperienceSerializer(trivia).data})

    def put(self, request, pk):
        trivia = get_owned_experience(pk, request.user)

        serializer = TriviaUpdateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        editor = TriviaEditor(trivia)
        if 'title' in data:
            editor.title = data['title']
        if 'questions' in data:
            editor.replace_questions(data['questions'])

        trivia = editor.save(fields=[name for name in ('title', 'questions') if name in data])
        return Response({"trivia": TriviaExperienceSerializer(trivia).data})


class PublishTriviaView(APIView):
    """
    Publish a trivia experience and return its public play URL.

    POST /api/trivia/<pk>/publish/

    Response:
        {"trivia": {...}, "url": "https://.../play/<slug>"}
    """

    def post(self, request, pk):
        trivia = get_owned_experience(pk, request.user)
        trivia = TriviaEditor(trivia).publish()
        return Response({
            "trivia": TriviaExperienceSerializer(trivia).data,
            "url": share_url(trivia),
        })


class AnalyticsIngestView(APIView):
    """
    Record an analytics event from a play session.

    POST /api/analytics/

    Request Body:
        {
            "experience_id": int,       # required
            "project_id": int,          # required
            "event_type": str,          # required: view | start | question_answer | quiz_complete
            "user_id": int,             # optional
            "question_index": int,      # optional
            "metadata": {...}           # optional
        }

    Response (201 Created):
        {"event": {...}}
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = AnalyticsEventRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        event = record_event(**serializer.validated_data)
        return Response({"event": AnalyticsEventSerializer(event).data}, status=status.HTTP_201_CREATED)


class AnalyticsSummaryView(APIView):
    """
    Aggregated analytics for a project or a trivia experience.

    GET /api/analytics/<pk>/?type=project
    GET /api/analytics/<pk>/?type=trivia   (default)

    Response:
        {
            "views": int,
            "starts": int,
            "completions": int,
            "completion_rate": float,
            "events": [...]   # newest first
        }
    """

    def get(self, request, pk):
        if request.query_params.get('type') == 'project':
            project = get_owned_project(pk, request.user)
            events = AnalyticsEvent.objects.filter(project=project)
        else:
            experience = get_owned_experience(pk, request.user)
            events = AnalyticsEvent.objects.filter(experience=experience)

        events = list(events.order_by('-created_at'))
        summary = summarize_events(events)
        summary["events"] = AnalyticsEventSerializer(events, many=True).data
        return Response(summary)
