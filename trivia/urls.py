"""
URL configuration for the trivia app.

API Endpoints:
    POST   /api/intake/                   - Create a project
    GET    /api/projects/                 - List own projects
    GET    /api/projects/<pk>/            - Project with documents and trivia
    POST   /api/upload/                   - Upload a document and extract its text
    POST   /api/process-document/         - Convert a document into trivia (Gemini)
    GET    /api/trivia/<pk>/              - Fetch trivia (public once published)
    PUT    /api/trivia/<pk>/              - Save title and/or questions
    POST   /api/trivia/<pk>/publish/      - Publish and get the share URL
    POST   /api/analytics/                - Record an analytics event
    GET    /api/analytics/<pk>/           - Analytics summary (?type=project|trivia)
"""

from django.urls import path

from trivia.views import (
    AnalyticsIngestView,
    AnalyticsSummaryView,
    DocumentUploadView,
    IntakeView,
    ProcessDocumentView,
    ProjectDetailView,
    ProjectListView,
    PublishTriviaView,
    TriviaDetailView,
)


urlpatterns = [
    path('intake/', IntakeView.as_view(), name='intake'),
    path('projects/', ProjectListView.as_view(), name='project-list'),
    path('projects/<int:pk>/', ProjectDetailView.as_view(), name='project-detail'),
    path('upload/', DocumentUploadView.as_view(), name='document-upload'),
    path('process-document/', ProcessDocumentView.as_view(), name='process-document'),
    path('trivia/<int:pk>/', TriviaDetailView.as_view(), name='trivia-detail'),
    path('trivia/<int:pk>/publish/', PublishTriviaView.as_view(), name='trivia-publish'),
    path('analytics/', AnalyticsIngestView.as_view(), name='analytics-ingest'),
    path('analytics/<int:pk>/', AnalyticsSummaryView.as_view(), name='analytics-summary'),
]
