"""WSGI config for the Doc2Trivia project."""

import os

from django.core.wsgi import get_wsgi_application


os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'doc2trivia.settings')

application = get_wsgi_application()
