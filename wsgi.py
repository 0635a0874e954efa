"""
WSGI entry point.

Usage:
    gunicorn wsgi:app
    flask --app wsgi run      # development server
"""

from sigreq import create_app

app = create_app()
