# wsgi.py (at repo root), e.g. ``gunicorn wsgi:app``
from wellness_api import create_app

app = create_app()
