"""
App assembly entry point.

Exposes the FastAPI `app` built from environment settings, e.g.
``uvicorn app:app``.
"""

from medical_doc.api.main import create_app

app = create_app()
