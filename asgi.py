"""
asgi.py -- ASGI entry point for Skillfolio.

Builds the application once from the process-wide settings. Tests do not
import this module; they call api.main.create_app() with their own Settings.

Run with:  uvicorn asgi:app --reload
           python main.py
"""

from api.main import create_app

app = create_app()
