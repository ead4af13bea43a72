"""
ASGI entry point for the formation portal API.

Run with:
    uvicorn asgi:app --reload
"""

from app import create_app

app = create_app()
