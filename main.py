"""
Main application entry point for the Contacts API.

Run with ``uvicorn main:app``. Configuration is read from the environment
(or ``.env``) by ``contacts_api.core.Settings``.
"""

from contacts_api.web import create_app

app = create_app()
