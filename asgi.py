"""
asgi.py -- Application assembly for DevConnector.

This is the ONLY module that builds the app from the environment. Everything
below it receives its configuration explicitly through create_app(settings).

Run with:  uvicorn asgi:app --reload
           python main.py --reload
"""

from api.main import create_app
from core.config import get_settings

app = create_app(get_settings())
