"""
asgi.py -- Application assembly for the account service.

Builds the app from the process-wide Settings singleton. This is the only
module that calls get_settings() for the HTTP app; everything below it receives
the Settings instance by reference.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import create_app
from core.config import get_settings

app = create_app(get_settings())
