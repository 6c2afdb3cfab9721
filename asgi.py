"""
asgi.py -- ASGI entry point for TasksCompleted.

Building the app here reads Settings from the environment. A missing or
short SECRET_KEY raises at import, so the server never starts listening
with an unusable signing key.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import create_app

app = create_app()
