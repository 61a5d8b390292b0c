"""
asgi.py -- ASGI entry point for the marketplace backend.

Run with:  uvicorn asgi:app --reload
           python asgi.py
"""

from api.main import app

__all__ = ["app"]

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("asgi:app", host="127.0.0.1", port=8000)
