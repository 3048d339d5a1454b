"""Web package — FastAPI routes exposing the workflow steps over HTTP."""
