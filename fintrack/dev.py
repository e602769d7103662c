"""Development entry point for uvicorn with hot reload.

    uvicorn fintrack.dev:app --reload --port 8080
"""
from fintrack import FinTrackService

# Create service instance - uvicorn needs an 'app' variable
_service = FinTrackService()
app = _service.app
