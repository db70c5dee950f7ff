"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request, status

from countdown.services.state_service import AppState


def get_app_state(request: Request) -> AppState:
    """Return the AppState attached to the application at startup."""
    app_state = getattr(request.app.state, "app_state", None)
    if app_state is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Application state not loaded")
    return app_state
