"""System API — health check and current session."""

from fastapi import APIRouter, Depends

from admin_panel.api.deps import get_current_session
from admin_panel.schemas.auth import SessionRead
from admin_panel.services.session_token import SessionFlags

router = APIRouter(prefix="/api/v1/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/session", response_model=SessionRead)
def current_session(flags: SessionFlags = Depends(get_current_session)):
    """Flags of the caller's fully authenticated session."""
    return SessionRead.model_validate(flags)
