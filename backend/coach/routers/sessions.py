from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from coach.dependencies import get_current_user, get_db, get_session_service
from coach.errors import SessionNotFound
from coach.models.database import User
from coach.models.schemas import ProgressSummary, SessionCreate, SessionOut, UsageOut
from coach.services.session_service import SessionService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_sessions(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
):
    return sessions.list_sessions(db, user)


# QuotaExceeded propagates to the app-level handler (429)
@router.post("", response_model=SessionOut, status_code=201)
def create_session(
    body: SessionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
):
    created = sessions.create_session(db, user, body)
    logger.info("Created session %s for user %s", created.id, user.id)
    return created


@router.get("/progress", response_model=ProgressSummary)
def progress(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
):
    return sessions.progress_summary(db, user)


@router.get("/usage", response_model=UsageOut)
def usage(
    user: User = Depends(get_current_user),
    sessions: SessionService = Depends(get_session_service),
):
    return sessions.usage(user)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
):
    try:
        return sessions.get_session(db, user, session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
