# coach/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
import logging

from coach.dependencies import get_auth_service, get_current_user, get_db, get_session_service
from coach.errors import AuthenticationError, UserExists
from coach.models.database import User
from coach.models.schemas import AuthResponse, LoginRequest, RegisterRequest, UserProfile
from coach.services.auth_service import AuthService
from coach.services.session_service import SessionService

router = APIRouter()
log = logging.getLogger(__name__)


def _auth_response(user: User, auth: AuthService) -> AuthResponse:
    return AuthResponse(id=user.id, name=user.name, email=user.email, token=auth.issue_token(user.id))


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        user = auth.register(db, body.name, body.email, body.password, body.role, body.experience)
    except UserExists as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _auth_response(user, auth)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionService = Depends(get_session_service),
):
    try:
        user = auth.authenticate(db, body.email, body.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    sessions.cache.invalidate(user.id)
    return _auth_response(user, auth)


@router.get("/me", response_model=UserProfile)
def me(user: User = Depends(get_current_user)):
    return UserProfile(
        id=user.id,
        name=user.name,
        email=user.email,
        is_pro=user.is_pro,
        role=user.role,
        experience=user.experience,
    )


@router.post("/logout")
def logout(
    user: User = Depends(get_current_user),
    sessions: SessionService = Depends(get_session_service),
):
    sessions.cache.invalidate(user.id)
    log.info("User %s logged out", user.id)
    return {"ok": True, "message": "Logged out"}
