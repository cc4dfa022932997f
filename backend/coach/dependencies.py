# coach/dependencies.py
from typing import Iterator, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coach.errors import AuthenticationError
from coach.models.database import User
from coach.services.analysis_service import AnalysisService
from coach.services.auth_service import AuthService
from coach.services.question_service import QuestionGeneratorService
from coach.services.session_service import SessionService

bearer = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_question_service(request: Request) -> QuestionGeneratorService:
    return request.app.state.question_service


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    try:
        return auth.user_from_token(db, credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
