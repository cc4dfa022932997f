import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coach.config import Settings
from coach.errors import AuthenticationError, UserExists
from coach.models.database import User

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Password hashing seam. Subclasses decide the algorithm."""

    def hash(self, password: str) -> str:
        raise NotImplementedError

    def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


class BcryptCredentialVerifier(CredentialVerifier):
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # malformed stored hash
            return False


class AuthService:
    def __init__(self, settings: Settings, verifier: Optional[CredentialVerifier] = None):
        self.settings = settings
        self.verifier = verifier or BcryptCredentialVerifier()

    # ------------ tokens -------------
    def issue_token(self, user_id: int) -> str:
        payload = {
            "id": user_id,
            "exp": datetime.now(timezone.utc) + timedelta(days=self.settings.jwt_expires_days),
        }
        return jwt.encode(payload, self.settings.jwt_secret, algorithm="HS256")

    def decode_token(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.settings.jwt_secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Not authorized, token failed") from e
        user_id = payload.get("id")
        if not isinstance(user_id, int):
            raise AuthenticationError("Not authorized, token failed")
        return user_id

    # ------------ users -------------
    def register(
        self,
        db: Session,
        name: str,
        email: str,
        password: str,
        role: Optional[str] = None,
        experience: Optional[str] = None,
    ) -> User:
        email = email.strip().lower()
        if db.execute(select(User).where(User.email == email)).scalar_one_or_none():
            raise UserExists("User already exists")

        user = User(
            name=name.strip(),
            email=email,
            password_hash=self.verifier.hash(password),
            role=role,
            experience=experience,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise UserExists("User already exists") from e
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, db: Session, email: str, password: str) -> User:
        user = db.execute(
            select(User).where(User.email == email.strip().lower())
        ).scalar_one_or_none()
        if user is None or not self.verifier.verify(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return user

    def user_from_token(self, db: Session, token: str) -> User:
        user = db.get(User, self.decode_token(token))
        if user is None:
            raise AuthenticationError("Not authorized, user not found")
        return user
