from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Text, Float, Boolean, ForeignKey, JSON, create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool
from datetime import datetime
import uuid

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_pro = Column(Boolean, default=False, nullable=False)
    role = Column(String(100), nullable=True)
    experience = Column(String(50), nullable=True)
    # Free-tier quota bookkeeping
    daily_session_count = Column(Integer, default=0, nullable=False)
    last_session_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    sessions = relationship("PracticeSession", back_populates="user", cascade="all, delete-orphan")


class PracticeSession(Base):
    __tablename__ = "practice_sessions"

    id = Column(String(36), primary_key=True, index=True, default=_uuid)  # UUID
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    question = Column(Text, nullable=False)
    transcript = Column(Text, default="")
    duration_seconds = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="sessions")
    analysis = relationship("Analysis", back_populates="session", uselist=False, cascade="all, delete-orphan")


class Analysis(Base):
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("practice_sessions.id"), unique=True, nullable=False)
    overall_score = Column(Integer, nullable=False)
    confidence = Column(Integer, nullable=False)
    clarity = Column(Integer, nullable=False)
    relevance = Column(Integer, nullable=False)
    wpm = Column(Integer, nullable=True)
    filler_words = Column(JSON, default=list)   # [{"word","count"}]
    sentiment = Column(JSON, nullable=False)    # {"positive","neutral","negative"}
    strengths = Column(JSON, default=list)
    improvements = Column(JSON, default=list)
    feedback = Column(JSON, default=list)
    duration_feedback = Column(String(100))
    suggested_next_topic = Column(String(200))
    pace_data = Column(JSON, nullable=True)     # [{"time","wpm"}]
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    session = relationship("PracticeSession", back_populates="analysis")


def make_engine(database_url: str):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, pool_recycle=1800)


def make_session_factory(engine):
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
