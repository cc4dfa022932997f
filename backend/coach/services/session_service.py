import logging
from datetime import date
from typing import List, Optional

import numpy as np
from sqlalchemy import case, or_, select, update
from sqlalchemy.orm import Session, selectinload

from coach.errors import QuotaExceeded, SessionNotFound
from coach.models.database import Analysis, PracticeSession, User
from coach.models.schemas import (
    AnalysisResult, ProgressPoint, ProgressSummary, SessionCreate, SessionOut, UsageOut,
)
from coach.models.session_cache import SessionCache

logger = logging.getLogger(__name__)


def analysis_to_row(result: AnalysisResult) -> Analysis:
    data = result.model_dump(mode="json")
    return Analysis(
        overall_score=result.overall_score,
        confidence=result.confidence,
        clarity=result.clarity,
        relevance=result.relevance,
        wpm=result.wpm,
        filler_words=data["filler_words"],
        sentiment=data["sentiment"],
        strengths=data["strengths"],
        improvements=data["improvements"],
        feedback=data["feedback"],
        duration_feedback=result.duration_feedback,
        suggested_next_topic=result.suggested_next_topic,
        pace_data=data["pace_data"],
    )


def row_to_analysis(row: Analysis) -> AnalysisResult:
    return AnalysisResult(
        overall_score=row.overall_score,
        confidence=row.confidence,
        clarity=row.clarity,
        relevance=row.relevance,
        wpm=row.wpm,
        filler_words=row.filler_words or [],
        sentiment=row.sentiment,
        strengths=row.strengths or [],
        improvements=row.improvements or [],
        feedback=row.feedback or [],
        duration_feedback=row.duration_feedback or "",
        suggested_next_topic=row.suggested_next_topic or "General Interview Practice",
        pace_data=row.pace_data,
    )


def session_to_out(row: PracticeSession) -> SessionOut:
    return SessionOut(
        id=row.id,
        question=row.question,
        transcript=row.transcript or "",
        duration_seconds=row.duration_seconds,
        created_at=row.created_at,
        analysis=row_to_analysis(row.analysis) if row.analysis else None,
    )


def session_score(analysis: Analysis) -> int:
    return int(round((analysis.confidence + analysis.clarity + analysis.relevance) / 3))


class SessionService:
    """
    Practice-session persistence. Creating a session checks and bumps the
    free-tier daily counter in the same transaction as the inserts.
    """

    def __init__(self, daily_limit: int = 2, cache: Optional[SessionCache] = None):
        self.daily_limit = daily_limit
        self.cache = cache if cache is not None else SessionCache()

    def create_session(self, db: Session, user: User, payload: SessionCreate, today: Optional[date] = None) -> SessionOut:
        today = today or date.today()
        allowed = or_(
            User.is_pro.is_(True),
            User.last_session_date.is_(None),
            User.last_session_date != today,
            User.daily_session_count < self.daily_limit,
        )
        counter = case(
            (User.last_session_date == today, User.daily_session_count + 1),
            else_=1,
        )
        try:
            # check-and-increment in one statement; the row stays locked until commit
            result = db.execute(
                update(User)
                .where(User.id == user.id, allowed)
                .values(daily_session_count=counter, last_session_date=today)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.info("User %s hit the daily session limit (%s)", user.id, self.daily_limit)
                db.rollback()
                raise QuotaExceeded(self.daily_limit)

            row = PracticeSession(
                user_id=user.id,
                question=payload.question,
                transcript=payload.transcript or "",
                duration_seconds=payload.duration_seconds,
            )
            if payload.analysis is not None:
                row.analysis = analysis_to_row(payload.analysis)
            db.add(row)
            db.commit()
        except QuotaExceeded:
            raise
        except Exception:
            db.rollback()
            logger.exception("Session creation failed for user %s", user.id)
            raise

        if user in db:
            db.refresh(user)
        self.cache.invalidate(user.id)
        return session_to_out(row)

    def _load_sessions(self, db: Session, user: User) -> List[PracticeSession]:
        stmt = (
            select(PracticeSession)
            .where(PracticeSession.user_id == user.id)
            .options(selectinload(PracticeSession.analysis))
            .order_by(PracticeSession.created_at.desc())
        )
        return list(db.execute(stmt).scalars())

    def list_sessions(self, db: Session, user: User) -> List[dict]:
        cached = self.cache.get(user.id)
        if cached is not None:
            return cached
        sessions = [
            session_to_out(s).model_dump(by_alias=True, mode="json")
            for s in self._load_sessions(db, user)
        ]
        self.cache.put(user.id, sessions)
        return sessions

    def get_session(self, db: Session, user: User, session_id: str) -> SessionOut:
        row = db.get(PracticeSession, session_id)
        if row is None or row.user_id != user.id:
            raise SessionNotFound("Session not found or authorized")
        return session_to_out(row)

    def progress_summary(self, db: Session, user: User) -> ProgressSummary:
        sessions = self._load_sessions(db, user)
        scored = [s for s in reversed(sessions) if s.analysis is not None]
        scores = np.array([session_score(s.analysis) for s in scored], dtype=float)
        total_seconds = float(np.sum([s.duration_seconds for s in sessions])) if sessions else 0.0

        return ProgressSummary(
            total_sessions=len(sessions),
            average_score=int(round(float(np.mean(scores)))) if scores.size else None,
            best_score=int(scores.max()) if scores.size else None,
            practice_minutes=int(round(total_seconds / 60)),
            chart=[
                ProgressPoint(date=s.created_at.strftime("%b %d"), score=session_score(s.analysis))
                for s in scored
            ],
        )

    def usage(self, user: User, today: Optional[date] = None) -> UsageOut:
        today = today or date.today()
        used = user.daily_session_count if user.last_session_date == today else 0
        if user.is_pro:
            return UsageOut(used_today=used, daily_limit=None, remaining=None, is_pro=True)
        return UsageOut(
            used_today=used,
            daily_limit=self.daily_limit,
            remaining=max(0, self.daily_limit - used),
            is_pro=False,
        )
