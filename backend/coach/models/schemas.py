# coach/models/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # accepts camelCase (wire) and snake_case (python) field names
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ------------ Analysis -------------
class FillerWordCount(CamelModel):
    word: str
    count: int = Field(..., ge=1)


class SentimentSplit(CamelModel):
    # No upper bound: the heuristic positive share can pass 100.
    positive: int = Field(..., ge=0)
    neutral: int = Field(..., ge=0)
    negative: int = Field(..., ge=0)


class PacePoint(CamelModel):
    time: str
    wpm: float


class AnalysisInput(CamelModel):
    transcript: str = ""
    question: str = ""
    duration_seconds: float = Field(..., alias="durationSeconds")


class AnalysisResult(CamelModel):
    overall_score: int = Field(..., ge=0, le=100, alias="overallScore")
    confidence: int = Field(..., ge=0, le=100)
    clarity: int = Field(..., ge=0, le=100)
    relevance: int = Field(..., ge=0, le=100)
    filler_words: List[FillerWordCount] = Field(default_factory=list, alias="fillerWords")
    sentiment: SentimentSplit
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    feedback: List[str] = Field(default_factory=list)
    duration_feedback: str = Field(..., alias="durationFeedback")
    suggested_next_topic: str = Field("General Interview Practice", alias="suggestedNextTopic")
    pace_data: Optional[List[PacePoint]] = Field(None, alias="paceData")
    wpm: Optional[int] = None


class RewriteRequest(CamelModel):
    transcript: str
    tone: str = "Professional"


class RewriteResponse(CamelModel):
    tone: str
    rewritten_answer: str = Field(..., alias="rewrittenAnswer")


# ------------ Questions -------------
class QuestionRequest(CamelModel):
    mode: str = "HR"
    role: Optional[str] = None
    experience: Optional[str] = None


class QuestionResponse(CamelModel):
    mode: str
    question: str


# ------------ Auth -------------
class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    role: Optional[str] = None
    experience: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class UserProfile(CamelModel):
    id: int = Field(..., alias="_id")
    name: str
    email: str
    is_pro: bool = Field(False, alias="isPro")
    role: Optional[str] = None
    experience: Optional[str] = None


class AuthResponse(CamelModel):
    id: int = Field(..., alias="_id")
    name: str
    email: str
    token: str


# ------------ Sessions -------------
class SessionCreate(CamelModel):
    question: str
    transcript: str = ""
    duration_seconds: float = Field(..., ge=0, alias="durationSeconds")
    analysis: Optional[AnalysisResult] = None


class SessionOut(CamelModel):
    id: str
    question: str
    transcript: str
    duration_seconds: float = Field(..., alias="durationSeconds")
    created_at: datetime = Field(..., alias="createdAt")
    analysis: Optional[AnalysisResult] = None


class ProgressPoint(CamelModel):
    date: str
    score: int


class ProgressSummary(CamelModel):
    total_sessions: int = Field(..., alias="totalSessions")
    average_score: Optional[int] = Field(None, alias="averageScore")
    best_score: Optional[int] = Field(None, alias="bestScore")
    practice_minutes: int = Field(..., alias="practiceMinutes")
    chart: List[ProgressPoint] = Field(default_factory=list)


class UsageOut(CamelModel):
    used_today: int = Field(..., alias="usedToday")
    daily_limit: Optional[int] = Field(None, alias="dailyLimit")
    remaining: Optional[int] = None
    is_pro: bool = Field(False, alias="isPro")
