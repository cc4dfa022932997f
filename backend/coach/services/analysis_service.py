import json, logging, re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from coach.errors import MalformedResponse
from coach.models.schemas import AnalysisResult, SentimentSplit
from coach.services.llm import GeminiBackend
from coach.services.scoring import (
    HeuristicScorer, analyze_filler_words, clamp, default_pace_data, words_per_minute,
)

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """Analyze this interview response for the question: "{question}"

Transcript: "{transcript}"

Duration: {duration} seconds ({wpm} WPM)

Return ONLY JSON in this exact schema:
{{
  "overallScore": 85,
  "confidence": 92,
  "clarity": 78,
  "relevance": 88,
  "fillerWords": [
    {{"word": "um", "count": 2}},
    {{"word": "like", "count": 3}}
  ],
  "strengths": ["Strong opening statement", "Good use of STAR method"],
  "improvements": ["Reduce filler words", "Provide more specific metrics"],
  "durationFeedback": "Too short | Good length | Too long",
  "sentiment": {{"positive": 65, "neutral": 25, "negative": 10}},
  "feedback": ["Reduce filler words", "Good pace"],
  "suggestedNextTopic": "Behavioral: Handling Conflict",
  "paceData": [{{"time": "0s", "wpm": 120}}]
}}
All scores are integers from 0 to 100.
"""

REWRITE_PROMPT = """You are an expert verbal communications coach.

Task: Rewrite the following interview answer to be more {tone}, concise, and impactful.
Context: The speaker may use "Hinglish" or Indian English idioms. Detect this and convert it to standard, high-quality Global Professional English.
Method: Use the STAR method where applicable. Fix grammar, remove filler words, and improve vocabulary.

Original Answer: "{transcript}"

Return ONLY the rewritten answer text. Do not add explanations."""

CANNED_REWRITES = {
    "Professional": (
        "In my previous role, I successfully managed a complex project by prioritizing key tasks and "
        "fostering open communication within the team. This approach allowed us to meet deadlines "
        "efficiently while ensuring high-quality deliverables."
    ),
    "Confident": (
        "I led a critical initiative that streamlined our workflow, resulting in a 20% increase in "
        "productivity. I thrive in challenging environments and am quick to adapt to new technologies "
        "to drive results."
    ),
    "Concise": (
        "I handled the stakeholder issue by listening to their concerns and proposing a data-backed "
        "solution, which resolved the conflict immediately."
    ),
}
DEFAULT_TONE = "Professional"

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

_SCORE_DEFAULTS = {"overallScore": 75, "confidence": 80, "clarity": 75, "relevance": 80}


def normalize_tone(tone: Optional[str]) -> str:
    for known in CANNED_REWRITES:
        if (tone or "").strip().lower() == known.lower():
            return known
    return DEFAULT_TONE


def degraded_analysis() -> AnalysisResult:
    """Served when the model replied but its reply could not be used."""
    return AnalysisResult(
        overall_score=70,
        confidence=70,
        clarity=70,
        relevance=70,
        filler_words=[],
        sentiment=SentimentSplit(positive=0, neutral=100, negative=0),
        strengths=["Couldn't parse AI details"],
        improvements=["Try again"],
        feedback=["Analysis parsing error"],
        duration_feedback="Unknown",
    )


def _score(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return _SCORE_DEFAULTS[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(f"{key} is not a number: {value!r}")
    return clamp(round(value), 0, 100)


def _or_default(data: Dict[str, Any], key: str, default):
    value = data.get(key)
    return default if value is None else value


class AnalysisService:
    """
    Transcript analysis and answer rewriting.
    Uses Gemini when configured, otherwise (or on any transport error) the
    heuristic scorer and canned rewrites.
    """

    def __init__(self, backend: GeminiBackend, scorer: Optional[HeuristicScorer] = None):
        self.backend = backend
        self.scorer = scorer or HeuristicScorer()

    async def analyze_transcript(self, transcript: str, question: str, duration_seconds: float) -> AnalysisResult:
        transcript = transcript or ""
        if not self.backend.available or not transcript.strip():
            return self.scorer.score(transcript, question, duration_seconds)

        prompt = ANALYSIS_PROMPT.format(
            question=question,
            transcript=transcript,
            duration=duration_seconds,
            wpm=words_per_minute(transcript, duration_seconds),
        )
        try:
            text = await self.backend.generate(prompt)
        except Exception as e:
            logger.warning("AI analysis failed, heuristic used: %r", e)
            return self.scorer.score(transcript, question, duration_seconds)

        try:
            return self.parse_analysis_response(text, transcript, duration_seconds)
        except MalformedResponse as e:
            logger.warning("Unusable AI analysis, degraded default served: %s", e)
            return degraded_analysis()

    def parse_analysis_response(self, text: str, transcript: str, duration_seconds: float = 0) -> AnalysisResult:
        """
        Pull the JSON object out of a model reply and fill in whatever the
        model left out. Raises MalformedResponse when there is nothing usable.
        """
        match = _JSON_OBJECT.search(text or "")
        if not match:
            raise MalformedResponse("No JSON found in response")
        try:
            data = json.loads(match.group(0))
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedResponse("JSON root is not an object")

        merged = {
            "overallScore": _score(data, "overallScore"),
            "confidence": _score(data, "confidence"),
            "clarity": _score(data, "clarity"),
            "relevance": _score(data, "relevance"),
            "fillerWords": _or_default(data, "fillerWords", None),
            "paceData": _or_default(data, "paceData", None),
            "sentiment": _or_default(data, "sentiment", {"positive": 60, "neutral": 30, "negative": 10}),
            "feedback": _or_default(data, "feedback", ["Good effort"]),
            "strengths": _or_default(data, "strengths", ["Good clarity"]),
            "improvements": _or_default(data, "improvements", ["Add more details"]),
            "durationFeedback": _or_default(data, "durationFeedback", "Good length"),
            "suggestedNextTopic": _or_default(data, "suggestedNextTopic", "General Interview Practice"),
            "wpm": words_per_minute(transcript, duration_seconds),
        }
        if merged["fillerWords"] is None:
            merged["fillerWords"] = analyze_filler_words(transcript)
        if merged["paceData"] is None:
            merged["paceData"] = default_pace_data()

        try:
            return AnalysisResult.model_validate(merged)
        except ValidationError as e:
            raise MalformedResponse(f"Analysis JSON has the wrong shape: {e.error_count()} error(s)") from e

    async def rewrite_answer(self, transcript: str, tone: str = DEFAULT_TONE) -> str:
        tone = normalize_tone(tone)
        if not self.backend.available or not (transcript or "").strip():
            return CANNED_REWRITES[tone]

        try:
            text = (await self.backend.generate(REWRITE_PROMPT.format(tone=tone, transcript=transcript))).strip()
        except Exception as e:
            logger.warning("Answer rewrite failed, canned rewrite used: %r", e)
            return CANNED_REWRITES[tone]
        return text or CANNED_REWRITES[tone]
