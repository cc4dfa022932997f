# coach/services/scoring.py
import random
import re
from typing import List, Optional, Tuple

from coach.models.schemas import AnalysisResult, FillerWordCount, PacePoint, SentimentSplit

# Iteration order here is the order of the reported filler words.
FILLER_WORDS = ["um", "uh", "like", "basically", "actually", "you know", "sort of", "kind of"]
POSITIVE_KEYWORDS = ["team", "lead", "learned", "result", "achieved", "solved", "improved", "helped"]
ACTION_KEYWORDS = ["i", "my", "we", "our"]

SUGGESTED_TOPICS = [
    "Behavioral: Handling Conflict",
    "Technical: System Design Basics",
    "Soft Skills: Leadership Experience",
    "Technical: Code Optimization",
    "Behavioral: Weaknesses & Failures",
]

DEFAULT_PACE_SERIES = [
    ("0s", 120), ("10s", 145), ("20s", 130), ("30s", 125), ("40s", 155), ("50s", 140),
]

DURATION_TOO_SHORT = "Too short. Try to elaborate more."
DURATION_GOOD = "Good length"
DURATION_TOO_LONG = "Too long. Try to be more concise."

_FILLER_PATTERNS = [(w, re.compile(r"\b" + re.escape(w) + r"\b")) for w in FILLER_WORDS]


def clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, value)))


def analyze_filler_words(transcript: str) -> List[FillerWordCount]:
    """Count whole-word (or whole-phrase) filler hits, case-insensitive."""
    if not transcript:
        return []
    lowered = transcript.lower()
    results = []
    for word, pattern in _FILLER_PATTERNS:
        count = len(pattern.findall(lowered))
        if count:
            results.append(FillerWordCount(word=word, count=count))
    return results


def count_words(transcript: str) -> int:
    return len(transcript.split()) if transcript else 0


def words_per_minute(transcript: str, duration_seconds: float) -> int:
    if not duration_seconds or duration_seconds <= 0:
        return 0
    return int(round(count_words(transcript) / duration_seconds * 60))


def keyword_signals(transcript: str) -> Tuple[int, int]:
    """
    Returns (positive_count, action_count): how many distinct keywords of each
    set occur anywhere in the transcript. Plain substring match, so "i" hits
    almost every English sentence.
    """
    lowered = (transcript or "").lower()
    positive = sum(1 for k in POSITIVE_KEYWORDS if k in lowered)
    action = sum(1 for k in ACTION_KEYWORDS if k in lowered)
    return positive, action


def duration_feedback(duration_seconds: float) -> str:
    if duration_seconds < 30:
        return DURATION_TOO_SHORT
    if duration_seconds > 180:
        return DURATION_TOO_LONG
    return DURATION_GOOD


def default_pace_data() -> List[PacePoint]:
    return [PacePoint(time=t, wpm=w) for t, w in DEFAULT_PACE_SERIES]


class HeuristicScorer:
    """
    Rule-based scorer. Needs no network and never raises; used directly when
    the AI adapter is off and as the fallback when a model call fails.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def score(self, transcript: str, question: str, duration_seconds: float) -> AnalysisResult:
        transcript = transcript or ""
        fillers = analyze_filler_words(transcript)
        wpm = words_per_minute(transcript, duration_seconds)
        positive, action = keyword_signals(transcript)

        base = 70
        base += positive * 2
        base += 5 if action > 2 else 0
        base -= len(fillers) * 2  # distinct terms, not occurrences
        overall = clamp(base, 50, 98)

        feedback = [
            f"Pace is {wpm} WPM - " + ("Great pace!" if 110 < wpm < 160 else "aim for 120-150 WPM"),
        ]
        if len(fillers) > 2:
            feedback.append("Reduce filler words: " + ", ".join(f.word for f in fillers))
        else:
            feedback.append("Excellent clarity with minimal filler words.")
        if positive > 0:
            feedback.append("Good use of action verbs and positive impact words.")
        else:
            feedback.append(
                "Try to use more strong action verbs (e.g., 'achieved', 'led', 'solved') to describe your impact."
            )
        if action == 0 and len(transcript) > 50:
            feedback.append("Ensure you personalize the answer with 'I' statements to own your contributions.")

        strengths = [
            "Clear articulation of ideas",
            "Maintained good flow throughout",
            "Used positive action words" if positive > 0 else "Professional tone",
        ]
        improvements = [
            "Reduce usage of filler words" if len(fillers) > 2 else "Vary your pitch for more engagement",
            "Provide more concrete examples",
            "Conclude with a strong summary statement",
        ]

        return AnalysisResult(
            overall_score=overall,
            confidence=clamp(overall + 5, 0, 100),
            clarity=clamp(100 - len(fillers) * 5, 0, 100),
            relevance=clamp(70 + positive * 5, 0, 100),
            filler_words=fillers,
            sentiment=SentimentSplit(positive=40 + positive * 10, neutral=30, negative=10),
            strengths=strengths,
            improvements=improvements,
            feedback=feedback,
            duration_feedback=duration_feedback(duration_seconds),
            suggested_next_topic=self.suggest_topic(),
            pace_data=default_pace_data(),
            wpm=wpm,
        )

    def suggest_topic(self) -> str:
        return self.rng.choice(SUGGESTED_TOPICS)
