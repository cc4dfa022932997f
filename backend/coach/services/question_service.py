import logging, random, re
from typing import List, Optional

from coach.services.llm import GeminiBackend

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "Software Engineer"
DEFAULT_EXPERIENCE = "Fresher"

HR_PROMPT = (
    "Generate a single, professional behavioral interview question for a {experience} {role}. "
    "Focus on soft skills, culture fit, or situational awareness. Return ONLY the question text."
)
TECHNICAL_PROMPT = (
    "Generate a single, technical interview question for a {experience} {role}. "
    "Focus on core concepts, problem-solving, or system design appropriate for this level. "
    "Return ONLY the question text."
)

HR_QUESTIONS = [
    "Tell me about a time you handled a difficult stakeholder.",
    "Describe a project where you had to learn a new technology quickly.",
    "How do you prioritize tasks when you have multiple deadlines?",
    "What is your approach to resolving conflicts within a team?",
    "Tell me about a time you failed and what you learned from it.",
]

TECHNICAL_QUESTIONS = [
    "Explain a core concept that is specific to your role.",
    "What are the key design principles you follow as a {role}?",
    "How do you optimize for performance in your applications?",
    "Describe a complex technical challenge you solved recently.",
    "What is your preferred tech stack and why?",
]


def is_hr_mode(mode: Optional[str]) -> bool:
    return (mode or "HR").strip().upper() == "HR"


def fallback_questions(mode: str, role: str = DEFAULT_ROLE) -> List[str]:
    if is_hr_mode(mode):
        return list(HR_QUESTIONS)
    return [q.format(role=role) for q in TECHNICAL_QUESTIONS]


_FENCE = re.compile(r"^```[\w-]*\s*|\s*```$")


def _clean(text: str) -> str:
    # Strip code fences (with any language tag) and wrapping quotes the model sometimes adds
    text = _FENCE.sub("", (text or "").strip()).strip().strip("`").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text


class QuestionGeneratorService:
    def __init__(self, backend: GeminiBackend, rng: Optional[random.Random] = None):
        self.backend = backend
        self.rng = rng or random.Random()

    def _fallback(self, mode: str, role: str) -> str:
        return self.rng.choice(fallback_questions(mode, role))

    async def generate_question(
        self,
        mode: str = "HR",
        role: Optional[str] = None,
        experience: Optional[str] = None,
    ) -> str:
        role = (role or "").strip() or DEFAULT_ROLE
        experience = (experience or "").strip() or DEFAULT_EXPERIENCE

        if not self.backend.available:
            return self._fallback(mode, role)

        template = HR_PROMPT if is_hr_mode(mode) else TECHNICAL_PROMPT
        try:
            question = _clean(await self.backend.generate(template.format(role=role, experience=experience)))
        except Exception as e:
            logger.warning("Question generation failed, fallback used: %r", e)
            return self._fallback(mode, role)
        if not question:
            logger.warning("Question generation returned nothing, fallback used.")
            return self._fallback(mode, role)
        return question
