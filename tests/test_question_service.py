"""Behavior tests for interview question generation and its fallback bank."""

import asyncio
import random

from coach.services.question_service import (
    HR_QUESTIONS,
    QuestionGeneratorService,
    fallback_questions,
)


def _generate(service, mode="HR", role=None, experience=None):
    return asyncio.run(service.generate_question(mode, role, experience))


def test_hr_fallback_without_credentials(offline_backend):
    service = QuestionGeneratorService(offline_backend, random.Random(5))
    assert _generate(service, "HR") in HR_QUESTIONS


def test_technical_fallback_mentions_role(offline_backend):
    service = QuestionGeneratorService(offline_backend, random.Random(5))
    pool = fallback_questions("Technical", "Data Engineer")

    assert "What are the key design principles you follow as a Data Engineer?" in pool
    assert _generate(service, "Technical", "Data Engineer") in pool


def test_other_modes_use_technical_bank():
    assert fallback_questions("Stress") == fallback_questions("Technical")
    assert fallback_questions("hr") == HR_QUESTIONS


def test_model_reply_is_cleaned(make_backend):
    backend = make_backend(reply='  "How would you design a rate limiter?"  ')
    question = _generate(QuestionGeneratorService(backend), "Technical", "Backend Developer", "Senior")

    assert question == "How would you design a rate limiter?"
    prompt = backend.model.prompts[0]
    assert "technical interview question for a Senior Backend Developer" in prompt


def test_hr_prompt_defaults_role_and_experience(make_backend):
    backend = make_backend(reply="Tell me about a time you disagreed with your manager.")
    _generate(QuestionGeneratorService(backend), "HR")

    assert "behavioral interview question for a Fresher Software Engineer" in backend.model.prompts[0]


def test_failure_falls_back_to_mode_bank(make_backend):
    service = QuestionGeneratorService(make_backend(error=ConnectionError("offline")), random.Random(1))
    assert _generate(service, "HR") in HR_QUESTIONS


def test_empty_reply_falls_back(make_backend):
    service = QuestionGeneratorService(make_backend(reply="``` ```"), random.Random(1))
    assert _generate(service, "Technical") in fallback_questions("Technical")


def test_fenced_reply_with_language_tag_is_unwrapped(make_backend):
    backend = make_backend(reply="```text\nHow would you design a cache?\n```")
    assert _generate(QuestionGeneratorService(backend), "Technical") == "How would you design a cache?"
