# coach/routers/questions.py
from fastapi import APIRouter, Depends

from coach.dependencies import get_current_user, get_question_service
from coach.models.database import User
from coach.models.schemas import QuestionRequest, QuestionResponse
from coach.services.question_service import QuestionGeneratorService

router = APIRouter()


@router.post("/generate", response_model=QuestionResponse)
async def generate_question(
    body: QuestionRequest,
    user: User = Depends(get_current_user),
    service: QuestionGeneratorService = Depends(get_question_service),
):
    # profile role/experience fill in whatever the request leaves out
    question = await service.generate_question(
        body.mode,
        body.role or user.role,
        body.experience or user.experience,
    )
    return QuestionResponse(mode=body.mode, question=question)
