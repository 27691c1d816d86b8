"""Questions router — one adaptive interview turn per call; the session travels with the client."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.schemas.questions import AnswerRequest, NextQuestionRequest
from app.services.question_flow import QuestionFlow, question_flow

logger = logging.getLogger(__name__)

router = APIRouter()


def get_question_flow() -> QuestionFlow:
    return question_flow


@router.post("/next")
async def next_question(
    req: NextQuestionRequest,
    flow: QuestionFlow = Depends(get_question_flow),
):
    session = req.session.to_domain()
    question = await flow.next_question(session)

    if question is None:
        preferences = None
        try:
            preferences = flow.to_preferences(session).to_dict()
        except ValueError as e:
            logger.info(f"Flow complete without usable preferences: {e}")
        return {
            "question": None,
            "complete": True,
            "answers": session.to_dict()["answers"],
            "preferences": preferences,
        }

    return {
        "question": question.to_dict(),
        "question_number": session.question_number,
        "complete": False,
        "is_final": question.source == "final",
    }


@router.post("/answer")
async def answer_question(
    req: AnswerRequest,
    flow: QuestionFlow = Depends(get_question_flow),
):
    session = req.session.to_domain()
    try:
        updated = flow.record_answer(session, req.question_id, req.answer, req.question_text)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"session": updated.to_dict(), "complete": updated.complete}
