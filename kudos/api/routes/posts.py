"""
kudos.api.routes.posts — Question & answer creation
=====================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from kudos.api.deps import get_config, get_current_user, get_engine, require_same_user
from kudos.config import KudosConfig
from kudos.services import post_service

router = APIRouter(tags=["posts"])


class QuestionCreate(BaseModel):
    title: str
    text: str
    asked_by: str


class AnswerCreate(BaseModel):
    text: str
    ans_by: str


@router.post("/questions", status_code=201)
def create_question(
    body: QuestionCreate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
    cfg: KudosConfig = Depends(get_config),
):
    require_same_user(user, body.asked_by)
    try:
        question, outcomes = post_service.create_question(
            engine, title=body.title, text=body.text, asked_by=body.asked_by, cfg=cfg,
        )
    except LookupError as exc:
        raise HTTPException(404, str(exc))
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return {
        "id": question.id,
        "title": question.title,
        "asked_by": question.asked_by,
        "asked_at": question.asked_at.isoformat() if question.asked_at else None,
        "points": outcomes.get("points"),
        "milestone_awarded": bool(outcomes.get("milestone")),
    }


@router.post("/questions/{question_id}/answers", status_code=201)
def create_answer(
    question_id: int,
    body: AnswerCreate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
    cfg: KudosConfig = Depends(get_config),
):
    require_same_user(user, body.ans_by)
    try:
        answer, outcomes = post_service.create_answer(
            engine, question_id=question_id, text=body.text, ans_by=body.ans_by, cfg=cfg,
        )
    except LookupError as exc:
        raise HTTPException(404, str(exc))
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return {
        "id": answer.id,
        "question_id": answer.question_id,
        "ans_by": answer.ans_by,
        "ans_at": answer.ans_at.isoformat() if answer.ans_at else None,
        "points": outcomes.get("points"),
        "milestone_awarded": bool(outcomes.get("milestone")),
    }


@router.get("/questions/count/{username}")
def count_questions(username: str, engine=Depends(get_engine)):
    return {"username": username, "count": post_service.count_user_questions(engine, username)}


@router.get("/answers/count/{username}")
def count_answers(username: str, engine=Depends(get_engine)):
    return {"username": username, "count": post_service.count_user_answers(engine, username)}
