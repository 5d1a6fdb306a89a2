"""
Assistant Routes
================

Virtual assistant answers and the D-ID talking avatar.

Version: 0.1.0
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from services.portal.services.assistant import answer_question
from services.portal.services.did_agent import DIDAgentClient, DIDAgentError, get_did_client
from shared.auth import User, get_current_user
from shared.config import settings
from shared.logging import get_logger
from shared.models.assistant import AskRequest, AssistantAnswer, DIDKeys, Talk, TalkRequest


logger = get_logger(__name__)

router = APIRouter()


def to_talk(data: dict[str, Any]) -> Talk:
    return Talk(
        id=data["id"],
        status=data.get("status", "created"),
        result_url=data.get("result_url"),
        created_at=data.get("created_at"),
        duration=data.get("duration"),
        error=data.get("error"),
    )


def did_error(e: DIDAgentError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/assistant/ask", response_model=AssistantAnswer)
async def ask(
    data: AskRequest,
    current_user: User = Depends(get_current_user),
) -> AssistantAnswer:
    answer = answer_question(data.question)
    logger.info("assistant_question_answered", category=answer.category.value, matched=answer.matched_key is not None)
    return answer


@router.get("/did-keys", response_model=DIDKeys)
async def did_keys(current_user: User = Depends(get_current_user)) -> DIDKeys:
    """Avatar agent id and whether a D-ID key is configured."""
    return DIDKeys(
        agent_id=settings.did.agent_id,
        api_key=bool(settings.did.api_key.get_secret_value()),
    )


@router.post("/did-agent/talk", response_model=Talk)
async def create_talk(
    data: TalkRequest,
    client: DIDAgentClient = Depends(get_did_client),
    current_user: User = Depends(get_current_user),
) -> Talk:
    try:
        talk = await client.create_talk(data.text, data.presenter_id, data.driver_id)
    except DIDAgentError as e:
        raise did_error(e) from e
    return to_talk(talk)


@router.get("/did-agent/talk/{talk_id}", response_model=Talk)
async def get_talk(
    talk_id: str,
    client: DIDAgentClient = Depends(get_did_client),
    current_user: User = Depends(get_current_user),
) -> Talk:
    try:
        talk = await client.get_talk(talk_id)
    except DIDAgentError as e:
        raise did_error(e) from e
    return to_talk(talk)


@router.post("/did-agent/talk/{talk_id}/wait", response_model=Talk)
async def wait_for_talk(
    talk_id: str,
    timeout_seconds: float | None = Query(default=None, gt=0, le=300),
    client: DIDAgentClient = Depends(get_did_client),
    current_user: User = Depends(get_current_user),
) -> Talk:
    """Block until the talk video is ready, failed or timed out."""
    try:
        talk = await client.wait_for_talk(talk_id, timeout_seconds=timeout_seconds)
    except DIDAgentError as e:
        raise did_error(e) from e
    return to_talk(talk)
