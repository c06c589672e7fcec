from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from pitchlab.common.error_envelope import error_response, success_envelope
from pitchlab.common.errors import GenerationError
from pitchlab.conversations.models import (
    ProcessTextRequest,
    SendMessageRequest,
    StartConversationRequest,
)
from pitchlab.conversations.service import ConversationService


def get_conversation_service(request: Request) -> ConversationService:
    return request.app.state.conversations


router = APIRouter(prefix="/api", tags=["conversations"])


@router.post("/conversations")
async def start_conversation(
    payload: StartConversationRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    result = await service.start_conversation(payload.initialText)
    return success_envelope(result.to_payload())


@router.post("/conversations/{session_id}/messages")
async def send_message(
    session_id: str,
    payload: SendMessageRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    result = await service.process_message(session_id, payload.message)
    return success_envelope(result.to_payload())


@router.get("/conversations/{session_id}")
async def get_conversation(
    session_id: str,
    service: ConversationService = Depends(get_conversation_service),
):
    result = await service.get_conversation(session_id)
    return success_envelope(result.to_payload())


@router.delete("/conversations/{session_id}")
async def end_conversation(
    session_id: str,
    service: ConversationService = Depends(get_conversation_service),
):
    return success_envelope(service.end_conversation(session_id).to_payload())


@router.post("/process-text")
async def process_text(
    payload: ProcessTextRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    try:
        result = await service.process_initial_text(payload.text)
    except GenerationError as exc:
        raise error_response(code=exc.code, message=exc.message, status_code=400)
    return success_envelope(result.to_payload())
