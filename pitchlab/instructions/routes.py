from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from pitchlab.common.error_envelope import error_response, success_envelope
from pitchlab.common.errors import GenerationError
from pitchlab.instructions.service import InstructionService


class InstructionTextPayload(BaseModel):
    text: Optional[Any] = None


class InstructionPayload(BaseModel):
    instruction: Optional[Any] = None


def get_instruction_service(request: Request) -> InstructionService:
    return request.app.state.instructions


router = APIRouter(prefix="/instructions", tags=["instructions"])


@router.post("/openai")
async def send_to_openai(
    payload: InstructionTextPayload,
    service: InstructionService = Depends(get_instruction_service),
):
    try:
        text = await service.send_to_model(payload.text)
    except GenerationError as exc:
        raise error_response(code=exc.code, message=exc.message, status_code=400)
    return success_envelope({"aiResponse": {"text": text}})


@router.post("")
async def post_instruction(
    payload: InstructionPayload,
    service: InstructionService = Depends(get_instruction_service),
):
    try:
        text = await service.post_instruction(payload.instruction)
    except GenerationError as exc:
        raise error_response(code=exc.code, message=exc.message, status_code=400)
    return success_envelope({"aiResponse": {"text": text}})
