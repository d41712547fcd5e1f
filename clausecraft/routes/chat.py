from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from clausecraft.auth import require_user
from clausecraft.errors import ClauseCraftError
from clausecraft.routes.contracts import get_service
from clausecraft.schemas import ChatExchange, ChatMessageRequest, User
from clausecraft.service import ContractService

router = APIRouter(prefix="/api/chat", tags=["chat"])

log = logging.getLogger("clausecraft.api.chat")


@router.get("/history", response_model=List[ChatExchange])
def history(
    user: User = Depends(require_user),
    service: ContractService = Depends(get_service),
) -> List[ChatExchange]:
    return service.history(user.id)


@router.post("/message", response_model=ChatExchange)
async def message(
    payload: ChatMessageRequest,
    user: User = Depends(require_user),
    service: ContractService = Depends(get_service),
) -> ChatExchange:
    if not payload.message.strip():
        raise HTTPException(status_code=400, detail="Invalid message format")

    try:
        return await service.chat(user.id, payload.message.strip())
    except ClauseCraftError as exc:
        log.exception("chat failed: user=%d: %s", user.id, exc)
        raise HTTPException(status_code=500, detail="Failed to process message")
