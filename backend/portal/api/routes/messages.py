"""
Messaging API routes.

Endpoints:
- POST   /api/messages                          -> send a direct message
- POST   /api/messages/broadcast                -> tenant-lead message to every member
- POST   /api/messages/announcements            -> operator message to one tenant or all tenants
- GET    /api/messages/inbox                    -> received messages, newest first
- GET    /api/messages/outbox                   -> sent messages, newest first
- GET    /api/messages/can-message/{recipient_id} -> whether the caller may message someone
- POST   /api/messages/{message_id}/read        -> mark a received message as read
- DELETE /api/messages/{message_id}             -> delete a message the caller sent or received
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from portal.core.deps import get_authorizer, get_current_principal, get_message_service
from portal.schemas.messages import (
    AnnouncementCreate,
    BroadcastCreate,
    CanMessageOut,
    MessageCreate,
    MessageListResponse,
    MessageOut,
)
from portal.services.messaging import MessageService, MessagingAuthorizer

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageCreate,
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageOut:
    try:
        message = messages.send(caller.id, payload.recipient_id, payload.body, subject=payload.subject)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return MessageOut.model_validate(message)


@router.post("/broadcast", response_model=MessageListResponse, status_code=status.HTTP_201_CREATED)
def broadcast(
    payload: BroadcastCreate,
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageListResponse:
    try:
        sent = messages.broadcast_to_tenant(caller.id, payload.body, subject=payload.subject)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    items = [MessageOut.model_validate(m) for m in sent]
    return MessageListResponse(items=items, total=len(items))


@router.post("/announcements", response_model=MessageListResponse, status_code=status.HTTP_201_CREATED)
def announce(
    payload: AnnouncementCreate,
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageListResponse:
    try:
        sent = messages.announce(caller.id, payload.body, subject=payload.subject, tenant_id=payload.tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    items = [MessageOut.model_validate(m) for m in sent]
    return MessageListResponse(items=items, total=len(items))


@router.get("/inbox", response_model=MessageListResponse)
def inbox(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageListResponse:
    items = [MessageOut.model_validate(m) for m in messages.inbox(caller.id, offset=offset, limit=limit)]
    return MessageListResponse(items=items, total=len(items))


@router.get("/outbox", response_model=MessageListResponse)
def outbox(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageListResponse:
    items = [MessageOut.model_validate(m) for m in messages.outbox(caller.id, offset=offset, limit=limit)]
    return MessageListResponse(items=items, total=len(items))


@router.get("/can-message/{recipient_id}", response_model=CanMessageOut)
def can_message(
    recipient_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    authorizer: MessagingAuthorizer = Depends(get_authorizer),
) -> CanMessageOut:
    allowed = authorizer.can_message(caller.id, recipient_id)
    return CanMessageOut(sender_id=caller.id, recipient_id=recipient_id, allowed=allowed)


@router.post("/{message_id}/read", response_model=MessageOut)
def mark_read(
    message_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> MessageOut:
    return MessageOut.model_validate(messages.mark_read(message_id, caller.id))


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: str = Path(..., min_length=1),
    caller: Any = Depends(get_current_principal),
    messages: MessageService = Depends(get_message_service),
) -> Response:
    messages.delete(message_id, caller.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
