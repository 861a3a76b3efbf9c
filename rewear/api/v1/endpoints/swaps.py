"""
Swap endpoints - propose, list, transition, chat and rate.
Transitions are PUTs on sub-resources (/accept, /reject, /complete, /cancel).
"""

from fastapi import APIRouter, Query, status

from rewear.core.dependencies import CurrentUser, SwapPage
from rewear.core.enums import SwapStatus
from rewear.schemas.common import MessageResponse, Page, Pagination
from rewear.schemas.swap import (
    ChatMessageCreate,
    ChatMessageResponse,
    RatingCreate,
    RatingResponse,
    SwapCancel,
    SwapCreate,
    SwapResponse,
    SwapResponseMessage,
)
from rewear.services.factories import SwapSvc

router = APIRouter()


@router.post("", response_model=SwapResponse, status_code=status.HTTP_201_CREATED)
async def create_swap(data: SwapCreate, user: CurrentUser, svc: SwapSvc):
    return SwapResponse.model_validate(await svc.create(user, data))


@router.get("", response_model=Page[SwapResponse])
async def list_swaps(user: CurrentUser, svc: SwapSvc, page: SwapPage, status: SwapStatus | None = Query(None)):
    """Swaps the user initiated or received."""
    swaps, total = await svc.list_for_user(
        user, status=status.value if status else None, skip=page.skip, limit=page.limit
    )
    return Page(
        items=[SwapResponse.model_validate(s) for s in swaps],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


@router.get("/pending", response_model=list[SwapResponse])
async def pending_swaps(user: CurrentUser, svc: SwapSvc):
    """Requests waiting for the user's answer."""
    return [SwapResponse.model_validate(s) for s in await svc.pending_for(user)]


@router.get("/{swap_id}", response_model=SwapResponse)
async def get_swap(swap_id: int, user: CurrentUser, svc: SwapSvc):
    return SwapResponse.model_validate(await svc.view(swap_id, user))


@router.put("/{swap_id}/accept", response_model=SwapResponse)
async def accept_swap(
    swap_id: int,
    user: CurrentUser,
    svc: SwapSvc,
    data: SwapResponseMessage | None = None,
):
    return SwapResponse.model_validate(await svc.accept(swap_id, user, data.response_message if data else None))


@router.put("/{swap_id}/reject", response_model=SwapResponse)
async def reject_swap(
    swap_id: int,
    user: CurrentUser,
    svc: SwapSvc,
    data: SwapResponseMessage | None = None,
):
    return SwapResponse.model_validate(await svc.reject(swap_id, user, data.response_message if data else None))


@router.put("/{swap_id}/complete", response_model=SwapResponse)
async def complete_swap(swap_id: int, user: CurrentUser, svc: SwapSvc):
    return SwapResponse.model_validate(await svc.complete(swap_id, user))


@router.put("/{swap_id}/cancel", response_model=SwapResponse)
async def cancel_swap(
    swap_id: int,
    user: CurrentUser,
    svc: SwapSvc,
    data: SwapCancel | None = None,
):
    return SwapResponse.model_validate(await svc.cancel(swap_id, user, data.reason if data else None))


@router.post("/{swap_id}/messages", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(swap_id: int, data: ChatMessageCreate, user: CurrentUser, svc: SwapSvc):
    return ChatMessageResponse.model_validate(await svc.add_message(swap_id, user, data.message))


@router.put("/{swap_id}/messages/read", response_model=MessageResponse)
async def mark_messages_read(swap_id: int, user: CurrentUser, svc: SwapSvc):
    changed = await svc.mark_messages_read(swap_id, user)
    return MessageResponse(message=f"{changed} messages marked as read")


@router.post("/{swap_id}/rating", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def rate_swap(swap_id: int, data: RatingCreate, user: CurrentUser, svc: SwapSvc):
    return RatingResponse.model_validate(await svc.rate(swap_id, user, data.rating, data.comment))
