"""
Event Routes
Browse, create and register for events
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from app.auth import get_current_user, get_optional_user
from app.services.event_service import event_service
from app.schemas.event import (
    CreateEventRequest,
    EventStatusRequest,
    EventListItem,
    EventDetailResponse,
    EventMutationResponse,
    RegisterResponse,
)

router = APIRouter()


@router.get("", response_model=List[EventListItem])
async def list_events(
    club_id: Optional[UUID] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    upcoming: bool = Query(False, description="Only upcoming events from today on"),
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200)
):
    return await event_service.list_events(
        club_id=str(club_id) if club_id else None,
        event_status=status_filter,
        upcoming=upcoming,
        search=search,
        limit=limit
    )


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: UUID,
    current_user: Optional[dict] = Depends(get_optional_user)
):
    return await event_service.get_event(str(event_id), current_user)


@router.post("", response_model=EventMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: CreateEventRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Create an event (club leads, co-leads and admins)

    Approved club members are notified.
    """
    event = await event_service.create_event(request, current_user)
    return {"message": "Event created!", "event": event}


@router.post("/{event_id}/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    event_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    """Register for an event if there is room"""
    return await event_service.register(str(event_id), current_user)


@router.delete("/{event_id}/register")
async def cancel_registration(
    event_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    return await event_service.cancel_registration(str(event_id), current_user)


@router.put("/{event_id}/status", response_model=EventMutationResponse)
async def update_status(
    event_id: UUID,
    request: EventStatusRequest,
    current_user: dict = Depends(get_current_user)
):
    """Cancel or complete an upcoming event"""
    event = await event_service.update_status(str(event_id), request.status, current_user)
    return {"message": f"Event {request.status}.", "event": event}


@router.get("/{event_id}/share")
async def share_links(event_id: UUID):
    return await event_service.share_links(str(event_id))
