"""
Club Routes
Browse, create, edit and review clubs
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from app.auth import get_current_user, get_optional_user, get_admin
from app.services.club_service import club_service
from app.services.membership_service import membership_service
from app.schemas.club import (
    CreateClubRequest,
    UpdateClubRequest,
    ReviewClubRequest,
    ClubListItem,
    ClubDetailResponse,
    ClubMemberResponse,
    ClubMutationResponse,
)

router = APIRouter()


@router.get("", response_model=List[ClubListItem])
async def list_clubs(
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Match name or description"),
    sort: str = Query("members", pattern="^(members|rating|newest)$")
):
    """List active clubs"""
    return await club_service.list_clubs(category=category, search=search, sort=sort)


@router.get("/{club_id}", response_model=ClubDetailResponse)
async def get_club(
    club_id: UUID,
    current_user: Optional[dict] = Depends(get_optional_user)
):
    """
    Club details with members and upcoming events

    Signed-in callers also get their own membership.
    """
    return await club_service.get_club(str(club_id), current_user)


@router.post("", response_model=ClubMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_club(
    request: CreateClubRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Create a club

    Admins create active clubs; anyone else files a request that admins review.
    The creator becomes the club lead.
    """
    club = await club_service.create_club(request, current_user)
    message = "Club created!" if club["status"] == "active" else "Club request submitted for approval."
    return {"message": message, "club": club}


@router.put("/{club_id}", response_model=ClubMutationResponse)
async def update_club(
    club_id: UUID,
    request: UpdateClubRequest,
    current_user: dict = Depends(get_current_user)
):
    club = await club_service.update_club(str(club_id), request, current_user)
    return {"message": "Club updated.", "club": club}


@router.put("/{club_id}/review", response_model=ClubMutationResponse)
async def review_club(
    club_id: UUID,
    request: ReviewClubRequest,
    current_admin: dict = Depends(get_admin)
):
    """Activate or deactivate a club (Admin only)"""
    club = await club_service.review_club(str(club_id), request.status, current_admin)
    return {"message": f"Club {request.status}.", "club": club}


@router.get("/{club_id}/members", response_model=List[ClubMemberResponse])
async def list_members(club_id: UUID):
    await club_service.get_club_by_id(str(club_id))
    return await membership_service.list_members(str(club_id))
