"""
Analytics Routes
Platform overview, user activity, leaderboard, insights, suggestions and drafts
"""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from app.auth import get_current_user, get_club_lead_or_admin
from app.services.analytics_service import analytics_service

router = APIRouter()


class SuggestClubsRequest(BaseModel):
    interests: List[str] = []


class GenerateDescriptionRequest(BaseModel):
    type: Literal["event", "club"] = "event"
    name: str
    club_name: Optional[str] = None
    category: Optional[str] = None


@router.get("/overview")
async def overview(current_user: dict = Depends(get_current_user)):
    return await analytics_service.overview()


@router.get("/user/{user_id}")
async def user_analytics(
    user_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Activity summary; pass **me** for your own"""
    return await analytics_service.user_analytics(user_id, current_user)


@router.get("/leaderboard")
async def leaderboard():
    """Top students by attendance, certificates and clubs (public)"""
    return await analytics_service.leaderboard()


@router.get("/event-insights/{event_id}")
async def event_insights(
    event_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    return await analytics_service.event_insights(str(event_id))


@router.post("/suggest-clubs")
async def suggest_clubs(
    request: SuggestClubsRequest,
    current_user: dict = Depends(get_current_user)
):
    """Up to five active clubs you have not joined, interest matches first"""
    return await analytics_service.suggest_clubs(current_user["id"], request.interests)

@router.post("/generate-description")
async def generate_description(
    request: GenerateDescriptionRequest,
    current_user: dict = Depends(get_club_lead_or_admin)
):
    """Template-based starting text for a club or event description"""
    return analytics_service.generate_description(
        request.type, request.name, request.club_name, request.category
    )
