"""
Membership Routes
Join requests, decisions, leaving and club roles
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from app.auth import get_current_user
from app.services.membership_service import membership_service
from app.schemas.membership import (
    MembershipDecisionRequest,
    AssignRoleRequest,
    MembershipMutationResponse,
    PendingRequestResponse,
    MyMembershipResponse,
)

router = APIRouter()


@router.post("/join/{club_id}", response_model=MembershipMutationResponse, status_code=status.HTTP_201_CREATED)
async def request_join(
    club_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    """Ask to join a club; the club's leads are notified"""
    membership = await membership_service.request_join(current_user, str(club_id))
    return {"message": "Join request sent!", "membership": membership}


@router.get("/my", response_model=List[MyMembershipResponse])
async def my_memberships(current_user: dict = Depends(get_current_user)):
    return await membership_service.my_memberships(current_user["id"])


@router.get("/pending/{club_id}", response_model=List[PendingRequestResponse])
async def list_pending(
    club_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    """Pending join requests (club leads, co-leads and admins)"""
    return await membership_service.list_pending(str(club_id), current_user)


@router.put("/{membership_id}", response_model=MembershipMutationResponse)
async def decide(
    membership_id: UUID,
    request: MembershipDecisionRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Approve or reject a join request

    - **status**: 'approved' or 'rejected'
    """
    membership = await membership_service.decide(str(membership_id), request.status, current_user)
    return {"message": f"Membership {request.status}.", "membership": membership}


@router.put("/{membership_id}/role", response_model=MembershipMutationResponse)
async def assign_role(
    membership_id: UUID,
    request: AssignRoleRequest,
    current_user: dict = Depends(get_current_user)
):
    membership = await membership_service.assign_role(str(membership_id), request.role, current_user)
    return {"message": "Role updated.", "membership": membership}


@router.delete("/leave/{club_id}")
async def leave(
    club_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    await membership_service.leave(current_user, str(club_id))
    return {"message": "You have left the club."}
