"""
Certificate Routes
Issue, bulk issue, public verification and the holder's list
"""

from typing import List

from fastapi import APIRouter, Depends, status
from app.auth import get_current_user
from app.services.certificate_service import certificate_service
from app.schemas.certificate import (
    IssueCertificateRequest,
    BulkIssueRequest,
    IssueCertificateResponse,
    BulkIssueResponse,
    CertificateVerifyResponse,
    MyCertificateResponse,
)

router = APIRouter()


@router.post("/issue", response_model=IssueCertificateResponse, status_code=status.HTTP_201_CREATED)
async def issue(
    request: IssueCertificateRequest,
    current_user: dict = Depends(get_current_user)
):
    """Issue one certificate to an attendee (club staff)"""
    certificate = await certificate_service.issue(
        str(request.event_id), str(request.user_id), request.certificate_type, current_user
    )
    return {"message": "Certificate issued!", "certificate": certificate}


@router.post("/bulk-issue", response_model=BulkIssueResponse)
async def bulk_issue(
    request: BulkIssueRequest,
    current_user: dict = Depends(get_current_user)
):
    """Issue to every attendee who has no certificate yet"""
    return await certificate_service.bulk_issue(str(request.event_id), request.certificate_type, current_user)


@router.get("/verify/{code}", response_model=CertificateVerifyResponse)
async def verify(code: str):
    """Public certificate verification"""
    return await certificate_service.verify(code)


@router.get("/my", response_model=List[MyCertificateResponse])
async def my_certificates(current_user: dict = Depends(get_current_user)):
    return await certificate_service.my_certificates(current_user["id"])
