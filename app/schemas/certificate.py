"""
Certificate Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date
from uuid import UUID


class IssueCertificateRequest(BaseModel):
    event_id: UUID
    user_id: UUID
    certificate_type: str = Field("participation", min_length=1, max_length=30)


class BulkIssueRequest(BaseModel):
    event_id: UUID
    certificate_type: str = Field("participation", min_length=1, max_length=30)


class CertificateResponse(BaseModel):
    id: UUID
    user_id: UUID
    event_id: UUID
    certificate_type: str
    verification_code: str
    issued_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyCertificateResponse(CertificateResponse):
    event_title: Optional[str] = None
    event_date: Optional[date] = None
    club_name: Optional[str] = None


class IssueCertificateResponse(BaseModel):
    message: str
    certificate: CertificateResponse


class BulkIssueResponse(BaseModel):
    message: str
    generated: int
    skipped: int
    total_attendees: int


class CertificateVerifyResponse(BaseModel):
    """Public verification result, no contact details"""
    valid: bool
    holder_name: str
    event_title: str
    event_date: Optional[date] = None
    certificate_type: str
    issued_at: Optional[datetime] = None
    verification_code: str
