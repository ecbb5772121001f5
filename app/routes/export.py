"""
Export Routes
Attendee and member lists for club staff
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from app.auth import get_current_user
from app.services.export_service import (
    export_service,
    rows_to_csv,
    safe_filename,
    ATTENDEE_COLUMNS,
    MEMBER_COLUMNS,
)

router = APIRouter()


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/event/{event_id}/attendees")
async def export_attendees(
    event_id: UUID,
    format: str = Query("json", pattern="^(json|csv)$"),
    current_user: dict = Depends(get_current_user)
):
    result = await export_service.event_attendees(str(event_id), current_user)
    if format == "csv":
        return _csv_response(
            rows_to_csv(result["attendees"], ATTENDEE_COLUMNS),
            f"{safe_filename(result['event'])}_attendees.csv"
        )
    return result


@router.get("/club/{club_id}/members")
async def export_members(
    club_id: UUID,
    format: str = Query("json", pattern="^(json|csv)$"),
    current_user: dict = Depends(get_current_user)
):
    result = await export_service.club_members(str(club_id), current_user)
    if format == "csv":
        return _csv_response(
            rows_to_csv(result["members"], MEMBER_COLUMNS),
            f"{safe_filename(result['club'])}_members.csv"
        )
    return result
