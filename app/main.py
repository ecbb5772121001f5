"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import connect_db, disconnect_db, utcnow
from app.services.analytics_service import analytics_service
from app.services.otp_service import otp_service, run_sweeper

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Campus club and event management API",
    version="1.0.0",
    debug=settings.DEBUG
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with the first problem as the message"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        detail = "Invalid request."
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Startup and shutdown events
@app.on_event("startup")
async def startup():
    """Connect to database and start the verification code sweeper"""
    await connect_db()
    app.state.otp_sweeper = asyncio.create_task(run_sweeper(otp_service))
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)


@app.on_event("shutdown")
async def shutdown():
    sweeper = getattr(app.state, "otp_sweeper", None)
    if sweeper:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
    await disconnect_db()


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": utcnow()}


@app.get("/api/stats")
async def platform_stats():
    """Public platform counters"""
    return await analytics_service.platform_stats()


# Include routers
from app.routes import (  # noqa: E402
    auth, clubs, memberships, events, checkin, certificates,
    feedback, notifications, chat, analytics, reminders, export,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(clubs.router, prefix="/api/clubs", tags=["Clubs"])
app.include_router(memberships.router, prefix="/api/memberships", tags=["Memberships"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(checkin.router, prefix="/api/checkin", tags=["Check-in"])
app.include_router(certificates.router, prefix="/api/certificates", tags=["Certificates"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(reminders.router, prefix="/api/email", tags=["Reminders"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
