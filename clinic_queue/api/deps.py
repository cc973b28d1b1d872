from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Appointment service bound to the request's database session."""
    return AppointmentService(db)

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic per-client rate limiting for booking endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:booking:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # one hour window
    else:
        if int(current_requests) >= settings.BOOKING_RATE_LIMIT_PER_HOUR:
            logger.warning(f"Booking rate limit exceeded for {client_ip}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many booking requests. Please try again later."
            )
        redis_client.incr(key)
