"""FastAPI routes for the Notifications domain — read-only email history."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from notifications.api.schemas import EmailLogListResponse, EmailLogResponse
from notifications.notification.email_log import EmailLog

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/orders/{order_id}/emails", response_model=EmailLogListResponse)
async def list_order_emails(order_id: str) -> EmailLogListResponse:
    logs = (
        current_domain.repository_for(EmailLog)
        ._dao.query.filter(order_id=order_id)
        .order_by("created_at")
        .limit(None)
        .all()
        .items
    )
    return EmailLogListResponse(emails=[EmailLogResponse.of(log) for log in logs], total=len(logs))
