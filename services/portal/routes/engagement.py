"""
Engagement Routes
=================

Contact messages and demo requests from the public site.

Submitting is public; reading and triaging requires an admin.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_or_404, require_admin
from services.portal.models import ContactMessageModel, DemoRequestModel
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.engagement import (
    ContactCreate,
    ContactMessage,
    ContactStatus,
    ContactStatusUpdate,
    DemoRequest,
    DemoRequestCreate,
    DemoStatus,
    DemoStatusUpdate,
)


logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Contact
# =============================================================================


@router.post("/contact", response_model=ContactMessage, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    data: ContactCreate,
    db: AsyncSession = Depends(get_postgres_session),
) -> ContactMessage:
    message = ContactMessageModel(**data.model_dump(), status=ContactStatus.NEW)
    db.add(message)
    await db.flush()

    logger.info("contact_message_received", contact_id=message.id)
    return ContactMessage.model_validate(message)


@router.get("/contact", response_model=list[ContactMessage])
async def list_contact_messages(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> list[ContactMessage]:
    result = await db.execute(select(ContactMessageModel).order_by(ContactMessageModel.created_at.desc()))
    return [ContactMessage.model_validate(m) for m in result.scalars().all()]


@router.patch("/contact/{contact_id}/status", response_model=ContactMessage)
async def update_contact_status(
    contact_id: int,
    data: ContactStatusUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> ContactMessage:
    message = await get_or_404(db, ContactMessageModel, contact_id, "Contact message")
    message.status = data.status
    await db.flush()

    logger.info("contact_status_updated", contact_id=contact_id, status=data.status.value, user_id=current_user.id)
    return ContactMessage.model_validate(message)


# =============================================================================
# Demo requests
# =============================================================================


@router.post("/book-demo", response_model=DemoRequest, status_code=status.HTTP_201_CREATED)
async def book_demo(
    data: DemoRequestCreate,
    db: AsyncSession = Depends(get_postgres_session),
) -> DemoRequest:
    request = DemoRequestModel(**data.model_dump(), status=DemoStatus.NEW)
    db.add(request)
    await db.flush()

    logger.info("demo_request_received", demo_request_id=request.id)
    return DemoRequest.model_validate(request)


@router.get("/book-demo", response_model=list[DemoRequest])
async def list_demo_requests(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> list[DemoRequest]:
    result = await db.execute(select(DemoRequestModel).order_by(DemoRequestModel.created_at.desc()))
    return [DemoRequest.model_validate(r) for r in result.scalars().all()]


@router.patch("/book-demo/{demo_request_id}/status", response_model=DemoRequest)
async def update_demo_status(
    demo_request_id: int,
    data: DemoStatusUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> DemoRequest:
    request = await get_or_404(db, DemoRequestModel, demo_request_id, "Demo request")
    request.status = data.status
    await db.flush()

    logger.info(
        "demo_request_status_updated",
        demo_request_id=demo_request_id,
        status=data.status.value,
        user_id=current_user.id,
    )
    return DemoRequest.model_validate(request)
