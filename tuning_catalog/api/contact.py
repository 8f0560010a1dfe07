"""Contact request routes (rate limited per client IP)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from ..core.config import get_settings
from ..models.requests import ContactRequest
from ..services.contact import ContactMailer, submit_contact
from .deps import get_mailer, limiter

router = APIRouter(prefix="/api")

MailerDep = Annotated[ContactMailer, Depends(get_mailer)]


def _contact_rate_limit() -> str:
    return get_settings().contact_rate_limit


@router.post("/contact")
@limiter.limit(_contact_rate_limit)
async def send_contact(request: Request, body: ContactRequest, mailer: MailerDep):
    """Send a visitor's request to the selected branch.

    On failure the response carries a translated message in ``detail``;
    the client keeps its form values and may retry.
    """
    return await submit_contact(body.model_copy(update={"reseller_id": None}), mailer)


@router.post("/reseller-contact")
@limiter.limit(_contact_rate_limit)
async def send_reseller_contact(request: Request, body: ContactRequest, mailer: MailerDep):
    """Send a request made on a reseller storefront to that reseller."""
    if not body.reseller_id:
        raise HTTPException(status_code=422, detail="reseller_id is required")
    return await submit_contact(body, mailer)
