"""Contact request delivery through the Resend HTTP API.

Visitor requests go to the inbox of the selected branch (``CONTACT_RECIPIENTS``,
falling back to ``CONTACT_EMAIL``); requests made on a reseller storefront go
to the reseller's configured email. Delivery failures raise
``ContactDeliveryError`` carrying a message translated to the visitor's
language.
"""

import html
import time

import httpx

from ..core.config import Settings, get_settings
from ..core.exceptions import ContactDeliveryError
from ..core.logging import log_error, log_external_call, logger
from ..db import resellers as resellers_db
from ..models.requests import ContactRequest
from ..utils.translations import t


def stage_label(stage_or_option: str) -> str:
    """Label used in mail subjects, e.g. "Steg 2" -> "STAGE 2"."""
    return stage_or_option.replace("Steg", "STAGE", 1).upper()


def render_subject(request: ContactRequest) -> str:
    vehicle = request.vehicle
    parts = [vehicle.brand, vehicle.model, vehicle.year, vehicle.engine] if vehicle else []
    subject = " ".join(p for p in parts if p) or request.name
    subject = f"NEW Tuning Request - {subject}"
    if request.stage_or_option:
        subject += f" | {stage_label(request.stage_or_option)}"
    return subject


def render_html(request: ContactRequest) -> str:
    """Mail body; every visitor-supplied value is HTML-escaped."""

    def item(label: str, value: str | None) -> str:
        if not value:
            return ""
        return f"<li><strong>{label}:</strong> {html.escape(value)}</li>"

    vehicle = request.vehicle
    vehicle_items = ""
    if vehicle:
        vehicle_items = "".join(
            [
                item("Brand", vehicle.brand),
                item("Model", vehicle.model),
                item("Year", vehicle.year),
                item("Engine", vehicle.engine),
            ]
        )
    if request.stage_or_option:
        vehicle_items += item("Stage/Option", stage_label(request.stage_or_option))

    customer_items = "".join(
        [
            item("Name", request.name),
            item("Email", request.email),
            item("Phone", request.phone),
            item("Branch", request.branch),
        ]
    )
    message = html.escape(request.message).replace("\n", "<br>")
    link = (
        f'<p><a href="{html.escape(request.link, quote=True)}">'
        f"{html.escape(request.link)}</a></p>"
        if request.link
        else ""
    )

    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        "<h2>New Tuning Request Received</h2>"
        f'<h3>Vehicle Details</h3><ul style="list-style: none; padding: 0;">{vehicle_items}</ul>'
        f'<h3>Customer Details</h3><ul style="list-style: none; padding: 0;">{customer_items}</ul>'
        f"<h3>Message</h3><p>{message}</p>"
        f"{link}"
        "</div>"
    )


class ContactMailer:
    """Async client for the Resend email API."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or httpx.AsyncClient(timeout=15.0)

    async def send(self, request: ContactRequest, recipient: str) -> str | None:
        """Deliver one request. Returns the provider's message id."""
        if not self.settings.resend_api_key:
            logger.warning("RESEND_API_KEY not set - contact requests cannot be sent")
            raise ContactDeliveryError(t(request.lang, "contactError"))

        payload = {
            "from": self.settings.contact_from_email,
            "to": [recipient],
            "reply_to": request.email,
            "subject": render_subject(request),
            "html": render_html(request),
        }
        start = time.time()
        try:
            resp = await self.client.post(
                self.settings.resend_api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            log_external_call("resend", "send_email", False, (time.time() - start) * 1000)
            log_error("Contact delivery failed", e, recipient=recipient)
            raise ContactDeliveryError(t(request.lang, "contactError")) from e

        log_external_call("resend", "send_email", True, (time.time() - start) * 1000)
        return resp.json().get("id") if resp.content else None

    async def close(self) -> None:
        await self.client.aclose()


async def resolve_recipient(request: ContactRequest, settings: Settings) -> str:
    """Reseller requests go to the reseller, everything else to the branch inbox."""
    if not request.reseller_id:
        return settings.recipient_for_branch(request.branch)

    config = await resellers_db.fetch_reseller_config(request.reseller_id)
    if config is None or not config.email:
        log_error("Reseller email not found", reseller_id=request.reseller_id)
        raise ContactDeliveryError(t(request.lang, "contactError"))
    return config.email


async def submit_contact(request: ContactRequest, mailer: ContactMailer) -> dict[str, str]:
    recipient = await resolve_recipient(request, mailer.settings)
    message_id = await mailer.send(request, recipient)
    logger.info(f"Contact request delivered id={message_id} reseller={request.reseller_id}")
    return {"message": t(request.lang, "contactSent")}
