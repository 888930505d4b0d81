"""
WhatsApp API endpoints.

- Contact directory used by the messaging agent
- Transport status and a test send for the settings page
- The Twilio webhook: incoming messages are answered by the orchestrator,
  with the sender's number as the conversation session
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from backend.dependencies import get_config, get_orchestrator, get_storage, get_transport
from backend.schemas import (
    ContactCreate,
    ContactListResponse,
    ContactResponse,
    SendTestRequest,
    SendTestResponse,
    WhatsAppStatusResponse,
)
from taskdesk.agents import AgentOrchestrator
from taskdesk.core.config import Config
from taskdesk.core.storage import Storage
from taskdesk.integrations.whatsapp import (
    TransportNotConfiguredError,
    WhatsAppTransport,
    empty_twiml,
    is_e164,
    normalize_number,
    parse_incoming_webhook,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["whatsapp"])

E164_HINT = "Phone number must be in E.164 format (e.g. +34600000000)"


@router.get("/whatsapp/contacts", response_model=ContactListResponse)
async def list_contacts(storage: Storage = Depends(get_storage)):
    """List the WhatsApp directory."""
    contacts = await storage.get_whatsapp_contacts()
    return ContactListResponse(
        contacts=[ContactResponse(**c.to_dict()) for c in contacts],
        total=len(contacts),
    )


@router.post("/whatsapp/contacts", response_model=ContactResponse, status_code=201)
async def create_contact(
    contact: ContactCreate,
    storage: Storage = Depends(get_storage),
    config: Config = Depends(get_config),
):
    """
    Add a contact.

    Numbers are normalized (spaces, dashes, 00 prefix, default country
    code) before the E.164 check. Duplicate numbers are rejected.
    """
    number = normalize_number(
        contact.phoneNumber,
        config.get("default_country_code", section="whatsapp", default="+34"),
    )
    if not is_e164(number):
        raise HTTPException(status_code=400, detail=E164_HINT)

    for existing in await storage.get_whatsapp_contacts():
        if existing.phone_number == number:
            raise HTTPException(status_code=400, detail="A contact with that phone number already exists")

    created = await storage.create_whatsapp_contact({"name": contact.name.strip(), "phone_number": number})
    return created.to_dict()


@router.get("/whatsapp/status", response_model=WhatsAppStatusResponse)
async def whatsapp_status(transport: WhatsAppTransport = Depends(get_transport)):
    """Whether Twilio credentials and the sender number are configured."""
    return transport.status()


@router.post("/whatsapp/send-test", response_model=SendTestResponse)
async def send_test(
    request: SendTestRequest,
    transport: WhatsAppTransport = Depends(get_transport),
):
    """Send a test message to any E.164 number."""
    to = request.to.strip()
    if not is_e164(to):
        raise HTTPException(status_code=400, detail=E164_HINT)

    try:
        result = await transport.send_message(to, request.message)
    except TransportNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not result.success:
        raise HTTPException(status_code=502, detail=f"Failed to send message: {result.error or 'unknown error'}")
    return result.to_dict()


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    storage: Storage = Depends(get_storage),
    transport: WhatsAppTransport = Depends(get_transport),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """
    Twilio incoming-message webhook (form-encoded).

    The reply is sent through the REST transport; the webhook itself is
    acknowledged with an empty TwiML document.
    """
    form = await request.form()
    try:
        incoming = parse_incoming_webhook(form)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("WhatsApp message %s from %s", incoming.message_id, incoming.from_number)

    contact = None
    for candidate in await storage.get_whatsapp_contacts():
        if candidate.phone_number == incoming.from_number:
            contact = candidate
            break

    if contact is not None:
        await storage.create_whatsapp_message({
            "contact_id": contact.id,
            "direction": "incoming",
            "body": incoming.body,
            "status": "received",
        })

    result = await orchestrator.process(incoming.body, session_id=incoming.from_number)

    if transport.configured:
        sent = await transport.send_message(incoming.from_number, result.message)
        if contact is not None:
            await storage.create_whatsapp_message({
                "contact_id": contact.id,
                "direction": "outgoing",
                "body": result.message,
                "status": "sent" if sent.success else "failed",
            })
    else:
        logger.warning("WhatsApp transport not configured; reply to %s not sent", incoming.from_number)

    return Response(content=empty_twiml(), media_type="application/xml")
