"""Tool declarations and argument models for the messaging agent."""

from pydantic import BaseModel, Field, field_validator


class SendMessageArgs(BaseModel):
    contact: str
    message: str = Field(min_length=1)


class ContactHistoryArgs(BaseModel):
    contact: str
    limit: int = Field(default=10, ge=1)

    @field_validator("limit", mode="before")
    @classmethod
    def _null_limit(cls, value):
        return 10 if value is None else value


MESSAGING_TOOLS = [
    {
        "name": "send_message",
        "description": "Send a WhatsApp message to a contact by name or E.164 number",
        "parameters": {
            "type": "object",
            "properties": {
                "contact": {"type": "string", "description": "Contact name or phone number (e.g. +34600000000)"},
                "message": {"type": "string", "description": "Text to send"},
            },
            "required": ["contact", "message"],
        },
    },
    {
        "name": "list_contacts",
        "description": "List the WhatsApp contacts in the directory",
        "parameters": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "get_contact_history",
        "description": "Show recent messages exchanged with a contact",
        "parameters": {
            "type": "object",
            "properties": {
                "contact": {"type": "string", "description": "Contact name or phone number"},
                "limit": {"type": "integer", "description": "Maximum number of messages (default 10)"},
            },
            "required": ["contact"],
        },
    },
]
