"""
OpenAI chat-completions client used by the classifier and the agents.

Every request is wrapped in asyncio.wait_for. A timeout is logged and
returned as an empty result, so callers fall back exactly as they would
for a malformed response. Transport errors propagate to the caller.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


@dataclass
class FunctionCall:
    """A tool invocation chosen by the model. Arguments are the raw JSON text."""
    name: str
    arguments: str = "{}"


@dataclass
class FunctionCallResult:
    """Either a structured tool call or free-text content (possibly neither on timeout)."""
    function_call: Optional[FunctionCall] = None
    content: Optional[str] = None


class LLMClient:
    """Thin async wrapper over the OpenAI SDK."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o",
                 temperature: float = 0.2, timeout_seconds: float = 30,
                 client: Optional[Any] = None):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY)
            model: Chat model name
            temperature: Sampling temperature
            timeout_seconds: Upper bound for a single completion call
            client: Pre-built AsyncOpenAI-compatible client (used by tests)
        """
        self.model = model
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.client = client or AsyncOpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))

    @classmethod
    def from_config(cls, config) -> 'LLMClient':
        """Build a client from the 'llm' config section."""
        return cls(
            model=config.get("model", section="llm", default="gpt-4o"),
            temperature=config.get("temperature", section="llm", default=0.2),
            timeout_seconds=config.get("timeout_seconds", section="llm", default=30),
        )

    async def _create(self, **kwargs):
        return await asyncio.wait_for(
            self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                **kwargs,
            ),
            timeout=self.timeout_seconds,
        )

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        """
        Request a JSON object as plain text.

        Returns:
            The message content, or None if the call timed out
        """
        try:
            completion = await self._create(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
            )
        except asyncio.TimeoutError:
            logger.warning("LLM JSON completion timed out after %ss", self.timeout_seconds)
            return None
        return completion.choices[0].message.content

    async def complete_with_tools(self, system_prompt: str, user_prompt: str,
                                  tools: List[Dict[str, Any]]) -> FunctionCallResult:
        """
        Offer the model a set of tool declarations.

        Args:
            system_prompt: Agent system prompt
            user_prompt: User text plus serialized context
            tools: Declarations of the form {name, description, parameters}

        Returns:
            FunctionCallResult with the first tool call, or the text content
        """
        try:
            completion = await self._create(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                tools=[{"type": "function", "function": decl} for decl in tools],
                tool_choice="auto",
            )
        except asyncio.TimeoutError:
            logger.warning("LLM tool completion timed out after %ss", self.timeout_seconds)
            return FunctionCallResult()

        message = completion.choices[0].message
        tool_calls = getattr(message, "tool_calls", None)
        if tool_calls:
            call = tool_calls[0]
            return FunctionCallResult(
                function_call=FunctionCall(
                    name=call.function.name,
                    arguments=call.function.arguments or "{}",
                )
            )
        return FunctionCallResult(content=message.content)
