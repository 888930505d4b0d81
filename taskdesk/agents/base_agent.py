"""
Base Agent for taskdesk
Defines the shared shape of every specialized agent.

Each agent owns:
- A system prompt describing its responsibilities
- A list of tool declarations offered to the LLM
- A pydantic argument model and an async handler per tool

The dispatch loop lives here (Template Method): ask the model, validate the
tool call, run the handler against storage, or fall back to the free-text
reply. Nothing in this loop raises to the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type
import json
import logging

from pydantic import BaseModel

from ..llm.client import FunctionCall, LLMClient
from ..llm.parsing import ModelReply, parse_json_model
from .context import AgentContext

# Confidence reported for the degraded paths of the dispatch loop
INVALID_ARGUMENTS_CONFIDENCE = 0.4
UNKNOWN_TOOL_CONFIDENCE = 0.3
RAW_TEXT_CONFIDENCE = 0.6
EMPTY_REPLY_CONFIDENCE = 0.3
EXCEPTION_CONFIDENCE = 0.5

ToolHandler = Callable[[Any, AgentContext], Awaitable['AgentResponse']]


@dataclass
class AgentRequest:
    """User text plus the context snapshot built for the receiving agent."""
    user_input: str
    context: AgentContext


@dataclass
class AgentResponse:
    """
    Standard response structure from any agent.

    Attributes:
        response: Human-readable message shown to the user
        action: Name of the tool that fired, "respond", "error", or None
        data: Structured payload (task dicts, stats, id sets, ...)
        confidence: Self-reported confidence in 0..1, used by collaborative routing
        failed: True when the agent raised instead of answering
    """
    response: str
    action: Optional[str] = None
    data: Optional[Any] = None
    confidence: float = 0.7
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "response": self.response,
            "data": self.data,
            "confidence": self.confidence,
        }

    @classmethod
    def ok(cls, action: str, response: str, data: Optional[Any] = None,
           confidence: float = 0.9) -> 'AgentResponse':
        """Factory method for a tool that completed."""
        return cls(response=response, action=action, data=data, confidence=confidence)

    @classmethod
    def error(cls, response: str, data: Optional[Any] = None,
              confidence: float = 0.8) -> 'AgentResponse':
        """Factory method for a user-facing failure (not found, validation, ...)."""
        return cls(response=response, action="error", data=data, confidence=confidence)

    @classmethod
    def respond(cls, response: str, confidence: float = 0.7) -> 'AgentResponse':
        """Factory method for a plain conversational reply."""
        return cls(response=response, action="respond", confidence=confidence)


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    """Coerce a model-reported confidence into 0..1."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, value))


class SpecializedAgent(ABC):
    """
    Abstract base class for all taskdesk agents.

    Subclasses must implement:
    - system_prompt: the agent's instructions
    - get_functions(): tool declarations {name, description, parameters}
    - get_handlers(): tool name -> (argument model, async handler)

    Subclasses may override pre_process() to answer without calling the model.
    """

    system_prompt: str = ""

    def __init__(self, storage, llm: LLMClient, config=None, name: str = "agent"):
        """
        Initialize the agent.

        Args:
            storage: Storage implementation used by tool handlers
            llm: LLM client used for tool calling
            config: Optional Config instance; defaults apply when omitted
            name: Agent type (e.g., "task", "planner")
        """
        self.storage = storage
        self.llm = llm
        self.config = config
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    def get_functions(self) -> List[Dict[str, Any]]:
        """Return the tool declarations this agent offers to the model."""
        pass

    @abstractmethod
    def get_handlers(self) -> Dict[str, Tuple[Type[BaseModel], ToolHandler]]:
        """Map each tool name to its argument model and handler."""
        pass

    async def pre_process(self, request: AgentRequest) -> Optional[AgentResponse]:
        """Hook for answering locally before the model is called."""
        return None

    async def process(self, request: AgentRequest) -> AgentResponse:
        """
        Process a user request.

        Args:
            request: User text and the agent's context snapshot

        Returns:
            AgentResponse; failures are reported in the response, never raised
        """
        self.log_action("process", {"input_length": len(request.user_input)})

        try:
            local = await self.pre_process(request)
            if local is not None:
                return local

            result = await self.llm.complete_with_tools(
                self.system_prompt,
                self.build_user_prompt(request),
                self.get_functions(),
            )

            if result.function_call is not None:
                return await self.dispatch(result.function_call, request.context)

            return self.interpret_text(result.content)
        except Exception as e:
            self.logger.error(f"Error processing request: {e}", exc_info=True)
            return AgentResponse(
                response=f"Something went wrong while handling your {self.name} request. Please try again.",
                action="error",
                confidence=EXCEPTION_CONFIDENCE,
                failed=True,
            )

    def build_user_prompt(self, request: AgentRequest) -> str:
        """Serialize the context ahead of the user's text."""
        context_json = json.dumps(request.context.to_dict(), indent=2, default=str)
        return f"System context:\n{context_json}\n\nUser request: {request.user_input}"

    async def dispatch(self, call: FunctionCall, context: AgentContext) -> AgentResponse:
        """
        Validate a tool call and run its handler.

        Args:
            call: Tool name and raw JSON arguments chosen by the model
            context: The agent's context snapshot

        Returns:
            Handler response, or a degraded text response for bad calls
        """
        handlers = self.get_handlers()
        entry = handlers.get(call.name)
        if entry is None:
            self.logger.warning("Model chose unknown tool: %s", call.name)
            return AgentResponse.respond(
                f"I don't know how to do '{call.name}'. Could you rephrase your request?",
                confidence=UNKNOWN_TOOL_CONFIDENCE,
            )

        args_model, handler = entry
        parsed = parse_json_model(args_model, call.arguments)
        if not parsed.ok:
            self.logger.warning("Invalid arguments for %s: %s", call.name, parsed.error)
            return AgentResponse.respond(
                f"I couldn't make sense of the details for {call.name}. "
                "Could you say that again with a bit more detail?",
                confidence=INVALID_ARGUMENTS_CONFIDENCE,
            )

        self.log_action(call.name, parsed.value.model_dump(exclude_none=True))
        return await handler(parsed.value, context)

    def interpret_text(self, content: Optional[str]) -> AgentResponse:
        """Read a free-text reply, expected to be a JSON ModelReply."""
        if not content:
            return AgentResponse.respond(
                "I couldn't process your request. Could you rephrase it?",
                confidence=EMPTY_REPLY_CONFIDENCE,
            )

        parsed = parse_json_model(ModelReply, content)
        if not parsed.ok:
            return AgentResponse.respond(content, confidence=RAW_TEXT_CONFIDENCE)

        reply = parsed.value
        return AgentResponse(
            response=reply.response,
            action=reply.action or "respond",
            data=reply.data,
            confidence=clamp_confidence(reply.confidence, default=0.7),
        )

    def log_action(self, action: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an action taken by this agent as one JSON line.

        Args:
            action: Description of the action taken
            details: Optional additional details as key-value pairs
        """
        log_entry = {
            "agent": self.name,
            "action": action,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        if details:
            log_entry["details"] = details

        self.logger.info(json.dumps(log_entry, default=str))

    def get_config_value(self, key: str, section: str = "agents",
                         default: Any = None) -> Any:
        """
        Get a configuration value with fallback to default.

        Args:
            key: Configuration key to retrieve
            section: Configuration section (settings, llm, agents, whatsapp)
            default: Default value if key not found or no config was given
        """
        if self.config is None:
            return default
        return self.config.get(key, section=section, default=default)
