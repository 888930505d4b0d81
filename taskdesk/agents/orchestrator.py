"""
Agent Orchestrator for taskdesk

The single entry point for chat requests:
1. Reference check: follow-ups about the last task skip classification
2. Keyword classification, then LLM classification when undecided
3. Direct dispatch to one agent, or a collaborative round when confidence is low
4. History and last-task bookkeeping for the session
5. One normalized result shape for every path, failures included

Conversation state is kept per session id, so concurrent conversations
sharing one orchestrator never see each other's history.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import asyncio
import logging

from .analytics_agent import AnalyticsAgent
from .base_agent import AgentRequest, AgentResponse, SpecializedAgent
from .category_agent import CategoryAgent
from .context import ContextBuilder
from .conversation import ConversationState, ReferenceResolver
from .intent_classifier import AGENT_KEYWORDS, IntentClassifier
from .marketing_agent import MarketingAgent
from .messaging_agent import MessagingAgent
from .planner_agent import PlannerAgent
from .project_agent import ProjectAgent
from .task_agent import TaskAgent

GENERIC_ERROR_MESSAGE = "Something went wrong while processing your request. Please try again."
CLARIFY_MESSAGE = (
    "I'm not sure what you'd like me to do. Could you be more specific? "
    "I can help with tasks, categories, reports, planning, marketing, projects and WhatsApp messages."
)


@dataclass
class OrchestratorResult:
    """Normalized response returned to the HTTP layer and the CLI."""
    message: str
    action: Optional[str] = None
    data: Optional[Any] = None
    agent_used: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "message": self.message,
            "data": self.data,
            "agentUsed": self.agent_used,
        }


def build_default_agents(storage, llm, config=None, transport=None) -> Dict[str, SpecializedAgent]:
    """The full roster, in keyword declaration order."""
    return {
        "task": TaskAgent(storage, llm, config),
        "category": CategoryAgent(storage, llm, config),
        "analytics": AnalyticsAgent(storage, llm, config),
        "planner": PlannerAgent(storage, llm, config),
        "marketing": MarketingAgent(storage, llm, config),
        "project": ProjectAgent(storage, llm, config),
        "messaging": MessagingAgent(storage, llm, config, transport=transport),
    }


class AgentOrchestrator:
    """
    Routes each user message to a specialized agent.

    Attributes:
        agents: Registry of agents by type
        sessions: ConversationState per session id
    """

    def __init__(self, storage, llm, config=None,
                 agents: Optional[Dict[str, SpecializedAgent]] = None, transport=None):
        """
        Initialize the orchestrator.

        Args:
            storage: Storage implementation shared by all agents
            llm: LLMClient for classification and agents
            config: Optional Config; thresholds default to 0.8 / 0.7 / 0.4
            agents: Agent registry (defaults to the full roster)
            transport: WhatsAppTransport for the messaging agent
        """
        self.storage = storage
        self.llm = llm
        self.config = config
        self.logger = logging.getLogger("agent.orchestrator")

        self.dispatch_threshold = self._setting("dispatch_threshold", 0.7)
        self.collaborative_floor = self._setting("collaborative_floor", 0.4)

        self.agents: Dict[str, SpecializedAgent] = (
            agents if agents is not None else build_default_agents(storage, llm, config, transport)
        )
        self.classifier = IntentClassifier(
            llm,
            keyword_threshold=self._setting("keyword_threshold", 0.8),
            agent_types=[name for name in AGENT_KEYWORDS if name in self.agents] or None,
        )
        self.context_builder = ContextBuilder(storage, history_window=self._setting("history_window", 5))
        self.resolver = ReferenceResolver()
        self.sessions: Dict[str, ConversationState] = {}

        self.logger.info("AgentOrchestrator initialized with agents: %s", list(self.agents))

    def _setting(self, key: str, default: Any) -> Any:
        if self.config is None:
            return default
        return self.config.get(key, section="agents", default=default)

    def get_session(self, session_id: str = "default") -> ConversationState:
        if session_id not in self.sessions:
            self.sessions[session_id] = ConversationState(session_id=session_id)
        return self.sessions[session_id]

    async def process(self, user_input: str, session_id: str = "default") -> OrchestratorResult:
        """
        Main entry point for processing user input.

        Args:
            user_input: Natural language input from the user
            session_id: Conversation key; each session has its own history

        Returns:
            OrchestratorResult; never raises
        """
        state = self.get_session(session_id)
        try:
            return await self._route(user_input, state)
        except Exception as e:
            self.logger.error(f"Orchestrator error: {e}", exc_info=True)
            state.record(user_input, "error", None, GENERIC_ERROR_MESSAGE)
            return OrchestratorResult(message=GENERIC_ERROR_MESSAGE, agent_used="orchestrator")

    async def _route(self, user_input: str, state: ConversationState) -> OrchestratorResult:
        reference = self.resolver.check(user_input, state)
        if reference and state.last_task_id is not None and reference.agent_type in self.agents:
            self.logger.info("Reference (%s) to task %s, routing to %s",
                             reference.kind, state.last_task_id, reference.agent_type)
            last_task = await self.storage.get_task(state.last_task_id)
            return await self._dispatch(reference.agent_type, user_input, state, last_task)

        determination = await self.classifier.classify(user_input)
        if determination.confidence < self.dispatch_threshold:
            return await self._collaborate(user_input, state)

        if determination.agent_type not in self.agents:
            message = f"The {determination.agent_type} assistant is not available yet."
            state.record(user_input, "orchestrator", None, message)
            return OrchestratorResult(message=message, agent_used="orchestrator")

        return await self._dispatch(determination.agent_type, user_input, state)

    async def _dispatch(self, agent_type: str, user_input: str, state: ConversationState,
                        last_task=None) -> OrchestratorResult:
        context = await self.context_builder.build(agent_type, state, last_task)
        response = await self.agents[agent_type].process(AgentRequest(user_input, context))
        return self._finish(state, user_input, agent_type, response)

    async def _run_isolated(self, agent_type: str, user_input: str,
                            state: ConversationState) -> Tuple[str, AgentResponse]:
        """Run one agent for the collaborative round; a failure scores 0."""
        try:
            context = await self.context_builder.build(agent_type, state)
            response = await self.agents[agent_type].process(AgentRequest(user_input, context))
        except Exception as e:
            self.logger.warning(f"Agent {agent_type} failed in collaborative round: {e}", exc_info=True)
            return agent_type, AgentResponse(response="", confidence=0.0, failed=True)
        if response.failed:
            return agent_type, AgentResponse(response="", confidence=0.0, failed=True)
        return agent_type, response

    async def _collaborate(self, user_input: str, state: ConversationState) -> OrchestratorResult:
        """
        Ask every agent concurrently and keep the most confident answer.

        Below the collaborative floor nothing is guessed: the user is asked
        to be more specific and no action or data is returned.
        """
        results: List[Tuple[str, AgentResponse]] = await asyncio.gather(
            *(self._run_isolated(name, user_input, state) for name in self.agents)
        )
        ranked = sorted(results, key=lambda item: item[1].confidence, reverse=True)
        self.logger.info("Collaborative round: %s",
                         [(name, round(r.confidence, 2)) for name, r in ranked])

        if not ranked or ranked[0][1].confidence < self.collaborative_floor:
            state.record(user_input, "orchestrator", None, CLARIFY_MESSAGE)
            return OrchestratorResult(message=CLARIFY_MESSAGE, agent_used="orchestrator")

        winner, response = ranked[0]
        return self._finish(state, user_input, winner, response)

    def _finish(self, state: ConversationState, user_input: str, agent_type: str,
                response: AgentResponse) -> OrchestratorResult:
        state.record(user_input, agent_type, response.action, response.response)
        state.remember_task(response.action, response.data)
        return OrchestratorResult(
            message=response.response,
            action=response.action,
            data=response.data,
            agent_used=agent_type,
        )
