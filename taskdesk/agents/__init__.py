"""
Agent Layer for taskdesk

Natural-language requests are routed by the AgentOrchestrator to one of the
specialized agents, each of which offers the LLM a set of tools and runs the
chosen tool against storage.

Architecture Overview:
- AgentOrchestrator: reference check, classification, dispatch, collaborative fallback
- IntentClassifier: keyword strategy plus LLM strategy
- ContextBuilder: per-agent context snapshots
- ConversationState / ReferenceResolver: per-session history and follow-up detection
- SpecializedAgent: shared dispatch loop
- TaskAgent, PlannerAgent, CategoryAgent, AnalyticsAgent, MarketingAgent,
  ProjectAgent, MessagingAgent: the domain agents

Usage:
    from taskdesk.agents import AgentOrchestrator
    from taskdesk.core import Config, MemoryStorage
    from taskdesk.llm import LLMClient

    config = Config()
    orchestrator = AgentOrchestrator(MemoryStorage(), LLMClient.from_config(config), config)
    result = await orchestrator.process("I need to do the accounting, due March 27")
"""

from .base_agent import SpecializedAgent, AgentRequest, AgentResponse
from .context import AgentContext, ContextBuilder
from .conversation import ConversationState, ConversationHistoryItem, ReferenceResolver
from .intent_classifier import IntentClassifier, AgentDetermination
from .task_agent import TaskAgent
from .planner_agent import PlannerAgent
from .category_agent import CategoryAgent
from .analytics_agent import AnalyticsAgent
from .marketing_agent import MarketingAgent
from .project_agent import ProjectAgent
from .messaging_agent import MessagingAgent
from .orchestrator import AgentOrchestrator, OrchestratorResult, build_default_agents

__all__ = [
    'SpecializedAgent',
    'AgentRequest',
    'AgentResponse',
    'AgentContext',
    'ContextBuilder',
    'ConversationState',
    'ConversationHistoryItem',
    'ReferenceResolver',
    'IntentClassifier',
    'AgentDetermination',
    'TaskAgent',
    'PlannerAgent',
    'CategoryAgent',
    'AnalyticsAgent',
    'MarketingAgent',
    'ProjectAgent',
    'MessagingAgent',
    'AgentOrchestrator',
    'OrchestratorResult',
    'build_default_agents',
]
