"""
Dependency injection for FastAPI endpoints.

Provides singleton instances of Config, Storage, LLMClient, the WhatsApp
transport and the AgentOrchestrator to be used across all API routes.

The orchestrator is a singleton too: it owns the per-session conversation
state, so a new instance per request would forget every follow-up.
"""

from functools import lru_cache
import logging
import os
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from taskdesk.core.config import Config
from taskdesk.core.database import get_database
from taskdesk.core.storage import DatabaseStorage, MemoryStorage, Storage
from taskdesk.llm.client import LLMClient
from taskdesk.integrations.whatsapp import WhatsAppTransport
from taskdesk.agents import AgentOrchestrator

logger = logging.getLogger(__name__)


@lru_cache()
def get_config() -> Config:
    """
    Get cached Config instance.

    lru_cache ensures we only create one Config instance
    for the lifetime of the application (singleton pattern).
    """
    return Config()


@lru_cache()
def get_storage() -> Storage:
    """
    Get cached Storage instance.

    Uses the configured database (PostgreSQL when DATABASE_URL is set,
    SQLite otherwise). TASKDESK_STORAGE=memory, or a missing SQLite file,
    gives an in-memory store seeded with the default categories.
    """
    if os.environ.get("TASKDESK_STORAGE", "").lower() == "memory":
        return MemoryStorage()

    config = get_config()
    try:
        return DatabaseStorage(get_database(config.get_database_path()))
    except FileNotFoundError as e:
        logger.warning(f"{e} Falling back to in-memory storage.")
        return MemoryStorage()


@lru_cache()
def get_llm_client() -> LLMClient:
    """Get cached LLMClient (OPENAI_API_KEY from the environment)."""
    return LLMClient.from_config(get_config())


@lru_cache()
def get_transport() -> WhatsAppTransport:
    """Get cached WhatsApp transport built from the Twilio environment variables."""
    return WhatsAppTransport.from_env()


@lru_cache()
def get_orchestrator() -> AgentOrchestrator:
    """
    Get the AgentOrchestrator for natural language processing.

    Shares the Storage, LLMClient and transport singletons with every
    other route, so API writes and agent writes see the same data.
    """
    return AgentOrchestrator(
        get_storage(),
        get_llm_client(),
        get_config(),
        transport=get_transport(),
    )
