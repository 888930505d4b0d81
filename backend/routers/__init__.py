"""
API routers for the taskdesk backend.

Each router handles a specific domain:
- nlp: Chat endpoint backed by the AgentOrchestrator
- tasks: Task CRUD and stats
- categories: Category CRUD
- whatsapp: Contact directory, test sends and the Twilio webhook
"""

from .nlp import router as nlp_router
from .tasks import router as tasks_router
from .categories import router as categories_router
from .whatsapp import router as whatsapp_router

__all__ = [
    'nlp_router',
    'tasks_router',
    'categories_router',
    'whatsapp_router',
]
