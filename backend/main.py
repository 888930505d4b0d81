"""
taskdesk FastAPI Backend

Serves the chat endpoint, task/category CRUD for the dashboard and the
WhatsApp contact directory and Twilio webhook. Every chat message, from
the dashboard or from WhatsApp, goes through the same AgentOrchestrator
singleton (see backend/dependencies.py).

Start the server:
    uvicorn backend.main:app --reload

Extra dashboard origins can be allowed with a comma-separated
TASKDESK_CORS_ORIGINS.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from backend.dependencies import get_config, get_storage, get_transport
from backend.routers import (
    categories_router,
    nlp_router,
    tasks_router,
    whatsapp_router,
)
from taskdesk import __version__
from taskdesk.core.storage import DatabaseStorage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def allowed_origins() -> list:
    extra = os.environ.get("TASKDESK_CORS_ORIGINS", "")
    return DEV_ORIGINS + [origin.strip() for origin in extra.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Print where data and config live and whether WhatsApp can send."""
    storage = get_storage()
    if isinstance(storage, DatabaseStorage):
        print(f"Database connected: {storage.db.db_path}")
    else:
        print("Using in-memory storage (run 'python scripts/init_db.py' to create the database)")
    print(f"Config loaded from: {get_config().config_dir}")

    whatsapp = get_transport().status()
    if not whatsapp.get("phoneConfigured"):
        print(f"WhatsApp disabled: {whatsapp.get('error')}")

    yield

    print("taskdesk API stopped")


app = FastAPI(
    title="taskdesk API",
    description="""
    Task management with a conversational agent layer.

    - **Agent**: one chat endpoint; messages are routed to the task, planner,
      category, analytics, marketing, project or messaging agent
    - **Tasks** and **Categories**: direct CRUD for the dashboard
    - **WhatsApp**: contact directory, test sends and the incoming-message webhook

    Try: "I need to do the accounting, due March 27", then "what date did you set for it?"
    """,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (nlp_router, tasks_router, categories_router, whatsapp_router):
    app.include_router(router)


@app.get("/")
async def root():
    """Service name, version and the main endpoints."""
    return {
        "name": "taskdesk API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "agent": "/agent/process",
            "tasks": "/tasks",
            "categories": "/categories",
            "whatsapp": "/whatsapp/contacts",
            "webhook": "/webhooks/whatsapp",
        },
    }


@app.get("/health")
async def health_check():
    """Liveness plus a storage round trip."""
    storage = get_storage()
    try:
        await storage.get_categories()
    except Exception as e:
        return {"status": "unhealthy", "storage": type(storage).__name__, "error": str(e)}
    return {"status": "healthy", "storage": type(storage).__name__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000, reload=True)
