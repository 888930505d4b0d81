"""
Natural Language Processing API endpoint.

Provides a unified chat endpoint: every message goes through the
AgentOrchestrator, which classifies it, routes it to a specialized agent
and returns the normalized {action, message, data, agentUsed} shape.

The orchestrator never raises for agent or LLM failures; anything that
still escapes becomes a 500.
"""

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_orchestrator
from backend.schemas import AgentProcessRequest, AgentProcessResponse
from taskdesk.agents import AgentOrchestrator

router = APIRouter(tags=["agent"])


async def _process(request: AgentProcessRequest, orchestrator: AgentOrchestrator) -> AgentProcessResponse:
    try:
        result = await orchestrator.process(request.message, session_id=request.sessionId or "default")
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to process request: {str(e)}"
        )

    return AgentProcessResponse(
        action=result.action,
        message=result.message,
        data=result.data,
        agentUsed=result.agent_used,
    )


@router.post("/agent/process", response_model=AgentProcessResponse)
async def process_message(
    request: AgentProcessRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """
    Process a chat message.

    Examples:
    - "I need to do the accounting, due March 27"
    - "What date is that task due?"
    - "Plan the website redesign project in three phases"
    - "Find out the weather in Madrid and send it to Ana"

    Pass the same sessionId on follow-ups so references like
    "that task" resolve against the right conversation.
    """
    return await _process(request, orchestrator)


@router.post("/nlp/ask", response_model=AgentProcessResponse)
async def ask_assistant(
    request: AgentProcessRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """
    General-purpose assistant endpoint.

    Alias for /agent/process.
    """
    return await _process(request, orchestrator)
