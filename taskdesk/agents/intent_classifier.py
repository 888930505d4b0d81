"""
Intent classification for the orchestrator.

Two strategies:
1. Keyword matching: local, cheap, bilingual keyword sets per agent type
2. LLM classification: only when keyword confidence is not decisive

classify() never raises; any LLM failure yields ("task", 0.5).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from ..llm.parsing import ClassificationResult, parse_json_model
from .base_agent import clamp_confidence

logger = logging.getLogger(__name__)

# Declaration order breaks ties between agent types with equal match counts
AGENT_KEYWORDS: Dict[str, List[str]] = {
    "task": [
        "task", "tarea", "to-do", "create", "crear", "delete", "borrar", "eliminar",
        "update", "actualizar", "marcar", "pending", "pendiente",
    ],
    "category": [
        "category", "categories", "categoría", "categoria", "label", "etiqueta", "color",
    ],
    "analytics": [
        "statistic", "estadística", "estadistica", "report", "informe", "analytics",
        "análisis", "analysis", "metric", "métrica", "trend", "tendencia", "summary", "resumen",
    ],
    "planner": [
        "schedule", "programar", "planificar", "planning", "deadline", "fecha límite",
        "calendar", "calendario", "upcoming", "próximos", "prioritize", "priorizar",
        "agenda", "this week", "esta semana",
    ],
    "marketing": [
        "marketing", "campaign", "campaña", "seo", "social media", "redes sociales",
        "newsletter", "promotion", "promoción", "branding", "instagram",
    ],
    "project": [
        "project", "proyecto", "phase", "fase", "milestone", "hito", "roadmap",
        "sprint", "stakeholder", "kickoff",
    ],
    "messaging": [
        "whatsapp", "message", "mensaje", "send", "enviar", "envía", "contact", "contacto",
    ],
}

AGENT_DESCRIPTIONS: Dict[str, str] = {
    "task": "create, update, delete or look up specific tasks",
    "category": "manage categories: create, rename, recolor, delete, list, assign tasks to them",
    "analytics": "statistics, reports, metrics on completed and pending tasks, trends",
    "planner": "planning, scheduling, deadlines, reminders, prioritizing work over time",
    "marketing": "digital marketing: campaigns, content plans, SEO, social media, email marketing",
    "project": "project management: phases, milestones, progress tracking, teams and resources",
    "messaging": "WhatsApp: send messages to contacts, list contacts, conversation history",
}

FALLBACK = ("task", 0.5)


@dataclass
class AgentDetermination:
    """Which agent should handle a request, and how sure we are."""
    agent_type: str
    confidence: float
    reasoning: Optional[str] = None
    source: str = "keyword"  # 'keyword', 'llm', 'fallback'


def build_classification_prompt(agent_types: List[str]) -> str:
    options = "\n".join(f"- {name}: {AGENT_DESCRIPTIONS.get(name, name)}" for name in agent_types)
    return f"""Decide which specialized agent should handle the following request.

Available options:
{options}

IMPORTANT: If the request is unclear or fits no specific option, choose "task".

Reply with a JSON object containing:
1. "agentType": one of {", ".join(agent_types)}
2. "confidence": a number between 0 and 1
3. "reasoning": a short explanation"""


class IntentClassifier:
    """Keyword-first, LLM-second classifier over a closed set of agent types."""

    def __init__(self, llm, keyword_threshold: float = 0.8,
                 agent_types: Optional[List[str]] = None):
        """
        Args:
            llm: LLMClient used for the semantic strategy
            keyword_threshold: Keyword confidence above which the LLM is skipped
            agent_types: Closed set of valid answers (defaults to all known types)
        """
        self.llm = llm
        self.keyword_threshold = keyword_threshold
        self.agent_types = agent_types or list(AGENT_KEYWORDS)

    def keyword_classify(self, text: str) -> Tuple[str, float]:
        """
        Count keyword hits per agent type.

        Returns:
            (agent_type, min(0.5 + hits / 5, 1.0)), or ("task", 0.5) with no hits
        """
        lowered = text.lower()
        best_type, best_count = FALLBACK[0], 0
        for agent_type in self.agent_types:
            count = sum(1 for keyword in AGENT_KEYWORDS.get(agent_type, []) if keyword in lowered)
            if count > best_count:
                best_type, best_count = agent_type, count

        if best_count == 0:
            return FALLBACK
        return best_type, min(0.5 + best_count / 5, 1.0)

    async def llm_classify(self, text: str) -> AgentDetermination:
        """Ask the model; any failure degrades to the task fallback."""
        try:
            raw = await self.llm.complete_json(build_classification_prompt(self.agent_types), text)
        except Exception as e:
            logger.warning(f"LLM classification failed: {e}", exc_info=True)
            return AgentDetermination(*FALLBACK, source="fallback")

        parsed = parse_json_model(ClassificationResult, raw)
        if not parsed.ok:
            logger.warning("Unparseable classification: %s", parsed.error)
            return AgentDetermination(*FALLBACK, source="fallback")

        result = parsed.value
        if result.agentType not in self.agent_types:
            logger.warning("Classifier returned unknown agent type: %s", result.agentType)
            return AgentDetermination(*FALLBACK, source="fallback")

        return AgentDetermination(
            agent_type=result.agentType,
            confidence=clamp_confidence(result.confidence),
            reasoning=result.reasoning,
            source="llm",
        )

    async def classify(self, text: str) -> AgentDetermination:
        agent_type, confidence = self.keyword_classify(text)
        if confidence > self.keyword_threshold:
            return AgentDetermination(agent_type, confidence, source="keyword")

        determination = await self.llm_classify(text)
        logger.info("Classified as %s (%.2f, %s)", determination.agent_type,
                    determination.confidence, determination.source)
        return determination
