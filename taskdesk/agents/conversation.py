"""
Per-session conversational state and reference resolution.

ConversationState keeps the full turn log and the last referenced task id.
ReferenceResolver spots follow-ups such as "what date did you set for it?"
so the orchestrator can skip classification.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import re

# Actions after which the returned task becomes the session's reference
TASK_REFERENCE_ACTIONS = ("createTask", "updateTask", "setDeadlines", "scheduleTasks")


@dataclass
class ConversationHistoryItem:
    """One completed turn."""
    user_input: str
    agent_type: str
    response: str
    action: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userInput": self.user_input,
            "agentType": self.agent_type,
            "action": self.action,
            "response": self.response,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ConversationState:
    """Turn log and last task pointer for one session. Never trimmed."""
    session_id: str = "default"
    history: List[ConversationHistoryItem] = field(default_factory=list)
    last_task_id: Optional[int] = None

    def record(self, user_input: str, agent_type: str, action: Optional[str],
               response: str) -> ConversationHistoryItem:
        item = ConversationHistoryItem(
            user_input=user_input,
            agent_type=agent_type,
            action=action,
            response=response,
        )
        self.history.append(item)
        return item

    def remember_task(self, action: Optional[str], data: Any) -> None:
        """Point at the task carried by data when action is a task-shaping tool."""
        if action not in TASK_REFERENCE_ACTIONS or not isinstance(data, dict):
            return
        task_id = data.get("id")
        if task_id is not None:
            self.last_task_id = task_id

    def recent_history(self, limit: int = 5) -> List[ConversationHistoryItem]:
        return self.history[-limit:] if limit > 0 else []

    def last_agent_type(self) -> Optional[str]:
        """Most recent agent type that was not an error."""
        for item in reversed(self.history):
            if item.agent_type not in ("error", "orchestrator"):
                return item.agent_type
        return None


@dataclass
class ReferenceMatch:
    kind: str  # 'date', 'explanation', 'confirmation'
    agent_type: str


class ReferenceResolver:
    """
    Detects messages that refer back to the previous action.

    Families are checked in a fixed order: date, explanation, confirmation.
    """

    DATE_PATTERNS = [
        r"\bfecha\b", r"\bplazo\b", r"\bdeadline\b", r"\bdue\s+date\b",
        r"\bcu[aá]ndo\b", r"\bpara\s+cu[aá]ndo\b",
        r"\bwhat\s+(?:date|day)\b", r"\bwhich\s+(?:date|day)\b",
        r"\bwhen\s+(?:is|was|will)\s+(?:it|that)\b",
    ]

    EXPLANATION_PATTERNS = [
        r"\bexpl[ií]ca(?:me)?\b", r"\bqu[eé]\s+(?:has|hiciste|acabas\s+de\s+hacer)\b",
        r"\bpor\s+qu[eé]\b", r"\bdetalles\b", r"\bc[oó]mo\s+funciona\b",
        r"\bexplain\b", r"\bwhat\s+(?:did\s+you|have\s+you)\s+(?:just\s+)?(?:do|done)\b",
        r"\bwhy\s+did\s+you\b", r"\bdetails\b", r"\bhow\s+does\s+(?:it|that)\s+work\b",
    ]

    CONFIRMATION_PATTERNS = [
        r"\bse\s+ha\s+(?:creado|actualizado|guardado|registrado|completado)\b",
        r"\bse\s+la\s+has\s+puesto\b", r"\bya\s+(?:est[aá]|lo\s+has\s+hecho|terminaste)\b",
        r"\bactualizaste\b", r"\blo\s+has\b", r"\bpusiste\b",
        r"\bhas\s+(?:it|that)\s+been\s+(?:created|updated|saved|done|completed)\b",
        r"\bis\s+(?:it|that)\s+(?:done|saved|created|updated)\b",
        r"\bdid\s+you\s+(?:create|update|save|add|set)\s+(?:it|that)\b",
    ]

    def __init__(self):
        self._date = [re.compile(p, re.IGNORECASE) for p in self.DATE_PATTERNS]
        self._explanation = [re.compile(p, re.IGNORECASE) for p in self.EXPLANATION_PATTERNS]
        self._confirmation = [re.compile(p, re.IGNORECASE) for p in self.CONFIRMATION_PATTERNS]

    @staticmethod
    def _matches(patterns, text: str) -> bool:
        return any(pattern.search(text) for pattern in patterns)

    def check(self, text: str, state: ConversationState) -> Optional[ReferenceMatch]:
        """
        Check whether text refers to the previous action.

        Args:
            text: Raw user input
            state: Session state (history is needed for explanations)

        Returns:
            ReferenceMatch with the agent that should answer, or None
        """
        if self._matches(self._date, text):
            return ReferenceMatch(kind="date", agent_type="planner")

        if state.history and self._matches(self._explanation, text):
            return ReferenceMatch(kind="explanation", agent_type=state.last_agent_type() or "task")

        if self._matches(self._confirmation, text):
            return ReferenceMatch(kind="confirmation", agent_type="task")

        return None
