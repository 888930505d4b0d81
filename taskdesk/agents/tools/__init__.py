"""
Tool declarations offered to the LLM, one module per agent.

Each declaration is {name, description, parameters: {type, properties, required}};
the pydantic models beside them validate the arguments the model sends back.
"""

from .task_tools import TASK_TOOLS
from .planner_tools import PLANNER_TOOLS
from .category_tools import CATEGORY_TOOLS
from .analytics_tools import ANALYTICS_TOOLS
from .marketing_tools import MARKETING_TOOLS
from .project_tools import PROJECT_TOOLS
from .messaging_tools import MESSAGING_TOOLS

__all__ = [
    'TASK_TOOLS',
    'PLANNER_TOOLS',
    'CATEGORY_TOOLS',
    'ANALYTICS_TOOLS',
    'MARKETING_TOOLS',
    'PROJECT_TOOLS',
    'MESSAGING_TOOLS',
]
