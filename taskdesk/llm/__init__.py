"""
LLM boundary for taskdesk

- LLMClient: chat completions with optional tool calling, bounded by a timeout
- parse_json_model: schema validation of model output into a ParseResult
"""

from .client import LLMClient, FunctionCall, FunctionCallResult
from .parsing import ParseResult, parse_json_model, ClassificationResult, ModelReply

__all__ = [
    'LLMClient',
    'FunctionCall',
    'FunctionCallResult',
    'ParseResult',
    'parse_json_model',
    'ClassificationResult',
    'ModelReply',
]
