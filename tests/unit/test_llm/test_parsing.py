"""
Unit tests for model-output validation.
"""

from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.llm.parsing import ClassificationResult, ModelReply, parse_json_model


class TestParseJsonModel:

    def test_valid_json(self):
        result = parse_json_model(ClassificationResult, '{"agentType": "planner", "confidence": 0.8}')
        assert result.ok
        assert result.value.agentType == "planner"
        assert result.value.confidence == 0.8

    def test_code_fence_stripped(self):
        raw = '```json\n{"response": "hi"}\n```'
        result = parse_json_model(ModelReply, raw)
        assert result.value.response == "hi"
        assert result.value.confidence == 0.7

    def test_dict_input(self):
        assert parse_json_model(ModelReply, {"response": "ok"}).ok

    def test_empty(self):
        assert parse_json_model(ModelReply, None).error == "empty payload"
        assert parse_json_model(ModelReply, "").error == "empty payload"

    def test_invalid_json(self):
        result = parse_json_model(ModelReply, "{not json")
        assert not result.ok
        assert result.error.startswith("invalid JSON")

    def test_non_object(self):
        result = parse_json_model(ModelReply, "[1, 2]")
        assert result.error == "expected a JSON object, got list"

    def test_schema_violation(self):
        result = parse_json_model(ClassificationResult, '{"confidence": 0.9}')
        assert not result.ok
        assert "agentType" in result.error
