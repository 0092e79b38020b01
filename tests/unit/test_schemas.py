"""Unit tests for Pydantic API schemas."""

import pytest
from pydantic import ValidationError

from voicevision.api.schemas import (
    AnalysisMode,
    ChatMessage,
    ErrorResponse,
    ObjectsResult,
    SceneResult,
    TextResult,
)


class TestResultDefaults:

    def test_objects_defaults(self):
        assert ObjectsResult().model_dump() == {"objects": [], "personCount": 0}

    def test_text_defaults(self):
        assert TextResult().model_dump() == {"text": ""}

    def test_scene_defaults(self):
        assert SceneResult().model_dump() == {"description": "", "confidence": 0.0}


class TestResultBounds:

    def test_negative_person_count_rejected(self):
        with pytest.raises(ValidationError):
            ObjectsResult(objects=[], personCount=-1)

    def test_confidence_above_one_rejected(self):
        with pytest.raises(ValidationError):
            SceneResult(description="x", confidence=1.01)

    def test_confidence_at_bounds(self):
        assert SceneResult(confidence=0.0).confidence == 0.0
        assert SceneResult(confidence=1.0).confidence == 1.0


class TestChatMessage:

    @pytest.mark.parametrize("role", ["user", "assistant", "system"])
    def test_valid_roles(self, role):
        assert ChatMessage(role=role, content="hello").role == role

    def test_invalid_role_rejected(self):
        with pytest.raises(ValidationError):
            ChatMessage(role="moderator", content="hello")


class TestMisc:

    def test_mode_values(self):
        assert [m.value for m in AnalysisMode] == ["objects", "text", "scene"]

    def test_error_response(self):
        assert ErrorResponse(error="nope").model_dump() == {"error": "nope"}
