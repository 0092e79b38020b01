"""Tests for the mode table and message builders."""

import pytest

from voicevision.api.schemas import AnalysisMode, ChatMessage, ObjectsResult, SceneResult, TextResult
from voicevision.relay.prompts import (
    CHAT_SYSTEM_PROMPT,
    MODE_SPECS,
    build_analysis_messages,
    build_chat_messages,
    get_mode_spec,
)


class TestModeTable:

    def test_every_mode_has_an_entry(self):
        assert set(MODE_SPECS) == set(AnalysisMode)

    def test_entries_are_keyed_by_their_mode(self):
        for mode, spec in MODE_SPECS.items():
            assert spec.mode is mode

    @pytest.mark.parametrize("mode, model", [
        (AnalysisMode.OBJECTS, ObjectsResult),
        (AnalysisMode.TEXT, TextResult),
        (AnalysisMode.SCENE, SceneResult),
    ])
    def test_answer_shape(self, mode, model):
        spec = get_mode_spec(mode)
        assert spec.coerce({}) == model()
        assert isinstance(spec.fallback("a reply"), model)

    def test_only_objects_accepts_arrays(self):
        assert [m for m, s in MODE_SPECS.items() if s.accepts_array] == [AnalysisMode.OBJECTS]

    @pytest.mark.parametrize("mode, fields", [
        (AnalysisMode.OBJECTS, ['"objects"', '"personCount"']),
        (AnalysisMode.TEXT, ['"text"']),
        (AnalysisMode.SCENE, ['"description"', '"confidence"']),
    ])
    def test_system_prompt_names_the_json_shape(self, mode, fields):
        prompt = get_mode_spec(mode).system_prompt
        assert "ONLY" in prompt
        for field in fields:
            assert field in prompt


class TestBuildAnalysisMessages:

    def test_shape(self):
        spec = get_mode_spec(AnalysisMode.TEXT)
        messages = build_analysis_messages(spec, "data:image/png;base64,AAAA")

        assert messages[0] == {"role": "system", "content": spec.system_prompt}
        assert messages[1]["role"] == "user"
        text_part, image_part = messages[1]["content"]
        assert text_part == {"type": "text", "text": spec.user_prompt}
        assert image_part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


class TestBuildChatMessages:

    def test_system_prompt_prepended(self):
        history = [
            ChatMessage(role="user", content="What can you do?"),
            ChatMessage(role="assistant", content="I can read text."),
        ]
        messages = build_chat_messages(history)

        assert messages[0] == {"role": "system", "content": CHAT_SYSTEM_PROMPT}
        assert messages[1:] == [
            {"role": "user", "content": "What can you do?"},
            {"role": "assistant", "content": "I can read text."},
        ]
