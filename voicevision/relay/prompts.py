"""Prompt tables for the image analysis and chat relays.

Each analysis mode maps to one ModeSpec carrying its prompts and how its answer
is read back. Adding a mode means adding a table entry, a result model and its
coerce/fallback pair; the normalizer dispatches through the table.
"""

from dataclasses import dataclass
from typing import Callable

from voicevision.api.schemas import AnalysisMode, AnalysisResult
from voicevision.relay import shapes


@dataclass(frozen=True)
class ModeSpec:
    """Prompt pair and expected answer shape for one analysis mode.

    Attributes:
        mode: The mode this entry serves.
        system_prompt: Instruction sent as the system turn.
        user_prompt: Text part of the multimodal user turn.
        coerce: Builds the result from a parsed JSON value.
        fallback: Builds the result from raw reply text when no JSON is usable.
        accepts_array: Whether a bare JSON array is a usable answer.
    """
    mode: AnalysisMode
    system_prompt: str
    user_prompt: str
    coerce: Callable[[dict | list], AnalysisResult]
    fallback: Callable[[str], AnalysisResult]
    accepts_array: bool = False


_AUDIENCE = (
    "You assist visually impaired users. Your answer is read aloud by a "
    "text-to-speech engine, so keep it short and plain."
)

MODE_SPECS: dict[AnalysisMode, ModeSpec] = {
    AnalysisMode.OBJECTS: ModeSpec(
        mode=AnalysisMode.OBJECTS,
        system_prompt=(
            f"You are an object detection assistant. {_AUDIENCE} "
            "Analyze the image and list ALL visible objects using short, common names. "
            "Count how many people are visible. "
            'Respond ONLY with a JSON object of the form {"objects": ["person", "chair"], '
            '"personCount": 1} and nothing else.'
        ),
        user_prompt="What objects do you see in this image? List all visible objects and count the people.",
        coerce=shapes.coerce_objects,
        fallback=shapes.objects_from_text,
        accepts_array=True,
    ),
    AnalysisMode.TEXT: ModeSpec(
        mode=AnalysisMode.TEXT,
        system_prompt=(
            f"You are a text recognition assistant. {_AUDIENCE} "
            "Read all printed or handwritten text visible in the image, in natural reading order. "
            'Respond ONLY with a JSON object of the form {"text": "..."} and nothing else. '
            'If there is no legible text, respond with {"text": ""}.'
        ),
        user_prompt="Read all the text in this image.",
        coerce=shapes.coerce_text,
        fallback=shapes.text_from_text,
    ),
    AnalysisMode.SCENE: ModeSpec(
        mode=AnalysisMode.SCENE,
        system_prompt=(
            f"You are a scene description assistant. {_AUDIENCE} "
            "Describe the scene in two or three sentences: where the user is, what is around them, "
            "and anything that matters for moving safely. "
            'Respond ONLY with a JSON object of the form {"description": "...", "confidence": 0.0} '
            "where confidence is a number between 0 and 1, and nothing else."
        ),
        user_prompt="Describe this scene.",
        coerce=shapes.coerce_scene,
        fallback=shapes.scene_from_text,
    ),
}

CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant for a Voice-Vision Assistant application. "
    "You help users understand the app's features (object detection, text reading, "
    "and scene description) and answer any questions they may have. "
    "Be friendly, concise, and helpful."
)


def get_mode_spec(mode: AnalysisMode) -> ModeSpec:
    return MODE_SPECS[mode]


def build_analysis_messages(spec: ModeSpec, image_url: str) -> list[dict]:
    """Build the gateway message list for one analysis call.

    Args:
        spec: Table entry for the requested mode.
        image_url: Data URI of the validated image.

    Returns:
        System turn followed by a single multi-part user turn (text + image).
    """
    return [
        {"role": "system", "content": spec.system_prompt},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": spec.user_prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        },
    ]


def build_chat_messages(messages: list) -> list[dict]:
    """Prepend the assistant persona to the caller's conversation."""
    return [{"role": "system", "content": CHAT_SYSTEM_PROMPT}] + [m.model_dump() for m in messages]
