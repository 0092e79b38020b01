"""Per-mode answer shapes: parsed JSON or raw text -> result model.

Coercers take the structured value a reply was parsed into; fallbacks take the
reply text when nothing structured could be recovered. Both default missing or
ill-typed fields instead of raising.
"""

import math
import re

from voicevision.api.schemas import ObjectsResult, SceneResult, TextResult

_LABEL_SPLIT = re.compile(r"[,\n]")


def split_labels(text: str) -> list[str]:
    """Split a prose or comma-separated list into trimmed, non-empty labels."""
    labels = []
    for token in _LABEL_SPLIT.split(text):
        label = token.strip().strip("\"'[]").strip()
        if label:
            labels.append(label)
    return labels


def _string(value: object) -> str:
    return value if isinstance(value, str) else ""


def _string_items(values: object) -> list[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str) and v.strip()]


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _count(value: object) -> int:
    if not _is_number(value):
        return 0
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        return 0
    return max(0, int(value))


def _confidence(value: object) -> float:
    if not _is_number(value):
        return 0.0
    if isinstance(value, int):
        return 1.0 if value >= 1 else 0.0
    if not math.isfinite(value):
        return 0.0
    return min(1.0, max(0.0, value))


# `value` is a dict, or a list for modes that accept arrays

def coerce_objects(value: dict | list) -> ObjectsResult:
    if isinstance(value, list):
        return ObjectsResult(objects=_string_items(value), personCount=0)
    return ObjectsResult(
        objects=_string_items(value.get("objects")),
        personCount=_count(value.get("personCount")),
    )


def coerce_text(value: dict) -> TextResult:
    return TextResult(text=_string(value.get("text")))


def coerce_scene(value: dict) -> SceneResult:
    return SceneResult(
        description=_string(value.get("description")),
        confidence=_confidence(value.get("confidence")),
    )


def objects_from_text(text: str) -> ObjectsResult:
    return ObjectsResult(objects=split_labels(text), personCount=0)


def text_from_text(text: str) -> TextResult:
    return TextResult(text=text)


def scene_from_text(text: str) -> SceneResult:
    return SceneResult(description=text, confidence=0.0)
