"""Pydantic models for the API layer.

Defines request/response schemas for both relays.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class AnalysisMode(str, Enum):
    """Which prompt pair and result shape an image analysis call uses."""
    OBJECTS = "objects"
    TEXT = "text"
    SCENE = "scene"


class ObjectsResult(BaseModel):
    """Objects-mode answer: visible object labels plus a head count."""
    objects: list[str] = Field(default_factory=list)
    personCount: int = Field(default=0, ge=0)


class TextResult(BaseModel):
    """Text-mode answer: everything legible in the frame, possibly empty."""
    text: str = ""


class SceneResult(BaseModel):
    """Scene-mode answer: a spoken-style description and the model's confidence."""
    description: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


AnalysisResult = ObjectsResult | TextResult | SceneResult


class ChatMessage(BaseModel):
    """Single role-tagged chat turn."""
    role: Literal["user", "assistant", "system"]
    content: str


class ErrorResponse(BaseModel):
    error: str
