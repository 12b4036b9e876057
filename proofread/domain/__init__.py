"""Domain package exports for value objects and the registry."""

from .models import (
    DEFAULT_MODEL,
    ModelDescriptor,
    ModelId,
    OrchestrationRequest,
    Prompt,
    PromptId,
    find_prompt,
)
from .registry import Registry

__all__ = [
    "DEFAULT_MODEL",
    "ModelDescriptor",
    "ModelId",
    "OrchestrationRequest",
    "Prompt",
    "PromptId",
    "Registry",
    "find_prompt",
]
