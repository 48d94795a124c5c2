from typing import Optional

from .config import settings
from .infrastructure.ai.gemini_provider import GeminiProvider
from .infrastructure.screens.memory_screen_registry import InMemoryScreenRegistry


_registry_instance: Optional[InMemoryScreenRegistry] = None

def get_screen_registry() -> InMemoryScreenRegistry:
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = InMemoryScreenRegistry(ai_provider=GeminiProvider(), settings=settings)
    return _registry_instance

def reset_screen_registry() -> None:
    global _registry_instance
    if _registry_instance is not None:
        _registry_instance.close_all()
    _registry_instance = None
