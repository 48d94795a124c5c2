import pytest

from gemrag.exceptions import ScreenNotFoundError
from gemrag.infrastructure.screens.memory_screen_registry import InMemoryScreenRegistry


class FakeAI:
    def generate_text(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        return "ok"


def test_create_waits_for_permission_answer():
    registry = InMemoryScreenRegistry(ai_provider=FakeAI())
    session = registry.create(permission_granted=False)
    assert registry.get(session.id) is session
    assert session.device.awaiting_permission_answer()
    assert session.controller.drain_notices() == []

    session.device.relay_permission_answer(False)
    session.controller.select_image()
    assert session.controller.drain_notices() == ["Permission denied"]


def test_create_with_relayed_answer_activates_screen():
    registry = InMemoryScreenRegistry(ai_provider=FakeAI())
    denied = registry.create(permission_answer=False)
    assert denied.controller.drain_notices() == ["Permission denied"]

    granted = registry.create(permission_answer=True)
    assert granted.controller.permission_granted is True
    assert granted.controller.drain_notices() == []


def test_create_without_required_permission_is_granted():
    registry = InMemoryScreenRegistry(ai_provider=FakeAI())
    session = registry.create(permission_required=False)
    assert session.controller.permission_granted is True
    assert session.controller.drain_notices() == []


def test_close_all_empties_registry():
    registry = InMemoryScreenRegistry(ai_provider=FakeAI())
    first = registry.create()
    registry.create()
    registry.close_all()
    assert len(registry) == 0
    with pytest.raises(ScreenNotFoundError):
        registry.get(first.id)
    with pytest.raises(ScreenNotFoundError):
        registry.close(first.id)
