import io
import itertools
from typing import List, Optional

import pytest
from PIL import Image

from gemrag.application.rendering import render_screen
from gemrag.application.services.prompt_view_model import PromptViewModel
from gemrag.application.services.screen_controller import ScreenController
from gemrag.application.ui_state import UiStateKind
from gemrag.exceptions import SubmissionInProgressError, SubmitDisabledError


def png_bytes(color=(255, 0, 0)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 12), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeDevice:
    def __init__(self, required: bool = True, granted: bool = False,
                 answers: Optional[List[bool]] = None, images: Optional[List[Optional[bytes]]] = None):
        self.required = required
        self.granted = granted
        self.answers = list(answers or [])
        self.images = list(images or [])
        self.permission_requests = 0
        self.pick_filters: List[str] = []

    def permission_required(self) -> bool:
        return self.required

    def has_permission(self) -> bool:
        return self.granted

    def request_permission(self) -> bool:
        self.permission_requests += 1
        self.granted = self.answers.pop(0) if self.answers else False
        return self.granted

    def pick_image(self, mime_filter: str) -> Optional[bytes]:
        self.pick_filters.append(mime_filter)
        return self.images.pop(0) if self.images else None


class FakeAI:
    def __init__(self, text: str = "A chocolate cake.", error: Optional[Exception] = None):
        self.text = text
        self.error = error

    def generate_text(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        if self.error:
            raise self.error
        return self.text


def make_controller(device: FakeDevice, ai: Optional[FakeAI] = None) -> ScreenController:
    vm = PromptViewModel(ai_provider=ai or FakeAI(), placeholder="Results will appear here")
    return ScreenController(device=device, view_model=vm)


def view(controller: ScreenController):
    return render_screen(
        state=controller.state,
        prompt=controller.prompt,
        image=controller.selected_image,
        permission_granted=controller.permission_granted,
        notices=controller.drain_notices(),
    )


def test_activate_with_granted_permission_opens_gallery():
    device = FakeDevice(granted=True, images=[png_bytes()])
    controller = make_controller(device)

    controller.activate()

    assert device.permission_requests == 0
    assert device.pick_filters == ["image/*"]
    assert controller.selected_image is not None
    assert controller.selected_image.width == 16


def test_activate_when_permission_not_required_skips_request():
    device = FakeDevice(required=False, images=[png_bytes()])
    controller = make_controller(device)

    controller.activate()

    assert device.permission_requests == 0
    assert controller.permission_granted is True
    assert controller.selected_image is not None


def test_activate_requests_permission_and_opens_gallery_on_grant():
    device = FakeDevice(answers=[True], images=[png_bytes()])
    controller = make_controller(device)

    controller.activate()

    assert device.permission_requests == 1
    assert controller.selected_image is not None
    assert controller.drain_notices() == []


def test_permission_denied_shows_notice_and_keeps_submit_disabled():
    device = FakeDevice(answers=[False], images=[png_bytes()])
    controller = make_controller(device)
    controller.update_prompt("describe this")

    controller.activate()

    assert device.pick_filters == []
    assert controller.selected_image is None
    rendered = view(controller)
    assert rendered.notices == ["Permission denied"]
    assert rendered.submit_enabled is False


def test_image_absent_until_permission_granted_for_any_answer_sequence():
    for answers in itertools.product([True, False], repeat=3):
        device = FakeDevice(answers=list(answers), images=[png_bytes()] * 3)
        controller = make_controller(device)
        granted_so_far = False
        for _ in answers:
            controller.select_image()
            granted_so_far = granted_so_far or device.granted
            assert (controller.selected_image is not None) == granted_so_far


def test_cancelled_pick_keeps_previous_image():
    device = FakeDevice(granted=True, images=[png_bytes(), None])
    controller = make_controller(device)
    controller.select_image()
    first = controller.selected_image

    controller.select_image()

    assert controller.selected_image is first


def test_new_pick_replaces_previous_image():
    device = FakeDevice(granted=True, images=[png_bytes((1, 2, 3)), png_bytes((4, 5, 6))])
    controller = make_controller(device)
    controller.select_image()
    first = controller.selected_image

    controller.select_image()

    assert controller.selected_image is not first
    assert controller.selected_image.data == png_bytes((4, 5, 6))


def test_decode_failure_clears_image_and_notifies():
    device = FakeDevice(granted=True, images=[png_bytes(), b"not an image"])
    controller = make_controller(device)
    controller.select_image()

    controller.select_image()

    assert controller.selected_image is None
    assert controller.drain_notices() == ["Could not decode the selected image"]


def test_notices_are_drained_once():
    device = FakeDevice(answers=[False])
    controller = make_controller(device)
    controller.activate()
    assert controller.drain_notices() == ["Permission denied"]
    assert controller.drain_notices() == []


@pytest.mark.parametrize("prompt, has_image, enabled", [
    ("", False, False),
    ("describe this", False, False),
    ("", True, False),
    ("describe this", True, True),
])
def test_submit_enabled_iff_prompt_and_image(prompt, has_image, enabled):
    device = FakeDevice(granted=True, images=[png_bytes()] if has_image else [])
    controller = make_controller(device)
    controller.activate()
    controller.update_prompt(prompt)

    assert controller.can_submit is enabled
    assert view(controller).submit_enabled is enabled


def test_submit_when_disabled_raises():
    controller = make_controller(FakeDevice(granted=True))
    with pytest.raises(SubmitDisabledError):
        controller.submit()
    assert controller.state.kind is UiStateKind.IDLE


@pytest.mark.asyncio
async def test_submit_success_renders_normal_text():
    device = FakeDevice(granted=True, images=[png_bytes()])
    controller = make_controller(device)
    controller.activate()
    controller.update_prompt("describe this")

    task = controller.submit()
    assert view(controller).result.kind == "progress"
    await task

    result = view(controller).result
    assert result.text == "A chocolate cake."
    assert result.style == "normal"


@pytest.mark.asyncio
async def test_submit_failure_renders_error_text():
    device = FakeDevice(granted=True, images=[png_bytes()])
    controller = make_controller(device, FakeAI(error=ConnectionError("network error")))
    controller.activate()
    controller.update_prompt("x")

    await controller.submit()

    result = view(controller).result
    assert result.text == "network error"
    assert result.style == "error"


@pytest.mark.asyncio
async def test_prompt_and_image_survive_submission():
    device = FakeDevice(granted=True, images=[png_bytes()])
    controller = make_controller(device)
    controller.activate()
    controller.update_prompt("describe this")

    await controller.submit()

    assert controller.prompt == "describe this"
    assert controller.selected_image is not None


@pytest.mark.asyncio
async def test_second_submit_while_loading_is_rejected_with_notice():
    device = FakeDevice(granted=True, images=[png_bytes()])
    controller = make_controller(device)
    controller.activate()
    controller.update_prompt("describe this")

    task = controller.submit()
    with pytest.raises(SubmissionInProgressError):
        controller.submit()
    await task

    assert controller.drain_notices() == ["A request is already in progress"]
    assert controller.state.kind is UiStateKind.SUCCESS
