import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..ports.device import DeviceCapabilities
from ..ui_state import UiState
from .prompt_view_model import PromptViewModel
from ...exceptions import (
    ImageDecodeError,
    PermissionDeniedError,
    SubmissionInProgressError,
    SubmitDisabledError,
)
from ...media_utils import DecodedImage, decode_image

logger = logging.getLogger(__name__)

PERMISSION_DENIED_NOTICE = "Permission denied"
REQUEST_IN_PROGRESS_NOTICE = "A request is already in progress"


@dataclass
class ScreenController:
    """Owns the transient screen state and drives permission, selection and submission."""

    device: DeviceCapabilities
    view_model: PromptViewModel
    mime_filter: str = "image/*"
    max_image_size: Optional[int] = None
    prompt: str = ""
    selected_image: Optional[DecodedImage] = None
    permission_granted: bool = False
    _notices: List[str] = field(default_factory=list, init=False, repr=False)

    @property
    def can_submit(self) -> bool:
        return self.prompt != "" and self.selected_image is not None

    @property
    def state(self) -> UiState:
        return self.view_model.state

    def activate(self) -> None:
        """Run the permission check performed when the screen is first shown."""
        self.select_image()

    def select_image(self) -> None:
        try:
            self._ensure_permission()
        except PermissionDeniedError as e:
            self._notify(e.detail)
            return
        self._open_gallery()

    def _ensure_permission(self) -> None:
        if not self.device.permission_required() or self.device.has_permission():
            self.permission_granted = True
            return
        granted = self.device.request_permission()
        logger.info(f"Storage permission request answered: granted={granted}")
        self.permission_granted = granted
        if not granted:
            raise PermissionDeniedError(PERMISSION_DENIED_NOTICE)

    def _open_gallery(self) -> None:
        data = self.device.pick_image(self.mime_filter)
        if data is None:
            logger.debug("Image selection cancelled")
            return
        try:
            self.selected_image = decode_image(data, self.max_image_size)
        except ImageDecodeError as e:
            self.selected_image = None
            self._notify(e.detail)
            return
        logger.info(
            f"Selected {self.selected_image.mime_type} image "
            f"{self.selected_image.width}x{self.selected_image.height}"
        )

    def update_prompt(self, text: str) -> None:
        self.prompt = text

    def submit(self) -> asyncio.Task:
        if not self.can_submit:
            raise SubmitDisabledError("Enter a prompt and select an image first")
        try:
            return self.view_model.send_prompt(self.selected_image, self.prompt)
        except SubmissionInProgressError:
            self._notify(REQUEST_IN_PROGRESS_NOTICE)
            raise

    def _notify(self, message: str) -> None:
        logger.info(f"Notice: {message}")
        self._notices.append(message)

    def drain_notices(self) -> List[str]:
        notices, self._notices = self._notices, []
        return notices

    def close(self) -> None:
        self.view_model.close()
        self.selected_image = None
        self.prompt = ""
