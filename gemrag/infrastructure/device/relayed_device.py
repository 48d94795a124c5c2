import logging
from typing import Optional

from ...application.ports.device import DeviceCapabilities

logger = logging.getLogger(__name__)


class RelayedDevice(DeviceCapabilities):
    """Device whose permission dialog and gallery live on a remote client.

    The client answers the OS dialogs itself and relays the outcome before the
    controller asks: ``relay_permission_answer`` for the permission dialog and
    ``relay_picked_image`` for the gallery. Each relayed answer is consumed by
    the next matching request.
    """

    def __init__(self, permission_granted: bool = False, permission_required: bool = True) -> None:
        self._required = permission_required
        self._granted = permission_granted
        self._pending_answer: Optional[bool] = None
        self._pending_image: Optional[bytes] = None

    def relay_permission_answer(self, granted: bool) -> None:
        self._pending_answer = granted

    def awaiting_permission_answer(self) -> bool:
        """True while the dialog is needed but the client has not answered it."""
        return self._required and not self._granted and self._pending_answer is None

    def relay_picked_image(self, data: Optional[bytes]) -> None:
        self._pending_image = data

    def permission_required(self) -> bool:
        return self._required

    def has_permission(self) -> bool:
        return self._granted

    def request_permission(self) -> bool:
        # No relayed answer means the dialog was dismissed
        answer, self._pending_answer = self._pending_answer, None
        self._granted = bool(answer)
        if not self._granted:
            # The gallery never opened, so a relayed pick is void
            self._pending_image = None
        return self._granted

    def pick_image(self, mime_filter: str) -> Optional[bytes]:
        data, self._pending_image = self._pending_image, None
        if data is None:
            logger.debug(f"No image relayed for picker filter {mime_filter}")
        return data
