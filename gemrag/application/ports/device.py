from typing import Optional, Protocol


class DeviceCapabilities(Protocol):
    """OS permission and gallery access as seen by a screen."""

    def permission_required(self) -> bool:
        ...

    def has_permission(self) -> bool:
        ...

    def request_permission(self) -> bool:
        ...

    def pick_image(self, mime_filter: str) -> Optional[bytes]:
        ...
