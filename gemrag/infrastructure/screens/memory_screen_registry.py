import uuid
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from ...application.ports.ai_provider import AIProvider
from ...application.services.prompt_view_model import PromptViewModel
from ...application.services.screen_controller import ScreenController
from ...config import Settings, settings as default_settings
from ...exceptions import ScreenLimitError, ScreenNotFoundError
from ..device.relayed_device import RelayedDevice

logger = logging.getLogger(__name__)


@dataclass
class ScreenSession:
    id: str
    controller: ScreenController
    device: RelayedDevice
    created_at: datetime


class InMemoryScreenRegistry:
    def __init__(self, ai_provider: AIProvider, settings: Optional[Settings] = None) -> None:
        self.ai_provider = ai_provider
        self.settings = settings or default_settings
        self._store: Dict[str, ScreenSession] = {}

    def __len__(self) -> int:
        return len(self._store)

    def create(self, permission_granted: bool = False, permission_required: bool = True,
               permission_answer: Optional[bool] = None) -> ScreenSession:
        if len(self._store) >= self.settings.MAX_ACTIVE_SCREENS:
            logger.warning(f"Screen limit reached ({self.settings.MAX_ACTIVE_SCREENS})")
            raise ScreenLimitError("Too many active screens")
        device = RelayedDevice(permission_granted=permission_granted, permission_required=permission_required)
        if permission_answer is not None:
            device.relay_permission_answer(permission_answer)
        view_model = PromptViewModel(
            ai_provider=self.ai_provider,
            placeholder=self.settings.RESULTS_PLACEHOLDER,
            timeout_seconds=self.settings.GENERATION_TIMEOUT_SECONDS,
        )
        controller = ScreenController(
            device=device,
            view_model=view_model,
            mime_filter=self.settings.IMAGE_MIME_FILTER,
            max_image_size=self.settings.MAX_FILE_SIZE,
        )
        session = ScreenSession(
            id=str(uuid.uuid4()),
            controller=controller,
            device=device,
            created_at=datetime.utcnow(),
        )
        self._store[session.id] = session
        logger.info(f"Created screen {session.id}")
        if device.awaiting_permission_answer():
            # Activation resumes when the client relays the dialog answer
            logger.info(f"Screen {session.id} waiting for a storage permission answer")
        else:
            controller.activate()
        return session

    def get(self, screen_id: str) -> ScreenSession:
        session = self._store.get(screen_id)
        if session is None:
            raise ScreenNotFoundError(f"Screen {screen_id} not found")
        return session

    def close(self, screen_id: str) -> None:
        session = self._store.pop(screen_id, None)
        if session is None:
            raise ScreenNotFoundError(f"Screen {screen_id} not found")
        session.controller.close()
        logger.info(f"Closed screen {screen_id}")

    def close_all(self) -> None:
        for screen_id in list(self._store):
            self.close(screen_id)
