import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..ports.ai_provider import AIProvider
from ..state_flow import StateFlow
from ..ui_state import UiState
from ...exceptions import InvalidTransitionError, SubmissionInProgressError
from ...media_utils import DecodedImage

logger = logging.getLogger(__name__)


@dataclass
class PromptViewModel:
    ai_provider: AIProvider
    placeholder: str
    timeout_seconds: float = 60.0
    ui_state: StateFlow = field(init=False)
    _task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.ui_state = StateFlow(UiState.idle(self.placeholder))

    @property
    def state(self) -> UiState:
        return self.ui_state.value

    def _transition(self, new_state: UiState) -> None:
        current = self.ui_state.value
        if not current.can_transition_to(new_state):
            raise InvalidTransitionError(f"Illegal transition {current.kind.value} -> {new_state.kind.value}")
        logger.info(f"UI state {current.kind.value} -> {new_state.kind.value}")
        self.ui_state.set(new_state)

    def send_prompt(self, image: DecodedImage, prompt: str) -> asyncio.Task:
        """Enter LOADING and start the generation call in the background.

        Overlapping submissions are rejected: while a request is outstanding a
        new one raises SubmissionInProgressError and leaves state untouched.
        Must be called from a running event loop.
        """
        if self.state.is_loading:
            raise SubmissionInProgressError("A request is already in progress")
        self._transition(UiState.loading())
        self._task = asyncio.create_task(self._generate(image, prompt))
        return self._task

    async def _generate(self, image: DecodedImage, prompt: str) -> UiState:
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self.ai_provider.generate_text, prompt, image.data, image.mime_type),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Generation timed out after {self.timeout_seconds:g}s")
            outcome = UiState.error(f"Request timed out after {self.timeout_seconds:g} seconds")
        except asyncio.CancelledError:
            logger.info("Generation cancelled")
            raise
        except Exception as e:
            logger.error(f"Error generating content: {e}")
            outcome = UiState.error(str(e) or e.__class__.__name__)
        else:
            if text:
                outcome = UiState.success(text)
            else:
                outcome = UiState.error("The model returned an empty response")
        self._transition(outcome)
        return outcome

    async def wait(self) -> UiState:
        """Wait for the outstanding request, if any, and return the current state."""
        task = self._task
        if task is not None and not task.done():
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # close() cancelled the request; only our own cancellation propagates
                if not task.cancelled():
                    raise
        return self.state

    def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
