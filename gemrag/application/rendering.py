"""Pure rendering of screen state into view models.

Nothing here touches the controller or the device: the same input always
produces an equal view.
"""
from typing import Iterable, Optional

from .ui_state import UiState, UiStateKind
from ..media_utils import DecodedImage
from ..schemas.screen.screen import ImagePreview, ResultView, ScreenView

SCREEN_TITLE = "GemRag"


def render_result(state: UiState) -> ResultView:
    if state.kind is UiStateKind.LOADING:
        return ResultView(kind="progress")
    if state.kind is UiStateKind.ERROR:
        return ResultView(kind="text", text=state.error_message, style="error")
    if state.kind is UiStateKind.SUCCESS:
        return ResultView(kind="text", text=state.output_text, style="normal")
    return ResultView(kind="text", text=state.placeholder, style="normal")


def render_image(image: Optional[DecodedImage]) -> Optional[ImagePreview]:
    if image is None:
        return None
    return ImagePreview(
        mime_type=image.mime_type,
        width=image.width,
        height=image.height,
        data_uri=image.preview_data_uri,
    )


def render_screen(
    state: UiState,
    prompt: str,
    image: Optional[DecodedImage],
    permission_granted: bool,
    notices: Iterable[str] = (),
) -> ScreenView:
    return ScreenView(
        title=SCREEN_TITLE,
        permission_granted=permission_granted,
        image=render_image(image),
        prompt=prompt,
        submit_enabled=prompt != "" and image is not None,
        state=state.kind.value,
        result=render_result(state),
        notices=list(notices),
    )
