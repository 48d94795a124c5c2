import asyncio
import contextlib
import logging
from fastapi import APIRouter, Depends, File, UploadFile, WebSocket, WebSocketDisconnect, status
from fastapi.responses import JSONResponse, Response

from ..application.rendering import render_result, render_screen
from ..dependencies import get_screen_registry
from ..exceptions import ImageDecodeError, PermissionPendingError, ScreenNotFoundError
from ..infrastructure.screens.memory_screen_registry import InMemoryScreenRegistry, ScreenSession
from ..schemas.common.common import ErrorResponse
from ..schemas.screen.screen import PermissionAnswer, PromptUpdate, ScreenCreate, ScreenResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/screens",
    tags=["Screens"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


def _respond(session: ScreenSession) -> ScreenResponse:
    controller = session.controller
    view = render_screen(
        state=controller.state,
        prompt=controller.prompt,
        image=controller.selected_image,
        permission_granted=controller.permission_granted,
        notices=controller.drain_notices(),
    )
    return ScreenResponse(screen_id=session.id, view=view)


@router.post("", response_model=ScreenResponse, status_code=status.HTTP_201_CREATED)
def create_screen(body: ScreenCreate, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    session = registry.create(
        permission_granted=body.permission_granted,
        permission_required=body.permission_required,
        permission_answer=body.permission_answer,
    )
    return _respond(session)


@router.get("/{screen_id}", response_model=ScreenResponse)
def get_screen(screen_id: str, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    return _respond(registry.get(screen_id))


@router.post("/{screen_id}/permission", response_model=ScreenResponse)
def answer_permission(screen_id: str, body: PermissionAnswer, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    session = registry.get(screen_id)
    session.device.relay_permission_answer(body.granted)
    session.controller.select_image()
    return _respond(session)


@router.post("/{screen_id}/image", response_model=ScreenResponse)
async def pick_image(screen_id: str, file: UploadFile = File(...), registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    session = registry.get(screen_id)
    if session.device.awaiting_permission_answer():
        raise PermissionPendingError("Answer the storage permission request first")
    if file.content_type and not file.content_type.startswith("image/"):
        raise ImageDecodeError(f"File type {file.content_type} not allowed")
    content = await file.read()
    session.device.relay_picked_image(content)
    session.controller.select_image()
    return _respond(session)


@router.put("/{screen_id}/prompt", response_model=ScreenResponse)
def update_prompt(screen_id: str, body: PromptUpdate, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    session = registry.get(screen_id)
    session.controller.update_prompt(body.prompt)
    return _respond(session)


@router.post("/{screen_id}/submit", response_model=ScreenResponse)
async def submit(screen_id: str, wait: bool = False, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    session = registry.get(screen_id)
    session.controller.submit()
    if wait:
        await session.controller.view_model.wait()
        # The screen may have been closed while the request was running
        return _respond(registry.get(screen_id))
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=_respond(session).model_dump(),
    )


@router.delete("/{screen_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_screen(screen_id: str, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    registry.close(screen_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def push_updates(websocket: WebSocket, queue: asyncio.Queue, screen_id: str) -> None:
    """Forward queued states to the client until the socket goes away."""
    while True:
        state = await queue.get()
        try:
            await websocket.send_json(render_result(state).model_dump())
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.info(f"Screen {screen_id} update stream closed while sending: {e!r}")
            return


async def stop_pusher(pusher: "asyncio.Task[None]") -> None:
    pusher.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await pusher


@router.websocket("/{screen_id}/ws")
async def screen_updates(websocket: WebSocket, screen_id: str, registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
    """Push the rendered result on connect and on every state change."""
    try:
        session = registry.get(screen_id)
    except ScreenNotFoundError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = session.controller.view_model.ui_state.subscribe(queue.put_nowait)

    pusher = None
    try:
        await websocket.send_json(render_result(session.controller.state).model_dump())
        pusher = asyncio.create_task(push_updates(websocket, queue, screen_id))
        # Incoming messages are ignored; receiving only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Screen {screen_id} update stream disconnected")
    finally:
        unsubscribe()
        if pusher is not None:
            await stop_pusher(pusher)
