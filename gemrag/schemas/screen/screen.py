# gemrag/schemas/screen.py
from pydantic import BaseModel
from typing import List, Literal, Optional


class ScreenCreate(BaseModel):
    permission_granted: bool = False
    permission_required: bool = True
    permission_answer: Optional[bool] = None

class PermissionAnswer(BaseModel):
    granted: bool

class PromptUpdate(BaseModel):
    prompt: str

class ResultView(BaseModel):
    kind: Literal["progress", "text"]
    text: Optional[str] = None
    style: Optional[Literal["normal", "error"]] = None

class ImagePreview(BaseModel):
    mime_type: str
    width: int
    height: int
    data_uri: str

class ScreenView(BaseModel):
    title: str
    select_image_label: str = "Select an Image"
    permission_granted: bool
    image: Optional[ImagePreview] = None
    prompt: str
    submit_enabled: bool
    state: str
    result: ResultView
    notices: List[str] = []

class ScreenResponse(BaseModel):
    screen_id: str
    view: ScreenView
