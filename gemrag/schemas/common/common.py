# gemrag/schemas/common.py
from pydantic import BaseModel
from typing import Optional

class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[dict] = None
    error: str

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    active_screens: int
    gemini_configured: bool
    gemini_model: str
