import logging
from typing import List, Optional

import google.generativeai as genai
from ...config import settings
from ...application.ports.ai_provider import AIProvider
from ...exceptions import RequestFailure

logger = logging.getLogger(__name__)


def _extract_text(result) -> Optional[str]:
    """Read the response text, turning blocked or candidate-less responses into RequestFailure."""
    feedback = getattr(result, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        reason = getattr(block_reason, "name", block_reason)
        raise RequestFailure(f"Request blocked by the model: {reason}")
    try:
        return result.text
    except ValueError as e:
        # The SDK raises ValueError from .text when no candidate carries text
        raise RequestFailure(f"The model returned no text: {e}") from e


class GeminiProvider(AIProvider):
    def __init__(self, api_key: Optional[str] = None, models: Optional[List[str]] = None,
                 timeout_seconds: Optional[float] = None) -> None:
        api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        if not api_key:
            logger.warning("GEMINI_API_KEY not configured")
        self.model_names = models or settings.gemini_models
        if not self.model_names:
            raise ValueError("At least one Gemini model must be configured")
        genai.configure(api_key=api_key)
        self.timeout_seconds = timeout_seconds or settings.GENERATION_TIMEOUT_SECONDS
        self._models = {}

    def _model(self, name: str):
        if name not in self._models:
            self._models[name] = genai.GenerativeModel(name)
        return self._models[name]

    def generate_text(self, prompt: str, image_bytes: bytes, mime_type: str) -> Optional[str]:
        """Send the image and prompt, falling back through the configured models.

        Transport and model errors move on to the next model. A response the
        model answered but refused is final and is not retried elsewhere.
        """
        last_error: Optional[Exception] = None
        for name in self.model_names:
            try:
                result = self._model(name).generate_content(
                    [
                        {"mime_type": mime_type, "data": image_bytes},
                        prompt,
                    ],
                    request_options={"timeout": self.timeout_seconds},
                )
            except Exception as e:
                logger.warning(f"Gemini model {name} failed: {e}")
                last_error = e
                continue
            return _extract_text(result)
        raise RequestFailure(str(last_error) or last_error.__class__.__name__) from last_error
