import asyncio, logging
from typing import Optional

import google.generativeai as genai

from coach.config import Settings
from coach.errors import AdapterUnavailable

logger = logging.getLogger(__name__)


class GeminiBackend:
    """
    Thin wrapper around a Gemini GenerativeModel shared by the analysis and
    question services. Every call is bounded by the configured timeout.
    """

    def __init__(self, settings: Settings, model=None):
        self.settings = settings
        self.timeout = settings.ai_timeout_seconds
        self.model = model
        self.initialized = model is not None

    @property
    def available(self) -> bool:
        return self.model is not None

    async def initialize(self):
        if self.initialized:
            return
        if not self.settings.ai_enabled:
            logger.warning("Gemini disabled or no API key. Using heuristic analysis and canned fallbacks.")
            self.initialized = True
            return

        try:
            genai.configure(api_key=self.settings.gemini_api_key)
            self.model = genai.GenerativeModel(self.settings.gemini_model)
            logger.info("Gemini backend initialized (%s).", self.settings.gemini_model)
        except Exception as e:
            logger.error("Gemini init failed: %s", e)
            self.model = None
        self.initialized = True

    async def cleanup(self):
        self.model = None
        self.initialized = False

    async def generate(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Return the model's text reply; transport errors and timeouts propagate."""
        if self.model is None:
            raise AdapterUnavailable("Gemini model not configured")
        resp = await asyncio.wait_for(
            self.model.generate_content_async(prompt),
            timeout=timeout or self.timeout,
        )
        return resp.text or ""
